"""Gmail REST client."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from gworkspace_cli.core.models import (
    DownloadResult,
    DraftResult,
    FullMessage,
    GmailProfile,
    LabelInfo,
    MessageSummary,
    ReplyContext,
    SentMessage,
)
from gworkspace_cli.mime.envelope import decode_base64url

from .base import GoogleApiClient, GoogleApiError

logger = logging.getLogger(__name__)

SUMMARY_HEADERS = ["Subject", "From", "To", "Date"]
REPLY_HEADERS = ["Message-ID", "References"]


class GmailClient(GoogleApiClient):
    """Client for the Gmail API acting on the authenticated user."""

    API_BASE = "https://gmail.googleapis.com/gmail/v1/users/me"

    async def list_messages(self, query: str = "", max_results: int = 10) -> list[MessageSummary]:
        """List messages matching a Gmail search query, newest first."""
        params: dict[str, Any] = {"maxResults": max_results}
        if query:
            params["q"] = query
        listing = await self._get_json("/messages", **params)
        summaries = list(
            await asyncio.gather(
                *(self._summarize(entry) for entry in listing.get("messages", []))
            )
        )
        logger.info("Retrieved %d message(s)", len(summaries))
        return summaries

    async def _summarize(self, entry: dict[str, Any]) -> MessageSummary:
        detail = await self._get_json(
            f"/messages/{entry['id']}",
            format="metadata",
            metadataHeaders=SUMMARY_HEADERS,
        )
        headers = _headers(detail)
        return MessageSummary(
            id=entry["id"],
            thread_id=entry.get("threadId", ""),
            subject=headers.get("subject", ""),
            sender=headers.get("from", ""),
            to=headers.get("to", ""),
            date=headers.get("date", ""),
            snippet=detail.get("snippet", ""),
            label_ids=detail.get("labelIds", []),
        )

    async def read_message(self, message_id: str) -> FullMessage:
        """Fetch a message with its decoded text and HTML bodies."""
        data = await self._get_json(f"/messages/{message_id}", format="full")
        headers = _headers(data)
        text, html = extract_body(data.get("payload"))
        return FullMessage(
            id=data.get("id", message_id),
            thread_id=data.get("threadId", ""),
            subject=headers.get("subject", ""),
            sender=headers.get("from", ""),
            to=headers.get("to", ""),
            date=headers.get("date", ""),
            snippet=data.get("snippet", ""),
            label_ids=data.get("labelIds", []),
            body=text,
            html_body=html,
        )

    async def send_raw(self, raw: str, thread_id: str | None = None) -> SentMessage:
        """Send a base64url encoded RFC 2822 message."""
        body: dict[str, Any] = {"raw": raw}
        if thread_id:
            body["threadId"] = thread_id
        response = await self._request("POST", "/messages/send", json_body=body)
        data = response.json()
        logger.info("Sent message %s", data.get("id"))
        return SentMessage(id=data.get("id", ""), thread_id=data.get("threadId", ""))

    async def create_draft(self, raw: str, thread_id: str | None = None) -> DraftResult:
        """Store a base64url encoded message as a draft."""
        message: dict[str, Any] = {"raw": raw}
        if thread_id:
            message["threadId"] = thread_id
        response = await self._request("POST", "/drafts", json_body={"message": message})
        data = response.json()
        logger.info("Created draft %s", data.get("id"))
        return DraftResult(
            id=data.get("id", ""),
            message_id=data.get("message", {}).get("id", ""),
        )

    async def get_reply_context(self, message_id: str) -> ReplyContext:
        """Collect the thread and Message-ID chain needed to answer a message."""
        detail = await self._get_json(
            f"/messages/{message_id}",
            format="metadata",
            metadataHeaders=REPLY_HEADERS,
        )
        headers = _headers(detail)
        original = headers.get("message-id", "")
        if not original:
            raise GoogleApiError(f"Message {message_id} has no Message-ID header")
        references = " ".join(filter(None, [headers.get("references", ""), original]))
        return ReplyContext(
            thread_id=detail.get("threadId", ""),
            in_reply_to=original,
            references=references,
        )

    async def list_labels(self) -> list[LabelInfo]:
        """List system and user labels."""
        data = await self._get_json("/labels")
        return [
            LabelInfo(id=label["id"], name=label["name"], type=label.get("type", "user"))
            for label in data.get("labels", [])
        ]

    async def modify_labels(
        self, message_id: str, add: list[str], remove: list[str]
    ) -> None:
        """Add and remove label IDs on a message."""
        await self._request(
            "POST",
            f"/messages/{message_id}/modify",
            json_body={"addLabelIds": add, "removeLabelIds": remove},
        )

    async def get_profile(self) -> GmailProfile:
        """Return the mailbox address and message counters."""
        data = await self._get_json("/profile")
        return GmailProfile(
            email_address=data.get("emailAddress", ""),
            messages_total=data.get("messagesTotal", 0),
            threads_total=data.get("threadsTotal", 0),
        )

    async def download_message(
        self, message_id: str, output_path: Path | None = None
    ) -> DownloadResult:
        """Save the raw RFC 2822 message to ``output_path`` (``<id>.eml`` by default)."""
        data = await self._get_json(f"/messages/{message_id}", format="raw")
        raw = data.get("raw")
        if not raw:
            raise GoogleApiError("No raw message data returned from Gmail API")
        content = decode_base64url(raw)
        target = output_path or Path(f"{message_id}.eml")
        target.write_bytes(content)
        logger.info("Wrote %s (%d bytes)", target, len(content))
        return DownloadResult(path=str(target), size=len(content))


def _headers(message: dict[str, Any]) -> dict[str, str]:
    """Map lower-cased header names to values (first occurrence wins)."""
    collected: dict[str, str] = {}
    for header in message.get("payload", {}).get("headers", []):
        name = (header.get("name") or "").lower()
        if name and name not in collected:
            collected[name] = header.get("value") or ""
    return collected


def extract_body(payload: dict[str, Any] | None) -> tuple[str, str | None]:
    """Return the text and HTML bodies found in a message payload tree."""
    if not payload:
        return "", None

    data = payload.get("body", {}).get("data")
    if data:
        content = decode_base64url(data).decode("utf-8", errors="replace")
        if payload.get("mimeType") == "text/html":
            return "", content
        return content, None

    text = ""
    html: str | None = None
    for part in payload.get("parts", []):
        mime_type = part.get("mimeType")
        part_data = part.get("body", {}).get("data")
        if mime_type == "text/plain" and part_data:
            text = decode_base64url(part_data).decode("utf-8", errors="replace")
        elif mime_type == "text/html" and part_data:
            html = decode_base64url(part_data).decode("utf-8", errors="replace")
        elif part.get("parts"):
            nested_text, nested_html = extract_body(part)
            if nested_text:
                text = nested_text
            if nested_html:
                html = nested_html
    return text, html


__all__ = ["GmailClient", "extract_body"]
