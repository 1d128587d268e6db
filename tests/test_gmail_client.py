"""Tests for the Gmail REST client."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import httpx
import pytest
import respx

from gworkspace_cli.google import GmailClient, GoogleApiError
from gworkspace_cli.google.gmail import SUMMARY_HEADERS, extract_body
from gworkspace_cli.mime import encode_base64url

BASE = GmailClient.API_BASE


class StaticTokens:
    """Token source handing out a fixed bearer token."""

    def __init__(self) -> None:
        self.invalidated = 0

    async def get_token(self) -> str:
        return "test-token"

    def invalidate(self) -> None:
        self.invalidated += 1


@pytest.fixture
def tokens() -> StaticTokens:
    return StaticTokens()


@pytest.fixture
def client(tokens: StaticTokens) -> GmailClient:
    return GmailClient(tokens)


def b64(text: str) -> str:
    return encode_base64url(text.encode("utf-8"))


@respx.mock
def test_list_messages_fetches_metadata(client: GmailClient) -> None:
    listing = respx.get(f"{BASE}/messages").respond(
        200, json={"messages": [{"id": "m1", "threadId": "t1"}]}
    )
    detail = respx.get(f"{BASE}/messages/m1").respond(
        200,
        json={
            "id": "m1",
            "snippet": "Hello",
            "labelIds": ["INBOX", "UNREAD"],
            "payload": {
                "headers": [
                    {"name": "Subject", "value": "Greetings"},
                    {"name": "From", "value": "alice@example.com"},
                    {"name": "Date", "value": "Mon, 1 Jan 2024 10:00:00 +0000"},
                ]
            },
        },
    )

    messages = asyncio.run(client.list_messages("is:unread", 5))

    assert len(messages) == 1
    assert messages[0].subject == "Greetings"
    assert messages[0].sender == "alice@example.com"
    assert messages[0].to == ""
    assert messages[0].thread_id == "t1"
    assert messages[0].label_ids == ["INBOX", "UNREAD"]

    list_request = listing.calls.last.request
    assert list_request.url.params["q"] == "is:unread"
    assert list_request.url.params["maxResults"] == "5"
    assert list_request.headers["Authorization"] == "Bearer test-token"
    detail_params = detail.calls.last.request.url.params
    assert detail_params["format"] == "metadata"
    assert detail_params.get_list("metadataHeaders") == SUMMARY_HEADERS


@respx.mock
def test_read_message_extracts_nested_bodies(client: GmailClient) -> None:
    route = respx.get(f"{BASE}/messages/m2").respond(
        200,
        json={
            "id": "m2",
            "threadId": "t2",
            "payload": {
                "mimeType": "multipart/mixed",
                "headers": [{"name": "Subject", "value": "Nested"}],
                "parts": [
                    {
                        "mimeType": "multipart/alternative",
                        "parts": [
                            {"mimeType": "text/plain", "body": {"data": b64("plain body")}},
                            {"mimeType": "text/html", "body": {"data": b64("<p>html</p>")}},
                        ],
                    },
                    {"mimeType": "application/pdf", "filename": "a.pdf", "body": {}},
                ],
            },
        },
    )

    message = asyncio.run(client.read_message("m2"))

    assert route.calls.last.request.url.params["format"] == "full"
    assert message.subject == "Nested"
    assert message.body == "plain body"
    assert message.html_body == "<p>html</p>"


def test_extract_body_single_part_html() -> None:
    text, html = extract_body({"mimeType": "text/html", "body": {"data": b64("<b>x</b>")}})

    assert text == ""
    assert html == "<b>x</b>"


@respx.mock
def test_send_raw_and_create_draft_post_payload(client: GmailClient) -> None:
    send = respx.post(f"{BASE}/messages/send").respond(
        200, json={"id": "m8", "threadId": "t8"}
    )
    drafts = respx.post(f"{BASE}/drafts").respond(
        200, json={"id": "d1", "message": {"id": "m9"}}
    )

    sent = asyncio.run(client.send_raw("cmF3", thread_id="t8"))
    draft = asyncio.run(client.create_draft("cmF3"))

    assert json.loads(send.calls.last.request.content) == {"raw": "cmF3", "threadId": "t8"}
    assert json.loads(drafts.calls.last.request.content) == {"message": {"raw": "cmF3"}}
    assert (sent.id, sent.thread_id) == ("m8", "t8")
    assert (draft.id, draft.message_id) == ("d1", "m9")


@respx.mock
def test_modify_labels(client: GmailClient) -> None:
    route = respx.post(f"{BASE}/messages/m1/modify").respond(200, json={"id": "m1"})

    asyncio.run(client.modify_labels("m1", ["STARRED"], ["UNREAD"]))

    assert json.loads(route.calls.last.request.content) == {
        "addLabelIds": ["STARRED"],
        "removeLabelIds": ["UNREAD"],
    }


@respx.mock
def test_rejected_token_is_refreshed_once(client: GmailClient, tokens: StaticTokens) -> None:
    route = respx.get(f"{BASE}/profile").mock(
        side_effect=[
            httpx.Response(401, json={"error": {"message": "Invalid Credentials"}}),
            httpx.Response(200, json={"emailAddress": "me@example.com"}),
        ]
    )

    profile = asyncio.run(client.get_profile())

    assert profile.email_address == "me@example.com"
    assert route.call_count == 2
    assert tokens.invalidated == 1


@respx.mock
def test_api_error_carries_status_and_message(client: GmailClient) -> None:
    respx.get(f"{BASE}/messages/missing").respond(
        404, json={"error": {"code": 404, "message": "Not Found"}}
    )

    with pytest.raises(GoogleApiError, match="Not Found") as excinfo:
        asyncio.run(client.read_message("missing"))

    assert excinfo.value.status_code == 404


@respx.mock
def test_network_failure_is_wrapped(client: GmailClient) -> None:
    respx.get(f"{BASE}/labels").mock(side_effect=httpx.ConnectError("offline"))

    with pytest.raises(GoogleApiError, match="offline"):
        asyncio.run(client.list_labels())


@respx.mock
def test_download_message_writes_eml(client: GmailClient, tmp_path: Path) -> None:
    raw_message = b"Subject: Saved\r\n\r\nbody\r\n"
    route = respx.get(f"{BASE}/messages/m3").respond(
        200, json={"id": "m3", "raw": encode_base64url(raw_message)}
    )

    target = tmp_path / "saved.eml"
    result = asyncio.run(client.download_message("m3", target))

    assert route.calls.last.request.url.params["format"] == "raw"
    assert target.read_bytes() == raw_message
    assert result.path == str(target)
    assert result.size == len(raw_message)


@respx.mock
def test_list_labels(client: GmailClient) -> None:
    respx.get(f"{BASE}/labels").respond(
        200,
        json={
            "labels": [
                {"id": "INBOX", "name": "INBOX", "type": "system"},
                {"id": "L1", "name": "Work"},
            ]
        },
    )

    labels = asyncio.run(client.list_labels())

    assert [(label.id, label.type) for label in labels] == [("INBOX", "system"), ("L1", "user")]


@respx.mock
def test_list_messages_keeps_listing_order(client: GmailClient) -> None:
    respx.get(f"{BASE}/messages").respond(
        200, json={"messages": [{"id": "a"}, {"id": "b"}, {"id": "c"}]}
    )
    for message_id in ("a", "b", "c"):
        respx.get(f"{BASE}/messages/{message_id}").respond(
            200,
            json={"payload": {"headers": [{"name": "Subject", "value": f"subject {message_id}"}]}},
        )

    messages = asyncio.run(client.list_messages())

    assert [m.subject for m in messages] == ["subject a", "subject b", "subject c"]


@respx.mock
def test_reply_context_extends_references(client: GmailClient) -> None:
    route = respx.get(f"{BASE}/messages/m5").respond(
        200,
        json={
            "id": "m5",
            "threadId": "t5",
            "payload": {
                "headers": [
                    {"name": "Message-Id", "value": "<orig@example.com>"},
                    {"name": "References", "value": "<root@example.com>"},
                ]
            },
        },
    )

    reply = asyncio.run(client.get_reply_context("m5"))

    params = route.calls.last.request.url.params
    assert params["format"] == "metadata"
    assert params.get_list("metadataHeaders") == ["Message-ID", "References"]
    assert reply.thread_id == "t5"
    assert reply.in_reply_to == "<orig@example.com>"
    assert reply.references == "<root@example.com> <orig@example.com>"


@respx.mock
def test_reply_context_requires_message_id(client: GmailClient) -> None:
    respx.get(f"{BASE}/messages/m6").respond(200, json={"id": "m6", "payload": {}})

    with pytest.raises(GoogleApiError, match="no Message-ID"):
        asyncio.run(client.get_reply_context("m6"))


@respx.mock
def test_draft_joins_thread(client: GmailClient) -> None:
    route = respx.post(f"{BASE}/drafts").respond(200, json={"id": "d2", "message": {}})

    asyncio.run(client.create_draft("cmF3", thread_id="t5"))

    assert json.loads(route.calls.last.request.content) == {
        "message": {"raw": "cmF3", "threadId": "t5"}
    }
