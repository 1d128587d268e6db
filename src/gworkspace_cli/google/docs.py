"""Google Docs client for reading and editing document text."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

from gworkspace_cli.core.models import DocumentContent, DocumentInfo, ExportResult

from .base import GoogleApiClient, path_segment
from .drive import DriveClient

logger = logging.getLogger(__name__)

EXPORT_FORMATS: dict[str, tuple[str, str]] = {
    "pdf": ("application/pdf", ".pdf"),
    "docx": (
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        ".docx",
    ),
    "odt": ("application/vnd.oasis.opendocument.text", ".odt"),
    "txt": ("text/plain", ".txt"),
    "html": ("text/html", ".html"),
    "rtf": ("application/rtf", ".rtf"),
    "epub": ("application/epub+zip", ".epub"),
}

_UNSAFE_FILENAME_RE = re.compile(r'[/\\?%*:|"<>]')


class GoogleDocsClient(GoogleApiClient):
    """Client for the Docs API v1."""

    API_BASE = "https://docs.googleapis.com/v1/documents"

    async def get_document(self, document_id: str) -> DocumentInfo:
        """Fetch document metadata."""
        data = await self._fetch(document_id)
        return DocumentInfo(
            document_id=data.get("documentId", document_id),
            title=data.get("title", ""),
            revision_id=data.get("revisionId", ""),
            suggestions_view_mode=data.get("suggestionsViewMode", ""),
        )

    async def read_document(self, document_id: str) -> DocumentContent:
        """Fetch a document and flatten its body to plain text."""
        data = await self._fetch(document_id)
        body = data.get("body", {})
        return DocumentContent(
            document_id=data.get("documentId", document_id),
            title=data.get("title", ""),
            text=extract_plain_text(body),
            end_index=_end_index(body),
        )

    async def create_document(self, title: str) -> DocumentInfo:
        """Create an empty document."""
        response = await self._request("POST", "", json_body={"title": title})
        data = response.json()
        logger.info("Created document %s", data.get("documentId"))
        return DocumentInfo(
            document_id=data.get("documentId", ""),
            title=data.get("title", title),
            revision_id=data.get("revisionId", ""),
        )

    async def insert_text(self, document_id: str, text: str, index: int = 1) -> int:
        """Insert ``text`` at ``index`` and return the index used."""
        await self._batch_update(
            document_id, [{"insertText": {"location": {"index": index}, "text": text}}]
        )
        return index

    async def append_text(self, document_id: str, text: str) -> int:
        """Insert ``text`` before the final newline of the body."""
        data = await self._fetch(document_id)
        index = max(1, _end_index(data.get("body", {})) - 1)
        return await self.insert_text(document_id, text, index)

    async def replace_text(
        self, document_id: str, find: str, replacement: str, *, match_case: bool = False
    ) -> int:
        """Replace every occurrence of ``find`` and return how many changed."""
        data = await self._batch_update(
            document_id,
            [
                {
                    "replaceAllText": {
                        "containsText": {"text": find, "matchCase": match_case},
                        "replaceText": replacement,
                    }
                }
            ],
        )
        replies = data.get("replies") or [{}]
        return replies[0].get("replaceAllText", {}).get("occurrencesChanged", 0)

    async def _fetch(self, document_id: str) -> dict[str, Any]:
        return await self._get_json(f"/{path_segment(document_id)}")

    async def _batch_update(
        self, document_id: str, requests: list[dict[str, Any]]
    ) -> dict[str, Any]:
        response = await self._request(
            "POST",
            f"/{path_segment(document_id)}:batchUpdate",
            json_body={"requests": requests},
        )
        return response.json()


def extract_plain_text(body: dict[str, Any]) -> str:
    """Concatenate paragraph text runs; table cells are joined with tabs."""
    parts: list[str] = []
    for element in body.get("content", []):
        if "paragraph" in element:
            parts.append(
                "".join(
                    run.get("textRun", {}).get("content", "")
                    for run in element["paragraph"].get("elements", [])
                )
            )
        elif "table" in element:
            for row in element["table"].get("tableRows", []):
                parts.append(
                    "\t".join(extract_plain_text(cell) for cell in row.get("tableCells", []))
                )
    return "".join(parts)


async def export_document(
    drive: DriveClient,
    document_id: str,
    export_format: str = "pdf",
    output: Path | None = None,
) -> ExportResult:
    """Export a document through Drive and write it to disk.

    ``output`` may be a file or an existing directory; without it the file is
    named after the document title in the working directory.
    """
    if export_format not in EXPORT_FORMATS:
        raise ValueError(
            f"Invalid format: {export_format}. Valid formats: {', '.join(EXPORT_FORMATS)}"
        )
    mime_type, extension = EXPORT_FORMATS[export_format]
    if output is None or output.is_dir():
        name = _UNSAFE_FILENAME_RE.sub("_", await drive.get_file_name(document_id))
        target = (output or Path.cwd()) / f"{name}{extension}"
    else:
        target = output
    content = await drive.export_file(document_id, mime_type)
    target.write_bytes(content)
    logger.info("Exported %s to %s (%d bytes)", document_id, target, len(content))
    return ExportResult(
        document_id=document_id,
        format=export_format,
        path=str(target.resolve()),
        size=len(content),
    )


def _end_index(body: dict[str, Any]) -> int:
    content = body.get("content") or [{}]
    return content[-1].get("endIndex", 1)


__all__ = ["EXPORT_FORMATS", "GoogleDocsClient", "export_document", "extract_plain_text"]
