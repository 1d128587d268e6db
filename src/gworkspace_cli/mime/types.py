"""File extension to MIME type lookup used for attachment headers."""

from __future__ import annotations

from pathlib import PurePath

DEFAULT_MIME_TYPE = "application/octet-stream"

MIME_TYPES: dict[str, str] = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".txt": "text/plain",
    ".html": "text/html",
    ".csv": "text/csv",
    ".json": "application/json",
    ".zip": "application/zip",
}


def guess_mime_type(path: str | PurePath) -> str:
    """Return the MIME type for ``path`` based on its extension."""
    return MIME_TYPES.get(PurePath(path).suffix.lower(), DEFAULT_MIME_TYPE)


__all__ = ["DEFAULT_MIME_TYPE", "MIME_TYPES", "guess_mime_type"]
