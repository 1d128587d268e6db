"""Attachment value objects and file loaders."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .types import guess_mime_type

LOGGER = logging.getLogger(__name__)


class AttachmentError(RuntimeError):
    """Raised when an attachment file cannot be read."""


@dataclass(frozen=True, slots=True)
class Attachment:
    """File content destined for a MIME part.

    Attributes:
        filename: Name advertised in the part headers
        content: Raw bytes of the file
        mime_type: Content type of the part
        inline: Whether the part is an inline image referenced via ``cid:``
        content_id: Identifier used in ``Content-ID`` for inline parts
    """

    filename: str
    content: bytes
    mime_type: str
    inline: bool = False
    content_id: str | None = None


@dataclass(frozen=True, slots=True)
class InlineImageSpec:
    """Path of an inline image and the content-id HTML refers to it by."""

    path: Path
    content_id: str


def _read_file(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise AttachmentError(f"Unable to read attachment '{path}': {exc}") from exc


def load_attachment(path: str | Path) -> Attachment:
    """Read ``path`` into a downloadable attachment."""
    file_path = Path(path)
    content = _read_file(file_path)
    LOGGER.debug("Loaded attachment %s (%d bytes)", file_path, len(content))
    return Attachment(
        filename=file_path.name,
        content=content,
        mime_type=guess_mime_type(file_path),
    )


def load_inline_image(path: str | Path, content_id: str) -> Attachment:
    """Read ``path`` into an inline part identified by ``content_id``."""
    if not content_id:
        raise AttachmentError(f"Inline image '{path}' needs a content-id")
    file_path = Path(path)
    content = _read_file(file_path)
    LOGGER.debug(
        "Loaded inline image %s as cid:%s (%d bytes)", file_path, content_id, len(content)
    )
    return Attachment(
        filename=file_path.name,
        content=content,
        mime_type=guess_mime_type(file_path),
        inline=True,
        content_id=content_id,
    )


async def load_attachments(paths: Iterable[str | Path]) -> tuple[Attachment, ...]:
    """Read every path concurrently; results keep the input order."""
    tasks = [asyncio.to_thread(load_attachment, path) for path in paths]
    return tuple(await asyncio.gather(*tasks))


async def load_inline_images(specs: Iterable[InlineImageSpec]) -> tuple[Attachment, ...]:
    """Read every inline image concurrently; results keep the input order."""
    tasks = [
        asyncio.to_thread(load_inline_image, spec.path, spec.content_id) for spec in specs
    ]
    return tuple(await asyncio.gather(*tasks))


def parse_inline_spec(raw: str) -> InlineImageSpec:
    """Parse ``path:cid`` into an :class:`InlineImageSpec`."""
    path, separator, content_id = raw.strip().rpartition(":")
    if not separator or not path or not content_id:
        raise ValueError(f"Inline image must be given as PATH:CID, got '{raw}'")
    return InlineImageSpec(path=Path(path), content_id=content_id)


__all__ = [
    "Attachment",
    "AttachmentError",
    "InlineImageSpec",
    "load_attachment",
    "load_attachments",
    "load_inline_image",
    "load_inline_images",
    "parse_inline_spec",
]
