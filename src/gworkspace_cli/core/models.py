"""Result models returned by the Google API collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class MessageSummary:
    """Header-level view of a Gmail message."""

    id: str
    thread_id: str
    subject: str
    sender: str
    to: str
    date: str
    snippet: str
    label_ids: list[str] = field(default_factory=list)


@dataclass(slots=True)
class FullMessage:
    """Gmail message including decoded bodies."""

    id: str
    thread_id: str
    subject: str
    sender: str
    to: str
    date: str
    snippet: str
    label_ids: list[str]
    body: str
    html_body: str | None = None


@dataclass(slots=True)
class LabelInfo:
    """Gmail label."""

    id: str
    name: str
    type: str


@dataclass(slots=True)
class GmailProfile:
    """Mailbox owner and counters."""

    email_address: str
    messages_total: int
    threads_total: int


@dataclass(slots=True)
class SentMessage:
    """Identifiers of a message accepted by Gmail."""

    id: str
    thread_id: str


@dataclass(slots=True)
class ReplyContext:
    """Threading details taken from the message being answered."""

    thread_id: str
    in_reply_to: str
    references: str


@dataclass(slots=True)
class DraftResult:
    """Identifiers of a created draft."""

    id: str
    message_id: str


@dataclass(slots=True)
class DownloadResult:
    """Location and size of a message saved as ``.eml``."""

    path: str
    size: int


@dataclass(slots=True)
class CalendarSummary:
    """Calendar visible to the user."""

    id: str
    summary: str
    description: str | None = None
    primary: bool | None = None
    background_color: str | None = None


# pylint: disable=too-many-instance-attributes
@dataclass(slots=True)
class EventSummary:
    """Calendar event flattened for display."""

    id: str
    summary: str
    start: str
    end: str
    description: str | None = None
    location: str | None = None
    attendees: list[str] = field(default_factory=list)
    html_link: str | None = None


@dataclass(slots=True)
class DriveFile:
    """A Drive file as listed for spreadsheets and documents."""

    id: str
    name: str
    created_time: str | None = None
    modified_time: str | None = None
    web_view_link: str | None = None


@dataclass(slots=True)
class SheetInfo:
    """One tab of a spreadsheet."""

    sheet_id: int
    title: str
    index: int
    row_count: int = 0
    column_count: int = 0


@dataclass(slots=True)
class SpreadsheetInfo:
    """Spreadsheet metadata and its tabs."""

    spreadsheet_id: str
    title: str
    locale: str
    spreadsheet_url: str
    sheets: list[SheetInfo] = field(default_factory=list)


@dataclass(slots=True)
class RangeValues:
    """Cell values read from an A1 range."""

    range: str
    values: list[list[Any]] = field(default_factory=list)


@dataclass(slots=True)
class UpdateResult:
    """Counters returned by a write or append."""

    updated_range: str
    updated_rows: int = 0
    updated_columns: int = 0
    updated_cells: int = 0


@dataclass(slots=True)
class DocumentInfo:
    """Document metadata."""

    document_id: str
    title: str
    revision_id: str = ""
    suggestions_view_mode: str = ""


@dataclass(slots=True)
class DocumentContent:
    """Plain text of a document and the index just past its last element."""

    document_id: str
    title: str
    text: str
    end_index: int


@dataclass(slots=True)
class ExportResult:
    """A document exported through Drive and written to disk."""

    document_id: str
    format: str
    path: str
    size: int


__all__ = [
    "CalendarSummary",
    "DocumentContent",
    "DocumentInfo",
    "DownloadResult",
    "DraftResult",
    "DriveFile",
    "EventSummary",
    "ExportResult",
    "FullMessage",
    "GmailProfile",
    "LabelInfo",
    "MessageSummary",
    "RangeValues",
    "ReplyContext",
    "SentMessage",
    "SheetInfo",
    "SpreadsheetInfo",
    "UpdateResult",
]
