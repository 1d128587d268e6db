"""Assemble outgoing messages and encode them as Gmail ``raw`` payloads."""

from __future__ import annotations

import base64
import secrets
import time
from collections.abc import Iterable
from dataclasses import dataclass
from email import encoders, policy
from email.message import Message
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from enum import Enum

from .attachments import Attachment

CRLF_POLICY = policy.compat32.clone(linesep="\r\n")


class EnvelopeError(ValueError):
    """Raised when an outgoing message is missing required fields."""


class MimeShape(Enum):
    """Message layouts, in selection precedence order."""

    MIXED_RELATED = 1
    MIXED_ALTERNATIVE = 2
    MIXED_TEXT = 3
    RELATED = 4
    ALTERNATIVE = 5
    PLAIN = 6


# pylint: disable=too-many-instance-attributes
@dataclass(frozen=True, slots=True)
class OutgoingEmail:
    """Outgoing email message representation.

    Attributes:
        to: Recipient email address
        subject: Email subject line
        body: Plain text body, also the fallback for HTML clients
        html: Optional HTML body
        attachments: Files attached for download
        inline_images: Images referenced from ``html`` via ``cid:``
        sender: Optional From header
        in_reply_to: Message-ID of the original email (for threading)
        references: Space-separated Message-IDs for thread context
    """

    to: str
    subject: str
    body: str
    html: str | None = None
    attachments: tuple[Attachment, ...] = ()
    inline_images: tuple[Attachment, ...] = ()
    sender: str | None = None
    in_reply_to: str | None = None
    references: str | None = None


def select_shape(
    *, has_html: bool, has_attachments: bool, has_inline_images: bool
) -> MimeShape:
    """Pick the message layout for the given combination of inputs.

    Inline images only take effect alongside an HTML body.
    """
    if has_attachments and has_html and has_inline_images:
        return MimeShape.MIXED_RELATED
    if has_attachments and has_html:
        return MimeShape.MIXED_ALTERNATIVE
    if has_attachments:
        return MimeShape.MIXED_TEXT
    if has_html and has_inline_images:
        return MimeShape.RELATED
    if has_html:
        return MimeShape.ALTERNATIVE
    return MimeShape.PLAIN


def shape_for(email: OutgoingEmail) -> MimeShape:
    """Return the layout :func:`build_mime_message` will use for ``email``."""
    return select_shape(
        has_html=bool(email.html),
        has_attachments=bool(email.attachments),
        has_inline_images=bool(email.inline_images),
    )


def make_boundary(label: str) -> str:
    """Return a boundary that cannot occur inside base64 encoded parts."""
    return f"=_{label}_{time.time_ns()}_{secrets.token_hex(8)}"


def _text_part(body: str, subtype: str) -> MIMEText:
    return MIMEText(body, subtype, "utf-8")


def _binary_part(attachment: Attachment) -> MIMEBase:
    maintype, _, subtype = attachment.mime_type.partition("/")
    part = MIMEBase(maintype, subtype or "octet-stream", name=attachment.filename)
    part.set_payload(attachment.content)
    encoders.encode_base64(part)
    disposition = "inline" if attachment.inline else "attachment"
    part.add_header("Content-Disposition", disposition, filename=attachment.filename)
    if attachment.inline and attachment.content_id:
        part["Content-ID"] = f"<{attachment.content_id}>"
    return part


def _multipart(subtype: str, parts: Iterable[Message]) -> MIMEMultipart:
    container = MIMEMultipart(subtype, boundary=make_boundary(subtype))
    for part in parts:
        container.attach(part)
    return container


def _alternative(email: OutgoingEmail) -> MIMEMultipart:
    return _multipart(
        "alternative",
        [_text_part(email.body, "plain"), _text_part(email.html or "", "html")],
    )


def _related(email: OutgoingEmail) -> MIMEMultipart:
    return _multipart(
        "related",
        [
            _text_part(email.html or "", "html"),
            *(_binary_part(image) for image in email.inline_images),
        ],
    )


def _mixed(first: Message, email: OutgoingEmail) -> MIMEMultipart:
    return _multipart(
        "mixed",
        [first, *(_binary_part(attachment) for attachment in email.attachments)],
    )


def build_mime_message(email: OutgoingEmail) -> Message:
    """Build the MIME tree for ``email``.

    Raises:
        EnvelopeError: If the recipient or subject is missing
    """
    if not email.to or not email.to.strip():
        raise EnvelopeError("Recipient address is required")
    if not email.subject or not email.subject.strip():
        raise EnvelopeError("Subject is required")

    shape = shape_for(email)
    message: Message
    if shape is MimeShape.MIXED_RELATED:
        message = _mixed(_related(email), email)
    elif shape is MimeShape.MIXED_ALTERNATIVE:
        message = _mixed(_alternative(email), email)
    elif shape is MimeShape.MIXED_TEXT:
        message = _mixed(_text_part(email.body, "plain"), email)
    elif shape is MimeShape.RELATED:
        message = _related(email)
    elif shape is MimeShape.ALTERNATIVE:
        message = _alternative(email)
    else:
        message = _text_part(email.body, "plain")

    message["To"] = email.to
    if email.sender:
        message["From"] = email.sender
    message["Subject"] = email.subject
    if email.in_reply_to:
        message["In-Reply-To"] = email.in_reply_to
    if email.references:
        message["References"] = email.references
    return message


def encode_base64url(data: bytes) -> str:
    """Encode ``data`` with the URL-safe alphabet and no padding."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def decode_base64url(data: str) -> bytes:
    """Decode URL-safe base64, tolerating missing padding."""
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def serialize_message(message: Message) -> bytes:
    """Serialise ``message`` with CRLF line endings."""
    return message.as_bytes(policy=CRLF_POLICY)


def encode_message(email: OutgoingEmail) -> str:
    """Build ``email`` and return it as a base64url ``raw`` payload."""
    return encode_base64url(serialize_message(build_mime_message(email)))


__all__ = [
    "EnvelopeError",
    "MimeShape",
    "OutgoingEmail",
    "build_mime_message",
    "decode_base64url",
    "encode_base64url",
    "encode_message",
    "make_boundary",
    "select_shape",
    "serialize_message",
    "shape_for",
]
