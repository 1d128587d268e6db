"""MIME message assembly for outgoing mail."""

from .attachments import (
    Attachment,
    AttachmentError,
    InlineImageSpec,
    load_attachment,
    load_attachments,
    load_inline_image,
    load_inline_images,
    parse_inline_spec,
)
from .envelope import (
    EnvelopeError,
    MimeShape,
    OutgoingEmail,
    build_mime_message,
    decode_base64url,
    encode_base64url,
    encode_message,
    select_shape,
)
from .types import guess_mime_type

__all__ = [
    "Attachment",
    "AttachmentError",
    "EnvelopeError",
    "InlineImageSpec",
    "MimeShape",
    "OutgoingEmail",
    "build_mime_message",
    "decode_base64url",
    "encode_base64url",
    "encode_message",
    "guess_mime_type",
    "load_attachment",
    "load_attachments",
    "load_inline_image",
    "load_inline_images",
    "parse_inline_spec",
    "select_shape",
]
