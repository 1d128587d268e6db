"""Tests for MIME envelope assembly and base64url encoding."""

from __future__ import annotations

import email
from email.message import Message

import pytest

from gworkspace_cli.mime import (
    Attachment,
    EnvelopeError,
    MimeShape,
    OutgoingEmail,
    build_mime_message,
    decode_base64url,
    encode_base64url,
    encode_message,
    select_shape,
)

PDF = Attachment(filename="report.pdf", content=b"%PDF-1.4 fake", mime_type="application/pdf")
LOGO = Attachment(
    filename="logo.png",
    content=b"\x89PNG fake",
    mime_type="image/png",
    inline=True,
    content_id="logo",
)


def decoded(message: OutgoingEmail) -> bytes:
    return decode_base64url(encode_message(message))


def multipart_boundaries(message: Message) -> list[str]:
    return [
        part.get_boundary()
        for part in message.walk()
        if part.is_multipart() and part.get_boundary()
    ]


@pytest.mark.parametrize(
    ("has_html", "has_attachments", "has_inline_images", "expected"),
    [
        (True, True, True, MimeShape.MIXED_RELATED),
        (True, True, False, MimeShape.MIXED_ALTERNATIVE),
        (False, True, True, MimeShape.MIXED_TEXT),
        (True, False, True, MimeShape.RELATED),
        (True, False, False, MimeShape.ALTERNATIVE),
        (False, False, True, MimeShape.PLAIN),
        (False, False, False, MimeShape.PLAIN),
    ],
)
def test_select_shape_precedence(
    has_html: bool, has_attachments: bool, has_inline_images: bool, expected: MimeShape
) -> None:
    assert (
        select_shape(
            has_html=has_html,
            has_attachments=has_attachments,
            has_inline_images=has_inline_images,
        )
        is expected
    )


def test_plain_message_has_no_boundary() -> None:
    raw = decoded(OutgoingEmail(to="a@example.com", subject="Hi", body="Hello there"))
    parsed = email.message_from_bytes(raw)

    assert b"multipart" not in raw
    assert b"boundary" not in raw
    assert parsed.get_content_type() == "text/plain"
    assert parsed["To"] == "a@example.com"
    assert parsed.get_payload(decode=True) == b"Hello there"


def test_html_with_attachment_is_mixed_alternative() -> None:
    outgoing = OutgoingEmail(
        to="a@example.com",
        subject="Report",
        body="plain",
        html="<p>rich</p>",
        attachments=(PDF,),
    )
    raw = decoded(outgoing)
    parsed = email.message_from_bytes(raw)

    assert parsed.get_content_type() == "multipart/mixed"
    alternative, attachment = parsed.get_payload()
    assert alternative.get_content_type() == "multipart/alternative"
    assert [part.get_content_type() for part in alternative.get_payload()] == [
        "text/plain",
        "text/html",
    ]
    assert attachment.get_content_type() == "application/pdf"
    assert attachment.get_content_disposition() == "attachment"
    assert attachment.get_filename() == "report.pdf"
    assert attachment.get_payload(decode=True) == PDF.content

    boundaries = multipart_boundaries(parsed)
    assert len(boundaries) == 2
    assert boundaries[0] != boundaries[1]
    text = raw.decode("ascii")
    for boundary in boundaries:
        assert text.count(f"--{boundary}--") == 1
        assert text.count(f'boundary="{boundary}"') == 1


def test_output_uses_crlf_line_endings() -> None:
    raw = decoded(
        OutgoingEmail(to="a@example.com", subject="Hi", body="one\ntwo", html="<p>x</p>")
    )

    assert b"\r\n" in raw
    assert b"\n" not in raw.replace(b"\r\n", b"")


def test_binary_parts_wrap_base64_at_76_columns() -> None:
    content = bytes(range(256)) * 2
    archive = Attachment(filename="data.bin", content=content, mime_type="application/zip")

    message = email.message_from_bytes(
        decoded(
            OutgoingEmail(to="a@example.com", subject="Data", body="x", attachments=(archive,))
        )
    )

    part = message.get_payload()[1]
    assert part["Content-Transfer-Encoding"] == "base64"
    lines = [line for line in part.get_payload().splitlines() if line]
    assert len(lines) > 1
    assert all(len(line) <= 76 for line in lines)
    assert part.get_payload(decode=True) == content


def test_inline_image_content_id_matches_caller() -> None:
    message = build_mime_message(
        OutgoingEmail(
            to="a@example.com",
            subject="Logo",
            body="plain",
            html='<img src="cid:logo">',
            inline_images=(LOGO,),
        )
    )

    assert message.get_content_type() == "multipart/related"
    html_part, image = message.get_payload()
    assert html_part.get_content_type() == "text/html"
    assert image["Content-ID"].strip("<>") == "logo"
    assert image.get_content_disposition() == "inline"


def test_all_parts_nest_as_mixed_related() -> None:
    message = build_mime_message(
        OutgoingEmail(
            to="a@example.com",
            subject="Everything",
            body="plain",
            html='<img src="cid:logo">',
            attachments=(PDF,),
            inline_images=(LOGO,),
        )
    )

    related, attachment = message.get_payload()
    assert message.get_content_type() == "multipart/mixed"
    assert related.get_content_type() == "multipart/related"
    assert attachment.get_filename() == "report.pdf"


def test_inline_images_without_html_are_ignored() -> None:
    message = build_mime_message(
        OutgoingEmail(to="a@example.com", subject="x", body="plain", inline_images=(LOGO,))
    )

    assert not message.is_multipart()


def test_threading_headers() -> None:
    message = build_mime_message(
        OutgoingEmail(
            to="a@example.com",
            subject="Re: x",
            body="reply",
            sender="me@example.com",
            in_reply_to="<orig@example.com>",
            references="<root@example.com> <orig@example.com>",
        )
    )

    assert message["From"] == "me@example.com"
    assert message["In-Reply-To"] == "<orig@example.com>"
    assert message["References"] == "<root@example.com> <orig@example.com>"


@pytest.mark.parametrize(("to", "subject"), [("", "Subject"), ("a@example.com", " ")])
def test_missing_recipient_or_subject(to: str, subject: str) -> None:
    with pytest.raises(EnvelopeError):
        build_mime_message(OutgoingEmail(to=to, subject=subject, body="x"))


def test_base64url_alphabet() -> None:
    payload = bytes(range(256)) * 3 + b"\xfb\xff"
    encoded = encode_base64url(payload)

    assert encode_base64url(b"\xfb\xff") == "-_8"
    assert not set(encoded) & {"+", "/", "="}
    assert decode_base64url(encoded) == payload
