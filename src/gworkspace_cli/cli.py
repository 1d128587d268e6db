"""Command-line entry point for gworkspace."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlparse

from gworkspace_cli.core import AppSettings, configure_logging, load_app_settings
from gworkspace_cli.google import (
    DOCUMENT_MIME_TYPE,
    EXPORT_FORMATS,
    SPREADSHEET_MIME_TYPE,
    AuthError,
    DriveClient,
    GmailClient,
    GoogleApiError,
    GoogleCalendarClient,
    GoogleDocsClient,
    GoogleSheetsClient,
    build_oauth_client,
    build_token_provider,
    export_document,
    find_token_path,
)
from gworkspace_cli.google.auth import ensure_gitignore, save_token
from gworkspace_cli.mime import (
    AttachmentError,
    EnvelopeError,
    OutgoingEmail,
    encode_message,
    load_attachments,
    load_inline_images,
    parse_inline_spec,
)
from gworkspace_cli.rendering import render_email_document

LOGGER = logging.getLogger(__name__)

STYLE_CHOICES = ["client", "labs", "plain"]
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

CLI_ERRORS = (
    AuthError,
    GoogleApiError,
    AttachmentError,
    EnvelopeError,
    ValueError,
    OSError,
)


def _add_compose_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--to", required=True, help="Recipient address.")
    parser.add_argument("--subject", required=True, help="Subject line.")
    parser.add_argument("--body", required=True, help="Plain text body.")
    parser.add_argument("--html", default=None, help="Optional HTML body.")
    parser.add_argument(
        "--attachment",
        default=None,
        help="File to attach; comma-separated for multiple.",
    )
    parser.add_argument(
        "--inline",
        default=None,
        help="Inline images as PATH:CID, comma-separated; referenced as cid:CID.",
    )
    parser.add_argument(
        "--in-reply-to",
        dest="reply_to_id",
        default=None,
        help="Gmail message ID being answered; the message joins its thread.",
    )


def _add_calendar_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--calendar",
        default=None,
        help="Calendar ID (default: configured calendar, usually 'primary').",
    )


def _add_sheets_commands(parser: argparse.ArgumentParser) -> None:
    actions = parser.add_subparsers(dest="action", required=True)

    listing = actions.add_parser("list", help="List spreadsheets.")
    listing.add_argument("--max", type=int, default=20, help="Max results (default: 20).")

    actions.add_parser("get", help="Show spreadsheet metadata and tabs.").add_argument(
        "spreadsheet_id"
    )

    for name, help_text in (
        ("read", "Read cell values."),
        ("write", "Write values to cells."),
        ("append", "Append rows after a table."),
        ("clear", "Clear values in a range."),
    ):
        action = actions.add_parser(name, help=help_text)
        action.add_argument("spreadsheet_id")
        action.add_argument("range", help="A1 notation, e.g. Sheet1!A1:D10.")
        if name in {"write", "append"}:
            action.add_argument(
                "--values", required=True, help="JSON array of rows, e.g. '[[\"a\", 1]]'."
            )

    create = actions.add_parser("create", help="Create a spreadsheet.")
    create.add_argument("--title", required=True)
    create.add_argument("--sheets", default=None, help="Comma-separated tab names.")

    add_sheet = actions.add_parser("add-sheet", help="Add a tab to a spreadsheet.")
    add_sheet.add_argument("spreadsheet_id")
    add_sheet.add_argument("--title", required=True)


def _add_docs_commands(parser: argparse.ArgumentParser) -> None:
    actions = parser.add_subparsers(dest="action", required=True)

    listing = actions.add_parser("list", help="List documents.")
    listing.add_argument("--max", type=int, default=20, help="Max results (default: 20).")

    actions.add_parser("get", help="Show document metadata.").add_argument("document_id")
    actions.add_parser("read", help="Read a document as plain text.").add_argument(
        "document_id"
    )

    create = actions.add_parser("create", help="Create a document.")
    create.add_argument("--title", required=True)

    insert = actions.add_parser("insert", help="Insert text at a position.")
    insert.add_argument("document_id")
    insert.add_argument("--text", required=True, help="Text; \\n and \\t are unescaped.")
    insert.add_argument("--index", type=int, default=1, help="Position (default: 1).")

    append = actions.add_parser("append", help="Append text to the end.")
    append.add_argument("document_id")
    append.add_argument("--text", required=True, help="Text; \\n and \\t are unescaped.")

    replace = actions.add_parser("replace", help="Find and replace text.")
    replace.add_argument("document_id")
    replace.add_argument("--find", required=True)
    replace.add_argument("--replace", required=True)
    replace.add_argument("--match-case", action="store_true")

    export = actions.add_parser("export", help="Export a document to a file.")
    export.add_argument("document_id")
    export.add_argument("--format", choices=sorted(EXPORT_FORMATS), default="pdf")
    export.add_argument(
        "--output", type=Path, default=None, help="File or directory (default: title)."
    )


def build_parser() -> argparse.ArgumentParser:
    """Create and configure the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="gworkspace",
        description="Gmail, Calendar, Sheets and Docs from the command line",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file containing configuration overrides.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Override the configured logging level (e.g. DEBUG).",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    auth = commands.add_parser("auth", help="Authenticate with Google.")
    auth.add_argument(
        "--code",
        default=None,
        help="Authorization code, or the full redirect URL containing it.",
    )
    commands.add_parser("check", help="Verify authentication.")
    commands.add_parser("profile", help="Show the Gmail profile.")

    listing = commands.add_parser("list", help="List messages.")
    listing.add_argument("--query", default="", help="Search query (Gmail syntax).")
    listing.add_argument("--max", type=int, default=10, help="Max results (default: 10).")

    read = commands.add_parser("read", help="Read a message by ID.")
    read.add_argument("message_id")

    _add_compose_arguments(commands.add_parser("send", help="Send an email."))
    _add_compose_arguments(commands.add_parser("draft", help="Create a draft email."))

    send_md = commands.add_parser("send-md", help="Send Markdown as a styled HTML email.")
    send_md.add_argument("--to", required=True, help="Recipient address.")
    send_md.add_argument("--file", type=Path, required=True, help="Markdown file to send.")
    send_md.add_argument("--style", choices=STYLE_CHOICES, default=None)
    send_md.add_argument(
        "--subject", default=None, help="Subject (default: first H1 in the Markdown)."
    )
    send_md.add_argument(
        "--draft", action="store_true", help="Create a draft instead of sending."
    )

    render = commands.add_parser("render", help="Render Markdown to the styled HTML document.")
    render.add_argument("--file", type=Path, required=True, help="Markdown file to render.")
    render.add_argument("--style", choices=STYLE_CHOICES, default=None)
    render.add_argument("--subject", default=None, help="Title override.")
    render.add_argument("--output", type=Path, default=None, help="Write HTML to this file.")

    commands.add_parser("labels", help="List all labels.")
    label = commands.add_parser("label", help="Modify labels on a message.")
    label.add_argument("message_id")
    label.add_argument("--add", default=None, help="Label IDs to add, comma-separated.")
    label.add_argument("--remove", default=None, help="Label IDs to remove, comma-separated.")

    download = commands.add_parser("download", help="Download a message as an EML file.")
    download.add_argument("message_id")
    download.add_argument("--output", type=Path, default=None, help="Output file path.")

    commands.add_parser("calendars", help="List all calendars.")

    events = commands.add_parser("events", help="List upcoming events.")
    _add_calendar_argument(events)
    events.add_argument("--max", type=int, default=None, help="Max results.")
    events.add_argument("--from", dest="time_min", default=None, help="Start time (ISO 8601).")
    events.add_argument("--to", dest="time_max", default=None, help="End time (ISO 8601).")

    event = commands.add_parser("event", help="Get event details.")
    event.add_argument("event_id")
    _add_calendar_argument(event)

    create = commands.add_parser("create", help="Create an event.")
    _add_calendar_argument(create)
    create.add_argument("--summary", required=True, help="Event title.")
    create.add_argument("--start", required=True, help="Start (ISO date or date-time).")
    create.add_argument("--end", required=True, help="End (ISO date or date-time).")
    create.add_argument("--description", default=None)
    create.add_argument("--location", default=None)
    create.add_argument("--attendees", default=None, help="Comma-separated emails.")

    delete = commands.add_parser("delete", help="Delete an event.")
    delete.add_argument("event_id")
    _add_calendar_argument(delete)

    _add_sheets_commands(commands.add_parser("sheets", help="Read and write spreadsheets."))
    _add_docs_commands(commands.add_parser("docs", help="Read and edit documents."))

    return parser


def execute(args: argparse.Namespace, settings: AppSettings) -> int:
    """Execute the requested CLI command and return the exit status."""
    try:
        data = asyncio.run(_dispatch(args, settings))
    except CLI_ERRORS as exc:
        LOGGER.debug("Command %s failed", args.command, exc_info=True)
        _output({"success": False, "error": str(exc)})
        return 1
    _output({"success": True, "data": data})
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_app_settings(env_file=args.env_file)
    logging_settings = settings.logging
    if args.log_level:
        logging_settings = logging_settings.model_copy(update={"level": args.log_level})
    configure_logging(logging_settings)
    return execute(args, settings)


# pylint: disable=too-many-return-statements,too-many-branches
async def _dispatch(args: argparse.Namespace, settings: AppSettings) -> Any:
    command = args.command
    if command == "auth":
        return await _run_auth(args, settings)
    if command == "render":
        return _run_render(args, settings)
    if command in {"send", "draft"}:
        return await _run_compose(args, settings, as_draft=command == "draft")
    if command == "send-md":
        return await _run_send_markdown(args, settings)
    if command in {"calendars", "events", "event", "create", "delete"}:
        return await _run_calendar(args, settings)
    if command == "sheets":
        return await _run_sheets(args, settings)
    if command == "docs":
        return await _run_docs(args, settings)

    gmail = _gmail_client(settings)
    if command == "check":
        profile = await gmail.get_profile()
        token_path = find_token_path(settings.google.token_candidates())
        return {
            "message": "Authenticated",
            "email": profile.email_address,
            "token_path": str(token_path) if token_path else None,
            "credentials_path": str(settings.google.resolved_credentials_path()),
        }
    if command == "profile":
        return await gmail.get_profile()
    if command == "list":
        messages = await gmail.list_messages(args.query, args.max)
        return {"messages": messages, "count": len(messages)}
    if command == "read":
        return await gmail.read_message(args.message_id)
    if command == "labels":
        return {"labels": await gmail.list_labels()}
    if command == "label":
        await gmail.modify_labels(
            args.message_id, _comma_list(args.add), _comma_list(args.remove)
        )
        return {"message": "Labels updated"}
    if command == "download":
        result = await gmail.download_message(args.message_id, args.output)
        return {**dataclasses.asdict(result), "message": "Message downloaded as EML"}
    raise ValueError(f"Unknown command: {command}")


async def _run_auth(args: argparse.Namespace, settings: AppSettings) -> dict[str, Any]:
    """Print the consent URL, or exchange a code and store the token."""
    oauth = build_oauth_client(settings.google)
    if not args.code:
        return {
            "authorization_url": oauth.get_authorization_url(),
            "message": "Open the URL, approve access, then run: gworkspace auth --code <code>",
        }
    tokens = await oauth.exchange_code_for_tokens(_extract_code(args.code))
    token_path = save_token(settings.google.project_token_path, tokens)
    ensure_gitignore(Path.cwd())
    return {"message": "Authentication successful", "token_path": str(token_path)}


def _run_render(args: argparse.Namespace, settings: AppSettings) -> dict[str, Any]:
    style = args.style or settings.mail.style
    markdown = args.file.read_text(encoding="utf-8")
    document = render_email_document(
        markdown, style, subject=args.subject, escape_title=settings.mail.escape_title
    )
    if args.output is None:
        return {"title": document.title, "style": style, "html": document.html}
    args.output.write_text(document.html, encoding="utf-8")
    return {"title": document.title, "style": style, "path": str(args.output)}


async def _run_compose(
    args: argparse.Namespace,
    settings: AppSettings,
    *,
    as_draft: bool,
) -> dict[str, Any]:
    attachment_paths = _comma_list(args.attachment)
    inline_specs = [parse_inline_spec(item) for item in _comma_list(args.inline)]
    attachments, inline_images = await asyncio.gather(
        load_attachments(attachment_paths), load_inline_images(inline_specs)
    )
    gmail = _gmail_client(settings)
    reply = await gmail.get_reply_context(args.reply_to_id) if args.reply_to_id else None
    raw = encode_message(
        OutgoingEmail(
            to=args.to,
            subject=args.subject,
            body=args.body,
            html=args.html,
            attachments=attachments,
            inline_images=inline_images,
            sender=settings.mail.sender,
            in_reply_to=reply.in_reply_to if reply else None,
            references=reply.references if reply else None,
        )
    )
    thread_id = reply.thread_id if reply else None
    noun = "Draft created" if as_draft else "Email sent"
    if attachments or inline_images:
        message = f"{noun} with attachment(s)"
    elif args.html:
        message = f"HTML {noun[0].lower()}{noun[1:]}"
    else:
        message = noun
    if as_draft:
        result: Any = await gmail.create_draft(raw, thread_id)
    else:
        result = await gmail.send_raw(raw, thread_id)
    return {**dataclasses.asdict(result), "message": message}


async def _run_send_markdown(args: argparse.Namespace, settings: AppSettings) -> dict[str, Any]:
    style = args.style or settings.mail.style
    markdown = args.file.read_text(encoding="utf-8")
    document = render_email_document(
        markdown, style, subject=args.subject, escape_title=settings.mail.escape_title
    )
    # The Markdown source doubles as the plain text alternative.
    raw = encode_message(
        OutgoingEmail(
            to=args.to,
            subject=document.title,
            body=markdown,
            html=document.html,
            sender=settings.mail.sender,
        )
    )
    gmail = _gmail_client(settings)
    if args.draft:
        result: Any = await gmail.create_draft(raw)
        message = f"Styled draft created with {style} template"
    else:
        result = await gmail.send_raw(raw)
        message = f"Styled email sent with {style} template"
    return {
        **dataclasses.asdict(result),
        "message": message,
        "subject": document.title,
        "style": style,
    }


async def _run_calendar(args: argparse.Namespace, settings: AppSettings) -> Any:
    calendar = GoogleCalendarClient(
        build_token_provider(settings.google),
        time_zone=settings.calendar.time_zone,
        timeout=settings.google.timeout_seconds,
    )
    if args.command == "calendars":
        return {"calendars": await calendar.list_calendars()}

    calendar_id = args.calendar or settings.calendar.calendar_id
    if args.command == "events":
        events = await calendar.list_events(
            calendar_id,
            args.max or settings.calendar.max_results,
            args.time_min,
            args.time_max,
        )
        return {"events": events, "count": len(events)}
    if args.command == "event":
        return await calendar.get_event(args.event_id, calendar_id)
    if args.command == "create":
        created = await calendar.create_event(
            args.summary,
            args.start,
            args.end,
            calendar_id=calendar_id,
            description=args.description,
            location=args.location,
            attendees=_comma_list(args.attendees) or None,
        )
        return {**dataclasses.asdict(created), "message": "Event created"}
    await calendar.delete_event(args.event_id, calendar_id)
    return {"message": "Event deleted"}


async def _run_sheets(args: argparse.Namespace, settings: AppSettings) -> Any:
    tokens = build_token_provider(settings.google)
    timeout = settings.google.timeout_seconds
    if args.action == "list":
        drive = DriveClient(tokens, timeout=timeout)
        files = await drive.list_files(SPREADSHEET_MIME_TYPE, args.max)
        return {"spreadsheets": files, "count": len(files)}

    sheets = GoogleSheetsClient(tokens, timeout=timeout)
    action = args.action
    if action == "get":
        return await sheets.get_spreadsheet(args.spreadsheet_id)
    if action == "read":
        return await sheets.read_range(args.spreadsheet_id, args.range)
    if action == "write":
        result = await sheets.write_range(
            args.spreadsheet_id, args.range, _parse_rows(args.values)
        )
        return {**dataclasses.asdict(result), "message": "Values written"}
    if action == "append":
        result = await sheets.append_rows(
            args.spreadsheet_id, args.range, _parse_rows(args.values)
        )
        return {**dataclasses.asdict(result), "message": "Rows appended"}
    if action == "clear":
        cleared = await sheets.clear_range(args.spreadsheet_id, args.range)
        return {"cleared_range": cleared, "message": "Range cleared"}
    if action == "create":
        created = await sheets.create_spreadsheet(args.title, _comma_list(args.sheets) or None)
        return {**dataclasses.asdict(created), "message": "Spreadsheet created"}
    added = await sheets.add_sheet(args.spreadsheet_id, args.title)
    return {**dataclasses.asdict(added), "message": "Sheet added"}


# pylint: disable=too-many-return-statements
async def _run_docs(args: argparse.Namespace, settings: AppSettings) -> Any:
    tokens = build_token_provider(settings.google)
    timeout = settings.google.timeout_seconds
    action = args.action
    if action in {"list", "export"}:
        drive = DriveClient(tokens, timeout=timeout)
        if action == "list":
            files = await drive.list_files(DOCUMENT_MIME_TYPE, args.max)
            return {"documents": files, "count": len(files)}
        exported = await export_document(drive, args.document_id, args.format, args.output)
        return {**dataclasses.asdict(exported), "message": f"Document exported to {exported.path}"}

    docs = GoogleDocsClient(tokens, timeout=timeout)
    if action == "get":
        return await docs.get_document(args.document_id)
    if action == "read":
        return await docs.read_document(args.document_id)
    if action == "create":
        created = await docs.create_document(args.title)
        return {**dataclasses.asdict(created), "message": "Document created"}
    if action == "insert":
        index = await docs.insert_text(args.document_id, _unescape(args.text), args.index)
        return {"document_id": args.document_id, "message": f"Text inserted at index {index}"}
    if action == "append":
        index = await docs.append_text(args.document_id, _unescape(args.text))
        return {"document_id": args.document_id, "message": f"Text appended at index {index}"}
    changed = await docs.replace_text(
        args.document_id, args.find, args.replace, match_case=args.match_case
    )
    return {
        "document_id": args.document_id,
        "occurrences_changed": changed,
        "message": f"Replaced {changed} occurrence(s)",
    }


def _gmail_client(settings: AppSettings) -> GmailClient:
    return GmailClient(
        build_token_provider(settings.google),
        timeout=settings.google.timeout_seconds,
    )


def _extract_code(value: str) -> str:
    """Accept either a bare code or the redirect URL carrying ``?code=``."""
    if "code=" not in value:
        return value.strip()
    codes = parse_qs(urlparse(value.strip()).query).get("code")
    if not codes:
        raise ValueError(f"No authorization code found in '{value}'")
    return codes[0]


def _parse_rows(value: str) -> list[list[Any]]:
    """Decode ``--values``, which must be a JSON array of arrays."""
    try:
        rows = json.loads(value)
    except json.JSONDecodeError as exc:
        raise ValueError(f"--values is not valid JSON: {exc}") from exc
    if not isinstance(rows, list) or not all(isinstance(row, list) for row in rows):
        raise ValueError("--values must be a JSON array of arrays")
    return rows


def _unescape(text: str) -> str:
    return text.replace("\\n", "\n").replace("\\t", "\t")


def _comma_list(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _output(result: dict[str, Any]) -> None:
    print(json.dumps(result, indent=2, default=_to_jsonable))


if __name__ == "__main__":
    raise SystemExit(main())
