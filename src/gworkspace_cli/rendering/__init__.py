"""Markdown to inline-styled email HTML."""

from .blocks import Block, BlockKind, ParsedDocument, extract_title, parse_markdown
from .html import RenderedEmail, markdown_to_email_html, render_blocks
from .inline import escape_html, format_inline
from .styles import StyleProfile, get_style_profile
from .templates import EmailDocument, apply_template, render_email_document

__all__ = [
    "Block",
    "BlockKind",
    "EmailDocument",
    "ParsedDocument",
    "RenderedEmail",
    "StyleProfile",
    "apply_template",
    "escape_html",
    "extract_title",
    "format_inline",
    "get_style_profile",
    "markdown_to_email_html",
    "parse_markdown",
    "render_blocks",
    "render_email_document",
]
