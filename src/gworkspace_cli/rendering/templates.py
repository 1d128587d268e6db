"""Outer HTML documents that wrap rendered email bodies."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .html import markdown_to_email_html
from .inline import escape_html

_PLACEHOLDER_RE = re.compile(r"\{\{(TITLE|CONTENT)\}\}")

_FONT_STACK = (
    "-apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif"
)

_HEAD = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{{TITLE}}</title>
</head>
"""

# Email clients ignore stylesheets and CSS variables, so everything is inline.
CLIENT_TEMPLATE = (
    _HEAD
    + f"""<body style="margin: 0; padding: 20px; background-color: #e8e6df; font-family: {_FONT_STACK};">
  <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="100%" style="max-width: 680px; margin: 0 auto;">
    <tr>
      <td style="background: #faf9f6; padding: 40px; border: 1px solid #d4d3cf; border-radius: 8px;">
        {{{{CONTENT}}}}
      </td>
    </tr>
  </table>
</body>
</html>"""
)

LABS_TEMPLATE = (
    _HEAD
    + f"""<body style="margin: 0; padding: 20px; background-color: #e8e6df; font-family: {_FONT_STACK}; color: #000000;">
  <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="100%" style="max-width: 680px; margin: 0 auto;">
    <tr>
      <td style="background: #f3f2ea; padding: 40px; border: 1px solid #000000; box-shadow: 8px 8px 0px 0px rgba(0,0,0,0.1); color: #000000;">
        {{{{CONTENT}}}}
      </td>
    </tr>
  </table>
</body>
</html>"""
)

PLAIN_TEMPLATE = (
    _HEAD
    + f"""<body style="font-family: {_FONT_STACK}; line-height: 1.6; color: #333;">
{{{{CONTENT}}}}
</body>
</html>"""
)

TEMPLATES = {
    "client": CLIENT_TEMPLATE,
    "labs": LABS_TEMPLATE,
    "plain": PLAIN_TEMPLATE,
}


@dataclass(frozen=True, slots=True)
class EmailDocument:
    """Complete HTML document ready to send, with its effective title."""

    html: str
    title: str


def get_template(style: str) -> str:
    """Return the outer document for ``style``."""
    try:
        return TEMPLATES[style]
    except KeyError as exc:
        raise ValueError(f"Unknown style '{style}'") from exc


def apply_template(
    style: str, title: str, content: str, *, escape_title: bool = False
) -> str:
    """Substitute ``title`` and ``content`` into the template for ``style``.

    The title is inserted verbatim unless ``escape_title`` is set; callers
    passing untrusted subjects should opt in.
    """
    template = get_template(style)
    if escape_title:
        title = escape_html(title)
    values = {"TITLE": title, "CONTENT": content}
    # Substituted values are never rescanned for placeholders.
    return _PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], template)


def render_email_document(
    text: str,
    style: str = "client",
    *,
    subject: str | None = None,
    escape_title: bool = False,
) -> EmailDocument:
    """Render Markdown ``text`` into a full document titled by ``subject`` or its H1."""
    rendered = markdown_to_email_html(text, style)
    title = subject or rendered.title
    html = apply_template(style, title, rendered.html, escape_title=escape_title)
    return EmailDocument(html=html, title=title)


__all__ = [
    "EmailDocument",
    "TEMPLATES",
    "apply_template",
    "get_template",
    "render_email_document",
]
