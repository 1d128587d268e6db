"""Inline Markdown substitutions (bold, italic, links, code spans)."""

from __future__ import annotations

import html
import re

from .styles import PLAIN, StyleProfile

_CODE_RE = re.compile(r"`([^`]+)`")
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_ITALIC_RE = re.compile(r"\*([^*]+?)\*")
_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_PLACEHOLDER_RE = re.compile("\x00(\\d+)\x00")
_TARGET_RE = re.compile("\x01(\\d+)\x01")


def escape_html(text: str) -> str:
    """Escape ``& < > " '`` for literal display."""
    return html.escape(text, quote=True).replace("&#x27;", "&#039;")


def format_inline(text: str, profile: StyleProfile = PLAIN) -> str:
    """Apply bold, italic, link and inline code markup to ``text``.

    Code spans and link targets are set aside first so that markers inside
    them survive the other passes untouched. Code spans come back as escaped
    ``<code>`` elements, targets as the original ``href`` text.
    """
    spans: list[str] = []
    targets: list[str] = []

    def stash(match: re.Match[str]) -> str:
        spans.append(match.group(1))
        return f"\x00{len(spans) - 1}\x00"

    def stash_target(match: re.Match[str]) -> str:
        targets.append(match.group(2))
        return f"[{match.group(1)}](\x01{len(targets) - 1}\x01)"

    formatted = _CODE_RE.sub(stash, text)
    formatted = _LINK_RE.sub(stash_target, formatted)
    formatted = _BOLD_RE.sub(
        lambda m: f"<strong{profile.attrs('strong')}>{m.group(1)}</strong>", formatted
    )
    formatted = _ITALIC_RE.sub(
        lambda m: f"<em{profile.attrs('em')}>{m.group(1)}</em>", formatted
    )
    formatted = _LINK_RE.sub(
        lambda m: f'<a href="{m.group(2)}"{profile.attrs("a")}>{m.group(1)}</a>',
        formatted,
    )
    formatted = _TARGET_RE.sub(lambda m: targets[int(m.group(1))], formatted)
    return _PLACEHOLDER_RE.sub(
        lambda m: f"<code{profile.attrs('code')}>{escape_html(spans[int(m.group(1))])}</code>",
        formatted,
    )


__all__ = ["escape_html", "format_inline"]
