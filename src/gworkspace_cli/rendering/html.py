"""Render parsed Markdown blocks as inline-styled email HTML."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .blocks import Block, BlockKind, parse_markdown
from .inline import escape_html, format_inline
from .styles import StyleProfile, get_style_profile


@dataclass(frozen=True, slots=True)
class RenderedEmail:
    """Body HTML fragment and the title extracted from the source."""

    html: str
    title: str


def _render_heading(block: Block, profile: StyleProfile) -> str:
    tag = f"h{block.level}"
    return f"<{tag}{profile.attrs(tag)}>{format_inline(block.lines[0], profile)}</{tag}>"


def _render_paragraph(block: Block, profile: StyleProfile) -> str:
    body = "\n".join(format_inline(line, profile) for line in block.lines)
    return f"<p{profile.attrs('p')}>{body}</p>"


def _render_list(tag: str) -> Callable[[Block, StyleProfile], str]:
    def render(block: Block, profile: StyleProfile) -> str:
        items = "\n".join(
            f"<li{profile.attrs('li')}>{format_inline(item, profile)}</li>"
            for item in block.items
        )
        return f"<{tag}{profile.attrs(tag)}>\n{items}\n</{tag}>"

    return render


def _render_cells(tag: str, cells: Iterable[str], profile: StyleProfile) -> str:
    return "".join(
        f"<{tag}{profile.attrs(tag)}>{format_inline(cell, profile)}</{tag}>"
        for cell in cells
    )


def _render_table(block: Block, profile: StyleProfile) -> str:
    parts = [
        f"<table{profile.attrs('table')}><thead><tr>",
        _render_cells("th", block.header, profile),
        "</tr></thead><tbody>",
    ]
    for row in block.rows:
        parts.append(f"<tr>{_render_cells('td', row, profile)}</tr>")
    parts.append("</tbody></table>")
    return "".join(parts)


def _render_code(block: Block, profile: StyleProfile) -> str:
    return f"<pre{profile.attrs('pre')}><code>{escape_html(block.lines[0])}</code></pre>"


def _render_blockquote(block: Block, profile: StyleProfile) -> str:
    if not block.lines:
        return ""
    content = "<br>".join(format_inline(line, profile) for line in block.lines)
    return (
        f"<blockquote{profile.attrs('blockquote')}>"
        f"<p{profile.attrs('p')}>{content}</p></blockquote>"
    )


def _render_rule(block: Block, profile: StyleProfile) -> str:
    del block
    return f"<hr{profile.attrs('hr')}>"


def _render_html(block: Block, profile: StyleProfile) -> str:
    del profile
    return block.lines[0]


_RENDERERS: dict[BlockKind, Callable[[Block, StyleProfile], str]] = {
    BlockKind.HEADING: _render_heading,
    BlockKind.PARAGRAPH: _render_paragraph,
    BlockKind.UNORDERED_LIST: _render_list("ul"),
    BlockKind.ORDERED_LIST: _render_list("ol"),
    BlockKind.TABLE: _render_table,
    BlockKind.CODE: _render_code,
    BlockKind.BLOCKQUOTE: _render_blockquote,
    BlockKind.RULE: _render_rule,
    BlockKind.HTML: _render_html,
}


def render_blocks(blocks: Iterable[Block], profile: StyleProfile) -> str:
    """Render ``blocks`` in order, one element per line group."""
    rendered = (_RENDERERS[block.kind](block, profile) for block in blocks)
    return "\n".join(fragment for fragment in rendered if fragment)


def markdown_to_email_html(text: str, style: str = "client") -> RenderedEmail:
    """Convert Markdown into an inline-styled HTML fragment and its title."""
    profile = get_style_profile(style)
    document = parse_markdown(text)
    return RenderedEmail(html=render_blocks(document.blocks, profile), title=document.title)


__all__ = ["RenderedEmail", "markdown_to_email_html", "render_blocks"]
