"""Classify Markdown lines into structural blocks.

The parser makes a single forward pass over the document. At each position it
tries the block constructs in a fixed order (fenced code, table, heading, rule,
lists, blockquote, raw HTML) and falls back to paragraph text. Only the
Markdown subset used for email reports is recognised.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

DEFAULT_TITLE = "Report"

_FENCE_RE = re.compile(r"^```(\w*)\s*$")
_HEADING_RE = re.compile(r"^(#{1,4}) (.+)$")
_TITLE_RE = re.compile(r"^# (.+)$", re.MULTILINE)
_ORDERED_RE = re.compile(r"^\d+\. ")
_SEPARATOR_RE = re.compile(r"^[\s|:\-]+$")
_HTML_BLOCK_RE = re.compile(
    r"^<(h[1-6]|ul|ol|li|blockquote|pre|hr|p|table|thead|tbody|tr|th|td)\b"
    r"|^</(h[1-6]|ul|ol|li|blockquote|pre|p|table|thead|tbody|tr|th|td)>"
)


class BlockKind(Enum):
    """Structural kinds recognised by the parser."""

    HEADING = "heading"
    PARAGRAPH = "paragraph"
    UNORDERED_LIST = "ul"
    ORDERED_LIST = "ol"
    TABLE = "table"
    CODE = "code"
    BLOCKQUOTE = "blockquote"
    RULE = "rule"
    HTML = "html"


# pylint: disable=too-many-instance-attributes
@dataclass(frozen=True, slots=True)
class Block:
    """One structural unit of a Markdown document."""

    kind: BlockKind
    lines: tuple[str, ...] = ()
    level: int = 0
    language: str | None = None
    header: tuple[str, ...] = ()
    rows: tuple[tuple[str, ...], ...] = ()
    items: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ParsedDocument:
    """Blocks in document order plus the default title."""

    blocks: tuple[Block, ...]
    title: str


def extract_title(text: str) -> str:
    """Return the text of the first level-1 heading, or ``"Report"``."""
    match = _TITLE_RE.search(_normalize(text))
    return match.group(1) if match else DEFAULT_TITLE


def parse_markdown(text: str) -> ParsedDocument:
    """Split ``text`` into blocks and extract its title."""
    lines = _normalize(text).split("\n")
    return ParsedDocument(blocks=tuple(_scan(lines)), title=extract_title(text))


def _normalize(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _scan(lines: list[str]) -> list[Block]:
    blocks: list[Block] = []
    paragraph: list[str] = []

    def flush_paragraph() -> None:
        if paragraph:
            blocks.append(Block(BlockKind.PARAGRAPH, lines=tuple(paragraph)))
            paragraph.clear()

    index = 0
    while index < len(lines):
        line = lines[index]
        if not line.strip():
            flush_paragraph()
            index += 1
            continue

        matched = _match_block(lines, index)
        if matched is None:
            paragraph.append(line)
            index += 1
            continue

        block, index = matched
        flush_paragraph()
        blocks.append(block)

    flush_paragraph()
    return blocks


def _match_block(lines: list[str], index: int) -> tuple[Block, int] | None:
    """Return the block starting at ``index`` and the index after it."""
    for matcher in _MATCHERS:
        result = matcher(lines, index)
        if result is not None:
            return result
    return None


def _match_code(lines: list[str], index: int) -> tuple[Block, int] | None:
    opening = _FENCE_RE.match(lines[index])
    if opening is None:
        return None
    for end in range(index + 1, len(lines)):
        if lines[end].startswith("```"):
            body = "\n".join(lines[index + 1 : end]).strip()
            block = Block(
                BlockKind.CODE,
                lines=(body,),
                language=opening.group(1) or None,
            )
            return block, end + 1
    # Unclosed fences stay literal.
    return None


def _is_table_line(line: str) -> bool:
    stripped = line.strip()
    return len(stripped) >= 2 and stripped.startswith("|") and stripped.endswith("|")


def _split_row(line: str) -> tuple[str, ...]:
    cells = line.strip().split("|")[1:-1]
    return tuple(cell.strip() for cell in cells)


def _match_table(lines: list[str], index: int) -> tuple[Block, int] | None:
    end = _run_end(lines, index, _is_table_line)
    run = lines[index:end]
    if len(run) < 2:
        return None
    header = _split_row(run[0])
    rows = tuple(_split_row(line) for line in run[1:] if not _SEPARATOR_RE.match(line))
    return Block(BlockKind.TABLE, lines=tuple(run), header=header, rows=rows), end


def _match_heading(lines: list[str], index: int) -> tuple[Block, int] | None:
    match = _HEADING_RE.match(lines[index])
    if match is None:
        return None
    block = Block(
        BlockKind.HEADING,
        lines=(match.group(2),),
        level=len(match.group(1)),
    )
    return block, index + 1


def _match_rule(lines: list[str], index: int) -> tuple[Block, int] | None:
    if lines[index] != "---":
        return None
    return Block(BlockKind.RULE), index + 1


def _is_unordered_item(line: str) -> bool:
    return line.startswith("- ") and bool(line[2:].strip())


def _is_ordered_item(line: str) -> bool:
    match = _ORDERED_RE.match(line)
    return match is not None and bool(line[match.end() :].strip())


def _match_unordered(lines: list[str], index: int) -> tuple[Block, int] | None:
    end = _run_end(lines, index, _is_unordered_item)
    if end == index:
        return None
    run = tuple(lines[index:end])
    items = tuple(line[2:] for line in run)
    return Block(BlockKind.UNORDERED_LIST, lines=run, items=items), end


def _match_ordered(lines: list[str], index: int) -> tuple[Block, int] | None:
    end = _run_end(lines, index, _is_ordered_item)
    if end == index:
        return None
    run = tuple(lines[index:end])
    items = tuple(_ORDERED_RE.sub("", line, count=1) for line in run)
    return Block(BlockKind.ORDERED_LIST, lines=run, items=items), end


def _is_quote_line(line: str) -> bool:
    return line.startswith(">")


def _match_blockquote(lines: list[str], index: int) -> tuple[Block, int] | None:
    if not _is_quote_line(lines[index]):
        return None
    collected: list[str] = []
    end = index
    while True:
        run_end = _run_end(lines, end, _is_quote_line)
        collected.extend(lines[end:run_end])
        # Quotes separated only by blank lines belong together.
        lookahead = run_end
        while lookahead < len(lines) and not lines[lookahead].strip():
            lookahead += 1
        end = run_end
        if lookahead < len(lines) and _is_quote_line(lines[lookahead]):
            end = lookahead
            continue
        break
    content = tuple(
        stripped
        for stripped in (re.sub(r"^>\s?", "", line).strip() for line in collected)
        if stripped
    )
    return Block(BlockKind.BLOCKQUOTE, lines=content), end


def _match_html(lines: list[str], index: int) -> tuple[Block, int] | None:
    if not _HTML_BLOCK_RE.match(lines[index].strip()):
        return None
    return Block(BlockKind.HTML, lines=(lines[index],)), index + 1


def _run_end(lines: Sequence[str], start: int, predicate: Callable[[str], bool]) -> int:
    """Return the index just past the run of lines satisfying ``predicate``."""
    end = start
    while end < len(lines) and predicate(lines[end]):
        end += 1
    return end


_MATCHERS: tuple[Callable[[list[str], int], tuple[Block, int] | None], ...] = (
    _match_code,
    _match_table,
    _match_heading,
    _match_rule,
    _match_unordered,
    _match_ordered,
    _match_blockquote,
    _match_html,
)


__all__ = [
    "DEFAULT_TITLE",
    "Block",
    "BlockKind",
    "ParsedDocument",
    "extract_title",
    "parse_markdown",
]
