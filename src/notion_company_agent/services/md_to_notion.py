"""Markdown → Notion blocks conversion.

A small, line-based block parser for the markdown the company analyzer emits.
It builds typed block records (headings, dividers, code, one level of nested
lists, paragraphs) whose text is split into rich-text runs, and serializes
them for `PATCH https://api.notion.com/v1/blocks/{block_id}/children`.

Important: Notion rejects any rich-text element whose `text.content` is longer
than 2000 UTF-16 code units, so every run is chunked at `NOTION_TEXT_LIMIT`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Union

# Notion API limit: max UTF-16 code units per rich_text element
NOTION_TEXT_LIMIT = 2000
DEFAULT_CODE_LANGUAGE = "plain text"

_BULLET_RE = re.compile(r"^(\s*)[*\-]\s(.*)")
_NUMBERED_RE = re.compile(r"^(\s*)\d+\.\s(.*)")
_DIVIDER_RE = re.compile(r"-{3,}|\*{3,}|_{3,}")
_FENCE = "```"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Annotations:
    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    code: bool = False
    color: str | None = None

    def to_notion(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for flag in ("bold", "italic", "strikethrough", "code"):
            if getattr(self, flag):
                out[flag] = True
        if self.color:
            out["color"] = self.color
        return out


BOLD = Annotations(bold=True)
ITALIC = Annotations(italic=True)
STRIKETHROUGH = Annotations(strikethrough=True)
CODE = Annotations(code=True)


@dataclass(frozen=True)
class TextRun:
    """A span of text with uniform formatting and an optional link target."""

    content: str
    annotations: Annotations | None = None
    link: str | None = None

    def to_notion(self) -> dict[str, Any]:
        text: dict[str, Any] = {"content": self.content}
        if self.link:
            text["link"] = {"url": self.link}
        item: dict[str, Any] = {"type": "text", "text": text}
        if self.annotations is not None:
            annotations = self.annotations.to_notion()
            if annotations:
                item["annotations"] = annotations
        return item


def _rich_text(runs: list[TextRun]) -> list[dict[str, Any]]:
    return [run.to_notion() for run in runs]


def _notion_block(block_type: str, payload: dict[str, Any]) -> dict[str, Any]:
    return {"object": "block", "type": block_type, block_type: payload}


@dataclass
class HeadingBlock:
    level: int
    rich_text: list[TextRun]

    @property
    def type(self) -> str:
        return f"heading_{self.level}"

    def to_notion(self) -> dict[str, Any]:
        return _notion_block(self.type, {"rich_text": _rich_text(self.rich_text)})


@dataclass
class DividerBlock:
    @property
    def type(self) -> str:
        return "divider"

    def to_notion(self) -> dict[str, Any]:
        return _notion_block(self.type, {})


@dataclass
class CodeBlock:
    language: str
    rich_text: list[TextRun]

    @property
    def type(self) -> str:
        return "code"

    def to_notion(self) -> dict[str, Any]:
        return _notion_block(
            self.type,
            {"rich_text": _rich_text(self.rich_text), "language": self.language},
        )


@dataclass
class ListItemBlock:
    """Numbered or bulleted list item; `children` is only set when non-empty."""

    ordered: bool
    rich_text: list[TextRun]
    children: list[ListItemBlock] | None = None

    @property
    def type(self) -> str:
        return "numbered_list_item" if self.ordered else "bulleted_list_item"

    def to_notion(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"rich_text": _rich_text(self.rich_text)}
        if self.children:
            payload["children"] = [child.to_notion() for child in self.children]
        return _notion_block(self.type, payload)


@dataclass
class ParagraphBlock:
    rich_text: list[TextRun]

    @property
    def type(self) -> str:
        return "paragraph"

    def to_notion(self) -> dict[str, Any]:
        return _notion_block(self.type, {"rich_text": _rich_text(self.rich_text)})


Block = Union[HeadingBlock, DividerBlock, CodeBlock, ListItemBlock, ParagraphBlock]


def blocks_to_notion(blocks: list[Block]) -> list[dict[str, Any]]:
    """Serialize blocks into Notion API block objects."""
    return [block.to_notion() for block in blocks]


# ---------------------------------------------------------------------------
# Inline formatting
# ---------------------------------------------------------------------------


def utf16_len(text: str) -> int:
    """Length as Notion (and JavaScript) counts it."""
    return len(text.encode("utf-16-le")) // 2


def split_rich_text(
    content: str,
    annotations: Annotations | None = None,
    link: str | None = None,
    limit: int = NOTION_TEXT_LIMIT,
) -> list[TextRun]:
    """Chop `content` into runs of at most `limit` UTF-16 code units.

    Notion measures `text.content` in UTF-16 units, so characters outside the
    BMP count twice and are never cut in half. Every chunk keeps the same
    annotations and link. The cut is hard; no attempt is made to align on
    word boundaries.
    """
    if not content:
        return [TextRun("")]
    if utf16_len(content) <= limit:
        return [TextRun(content, annotations, link)]

    runs: list[TextRun] = []
    start = 0
    units = 0
    for i, ch in enumerate(content):
        width = 2 if ord(ch) > 0xFFFF else 1
        if units + width > limit:
            runs.append(TextRun(content[start:i], annotations, link))
            start, units = i, 0
        units += width
    runs.append(TextRun(content[start:], annotations, link))
    return runs


# Order matters: bold before italic, markdown links before bare URLs.
InlineMatcher = tuple[re.Pattern[str], Callable[[re.Match[str]], list[TextRun]]]

INLINE_MATCHERS: list[InlineMatcher] = [
    (re.compile(r"\*\*(.+?)\*\*"), lambda m: split_rich_text(m.group(1), BOLD)),
    (re.compile(r"~~(.+?)~~"), lambda m: split_rich_text(m.group(1), STRIKETHROUGH)),
    (re.compile(r"`(.+?)`"), lambda m: split_rich_text(m.group(1), CODE)),
    (re.compile(r"\[(.+?)\]\((.+?)\)"), lambda m: split_rich_text(m.group(1), link=m.group(2))),
    (re.compile(r"\*(.+?)\*"), lambda m: split_rich_text(m.group(1), ITALIC)),
    (re.compile(r"(https?://[^\s)]+)"), lambda m: split_rich_text(m.group(1), link=m.group(1))),
]


def _match_at(text: str, pos: int) -> tuple[re.Match[str], Callable[[re.Match[str]], list[TextRun]]] | None:
    for pattern, build in INLINE_MATCHERS:
        m = pattern.match(text, pos)
        if m:
            return m, build
    return None


def parse_inline_formatting(text: str) -> list[TextRun]:
    """Parse one line of inline markdown into rich-text runs.

    Supported: **bold**, ~~strikethrough~~, `code`, [link text](url), *italic*
    and bare http(s) URLs. Formatting flags are never combined; nested markers
    are kept literally.
    """
    if not text or not text.strip():
        return [TextRun(text or "")]

    items: list[TextRun] = []
    last = 0
    pos = 0
    while pos < len(text):
        hit = _match_at(text, pos)
        if hit is None:
            pos += 1
            continue
        m, build = hit
        if m.start() > last:
            items.extend(split_rich_text(text[last : m.start()]))
        items.extend(build(m))
        last = pos = m.end()

    if last < len(text):
        items.extend(split_rich_text(text[last:]))
    return items or [TextRun(text)]


# ---------------------------------------------------------------------------
# Block-level parsing
# ---------------------------------------------------------------------------


def _list_item_match(line: str) -> tuple[re.Match[str], bool] | None:
    """Return the list-item match for `line` and whether it is numbered."""
    m = _BULLET_RE.match(line)
    if m:
        return m, False
    m = _NUMBERED_RE.match(line)
    if m:
        return m, True
    return None


def _is_deeper_list_item(line: str, parent_indent: int) -> bool:
    hit = _list_item_match(line)
    return hit is not None and len(hit[0].group(1)) > parent_indent


def collect_nested_list_items(
    lines: list[str], start_index: int, parent_indent: int
) -> tuple[list[ListItemBlock], int]:
    """Collect list items indented deeper than `parent_indent`.

    Returns the child blocks and the line index to resume from. Only one level
    of nesting is built: deeper lines all become direct children.
    """
    children: list[ListItemBlock] = []
    i = start_index
    while i < len(lines):
        line = lines[i]

        # A blank line only continues the nested list if the next non-blank
        # line is still a deeper list item.
        if not line.strip():
            j = i + 1
            while j < len(lines) and not lines[j].strip():
                j += 1
            if j < len(lines) and _is_deeper_list_item(lines[j], parent_indent):
                i = j
                continue
            break

        hit = _list_item_match(line)
        if hit is None or len(hit[0].group(1)) <= parent_indent:
            break
        m, ordered = hit
        children.append(ListItemBlock(ordered=ordered, rich_text=parse_inline_formatting(m.group(2))))
        i += 1

    return children, i


def _list_item_block(lines: list[str], i: int, m: re.Match[str], ordered: bool) -> tuple[ListItemBlock, int]:
    children, next_index = collect_nested_list_items(lines, i + 1, len(m.group(1)))
    block = ListItemBlock(
        ordered=ordered,
        rich_text=parse_inline_formatting(m.group(2)),
        children=children or None,
    )
    return block, next_index


def markdown_to_notion_blocks(markdown: str) -> list[Block]:
    """Convert markdown into typed blocks.

    Supported block types:
      # / ## / ### headings, dividers, fenced code, bulleted & numbered lists
      (one level of nesting) and single-line paragraphs. Anything else falls
      back to a paragraph, so this never raises.
    """
    lines = markdown.split("\n")
    blocks: list[Block] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        stripped = line.strip()
        if not stripped:
            i += 1
            continue
        # Heading
        if line.startswith("### "):
            blocks.append(HeadingBlock(3, parse_inline_formatting(line[4:])))
            i += 1
            continue
        if line.startswith("## "):
            blocks.append(HeadingBlock(2, parse_inline_formatting(line[3:])))
            i += 1
            continue
        if line.startswith("# "):
            blocks.append(HeadingBlock(1, parse_inline_formatting(line[2:])))
            i += 1
            continue
        # HR
        if _DIVIDER_RE.fullmatch(stripped):
            blocks.append(DividerBlock())
            i += 1
            continue
        # Code block
        if stripped.startswith(_FENCE):
            language = stripped[len(_FENCE) :].strip() or DEFAULT_CODE_LANGUAGE
            code_lines = []
            i += 1
            while i < len(lines) and lines[i].strip() != _FENCE:
                code_lines.append(lines[i])
                i += 1
            if i < len(lines):
                i += 1  # closing fence
            blocks.append(CodeBlock(language, split_rich_text("\n".join(code_lines))))
            continue
        # Numbered list, then bulleted list
        m = _NUMBERED_RE.match(line)
        if m:
            block, i = _list_item_block(lines, i, m, ordered=True)
            blocks.append(block)
            continue
        m = _BULLET_RE.match(line)
        if m:
            block, i = _list_item_block(lines, i, m, ordered=False)
            blocks.append(block)
            continue
        # Paragraph (one per line)
        blocks.append(ParagraphBlock(parse_inline_formatting(line)))
        i += 1
    return blocks
