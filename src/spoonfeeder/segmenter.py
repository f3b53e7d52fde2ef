# -*- coding: utf-8 -*-
"""
Block segmentation: structured text → ordered list of blocks.

The text is read once, line by line. Each line is classified first
(:func:`classify_line`), then fed to a small state machine that keeps one
open list, table or multi-line math accumulator and flushes it when a line
of another shape arrives.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from spoonfeeder.inline import format_inline
from spoonfeeder.math_processor import (
    detect_standalone_math_line,
    extract_standalone_math,
    preprocess_math,
)
from spoonfeeder.models import (
    Block,
    BlockquoteBlock,
    CodeBlock,
    HeadingBlock,
    HorizontalRuleBlock,
    InlineRun,
    ListBlock,
    MathBlock,
    ParagraphBlock,
    RenderMode,
    TableBlock,
    TextSpan,
)

logger = logging.getLogger(__name__)

NO_CONTENT_TEXT = "No content available"


# ---------------------------------------------------------------------------
# Line classification
# ---------------------------------------------------------------------------

class LineTag(str, Enum):
    """Shape of a single source line."""

    BRACKET = "bracket"
    TABLE_ROW = "table_row"
    TABLE_SEPARATOR = "table_separator"
    HEADING = "heading"
    RULE = "rule"
    BLOCKQUOTE = "blockquote"
    LIST_ITEM = "list_item"
    BLANK = "blank"
    MATH_OPEN = "math_open"
    MATH_LINE = "math_line"
    TEXT = "text"


@dataclass
class TaggedLine:
    """A classified line with the parts the segmenter needs."""

    tag: LineTag
    text: str = ""
    indent: int = 0
    level: int = 0
    ordered: bool = False
    number: int = 1
    cells: List[str] = field(default_factory=list)
    markdown_table: bool = False
    alignments: List[str] = field(default_factory=list)


_TABLE_SEPARATOR = re.compile(r'^(?=.*\|)\|?\s*:?-+:?\s*(\|\s*:?-+:?\s*)*\|?$')
_MARKDOWN_ROW = re.compile(r'^\|.*\|$')
_LEGACY_CELL_SPLIT = re.compile(r'\s+\.\s+|\s*\|\s*')
_HEADING = re.compile(r'^(#{1,6})\s*(.*)$')
_RULE = re.compile(r'^[-*_]{3,}$')
_NUMBERED_ITEM = re.compile(r'^(\d+)\.\s+(.+)$')
_BULLET_ITEM = re.compile(r'^[-*+]\s+(.+)$')

_MATH_OPENERS = {'$$': '$$', '\\[': '\\]'}
_EMPTY_MATH = re.compile(r'^(?:\$\$\s*\$\$|\\\[\s*\\\])$')


def _separator_alignments(trimmed: str) -> List[str]:
    alignments = []
    for cell in trimmed.strip('|').split('|'):
        cell = cell.strip()
        if cell.startswith(':') and cell.endswith(':'):
            alignments.append('center')
        elif cell.endswith(':'):
            alignments.append('right')
        else:
            alignments.append('left')
    return alignments


def classify_line(line: str) -> TaggedLine:
    """
    Classify one source line.

    The checks run in a fixed order: table rows come before headings,
    headings before rules, rules before blockquotes, blockquotes before
    list items, and math detection only sees what is left.
    """
    trimmed = line.strip()
    indent = len(line) - len(line.lstrip())

    if trimmed in ('[', ']'):
        return TaggedLine(LineTag.BRACKET, trimmed)

    if _TABLE_SEPARATOR.match(trimmed):
        return TaggedLine(
            LineTag.TABLE_SEPARATOR, trimmed,
            markdown_table=True,
            alignments=_separator_alignments(trimmed),
        )

    if _MARKDOWN_ROW.match(trimmed):
        cells = [cell.strip() for cell in trimmed[1:-1].split('|')]
        return TaggedLine(LineTag.TABLE_ROW, trimmed, cells=cells, markdown_table=True)

    if ' . ' in trimmed or ' | ' in trimmed:
        cells = [cell.strip() for cell in _LEGACY_CELL_SPLIT.split(trimmed) if cell.strip()]
        return TaggedLine(LineTag.TABLE_ROW, trimmed, cells=cells)

    heading = _HEADING.match(trimmed)
    if heading:
        return TaggedLine(
            LineTag.HEADING, heading.group(2).strip(), level=len(heading.group(1)),
        )

    if _RULE.match(trimmed):
        return TaggedLine(LineTag.RULE, trimmed)

    if trimmed.startswith('>'):
        return TaggedLine(LineTag.BLOCKQUOTE, trimmed[1:].strip())

    numbered = _NUMBERED_ITEM.match(trimmed)
    if numbered:
        return TaggedLine(
            LineTag.LIST_ITEM, numbered.group(2).strip(),
            indent=indent, ordered=True, number=int(numbered.group(1)),
        )

    bullet = _BULLET_ITEM.match(trimmed)
    if bullet:
        return TaggedLine(LineTag.LIST_ITEM, bullet.group(1).strip(), indent=indent)

    if not trimmed or _EMPTY_MATH.match(trimmed):
        return TaggedLine(LineTag.BLANK)

    if trimmed in _MATH_OPENERS:
        return TaggedLine(LineTag.MATH_OPEN, trimmed)

    if detect_standalone_math_line(trimmed):
        return TaggedLine(LineTag.MATH_LINE, extract_standalone_math(trimmed))

    return TaggedLine(LineTag.TEXT, trimmed)


# ---------------------------------------------------------------------------
# Accumulators
# ---------------------------------------------------------------------------

@dataclass
class _OpenList:
    ordered: bool
    indent: int
    start_number: int
    items: List[InlineRun] = field(default_factory=list)


@dataclass
class _OpenTable:
    markdown: bool
    headers: Optional[List[str]] = None
    rows: List[List[str]] = field(default_factory=list)
    alignments: List[str] = field(default_factory=list)
    last_row_index: int = -1


@dataclass
class _OpenMath:
    closer: str
    lines: List[str] = field(default_factory=list)


class BlockSegmenter:
    """
    Line-by-line state machine producing blocks.

    One instance serves one render call; it is not meant to be reused.
    """

    def __init__(self, mode: RenderMode = RenderMode.NORMAL):
        self.mode = mode
        self.blocks: List[Block] = []
        self._list: Optional[_OpenList] = None
        self._table: Optional[_OpenTable] = None
        self._math: Optional[_OpenMath] = None

    # ===== FLUSHING =====

    def _flush_list(self) -> None:
        if self._list is None:
            return
        if self._list.items:
            self.blocks.append(ListBlock(
                ordered=self._list.ordered,
                start_number=self._list.start_number,
                items=self._list.items,
                indent_level=self._list.indent,
            ))
        self._list = None

    def _flush_table(self) -> None:
        if self._table is None:
            return
        table = self._table
        if table.headers is not None or table.rows:
            self.blocks.append(TableBlock(
                headers=table.headers,
                rows=table.rows,
                header_cells=(
                    [self._inline(cell) for cell in table.headers]
                    if table.headers is not None else None
                ),
                cells=[[self._inline(cell) for cell in row] for row in table.rows],
                alignments=table.alignments,
            ))
        self._table = None

    def _flush_math(self) -> None:
        if self._math is None:
            return
        latex = '\n'.join(self._math.lines).strip()
        self._math = None
        self._emit_math(latex)

    def _flush_all(self) -> None:
        self._flush_list()
        self._flush_table()

    # ===== HELPERS =====

    def _inline(self, text: str) -> InlineRun:
        return format_inline(text, self.mode)

    def _emit_math(self, latex: str) -> None:
        # Normal mode shows math as Unicode text; latex keeps the source
        self.blocks.append(MathBlock(latex=latex, plain=self.mode is RenderMode.NORMAL))

    # ===== FEEDING =====

    def feed(self, index: int, line: str) -> None:
        """Consume line number ``index`` of the text."""
        if self._math is not None:
            self._feed_math(line)
            return

        tagged = classify_line(line)
        tag = tagged.tag

        if tag is LineTag.BRACKET:
            return

        if tag is LineTag.TABLE_ROW:
            self._feed_table_row(index, tagged)
            return

        if tag is LineTag.TABLE_SEPARATOR:
            self._feed_table_separator(index, tagged)
            return

        if tag is LineTag.LIST_ITEM:
            self._feed_list_item(tagged)
            return

        if tag is LineTag.BLANK:
            # Blank lines close lists and tables of either flavour
            self._flush_all()
            return

        self._flush_all()

        if tag is LineTag.HEADING:
            self.blocks.append(HeadingBlock(level=tagged.level, inline=self._inline(tagged.text)))
        elif tag is LineTag.RULE:
            self.blocks.append(HorizontalRuleBlock())
        elif tag is LineTag.BLOCKQUOTE:
            self.blocks.append(BlockquoteBlock(inline=self._inline(tagged.text)))
        elif tag is LineTag.MATH_OPEN:
            self._math = _OpenMath(closer=_MATH_OPENERS[tagged.text])
        elif tag is LineTag.MATH_LINE:
            self._emit_math(tagged.text)
        else:
            self.blocks.append(ParagraphBlock(inline=self._inline(tagged.text)))

    def _feed_math(self, line: str) -> None:
        trimmed = line.rstrip()
        closer = self._math.closer
        if trimmed.endswith(closer):
            self._math.lines.append(trimmed[:-len(closer)])
            self._flush_math()
        else:
            self._math.lines.append(line)

    def _feed_table_row(self, index: int, tagged: TaggedLine) -> None:
        self._flush_list()
        if self._table is not None and self._table.markdown != tagged.markdown_table:
            self._flush_table()
        if self._table is None:
            self._table = _OpenTable(markdown=tagged.markdown_table)

        table = self._table
        if not table.markdown and index == 0 and table.headers is None:
            table.headers = tagged.cells
        else:
            table.rows.append(tagged.cells)
        table.last_row_index = index

    def _feed_table_separator(self, index: int, tagged: TaggedLine) -> None:
        self._flush_list()
        table = self._table
        if (table is not None and table.markdown and table.headers is None
                and table.rows and table.last_row_index == index - 1):
            table.headers = table.rows.pop()
            table.alignments = tagged.alignments
        # Any other separator row is dropped

    def _feed_list_item(self, tagged: TaggedLine) -> None:
        self._flush_table()
        current = self._list
        if current is None or current.ordered != tagged.ordered or current.indent != tagged.indent:
            self._flush_list()
            self._list = _OpenList(
                ordered=tagged.ordered,
                indent=tagged.indent,
                start_number=tagged.number if tagged.ordered else 1,
            )
        self._list.items.append(self._inline(tagged.text))

    def finish(self) -> List[Block]:
        """Flush whatever is still open and return the blocks."""
        self._flush_math()
        self._flush_all()
        return self.blocks


# ---------------------------------------------------------------------------
# Code detection
# ---------------------------------------------------------------------------

_CODE_LINE_PATTERNS = [
    # Function / type definitions
    re.compile(r'^(function|def|class|public|private|void|int|string|bool|const|let|var)\s+\w+'),
    # Pseudocode keywords, calls followed by : or {
    re.compile(r'^(if|for|while|do|BEGIN|END|READ|FOR|WHILE|IF|ELSE|RETURN)\s'
               r'|\w+\([^)]*\)\s*[:{]|\w+\s*\([^)]*\)\s*\{'),
    # Array access
    re.compile(r'[A-Z]\[[^\]]+\]'),
]
_CODE_ASSIGNMENT = re.compile(r'^\w+\s*=\s*[^=]')


def looks_like_code(text: str) -> bool:
    """Heuristic used for Q&A answers: does any line read like source code?"""
    for line in (text or '').split('\n'):
        trimmed = line.strip()
        if any(pattern.search(trimmed) for pattern in _CODE_LINE_PATTERNS):
            return True
        if _CODE_ASSIGNMENT.match(trimmed) and any(ch in trimmed for ch in '[({'):
            return True
    return False


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def placeholder_block() -> ParagraphBlock:
    """The block shown when there is nothing to render."""
    return ParagraphBlock(
        inline=InlineRun(spans=[TextSpan(text=NO_CONTENT_TEXT)]),
        placeholder=True,
    )


def render(
    source_text: Optional[str],
    mode: Union[RenderMode, str, None] = RenderMode.NORMAL,
    detect_code: bool = False
) -> List[Block]:
    """
    Render structured text into blocks.

    Args:
        source_text: Stored note / question / answer text. ``None`` is
            treated as empty.
        mode: ``normal``, ``math`` or ``code``; unknown values mean normal.
        detect_code: Render the whole text as one code block when it looks
            like source code (used for Q&A answers).

    Returns:
        At least one block. Code mode always yields exactly one
        :class:`CodeBlock` holding the text unchanged.
    """
    text = source_text or ''
    mode = RenderMode.coerce(mode)

    if mode is RenderMode.CODE:
        return [CodeBlock(raw=text)]

    if not text.strip():
        return [placeholder_block()]

    if detect_code and looks_like_code(text):
        logger.debug("Text looks like code, rendering verbatim")
        return [CodeBlock(raw=text)]

    if mode is RenderMode.MATH:
        text = preprocess_math(text)

    segmenter = BlockSegmenter(mode)
    for index, line in enumerate(text.split('\n')):
        segmenter.feed(index, line)
    blocks = segmenter.finish()

    if not blocks:
        return [placeholder_block()]

    logger.debug(f"Rendered {len(blocks)} blocks in {mode.value} mode")
    return blocks
