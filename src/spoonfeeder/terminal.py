"""
Blocks → rich renderables for the command line.

Math is shown as Unicode text in every mode; terminals have no typesetter.
"""

from typing import Iterable, List

from rich.align import Align
from rich.console import Group
from rich.panel import Panel
from rich.rule import Rule
from rich.style import Style
from rich.table import Table
from rich.text import Text

from spoonfeeder.latex_unicode import convert_latex_to_unicode
from spoonfeeder.models import (
    BlockquoteBlock,
    BoldSpan,
    CodeBlock,
    CodeSpan,
    HeadingBlock,
    HorizontalRuleBlock,
    InlineRun,
    ItalicSpan,
    LinkSpan,
    ListBlock,
    MathBlock,
    MathSpan,
    ParagraphBlock,
    StrikeSpan,
    TableBlock,
    TextSpan,
)

MATH_STYLE = Style(color="#1a5276")
CODE_STYLE = Style(color="cyan")

_HEADING_STYLES = {
    1: "bold underline",
    2: "bold",
    3: "bold",
    4: "bold italic",
    5: "italic",
    6: "italic",
}


def _append_spans(text: Text, spans: Iterable, style: Style) -> None:
    for span in spans:
        if isinstance(span, TextSpan):
            text.append(span.text, style=style)
        elif isinstance(span, BoldSpan):
            _append_spans(text, span.children, style + Style(bold=True))
        elif isinstance(span, ItalicSpan):
            _append_spans(text, span.children, style + Style(italic=True))
        elif isinstance(span, StrikeSpan):
            _append_spans(text, span.children, style + Style(strike=True))
        elif isinstance(span, CodeSpan):
            text.append(span.code, style=style + CODE_STYLE)
        elif isinstance(span, LinkSpan):
            _append_spans(text, span.children, style + Style(underline=True, link=span.href))
        elif isinstance(span, MathSpan):
            text.append(convert_latex_to_unicode(span.latex), style=style + MATH_STYLE)


def inline_text(run: InlineRun, style: str = "") -> Text:
    """Build a rich Text from an InlineRun."""
    text = Text(style=style)
    _append_spans(text, run.spans, Style.null())
    return text


def _list_renderable(block: ListBlock) -> Group:
    indent = " " * block.indent_level
    lines = []
    for offset, item in enumerate(block.items):
        marker = f"{block.start_number + offset}. " if block.ordered else "• "
        line = Text(indent + marker)
        line.append_text(inline_text(item))
        lines.append(line)
    return Group(*lines)


def _table_renderable(block: TableBlock) -> Table:
    rows = block.cells or [[InlineRun(spans=[TextSpan(text=c)]) for c in row] for row in block.rows]
    headers = block.header_cells
    if headers is None and block.headers is not None:
        headers = [InlineRun(spans=[TextSpan(text=h)]) for h in block.headers]

    width = max([len(row) for row in rows] + [len(headers or [])])
    table = Table(show_header=headers is not None)
    for index in range(width):
        header = inline_text(headers[index]) if headers and index < len(headers) else ""
        justify = block.alignments[index] if index < len(block.alignments) else "left"
        table.add_column(header, justify=justify)

    for row in rows:
        cells: List = [inline_text(cell) for cell in row]
        cells.extend([""] * (width - len(cells)))
        table.add_row(*cells)
    return table


def render_block(block):
    """Turn one block into a rich renderable."""
    if isinstance(block, HeadingBlock):
        return inline_text(block.inline, style=_HEADING_STYLES[block.level])
    if isinstance(block, ParagraphBlock):
        return inline_text(block.inline, style="dim italic" if block.placeholder else "")
    if isinstance(block, ListBlock):
        return _list_renderable(block)
    if isinstance(block, TableBlock):
        return _table_renderable(block)
    if isinstance(block, BlockquoteBlock):
        quote = Text("│ ", style="dim")
        quote.append_text(inline_text(block.inline, style="italic"))
        return quote
    if isinstance(block, HorizontalRuleBlock):
        return Rule(style="dim")
    if isinstance(block, MathBlock):
        math = Text(convert_latex_to_unicode(block.latex), style=MATH_STYLE)
        return Align.center(math) if block.centered else math
    if isinstance(block, CodeBlock):
        return Panel(Text(block.raw), title=block.language, title_align="left", border_style="dim")
    raise TypeError(f"Unknown block type: {type(block).__name__}")


def render_terminal(blocks: Iterable) -> Group:
    """Group of renderables, one per block, for ``console.print``."""
    return Group(*(render_block(block) for block in blocks))
