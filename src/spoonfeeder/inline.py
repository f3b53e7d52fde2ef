"""
Inline formatting: one line or table cell → :class:`InlineRun`.

Instead of building an HTML string, the formatter splits the text into a
tree of typed spans. Rules are tried in a fixed order; text between the
matches of a rule, and the inside of a container span, is handed to the
rules that come after it. Presenters escape span text when they draw it.
"""

import re
from typing import Callable, List, Sequence, Tuple, Union

from spoonfeeder.math_processor import process_math_expressions
from spoonfeeder.models import (
    BoldSpan,
    CodeSpan,
    InlineRun,
    ItalicSpan,
    LinkSpan,
    MathSpan,
    RenderMode,
    StrikeSpan,
    TextSpan,
)

Rule = Tuple["re.Pattern[str]", Callable]


def _build_math(m, rest):
    display, paren, inline = m.group(1), m.group(2), m.group(3)
    if display is not None:
        return MathSpan(latex=display.strip(), display=True)
    return MathSpan(latex=(paren if paren is not None else inline).strip())


def _build_link(m, rest):
    return LinkSpan(href=m.group(2).strip(), children=_parse(m.group(1), rest))


def _build_code(m, rest):
    return CodeSpan(code=m.group(1))


def _build_bold_italic(m, rest):
    return BoldSpan(children=[ItalicSpan(children=_parse(m.group(1), rest))])


def _build_bold(m, rest):
    return BoldSpan(children=_parse(m.group(1), rest))


def _build_italic(m, rest):
    return ItalicSpan(children=_parse(m.group(1), rest))


def _build_strike(m, rest):
    return StrikeSpan(children=_parse(m.group(1), rest))


MATH_RULE: Rule = (
    re.compile(r'\$\$([^$]+?)\$\$|\\\((.+?)\\\)|(?<!\$)\$(?!\$)([^$\n]+?)(?<!\$)\$(?!\$)'),
    _build_math,
)

TEXT_RULES: List[Rule] = [
    (re.compile(r'\[([^\]]+)\]\(([^)]+)\)'), _build_link),
    (re.compile(r'`([^`\n]+)`'), _build_code),
    (re.compile(r'\*\*\*(.+?)\*\*\*'), _build_bold_italic),
    (re.compile(r'\*\*(.+?)\*\*'), _build_bold),
    # A single * that does not touch another * on either side
    (re.compile(r'(?<!\*)\*(?!\*)([^*]+?)(?<!\*)\*(?!\*)'), _build_italic),
    (re.compile(r'~~(.+?)~~'), _build_strike),
]


def _parse(text: str, rules: Sequence[Rule]) -> list:
    if not text:
        return []
    if not rules:
        return [TextSpan(text=text)]

    pattern, build = rules[0]
    rest = rules[1:]
    spans = []
    position = 0
    for match in pattern.finditer(text):
        spans.extend(_parse(text[position:match.start()], rest))
        spans.append(build(match, rest))
        position = match.end()
    spans.extend(_parse(text[position:], rest))
    return _merge_text(spans)


def _merge_text(spans: list) -> list:
    merged = []
    for span in spans:
        if merged and isinstance(span, TextSpan) and isinstance(merged[-1], TextSpan):
            merged[-1] = TextSpan(text=merged[-1].text + span.text)
        else:
            merged.append(span)
    return merged


def format_inline(text: str, mode: Union[RenderMode, str] = RenderMode.NORMAL) -> InlineRun:
    """
    Format one line or table cell.

    Args:
        text: Line text, already stripped of its block marker.
        mode: ``normal`` converts LaTeX to Unicode glyphs; ``math`` keeps
            ``$``/``$$`` spans as :class:`MathSpan`; ``code`` keeps the text
            as a single literal span.

    Returns:
        InlineRun with the span tree.
    """
    mode = RenderMode.coerce(mode)
    if not text:
        return InlineRun()

    if mode is RenderMode.CODE:
        return InlineRun(spans=[TextSpan(text=text)])

    if mode is RenderMode.MATH:
        prepared = process_math_expressions(text, enable_math=True)
        rules = [MATH_RULE] + TEXT_RULES
    else:
        prepared = process_math_expressions(text, enable_math=False, convert_to_unicode=True)
        rules = TEXT_RULES

    return InlineRun(spans=_parse(prepared, rules))
