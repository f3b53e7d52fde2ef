# -*- coding: utf-8 -*-
"""
Math preprocessing for stored notes, questions and answers.

Authors type math in several loose shapes: ``[x^2 + 1]`` in square
brackets, bare LaTeX lines, ``\\[...\\]``, dangling ``$``. The functions
here turn those into the canonical ``$...$`` / ``$$...$$`` form (math mode)
or strip them down to Unicode text (normal mode).

Everything is heuristic and best-effort: no function in this module raises,
and malformed LaTeX is passed through beyond the repairs listed below.
"""

import re
from typing import List

from spoonfeeder.latex_unicode import convert_latex_to_unicode

__all__ = [
    "MATH_CLASS_PATTERN",
    "normalize_math_delimiters",
    "balance_left_right",
    "reject_markdown_in_math",
    "auto_wrap_bare_math",
    "promote_complex_inline_to_block",
    "handle_boxed_commands",
    "preprocess_math",
    "strip_math_brackets",
    "process_math_expressions",
    "detect_standalone_math_line",
    "extract_standalone_math",
    "convert_latex_to_unicode",
]


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

# Characters that make bracketed content look like math
MATH_CLASS_PATTERN = re.compile(r'[\\^_{}()=<>\d≤≥∈∉∑∏∫√]')

# Same set without digits, for lines that carry no brackets at all
_MATH_SYMBOL_PATTERN = re.compile(r'[\\^_{}()=<>≤≥∈∉∑∏∫√]')

BLOCK_MATH_SPAN = re.compile(r'\$\$([^$]+)\$\$')
INLINE_MATH_SPAN = re.compile(r'(?<!\$)\$(?!\$)([^$\n]+?)(?<!\$)\$(?!\$)')

_LEFT_TOKEN = re.compile(r'\\left(?![a-zA-Z])')
_RIGHT_TOKEN = re.compile(r'\\right(?![a-zA-Z])')

_MARKDOWN_IN_MATH = re.compile(
    r'^#{1,6}\s|^\s*[*\-+]\s|^\s*\d+\.\s|\*\*|\*|^\s*>\s|^\s*```|~~~|^\s*\|.*\|.*\|'
)

_LATEX_COMMAND = re.compile(r'\\[a-zA-Z]+')
_BARE_MATH_PUNCTUATION = re.compile(r'[\^_{}()=+\-*/\s]')
_ALPHA_RUN = re.compile(r'[a-zA-Z]{3,}')

_MARKDOWN_LINE = re.compile(r'^(#{1,6}(\s|$)|>|[-*+]\s|\d+\.\s|\|)')
_MARKDOWN_MARKER = re.compile(r'^([#*>\-+|]|\d+\.\s)')
_MARKDOWN_LINK = re.compile(r'\[[^\]]+\]\([^)]+\)')

_COMPLEX_INLINE = re.compile(
    r'\n|[=+\-*/]=|\\(?:frac|sum|prod|int|lim|partial|nabla)(?![a-zA-Z])'
)

_BOXED_LINE = re.compile(r'^\s*\[([^\]]*\\boxed\s*\{[^}]*\}[^\]]*)\]\s*(.*)$')

_BRACKET_SPAN = re.compile(r'\[([^\]]+)\]')
_BRACKETED_LINE = re.compile(r'^\[([^\]]+)\]$')
_SIMPLE_INTERVAL = re.compile(r'^[a-zA-Z0-9,\s]+$')
_STANDALONE_BRACKET = re.compile(r'^[ \t]*[\[\]][ \t]*$', re.MULTILINE)

_DELIMITED_LINE = re.compile(r'^\$\$([^$]+)\$\$$|^\\\[(.+)\\\]$')
_ESCAPED_DISPLAY = re.compile(r'\\\[(.+?)\\\]')

COMPLEX_INLINE_LENGTH = 50
STANDALONE_MAX_LENGTH = 200

# Words that read as math rather than prose when found outside commands
_MATH_WORDS = frozenset({
    'sin', 'cos', 'tan', 'cot', 'sec', 'csc', 'log', 'exp',
    'lim', 'max', 'min', 'det', 'sup', 'inf', 'gcd', 'lcm', 'mod',
})


# ---------------------------------------------------------------------------
# Delimiter repair
# ---------------------------------------------------------------------------

def normalize_math_delimiters(text: str) -> str:
    """
    Close dangling ``$`` and ``$$`` delimiters.

    One left-to-right scan: ``$$`` opens block math that runs to the next
    ``$$``; a lone ``$`` opens inline math that runs to the next ``$``,
    including the first ``$`` of a ``$$``. A span still open at the end of
    the input gets its closing delimiter appended. Block spans with nothing
    inside are dropped. The output always holds an even number of ``$``
    characters.
    """
    if not text:
        return text

    result: List[str] = []
    length = len(text)
    i = 0

    while i < length:
        if text[i] != '$':
            result.append(text[i])
            i += 1
            continue

        if i + 1 < length and text[i + 1] == '$':
            close = text.find('$$', i + 2)
            end = length if close == -1 else close
            content = text[i + 2:end]
            # A lone $ inside block math cannot be paired
            if content.count('$') % 2:
                content = content.replace('$', '')
            if content.strip():
                result.append(f'$${content}$$')
            else:
                result.append(content)
            if close == -1:
                break
            i = close + 2
            continue

        close = text.find('$', i + 1)
        if close == -1:
            result.append(text[i:] + '$')
            break
        result.append(text[i:close + 1])
        i = close + 1

    return ''.join(result)


def _pad_right_delimiters(content: str) -> str:
    missing = len(_LEFT_TOKEN.findall(content)) - len(_RIGHT_TOKEN.findall(content))
    if missing > 0:
        content += '\\right.' * missing
    # Extra \right tokens are left in place.
    return content


def balance_left_right(text: str) -> str:
    """Append ``\\right.`` to math spans that have more ``\\left`` than ``\\right``."""
    text = BLOCK_MATH_SPAN.sub(lambda m: f'$${_pad_right_delimiters(m.group(1))}$$', text)
    text = INLINE_MATH_SPAN.sub(lambda m: f'${_pad_right_delimiters(m.group(1))}$', text)
    return text


def reject_markdown_in_math(text: str) -> str:
    """Drop the delimiters of math spans that actually hold markdown."""
    def _demote(m, delimiter):
        content = m.group(1)
        if _MARKDOWN_IN_MATH.search(content):
            return content
        return f'{delimiter}{content}{delimiter}'

    text = BLOCK_MATH_SPAN.sub(lambda m: _demote(m, '$$'), text)
    text = INLINE_MATH_SPAN.sub(lambda m: _demote(m, '$'), text)
    return text


# ---------------------------------------------------------------------------
# Math detection and wrapping
# ---------------------------------------------------------------------------

def _is_bare_math(trimmed: str) -> bool:
    if not trimmed or '$' in trimmed:
        return False
    if trimmed.startswith(('[', '\\[', '\\(')):
        return False
    if _MARKDOWN_LINE.match(trimmed) or ' | ' in trimmed or ' . ' in trimmed:
        return False
    if not _LATEX_COMMAND.search(trimmed) or not _BARE_MATH_PUNCTUATION.search(trimmed):
        return False
    return not _ALPHA_RUN.search(_LATEX_COMMAND.sub('', trimmed))


def auto_wrap_bare_math(text: str) -> str:
    """Wrap lines made only of LaTeX commands and math punctuation in ``$$``."""
    lines = text.split('\n')
    closer = None
    for index, line in enumerate(lines):
        trimmed = line.strip()
        if closer is not None:
            # Inside a multi-line $$ / \[ block
            if trimmed.endswith(closer):
                closer = None
            continue
        if trimmed in ('$$', '\\['):
            closer = '$$' if trimmed == '$$' else '\\]'
            continue
        if _is_bare_math(trimmed):
            lines[index] = f'$${trimmed}$$'
    return '\n'.join(lines)


def promote_complex_inline_to_block(text: str) -> str:
    """Turn long or structurally complex inline math into block math."""
    def _promote(m):
        content = m.group(1)
        if _COMPLEX_INLINE.search(content) or len(content) > COMPLEX_INLINE_LENGTH:
            return f'$${content}$$'
        return m.group(0)

    return INLINE_MATH_SPAN.sub(_promote, text)


def handle_boxed_commands(text: str) -> str:
    """
    Turn ``[ ... \\boxed{...} ... ] trailing`` lines into block math.

    Trailing tokens after the closing bracket move to a line of their own so
    only math ends up inside the delimiters.
    """
    lines = text.split('\n')
    for index, line in enumerate(lines):
        match = _BOXED_LINE.match(line)
        if not match:
            continue
        boxed, trailing = match.group(1).strip(), match.group(2).strip()
        lines[index] = f'$${boxed}$$\n{trailing}' if trailing else f'$${boxed}$$'
    return '\n'.join(lines)


def preprocess_math(text: str) -> str:
    """
    Repair math in a whole text before it is split into blocks.

    Rules, in order: boxed expressions, dangling delimiters,
    ``\\left``/``\\right`` pairing, markdown inside math, bare LaTeX lines,
    complex inline math promoted to block math.
    """
    if not text:
        return text

    processed = handle_boxed_commands(text)
    processed = normalize_math_delimiters(processed)
    processed = balance_left_right(processed)
    processed = reject_markdown_in_math(processed)
    processed = auto_wrap_bare_math(processed)
    processed = promote_complex_inline_to_block(processed)
    return processed


# ---------------------------------------------------------------------------
# Square-bracket math
# ---------------------------------------------------------------------------

def _is_math_bracket_content(content: str) -> bool:
    if len(content) <= 2 or not MATH_CLASS_PATTERN.search(content):
        return False
    # [a, b] style intervals keep their brackets
    return not (_SIMPLE_INTERVAL.match(content) and len(content) < 10)


def strip_math_brackets(text: str, wrap: bool = False) -> str:
    """
    Remove square brackets around math-looking content.

    ``[text](url)`` links and ``\\[`` escapes are never touched. With
    ``wrap=True`` the freed content is wrapped in ``$$`` (math mode);
    otherwise only the brackets go (normal mode).
    """
    if not text:
        return text

    text = _STANDALONE_BRACKET.sub('', text)

    def _replace(m):
        if text[m.end():m.end() + 1] == '(':
            return m.group(0)
        if m.start() > 0 and text[m.start() - 1] == '\\':
            return m.group(0)
        content = m.group(1).strip()
        if not _is_math_bracket_content(content):
            return m.group(0)
        if wrap and len(content) > 3 and 'http' not in content.lower():
            return f'$${content}$$'
        return content

    return _BRACKET_SPAN.sub(_replace, text)


def process_math_expressions(
    text: str,
    enable_math: bool = True,
    convert_to_unicode: bool = False
) -> str:
    """
    Per-line math handling used before inline formatting.

    Args:
        text: One line or table cell.
        enable_math: Produce canonical ``$``/``$$`` spans (math mode).
        convert_to_unicode: Replace LaTeX commands with Unicode glyphs
            and strip math brackets (normal mode).

    Returns:
        The processed text.
    """
    if not text:
        return text

    if convert_to_unicode:
        text = strip_math_brackets(convert_latex_to_unicode(text))

    if not enable_math:
        return text

    whole = _BRACKETED_LINE.match(text.strip())
    if whole:
        content = whole.group(1).strip()
        if len(content) > 2 and MATH_CLASS_PATTERN.search(content):
            return f'$${content}$$'

    processed = strip_math_brackets(text, wrap=True)
    processed = _ESCAPED_DISPLAY.sub(lambda m: f'$${m.group(1)}$$', processed)
    processed = BLOCK_MATH_SPAN.sub(lambda m: f'$${m.group(1).strip()}$$', processed)
    return processed


# ---------------------------------------------------------------------------
# Standalone math lines
# ---------------------------------------------------------------------------

def _prose_words(text: str) -> List[str]:
    words = _ALPHA_RUN.findall(_LATEX_COMMAND.sub('', text))
    return [word for word in words if word.lower() not in _MATH_WORDS]


def detect_standalone_math_line(line: str) -> bool:
    """
    Check whether a whole line should be shown as display math.

    True for ``[...]`` wrapped math-looking content, for a line that is one
    ``$$...$$`` or ``\\[...\\]`` span, and for short lines with math
    symbols, no markdown marker, no URL and no prose words.
    """
    trimmed = line.strip()
    if not trimmed:
        return False

    bracketed = _BRACKETED_LINE.match(trimmed)
    if bracketed:
        content = bracketed.group(1).strip()
        if len(content) > 2 and MATH_CLASS_PATTERN.search(content):
            return True

    if _DELIMITED_LINE.match(trimmed):
        return True

    if len(trimmed) >= STANDALONE_MAX_LENGTH:
        return False
    if _MARKDOWN_MARKER.match(trimmed) or 'http' in trimmed.lower():
        return False
    if _MARKDOWN_LINK.search(trimmed) or '$' in trimmed:
        return False
    if not _MATH_SYMBOL_PATTERN.search(trimmed):
        return False
    return not _prose_words(trimmed)


def extract_standalone_math(line: str) -> str:
    """LaTeX of a line accepted by :func:`detect_standalone_math_line`."""
    trimmed = line.strip()

    bracketed = _BRACKETED_LINE.match(trimmed)
    if bracketed:
        return bracketed.group(1).strip()

    delimited = _DELIMITED_LINE.match(trimmed)
    if delimited:
        return (delimited.group(1) or delimited.group(2)).strip()

    return trimmed
