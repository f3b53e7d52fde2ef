# -*- coding: utf-8 -*-
"""
Blocks → HTML.

Markup uses the ``structured-*`` class names of the SpoonFeeder web
frontend, so the existing stylesheet applies unchanged. All user text is
entity-escaped here; spans never carry markup of their own.

Math is emitted with its ``$``/``$$`` delimiters for a typesetter such as
MathJax. :func:`render_page` wraps a fragment into a standalone document
and runs the typesetting pass once, after the content is in the DOM.
"""

import logging
import re
from typing import Iterable, List, Optional

from spoonfeeder.latex_unicode import convert_latex_to_unicode
from spoonfeeder.models import (
    BlockquoteBlock,
    BoldSpan,
    CodeBlock,
    CodeSpan,
    DEFAULT_MATHJAX_URL,
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

logger = logging.getLogger(__name__)

LIST_INDENT_PX = 20

_UNSAFE_SCHEME = re.compile(r'^\s*(javascript|data|vbscript):', re.IGNORECASE)


# ---------------------------------------------------------------------------
# Escaping
# ---------------------------------------------------------------------------

def escape_html(text: str) -> str:
    """Escape ``& < > " '`` for element content and attribute values."""
    return (
        text.replace('&', '&amp;')
        .replace('<', '&lt;')
        .replace('>', '&gt;')
        .replace('"', '&quot;')
        .replace("'", '&#39;')
    )


def escape_code(text: str) -> str:
    """Escape only ``& < >``; code keeps its quotes as typed."""
    return text.replace('&', '&amp;').replace('<', '&lt;').replace('>', '&gt;')


def _safe_href(href: str) -> str:
    if _UNSAFE_SCHEME.match(href):
        logger.debug(f"Dropping unsafe link target {href!r}")
        return '#'
    return href


# ---------------------------------------------------------------------------
# Inline spans
# ---------------------------------------------------------------------------

def _render_children(spans: Iterable) -> str:
    return ''.join(render_span(span) for span in spans)


def render_span(span) -> str:
    """Render one inline span."""
    if isinstance(span, TextSpan):
        return escape_html(span.text)
    if isinstance(span, BoldSpan):
        return f'<strong class="structured-bold">{_render_children(span.children)}</strong>'
    if isinstance(span, ItalicSpan):
        return f'<em class="structured-italic">{_render_children(span.children)}</em>'
    if isinstance(span, StrikeSpan):
        return f'<del class="structured-strikethrough">{_render_children(span.children)}</del>'
    if isinstance(span, CodeSpan):
        return f'<code class="structured-inline-code">{escape_code(span.code)}</code>'
    if isinstance(span, LinkSpan):
        href = escape_html(_safe_href(span.href))
        return (
            f'<a href="{href}" class="structured-link" target="_blank" '
            f'rel="noopener noreferrer">{_render_children(span.children)}</a>'
        )
    if isinstance(span, MathSpan):
        if span.display:
            return f'<span class="math-display">$${escape_html(span.latex)}$$</span>'
        return f'<span class="math-inline">${escape_html(span.latex)}$</span>'
    raise TypeError(f"Unknown span type: {type(span).__name__}")


def render_inline(run: Optional[InlineRun]) -> str:
    """Render an InlineRun to an HTML fragment."""
    if run is None:
        return ''
    return _render_children(run.spans)


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------

def _cell_style(alignments: List[str], index: int) -> str:
    if index < len(alignments) and alignments[index] != 'left':
        return f' style="text-align:{alignments[index]};"'
    return ''


def _render_table(block: TableBlock) -> str:
    parts = ['<table class="structured-table">']

    header_cells = block.header_cells
    if header_cells is None and block.headers is not None:
        header_cells = [InlineRun(spans=[TextSpan(text=h)]) for h in block.headers]
    if header_cells is not None:
        parts.append('<thead><tr>')
        for i, cell in enumerate(header_cells):
            style = _cell_style(block.alignments, i)
            parts.append(f'<th class="structured-table-header"{style}>{render_inline(cell)}</th>')
        parts.append('</tr></thead>')

    cells = block.cells or [
        [InlineRun(spans=[TextSpan(text=c)]) for c in row] for row in block.rows
    ]
    parts.append('<tbody>')
    for row in cells:
        parts.append('<tr>')
        for i, cell in enumerate(row):
            style = _cell_style(block.alignments, i)
            parts.append(f'<td class="structured-table-cell"{style}>{render_inline(cell)}</td>')
        parts.append('</tr>')
    parts.append('</tbody></table>')
    return ''.join(parts)


def _render_list(block: ListBlock) -> str:
    margin = block.indent_level * LIST_INDENT_PX
    style = f' style="margin-left:{margin}px;"' if margin else ''
    items = ''.join(
        f'<li class="structured-list-item"{style}>{render_inline(item)}</li>'
        for item in block.items
    )
    if block.ordered:
        return (
            f'<ol class="structured-list structured-numbered-list" '
            f'start="{block.start_number}">{items}</ol>'
        )
    return f'<ul class="structured-list">{items}</ul>'


def _render_math(block: MathBlock) -> str:
    style = ' style="margin:1em 0; text-align:center;"' if block.centered else ' style="margin:1em 0;"'
    if block.plain:
        body = f'<span class="math-plain">{escape_html(convert_latex_to_unicode(block.latex))}</span>'
    else:
        body = f'<span class="math-display">$${escape_html(block.latex)}$$</span>'
    return f'<div class="math-block"{style}>{body}</div>'


def render_block(block) -> str:
    """Render one block to HTML."""
    if isinstance(block, HeadingBlock):
        return (
            f'<div class="structured-heading structured-h{block.level}">'
            f'{render_inline(block.inline)}</div>'
        )
    if isinstance(block, ParagraphBlock):
        css = 'structured-paragraph markdown-empty' if block.placeholder else 'structured-paragraph'
        return f'<p class="{css}">{render_inline(block.inline)}</p>'
    if isinstance(block, ListBlock):
        return _render_list(block)
    if isinstance(block, TableBlock):
        return _render_table(block)
    if isinstance(block, BlockquoteBlock):
        return f'<blockquote class="structured-blockquote">{render_inline(block.inline)}</blockquote>'
    if isinstance(block, HorizontalRuleBlock):
        return '<hr class="structured-horizontal-line">'
    if isinstance(block, MathBlock):
        return _render_math(block)
    if isinstance(block, CodeBlock):
        lang = escape_html(block.language)
        return (
            f'<pre class="structured-code-block" data-language="{lang}">'
            f'<code class="language-{lang}">{escape_code(block.raw)}</code></pre>'
        )
    raise TypeError(f"Unknown block type: {type(block).__name__}")


def render_html(blocks: Iterable) -> str:
    """Render blocks to an HTML fragment, one block per line."""
    return '\n'.join(render_block(block) for block in blocks)


# ---------------------------------------------------------------------------
# Standalone page
# ---------------------------------------------------------------------------

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<script>
window.MathJax = {{
  tex: {{
    inlineMath: [['$', '$'], ['\\\\(', '\\\\)']],
    displayMath: [['$$', '$$']]
  }},
  startup: {{ typeset: false }}
}};
</script>
<script id="MathJax-script" src="{mathjax_url}"></script>
</head>
<body>
<div class="structured-content">
{body}
</div>
<script>
window.addEventListener('load', function () {{
  if (window.MathJax && window.MathJax.typesetPromise) {{
    window.MathJax.typesetPromise().catch(function (err) {{
      console.warn('MathJax typeset error:', err);
    }});
  }}
}});
</script>
</body>
</html>
"""


def wrap_page(body: str, title: str = "SpoonFeeder", mathjax_url: str = DEFAULT_MATHJAX_URL) -> str:
    """
    Wrap an already rendered fragment into a complete HTML document.

    MathJax is configured with automatic startup typesetting off; the page
    typesets once after load.
    """
    return _PAGE_TEMPLATE.format(
        title=escape_html(title),
        mathjax_url=escape_html(mathjax_url),
        body=body,
    )


def render_page(
    blocks: Iterable,
    title: str = "SpoonFeeder",
    mathjax_url: str = DEFAULT_MATHJAX_URL
) -> str:
    """Render blocks into a complete HTML document."""
    return wrap_page(render_html(blocks), title=title, mathjax_url=mathjax_url)
