"""Tests for the HTML presentation."""

from spoonfeeder.html_renderer import (
    escape_code,
    escape_html,
    render_html,
    render_page,
)
from spoonfeeder.models import CodeBlock, MathBlock, RenderMode
from spoonfeeder.segmenter import render


def test_escape_html():
    assert escape_html("""<a href="x">'&'</a>""") == (
        "&lt;a href=&quot;x&quot;&gt;&#39;&amp;&#39;&lt;/a&gt;"
    )
    assert escape_code("""if a < b && c == "d":""") == 'if a &lt; b &amp;&amp; c == "d":'


def test_script_is_never_emitted():
    text = (
        "# <script>a</script>\n\n"
        "> <script>b</script>\n\n"
        "| <script> | c |\n\n"
        "<script>d</script>"
    )
    for mode in (RenderMode.NORMAL, RenderMode.MATH):
        html = render_html(render(text, mode))
        assert "<script" not in html
        assert "&lt;script&gt;" in html


def test_heading_and_paragraph_classes():
    assert render_html(render("## Title")) == (
        '<div class="structured-heading structured-h2">Title</div>'
    )
    assert render_html(render("Just text")) == '<p class="structured-paragraph">Just text</p>'


def test_placeholder():
    assert render_html(render("")) == (
        '<p class="structured-paragraph markdown-empty">No content available</p>'
    )


def test_numbered_list_keeps_start():
    assert render_html(render("3. a\n4. b")) == (
        '<ol class="structured-list structured-numbered-list" start="3">'
        '<li class="structured-list-item">a</li>'
        '<li class="structured-list-item">b</li>'
        '</ol>'
    )


def test_indented_list_margin():
    html = render_html(render("  - nested"))
    assert html == (
        '<ul class="structured-list">'
        '<li class="structured-list-item" style="margin-left:40px;">nested</li>'
        '</ul>'
    )


def test_inline_markup():
    html = render_html(render("**bold** and *italic* and ***both*** ~~old~~ `x < 1`"))

    assert '<strong class="structured-bold">bold</strong>' in html
    assert '<em class="structured-italic">italic</em>' in html
    assert '<strong class="structured-bold"><em class="structured-italic">both</em></strong>' in html
    assert '<del class="structured-strikethrough">old</del>' in html
    assert '<code class="structured-inline-code">x &lt; 1</code>' in html
    assert "*" not in html


def test_link_attributes():
    html = render_html(render("[Click here](http://example.com)"))
    assert html == (
        '<p class="structured-paragraph">'
        '<a href="http://example.com" class="structured-link" target="_blank" '
        'rel="noopener noreferrer">Click here</a></p>'
    )


def test_unsafe_link_is_neutralised():
    html = render_html(render("[x](javascript:alert(1))"))
    assert 'href="#"' in html
    assert "javascript" not in html


def test_table_markup():
    html = render_html(render("| Name | Score |\n|---|---:|\n| Ann | 9 |"))
    assert html == (
        '<table class="structured-table">'
        '<thead><tr>'
        '<th class="structured-table-header">Name</th>'
        '<th class="structured-table-header" style="text-align:right;">Score</th>'
        '</tr></thead>'
        '<tbody><tr>'
        '<td class="structured-table-cell">Ann</td>'
        '<td class="structured-table-cell" style="text-align:right;">9</td>'
        '</tr></tbody></table>'
    )


def test_blockquote_and_rule():
    html = render_html(render("> note\n***"))
    assert html == (
        '<blockquote class="structured-blockquote">note</blockquote>\n'
        '<hr class="structured-horizontal-line">'
    )


def test_math_blocks():
    assert render_html([MathBlock(latex="x^2 < y")]) == (
        '<div class="math-block" style="margin:1em 0; text-align:center;">'
        '<span class="math-display">$$x^2 &lt; y$$</span></div>'
    )
    assert render_html([MathBlock(latex="x^2", plain=True)]) == (
        '<div class="math-block" style="margin:1em 0; text-align:center;">'
        '<span class="math-plain">x²</span></div>'
    )


def test_inline_math_keeps_delimiters():
    html = render_html(render("Area $x^2$ here", RenderMode.MATH))
    assert '<span class="math-inline">$x^2$</span>' in html


def test_code_block():
    assert render_html([CodeBlock(raw='if a < b: print("x")')]) == (
        '<pre class="structured-code-block" data-language="text">'
        '<code class="language-text">if a &lt; b: print("x")</code></pre>'
    )


def test_render_page():
    page = render_page(render("## Title"), title="Notes <1>", mathjax_url="https://cdn.example/mathjax.js")

    assert page.startswith("<!DOCTYPE html>")
    assert "<title>Notes &lt;1&gt;</title>" in page
    assert '<script id="MathJax-script" src="https://cdn.example/mathjax.js"></script>' in page
    assert "typesetPromise" in page
    assert '<div class="structured-heading structured-h2">Title</div>' in page
    assert "inlineMath: [['$', '$'], ['\\\\(', '\\\\)']]" in page
