"""Tests for math preprocessing."""

from spoonfeeder.math_processor import (
    auto_wrap_bare_math,
    balance_left_right,
    detect_standalone_math_line,
    extract_standalone_math,
    handle_boxed_commands,
    normalize_math_delimiters,
    preprocess_math,
    process_math_expressions,
    promote_complex_inline_to_block,
    reject_markdown_in_math,
    strip_math_brackets,
)


def test_normalize_closes_dangling_delimiters():
    assert normalize_math_delimiters("$x") == "$x$"
    assert normalize_math_delimiters("$$x") == "$$x$$"
    assert normalize_math_delimiters("$$a$$ and $b") == "$$a$$ and $b$"
    assert normalize_math_delimiters("a $b$ c") == "a $b$ c"
    assert normalize_math_delimiters("") == ""


def test_normalize_leaves_even_delimiters():
    sources = [
        "$x", "$$x", "a $b$ c $d", "$a$$b", "$$a$$ $b", "no math",
        "$$a$ b", "x $y$$ z", "$$$", "$ $$ $",
    ]
    for source in sources:
        assert normalize_math_delimiters(source).count("$") % 2 == 0


def test_normalize_inline_closes_on_double_dollar():
    assert normalize_math_delimiters("$a$$b") == "$a$$b$"
    assert normalize_math_delimiters("x $y$$ z") == "x $y$$ z$"


def test_normalize_drops_unpaired_dollar_in_block():
    assert normalize_math_delimiters("$$a$ b") == "$$a b$$"


def test_normalize_drops_empty_block_span():
    assert normalize_math_delimiters("notes\n$$") == "notes\n"
    assert normalize_math_delimiters("a $$$$ b") == "a  b"


def test_balance_pads_missing_right():
    assert balance_left_right(r"$$\left( x$$") == r"$$\left( x\right.$$"
    assert balance_left_right(r"$\left[ a \left( b$") == r"$\left[ a \left( b\right.\right.$"


def test_balance_leaves_excess_right():
    assert balance_left_right(r"$x \right)$") == r"$x \right)$"


def test_balance_ignores_arrows():
    assert balance_left_right(r"$a \leftarrow b$") == r"$a \leftarrow b$"


def test_reject_markdown_in_math():
    assert reject_markdown_in_math("$**bold**$") == "**bold**"
    assert reject_markdown_in_math("$x^2$") == "$x^2$"


def test_auto_wrap_bare_math():
    assert auto_wrap_bare_math(r"\frac{a}{b} = c") == r"$$\frac{a}{b} = c$$"
    assert auto_wrap_bare_math(r"The \alpha value is big") == r"The \alpha value is big"
    assert auto_wrap_bare_math(r"$\frac{a}{b}$") == r"$\frac{a}{b}$"


def test_auto_wrap_skips_open_display_block():
    source = "$$\n\\frac{a}{b}\n$$"
    assert auto_wrap_bare_math(source) == source


def test_promote_complex_inline():
    assert promote_complex_inline_to_block(r"$\frac{a}{b}$") == r"$$\frac{a}{b}$$"
    assert promote_complex_inline_to_block("$x += 1$") == "$$x += 1$$"
    assert promote_complex_inline_to_block("$x$") == "$x$"
    long_expr = "x+" * 30
    assert promote_complex_inline_to_block(f"${long_expr}$") == f"$${long_expr}$$"


def test_boxed_lines():
    assert handle_boxed_commands(r"[ \boxed{42} ] units") == "$$\\boxed{42}$$\nunits"
    assert handle_boxed_commands(r"[\boxed{x = 1}]") == r"$$\boxed{x = 1}$$"


def test_preprocess_math_chain():
    assert preprocess_math(r"Value $\frac{1}{2}") == r"Value $$\frac{1}{2}$$"
    assert preprocess_math("") == ""


def test_strip_math_brackets():
    assert strip_math_brackets("[x^2]") == "x^2"
    assert strip_math_brackets("[a, b]") == "[a, b]"
    assert strip_math_brackets("[1, 2]") == "[1, 2]"
    assert strip_math_brackets("see [x^2 + 1] here", wrap=True) == "see $$x^2 + 1$$ here"


def test_strip_math_brackets_link_guard():
    link = "[Click here](http://example.com)"
    assert strip_math_brackets(link) == link
    assert strip_math_brackets("[x^2](http://example.com)", wrap=True) == "[x^2](http://example.com)"


def test_strip_standalone_bracket_lines():
    assert strip_math_brackets("[\nx\n]") == "\nx\n"


def test_process_math_expressions_modes():
    assert process_math_expressions(r"[\alpha + 1]", enable_math=False, convert_to_unicode=True) == "α + 1"
    assert process_math_expressions("[x^2 + y^2 = 4]") == "$$x^2 + y^2 = 4$$"
    assert process_math_expressions(r"so \[x\] holds") == "so $$x$$ holds"
    assert process_math_expressions("$$ x $$") == "$$x$$"
    assert process_math_expressions("plain", enable_math=False) == "plain"


def test_detect_standalone_math_line():
    assert detect_standalone_math_line("[x^2 + y^2 = 4]")
    assert detect_standalone_math_line("$$x^2$$")
    assert detect_standalone_math_line(r"\[a+b\]")
    assert detect_standalone_math_line("x = 5")
    assert detect_standalone_math_line("sin(x) = 0")
    assert not detect_standalone_math_line("The value of x is (approx) 5")
    assert not detect_standalone_math_line("[Click here](http://example.com)")
    assert not detect_standalone_math_line("## Heading (1)")
    assert not detect_standalone_math_line("Area is $x^2$ units")
    assert not detect_standalone_math_line("")


def test_extract_standalone_math():
    assert extract_standalone_math("[x^2]") == "x^2"
    assert extract_standalone_math(r"\[a+b\]") == "a+b"
    assert extract_standalone_math("$$ y $$") == "y"
    assert extract_standalone_math(" x = 5 ") == "x = 5"
