# -*- coding: utf-8 -*-
"""
LaTeX → Unicode conversion for the plain-text ("normal") render mode.

Commands are replaced from fixed tables, longest command first, and only
when the whole command name matches (``\\in`` never eats ``\\infty``).
``\\sqrt{...}`` is resolved by brace counting so nested roots work.
"""

import re
from typing import Dict


# ---------------------------------------------------------------------------
# LaTeX → Unicode mappings
# ---------------------------------------------------------------------------

_RELATIONS = {
    r'\ge': '≥', r'\geq': '≥', r'\le': '≤', r'\leq': '≤',
    r'\neq': '≠', r'\ne': '≠',
    r'\approx': '≈', r'\equiv': '≡', r'\sim': '∼',
    r'\ll': '≪', r'\gg': '≫', r'\propto': '∝',
}

_SET_OPERATIONS = {
    r'\in': '∈', r'\notin': '∉',
    r'\subset': '⊂', r'\subseteq': '⊆',
    r'\supset': '⊃', r'\supseteq': '⊇',
    r'\cup': '∪', r'\cap': '∩',
    r'\emptyset': '∅', r'\varnothing': '∅',
    r'\forall': '∀', r'\exists': '∃',
}

_NUMBER_SETS = {
    r'\mathbb{R}': 'ℝ', r'\mathbb{N}': 'ℕ', r'\mathbb{Z}': 'ℤ',
    r'\mathbb{Q}': 'ℚ', r'\mathbb{C}': 'ℂ',
}

_OPERATORS = {
    r'\mid': '|', r'\cdot': '·', r'\times': '×', r'\div': '÷',
    r'\pm': '±', r'\mp': '∓',
    r'\sum': '∑', r'\prod': '∏', r'\int': '∫', r'\oint': '∮',
    r'\partial': '∂', r'\nabla': '∇', r'\infty': '∞',
    r'\rightarrow': '→', r'\leftarrow': '←', r'\to': '→',
    r'\Rightarrow': '⇒', r'\Leftrightarrow': '⇔',
    r'\ldots': '…', r'\cdots': '⋯',
}

_GREEK_LETTERS = {
    r'\alpha': 'α', r'\beta': 'β', r'\gamma': 'γ', r'\delta': 'δ',
    r'\epsilon': 'ε', r'\zeta': 'ζ', r'\eta': 'η', r'\theta': 'θ',
    r'\kappa': 'κ', r'\lambda': 'λ', r'\mu': 'μ', r'\nu': 'ν',
    r'\xi': 'ξ', r'\pi': 'π', r'\rho': 'ρ', r'\sigma': 'σ',
    r'\tau': 'τ', r'\phi': 'φ', r'\chi': 'χ', r'\psi': 'ψ',
    r'\omega': 'ω',
    # Uppercase
    r'\Gamma': 'Γ', r'\Delta': 'Δ', r'\Theta': 'Θ', r'\Lambda': 'Λ',
    r'\Sigma': 'Σ', r'\Phi': 'Φ', r'\Psi': 'Ψ', r'\Omega': 'Ω',
}

_FUNCTION_NAMES = {
    r'\sin': 'sin', r'\cos': 'cos', r'\tan': 'tan',
    r'\log': 'log', r'\ln': 'ln', r'\exp': 'exp',
}

LATEX_SYMBOLS: Dict[str, str] = {}
for _table in (_RELATIONS, _SET_OPERATIONS, _NUMBER_SETS, _OPERATORS,
               _GREEK_LETTERS, _FUNCTION_NAMES):
    LATEX_SYMBOLS.update(_table)

SUPERSCRIPT_DIGITS = {
    '0': '⁰', '1': '¹', '2': '²', '3': '³', '4': '⁴',
    '5': '⁵', '6': '⁶', '7': '⁷', '8': '⁸', '9': '⁹',
}

SUBSCRIPT_DIGITS = {
    '0': '₀', '1': '₁', '2': '₂', '3': '₃', '4': '₄',
    '5': '₅', '6': '₆', '7': '₇', '8': '₈', '9': '₉',
}


def _command_pattern(command: str) -> 're.Pattern[str]':
    # Whole command only: \in must not match the start of \infty.
    return re.compile(re.escape(command) + r'(?![a-zA-Z])')


# Longest first so \geq wins over \ge and \subseteq over \subset.
_SYMBOL_PATTERNS = [
    (_command_pattern(cmd), LATEX_SYMBOLS[cmd])
    for cmd in sorted(LATEX_SYMBOLS, key=len, reverse=True)
]

_SQRT = '\\sqrt'


# ---------------------------------------------------------------------------
# Super/subscripts
# ---------------------------------------------------------------------------

def _to_superscript(digits: str) -> str:
    return ''.join(SUPERSCRIPT_DIGITS.get(d, d) for d in digits)


def _to_subscript(digits: str) -> str:
    return ''.join(SUBSCRIPT_DIGITS.get(d, d) for d in digits)


def convert_scripts(text: str) -> str:
    """Convert numeric ``^{12}``, ``^2``, ``_{12}`` and ``_1`` to Unicode."""
    text = re.sub(r'\^\{(\d+)\}', lambda m: _to_superscript(m.group(1)), text)
    text = re.sub(r'\^(\d)', lambda m: _to_superscript(m.group(1)), text)
    text = re.sub(r'_\{(\d+)\}', lambda m: _to_subscript(m.group(1)), text)
    text = re.sub(r'_(\d)', lambda m: _to_subscript(m.group(1)), text)
    return text


# ---------------------------------------------------------------------------
# Square roots
# ---------------------------------------------------------------------------

def _find_closing_brace(text: str, open_pos: int) -> int:
    """Index of the brace closing ``text[open_pos]``, or -1 if unbalanced."""
    depth = 0
    for pos in range(open_pos, len(text)):
        char = text[pos]
        if char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                return pos
    return -1


def convert_sqrt(text: str) -> str:
    """
    Replace ``\\sqrt{...}`` with ``√(...)`` and ``\\sqrt x`` with ``√x``.

    Braces are matched by depth counting, so ``\\sqrt{\\sqrt{x}}`` becomes
    ``√(√(x))``. A root with an unbalanced brace is left as it is.
    """
    search_from = 0
    while True:
        start = text.find(_SQRT, search_from)
        if start == -1:
            return text

        after = start + len(_SQRT)
        if after < len(text) and text[after].isalpha():
            # \sqrtsomething is a different command
            search_from = after
            continue

        pos = after
        while pos < len(text) and text[pos] in ' \t':
            pos += 1

        if pos < len(text) and text[pos] == '{':
            end = _find_closing_brace(text, pos)
            if end == -1:
                search_from = after
                continue
            body = convert_scripts(text[pos + 1:end])
            replacement = f'√({body})'
            text = text[:start] + replacement + text[end + 1:]
            # Rescan from the root itself to pick up nested roots
            search_from = start
            continue

        bare = re.match(r'[a-zA-Z0-9]+', text[pos:])
        if bare:
            text = text[:start] + '√' + bare.group(0) + text[pos + bare.end():]
            search_from = start + 1
            continue

        search_from = after


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def convert_latex_to_unicode(text: str) -> str:
    """
    Convert LaTeX commands in ``text`` to Unicode glyphs for plain display.

    Text that holds no LaTeX commands only has its whitespace collapsed, so
    converting an already converted string is a no-op.
    """
    if not text:
        return text

    converted = convert_sqrt(text)

    for pattern, symbol in _SYMBOL_PATTERNS:
        converted = pattern.sub(symbol, converted)

    converted = convert_scripts(converted)

    converted = re.sub(r'\s+', ' ', converted).strip()
    return converted
