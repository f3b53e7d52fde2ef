"""
SpoonFeeder structured-text renderer.

Turns stored study notes, questions and answers into typed blocks and
presents them as HTML or in the terminal.
"""

from spoonfeeder.segmenter import render, looks_like_code
from spoonfeeder.inline import format_inline
from spoonfeeder.latex_unicode import convert_latex_to_unicode
from spoonfeeder.html_renderer import render_html, render_page
from spoonfeeder.client import SpoonFeederClient
from spoonfeeder.models import (
    RenderMode,
    InlineRun,
    HeadingBlock,
    ParagraphBlock,
    ListBlock,
    TableBlock,
    BlockquoteBlock,
    HorizontalRuleBlock,
    MathBlock,
    CodeBlock,
    RenderedDocument,
    ContentRecord,
)
from spoonfeeder.exceptions import (
    SpoonFeederError,
    AuthenticationError,
    APIError,
    NotFoundError,
    ServerError,
    ValidationError,
    ConfigError,
)

__version__ = "1.0.0"

__all__ = [
    # Rendering
    "render",
    "looks_like_code",
    "format_inline",
    "convert_latex_to_unicode",
    "render_html",
    "render_page",
    # Client
    "SpoonFeederClient",
    # Models
    "RenderMode",
    "InlineRun",
    "HeadingBlock",
    "ParagraphBlock",
    "ListBlock",
    "TableBlock",
    "BlockquoteBlock",
    "HorizontalRuleBlock",
    "MathBlock",
    "CodeBlock",
    "RenderedDocument",
    "ContentRecord",
    # Exceptions
    "SpoonFeederError",
    "AuthenticationError",
    "APIError",
    "NotFoundError",
    "ServerError",
    "ValidationError",
    "ConfigError",
]
