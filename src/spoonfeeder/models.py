"""
Pydantic models for the structured-text renderer.

Blocks and inline spans are discriminated on ``kind`` so that a rendered
document serializes to JSON and back without losing its shape.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any, Literal, Union, Annotated

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


# ===== RENDER MODE =====

class RenderMode(str, Enum):
    """How math and code are treated by the renderer."""

    NORMAL = "normal"
    MATH = "math"
    CODE = "code"

    @classmethod
    def coerce(cls, value: Union["RenderMode", str, None]) -> "RenderMode":
        """
        Turn a stored mode tag into a RenderMode.

        Missing, empty and unknown tags fall back to NORMAL.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.NORMAL
        tag = str(value).strip().lower()
        if not tag:
            return cls.NORMAL
        try:
            return cls(tag)
        except ValueError:
            logger.warning(f"Unknown render mode {value!r}, using 'normal'")
            return cls.NORMAL


# ===== INLINE SPANS =====

class TextSpan(BaseModel):
    """Literal text."""
    kind: Literal["text"] = "text"
    text: str


class BoldSpan(BaseModel):
    kind: Literal["bold"] = "bold"
    children: List["Span"] = Field(default_factory=list)


class ItalicSpan(BaseModel):
    kind: Literal["italic"] = "italic"
    children: List["Span"] = Field(default_factory=list)


class StrikeSpan(BaseModel):
    kind: Literal["strike"] = "strike"
    children: List["Span"] = Field(default_factory=list)


class CodeSpan(BaseModel):
    """Inline code; ``code`` is shown verbatim."""
    kind: Literal["code"] = "code"
    code: str


class LinkSpan(BaseModel):
    """Hyperlink opened in a new tab."""
    kind: Literal["link"] = "link"
    href: str
    children: List["Span"] = Field(default_factory=list)


class MathSpan(BaseModel):
    """LaTeX fragment left for a math typesetter."""
    kind: Literal["math"] = "math"
    latex: str
    display: bool = False


Span = Annotated[
    Union[TextSpan, BoldSpan, ItalicSpan, StrikeSpan, CodeSpan, LinkSpan, MathSpan],
    Field(discriminator="kind"),
]

for _model in (BoldSpan, ItalicSpan, StrikeSpan, LinkSpan):
    _model.model_rebuild()


def _span_text(span: Any) -> str:
    if isinstance(span, TextSpan):
        return span.text
    if isinstance(span, CodeSpan):
        return span.code
    if isinstance(span, MathSpan):
        return span.latex
    return "".join(_span_text(child) for child in span.children)


class InlineRun(BaseModel):
    """Formatted content of one line or table cell."""
    spans: List[Span] = Field(default_factory=list)

    def plain_text(self) -> str:
        """Visible text without any formatting."""
        return "".join(_span_text(span) for span in self.spans)


# ===== BLOCKS =====

class HeadingBlock(BaseModel):
    kind: Literal["heading"] = "heading"
    level: int = Field(ge=1, le=6)
    inline: InlineRun


class ParagraphBlock(BaseModel):
    kind: Literal["paragraph"] = "paragraph"
    inline: InlineRun
    placeholder: bool = Field(default=False, description="True for the 'no content' stand-in")


class ListBlock(BaseModel):
    """A run of same-type, same-indent list lines."""
    kind: Literal["list"] = "list"
    ordered: bool
    start_number: int = 1
    items: List[InlineRun] = Field(default_factory=list)
    indent_level: int = Field(default=0, description="Leading spaces of the source lines")


class TableBlock(BaseModel):
    """Contiguous delimiter-separated rows."""
    kind: Literal["table"] = "table"
    headers: Optional[List[str]] = None
    rows: List[List[str]] = Field(default_factory=list)
    header_cells: Optional[List[InlineRun]] = None
    cells: List[List[InlineRun]] = Field(default_factory=list)
    alignments: List[Literal["left", "center", "right"]] = Field(default_factory=list)


class BlockquoteBlock(BaseModel):
    kind: Literal["blockquote"] = "blockquote"
    inline: InlineRun


class HorizontalRuleBlock(BaseModel):
    kind: Literal["hr"] = "hr"


class MathBlock(BaseModel):
    """Display math."""
    kind: Literal["math"] = "math"
    latex: str
    plain: bool = Field(default=False, description="Shown as Unicode text instead of typeset")
    centered: bool = True


class CodeBlock(BaseModel):
    """Verbatim preformatted text."""
    kind: Literal["code"] = "code"
    raw: str
    language: str = "text"


Block = Annotated[
    Union[
        HeadingBlock,
        ParagraphBlock,
        ListBlock,
        TableBlock,
        BlockquoteBlock,
        HorizontalRuleBlock,
        MathBlock,
        CodeBlock,
    ],
    Field(discriminator="kind"),
]


class RenderedDocument(BaseModel):
    """Serializable result of one render call."""
    mode: RenderMode
    blocks: List[Block] = Field(default_factory=list)


# ===== CONTENT STORE MODELS =====

QA_CONTENT_TYPES = ("qa", "question", "answer")


class ContentRecord(BaseModel):
    """A row of subtopic content as returned by the SpoonFeeder API."""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    subtopic_id: Optional[int] = Field(default=None, alias="subtopicId")
    content_type: str = Field(alias="contentType")
    content_order: Optional[int] = Field(default=None, alias="contentOrder")
    parent_content_id: Optional[int] = Field(default=None, alias="parentContentId")
    title: Optional[str] = None
    content: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    @property
    def mode(self) -> RenderMode:
        """Render mode stored alongside the content."""
        meta = self.metadata or {}
        return RenderMode.coerce(meta.get("format") or meta.get("mode"))

    @property
    def detect_code(self) -> bool:
        """Q&A entries get code auto-detection."""
        return self.content_type.lower() in QA_CONTENT_TYPES


# ===== LOCAL CONFIG MODELS =====

DEFAULT_API_URL = "http://localhost:5000/api"
DEFAULT_MATHJAX_URL = "https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-mml-chtml.js"


class SpoonFeederConfig(BaseModel):
    """Local configuration."""
    api_url: str = DEFAULT_API_URL
    token: Optional[str] = Field(default=None, description="JWT bearer token for the content API")
    default_mode: RenderMode = RenderMode.NORMAL
    detect_code: bool = False
    mathjax_url: str = DEFAULT_MATHJAX_URL


class HealthStatus(BaseModel):
    """Response of ``GET /health``."""
    status: str
    message: Optional[str] = None
    timestamp: Optional[datetime] = None
