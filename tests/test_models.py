"""Tests for the data models."""

from spoonfeeder.models import (
    CodeBlock,
    ContentRecord,
    HeadingBlock,
    InlineRun,
    RenderedDocument,
    RenderMode,
    TextSpan,
)


def test_render_mode_coerce():
    assert RenderMode.coerce(None) is RenderMode.NORMAL
    assert RenderMode.coerce("") is RenderMode.NORMAL
    assert RenderMode.coerce(" Math ") is RenderMode.MATH
    assert RenderMode.coerce("code") is RenderMode.CODE
    assert RenderMode.coerce(RenderMode.MATH) is RenderMode.MATH
    assert RenderMode.coerce("latex") is RenderMode.NORMAL


def test_content_record_aliases_and_mode():
    record = ContentRecord(**{
        "id": 3,
        "subtopicId": 7,
        "contentType": "notes",
        "contentOrder": 1,
        "parentContentId": None,
        "title": "Limits",
        "content": "## Limits",
        "metadata": {"format": "math"},
        "created_at": "2024-01-01T00:00:00Z",
    })

    assert record.subtopic_id == 7
    assert record.content_type == "notes"
    assert record.mode is RenderMode.MATH
    assert not record.detect_code


def test_content_record_defaults():
    record = ContentRecord(id=1, content_type="QA")
    assert record.mode is RenderMode.NORMAL
    assert record.detect_code


def test_document_json_keeps_block_kinds():
    document = RenderedDocument(
        mode=RenderMode.NORMAL,
        blocks=[
            HeadingBlock(level=1, inline=InlineRun(spans=[TextSpan(text="Title")])),
            CodeBlock(raw="x = 1"),
        ],
    )

    restored = RenderedDocument.model_validate_json(document.model_dump_json())

    assert isinstance(restored.blocks[0], HeadingBlock)
    assert isinstance(restored.blocks[1], CodeBlock)
    assert restored == document
