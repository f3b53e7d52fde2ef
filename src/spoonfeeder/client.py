"""
High-level SpoonFeeder client.

Fetches subtopic content from the API and renders it into blocks.
"""

import logging
from pathlib import Path
from typing import Optional, List

import httpx

from spoonfeeder.config import get_config_manager
from spoonfeeder.http_client import HTTPClient
from spoonfeeder.models import (
    ContentRecord,
    HealthStatus,
    RenderedDocument,
    RenderMode,
)
from spoonfeeder.segmenter import render

logger = logging.getLogger(__name__)


class SpoonFeederClient:
    """
    Read-only client for the content API.

    Example:

    ```python
    with SpoonFeederClient(api_url="http://localhost:5000/api", token="...") as client:
        for record, document in client.render_subtopic(42):
            print(record.title, len(document.blocks))
    ```
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        token: Optional[str] = None,
        config_dir: Optional[Path] = None,
        timeout: float = HTTPClient.DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Args:
            api_url: API base URL (e.g. http://localhost:5000/api)
            token: Bearer token
            config_dir: Configuration directory
            timeout: Request timeout in seconds
            transport: Custom httpx transport
        """
        self._config_manager = get_config_manager(config_dir)

        self._http = HTTPClient(
            api_url=api_url,
            token=token,
            config_manager=self._config_manager,
            timeout=timeout,
            transport=transport
        )

    # ===== SERVER =====

    def health(self) -> HealthStatus:
        """Check that the API is up. Needs no token."""
        response = self._http.get("/health", require_auth=False)
        return HealthStatus(**response.json())

    # ===== CONTENT =====

    def get_subtopic_content(self, subtopic_id: int) -> List[ContentRecord]:
        """
        Content records of a subtopic, in display order.

        Args:
            subtopic_id: Subtopic ID

        Returns:
            Records sorted by ``content_order``
        """
        response = self._http.get(f"/subtopics/{subtopic_id}/content")
        records = [ContentRecord(**item) for item in response.json()]
        records.sort(key=lambda r: (r.content_order is None, r.content_order or 0))
        logger.debug(f"Fetched {len(records)} content records for subtopic {subtopic_id}")
        return records

    # ===== RENDERING =====

    def render_record(
        self,
        record: ContentRecord,
        mode: Optional[RenderMode] = None
    ) -> RenderedDocument:
        """
        Render one content record.

        Args:
            record: Content record
            mode: Overrides the mode stored in the record's metadata

        Returns:
            Rendered document
        """
        effective = RenderMode.coerce(mode) if mode is not None else record.mode
        detect_code = record.detect_code or self._config_manager.get_config().detect_code
        blocks = render(record.content, effective, detect_code=detect_code)
        return RenderedDocument(mode=effective, blocks=blocks)

    def render_subtopic(
        self,
        subtopic_id: int,
        mode: Optional[RenderMode] = None
    ) -> List[tuple]:
        """
        Fetch and render all content of a subtopic.

        Returns:
            ``(record, document)`` pairs in display order
        """
        return [
            (record, self.render_record(record, mode))
            for record in self.get_subtopic_content(subtopic_id)
        ]

    # ===== CONTEXT MANAGER =====

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        """Close the client."""
        self._http.close()
