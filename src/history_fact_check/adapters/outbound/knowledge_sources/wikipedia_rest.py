"""
Wikipedia REST API Adapter
==========================

Reads page summaries from one language edition of Wikipedia through the
REST API (rest_v1).
https://en.wikipedia.org/api/rest_v1/
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from history_fact_check.adapters.outbound.knowledge_sources.base import (
    DEFAULT_USER_AGENT,
    HTTPKnowledgeSource,
)
from history_fact_check.domain.entities import ReferenceContext
from history_fact_check.ports.knowledge_source import KnowledgeSourceError, SummarySource

if TYPE_CHECKING:
    from history_fact_check.infrastructure.rate_limit import TokenBucketRateLimiter

logger = logging.getLogger(__name__)


def encode_title(title: str) -> str:
    """Normalize a page title to the URL form used by Wikimedia paths."""
    return quote(title.strip().replace(" ", "_"), safe="")


class WikipediaSummaryAdapter(HTTPKnowledgeSource, SummarySource):
    """
    Adapter for Wikipedia page summaries.

    Returns the summary as a ReferenceContext; the ``wikibase_item``
    field carries the Wikidata id used for identity checks.
    """

    def __init__(
        self,
        language: str = "en",
        base_url: str | None = None,
        timeout: float = 15.0,
        max_connections: int = 10,
        user_agent: str = DEFAULT_USER_AGENT,
        rate_limiter: TokenBucketRateLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._language = language
        super().__init__(
            base_url=base_url or f"https://{language}.wikipedia.org/api/rest_v1",
            timeout=timeout,
            max_connections=max_connections,
            user_agent=user_agent,
            rate_limiter=rate_limiter,
            transport=transport,
        )

    @property
    def source_name(self) -> str:
        return f"Wikipedia ({self._language})"

    @property
    def language(self) -> str:
        return self._language

    async def health_check(self) -> bool:
        """Check Wikipedia REST API health."""
        if not self._client:
            return False
        try:
            response = await self._client.get("/page/random/summary", timeout=5.0)
            return response.status_code < 500
        except httpx.HTTPError:
            return False

    async def get_summary(self, title: str) -> ReferenceContext | None:
        """Get a page summary by exact title; None when the page is missing."""
        encoded_title = encode_title(title)
        if not encoded_title:
            return None

        data = await self._get_json(f"/page/summary/{encoded_title}")
        if data is None:
            logger.debug(f"{self.source_name}: no page for '{title}'")
            return None

        try:
            return ReferenceContext.model_validate(data)
        except ValidationError as e:
            raise KnowledgeSourceError(
                f"{self.source_name} returned an unreadable summary for '{title}': {e}"
            ) from e
