"""
Wikiquote Action API Adapter
============================

Fetches page wikitext from one language edition of Wikiquote through
the MediaWiki Action API (action=parse).
https://www.mediawiki.org/wiki/API:Parsing_wikitext
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from history_fact_check.adapters.outbound.knowledge_sources.base import (
    DEFAULT_USER_AGENT,
    HTTPKnowledgeSource,
)
from history_fact_check.ports.knowledge_source import (
    KnowledgeSourceError,
    KnowledgeSourceRateLimitedError,
    QuotationSource,
)

if TYPE_CHECKING:
    from history_fact_check.infrastructure.rate_limit import TokenBucketRateLimiter

logger = logging.getLogger(__name__)

# Action API error codes meaning "no such page" rather than a failure.
MISSING_PAGE_CODES = frozenset({"missingtitle", "invalidtitle", "nosuchpageid"})
THROTTLE_CODES = frozenset({"ratelimited", "maxlag"})


class WikiquoteAdapter(HTTPKnowledgeSource, QuotationSource):
    """Adapter for Wikiquote page wikitext."""

    def __init__(
        self,
        language: str = "en",
        api_url: str | None = None,
        timeout: float = 15.0,
        max_connections: int = 10,
        user_agent: str = DEFAULT_USER_AGENT,
        rate_limiter: TokenBucketRateLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._language = language
        api_url = api_url or f"https://{language}.wikiquote.org/w/api.php"
        # The client is rooted at the script directory; requests target api.php.
        base_url, _, script = api_url.rstrip("/").rpartition("/")
        self._api_path = f"/{script}" if script.endswith(".php") else "/api.php"
        super().__init__(
            base_url=base_url if script.endswith(".php") else api_url,
            timeout=timeout,
            max_connections=max_connections,
            user_agent=user_agent,
            rate_limiter=rate_limiter,
            transport=transport,
        )

    @property
    def source_name(self) -> str:
        return f"Wikiquote ({self._language})"

    @property
    def language(self) -> str:
        return self._language

    async def health_check(self) -> bool:
        """Check Wikiquote Action API health."""
        if not self._client:
            return False
        try:
            response = await self._client.get(
                self._api_path,
                params={"action": "query", "meta": "siteinfo", "format": "json"},
                timeout=5.0,
            )
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def get_page_wikitext(self, title: str) -> str | None:
        """Fetch page wikitext; None when the page does not exist."""
        title = title.strip()
        if not title:
            return None

        data = await self._get_json(
            self._api_path,
            params={
                "action": "parse",
                "prop": "wikitext",
                "format": "json",
                "formatversion": "2",
                "redirects": "1",
                "page": title,
            },
        )
        if data is None:
            return None

        error = data.get("error")
        if isinstance(error, dict):
            code = str(error.get("code", ""))
            if code in MISSING_PAGE_CODES:
                logger.debug(f"{self.source_name}: no page for '{title}'")
                return None
            if code in THROTTLE_CODES:
                raise KnowledgeSourceRateLimitedError(self.source_name)
            raise KnowledgeSourceError(
                f"{self.source_name} API error {code}: {error.get('info', '')}"
            )

        wikitext = data.get("parse", {}).get("wikitext")
        # formatversion=1 nests the text under "*".
        if isinstance(wikitext, dict):
            wikitext = wikitext.get("*")
        return wikitext if isinstance(wikitext, str) and wikitext.strip() else None
