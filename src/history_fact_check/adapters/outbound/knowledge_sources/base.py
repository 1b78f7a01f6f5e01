"""
Base HTTP Knowledge Source
==========================

Abstract base class for the HTTP-based Wikimedia sources.
Provides the pooled client, the rate-limit gate and error translation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from history_fact_check.ports.knowledge_source import (
    KnowledgeSource,
    KnowledgeSourceError,
    KnowledgeSourceRateLimitedError,
)

if TYPE_CHECKING:
    from history_fact_check.infrastructure.rate_limit import TokenBucketRateLimiter

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "HistoryAI/1.0 (contact: info@historyai.app)"


class HTTPKnowledgeSource(KnowledgeSource):
    """
    Base class for HTTP knowledge sources.

    ``_get`` returns None for 404 so subclasses can map it to "not found";
    429 and a local token-bucket rejection raise
    KnowledgeSourceRateLimitedError; every other failure raises
    KnowledgeSourceError.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        max_connections: int = 10,
        user_agent: str = DEFAULT_USER_AGENT,
        rate_limiter: TokenBucketRateLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the HTTP knowledge source.

        Args:
            base_url: Base URL for the API.
            timeout: Request timeout in seconds.
            max_connections: Maximum concurrent connections.
            user_agent: User-Agent header for requests.
            rate_limiter: Optional client-side throttle.
            transport: Optional httpx transport (used by tests).
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._user_agent = user_agent
        self._rate_limiter = rate_limiter
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        self._limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max(1, max_connections // 2),
        )

    @property
    def base_url(self) -> str:
        """Return the base URL."""
        return self._base_url

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        """Initialize the HTTP client."""
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
            limits=self._limits,
            headers={
                "User-Agent": self._user_agent,
                "Accept": "application/json",
            },
            follow_redirects=True,
            transport=self._transport,
        )
        logger.info(f"{self.source_name} client ready: {self._base_url}")

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info(f"{self.source_name} disconnected")

    async def health_check(self) -> bool:
        """Check if the API is responding."""
        if not self._client:
            return False
        try:
            response = await self._client.get("/", timeout=5.0)
            return response.status_code < 500
        except httpx.HTTPError:
            return False

    async def _get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response | None:
        """
        Make a throttled GET request.

        Returns:
            The successful response, or None for 404.
        """
        if not self._client:
            raise KnowledgeSourceError(f"{self.source_name} client not connected")

        if self._rate_limiter is not None and not self._rate_limiter.try_acquire():
            logger.warning(f"{self.source_name} local rate limit reached")
            raise KnowledgeSourceRateLimitedError(self.source_name)

        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            raise KnowledgeSourceError(f"{self.source_name} request failed: {e}") from e

        if response.status_code == 404:
            return None
        if response.status_code == 429:
            raise KnowledgeSourceRateLimitedError(self.source_name)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise KnowledgeSourceError(
                f"{self.source_name} returned HTTP {response.status_code}"
            ) from e
        return response

    async def _get_json(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """GET and decode a JSON object; None for 404."""
        response = await self._get(path, params=params)
        if response is None:
            return None
        try:
            data = response.json()
        except ValueError as e:
            raise KnowledgeSourceError(f"{self.source_name} returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise KnowledgeSourceError(f"{self.source_name} returned unexpected payload")
        return data
