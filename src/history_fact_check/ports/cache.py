"""
CacheProvider Port
==================

Abstract interface for the read-through cache in front of the
knowledge sources.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class CacheProvider(ABC):
    """
    Port for caching knowledge-source lookups.

    Values are JSON-compatible structures (dicts, lists, strings, numbers).
    Population on miss is the caller's responsibility.

    Responsibilities:
    - Exact key lookup
    - TTL-based expiration
    - Invalidation
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """
        Retrieve a cached value.

        Args:
            key: Cache key.

        Returns:
            Cached value, or None if absent or expired.
        """
        ...

    @abstractmethod
    async def put(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """
        Store a value.

        Args:
            key: Cache key.
            value: JSON-compatible value.
            ttl_seconds: Time-to-live in seconds (None = use default).
        """
        ...

    @abstractmethod
    async def invalidate(self, key: str) -> bool:
        """
        Remove a cached entry.

        Returns:
            True if the entry existed.
        """
        ...

    @abstractmethod
    async def clear(self) -> int:
        """
        Remove all cached entries.

        Returns:
            Number of entries cleared.
        """
        ...

    async def connect(self) -> None:
        """Open the backing store, if any."""
        return None

    async def disconnect(self) -> None:
        """Close the backing store, if any."""
        return None

    async def health_check(self) -> bool:
        """Check if the cache is operational."""
        return True
