"""
In-Memory Cache Adapter
=======================

Process-local TTL cache for knowledge lookups. Used when no Redis
instance is configured.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

from history_fact_check.ports.cache import CacheProvider

logger = logging.getLogger(__name__)


class InMemoryCacheAdapter(CacheProvider):
    """
    Thread-safe TTL cache with a size bound.

    Entries expire after their TTL; when full, the least recently
    written entry is evicted. Concurrent writers for the same key simply
    overwrite each other.
    """

    def __init__(
        self,
        default_ttl_seconds: int = 86400,
        max_entries: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = default_ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._store: OrderedDict[str, tuple[Any, float]] = OrderedDict()
        self._lock = threading.Lock()

    async def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._store[key]
                return None
            return value

    async def put(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        with self._lock:
            self._store.pop(key, None)
            self._store[key] = (value, self._clock() + ttl)
            while len(self._store) > self._max_entries:
                evicted, _ = self._store.popitem(last=False)
                logger.debug(f"Cache full, evicted {evicted}")

    async def invalidate(self, key: str) -> bool:
        with self._lock:
            return self._store.pop(key, None) is not None

    async def clear(self) -> int:
        with self._lock:
            count = len(self._store)
            self._store.clear()
            return count

    def size(self) -> int:
        with self._lock:
            return len(self._store)
