"""
Redis Cache Adapter
===================

Adapter for Redis as a shared cache of knowledge lookups, so several
API workers reuse each other's Wikipedia and Wikidata results.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

import redis.asyncio as redis

from history_fact_check.ports.cache import CacheProvider

if TYPE_CHECKING:
    from history_fact_check.infrastructure.config import CacheSettings

logger = logging.getLogger(__name__)

CACHE_PREFIX = "hfc:cache:"


class RedisCacheError(Exception):
    """Exception raised when Redis operations fail."""

    pass


class RedisCacheAdapter(CacheProvider):
    """
    Adapter for Redis as a lookup cache.

    Read and write failures are logged and degrade to a cache miss.

    Supports:
    - Exact key lookup
    - TTL-based expiration
    - Prefix-scoped clearing
    """

    def __init__(self, settings: CacheSettings, max_retries: int = 5) -> None:
        """
        Initialize the adapter with configuration.

        Args:
            settings: Cache settings (Redis connection and TTL).
            max_retries: Connection attempts before giving up.
        """
        self._settings = settings
        self._client: redis.Redis | None = None  # type: ignore[type-arg]
        self._pool: redis.ConnectionPool | None = None
        self._default_ttl = settings.ttl_seconds
        self._max_retries = max_retries

    async def connect(self) -> None:
        """Establish connection to Redis with retries."""
        retry_delay = 1.0
        last_error: Exception | None = None

        password = None
        if self._settings.redis_password:
            password = self._settings.redis_password.get_secret_value()

        pool = redis.ConnectionPool(
            host=self._settings.redis_host,
            port=self._settings.redis_port,
            password=password,
            db=self._settings.redis_db,
            max_connections=self._settings.redis_max_connections,
        )
        client = redis.Redis(connection_pool=pool, decode_responses=False)

        for attempt in range(self._max_retries):
            try:
                await client.ping()  # type: ignore[misc]
                self._pool = pool
                self._client = client
                logger.info(
                    "Connected to Redis at %s:%s",
                    self._settings.redis_host,
                    self._settings.redis_port,
                )
                return
            except redis.ConnectionError as e:
                last_error = e
                if attempt < self._max_retries - 1:
                    logger.warning(
                        "Redis connection attempt %s failed: %s. Retrying in %ss...",
                        attempt + 1,
                        e,
                        retry_delay,
                    )
                    await asyncio.sleep(retry_delay)

        await client.aclose()
        await pool.disconnect()
        logger.error(f"Redis connection failed after {self._max_retries} attempts: {last_error}")
        raise RedisCacheError(
            f"Connection failed after {self._max_retries} attempts: {last_error}"
        )

    async def disconnect(self) -> None:
        """Close the Redis connection."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Disconnected from Redis")
        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None

    async def health_check(self) -> bool:
        """Check if Redis is reachable."""
        if self._client is None:
            return False
        try:
            await self._client.ping()  # type: ignore[misc]
            return True
        except Exception as e:
            logger.warning(f"Redis health check failed: {e}")
            return False

    def _make_key(self, key: str) -> str:
        """Create full cache key with prefix."""
        return f"{CACHE_PREFIX}{key}"

    async def get(self, key: str) -> Any | None:
        if self._client is None:
            logger.warning("Redis client not connected")
            return None

        try:
            data = await self._client.get(self._make_key(key))
            if data is None:
                return None
            return json.loads(data)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to deserialize cached value: {e}")
            await self.invalidate(key)
            return None
        except Exception as e:
            logger.error(f"Cache get failed: {e}")
            return None

    async def put(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        if self._client is None:
            logger.warning("Redis client not connected")
            return

        try:
            ttl = ttl_seconds or self._default_ttl
            payload = json.dumps(value, ensure_ascii=False)
            await self._client.set(self._make_key(key), payload, ex=ttl)
            logger.debug(f"Cached {key} with TTL {ttl}s")
        except Exception as e:
            logger.error(f"Cache set failed: {e}")

    async def invalidate(self, key: str) -> bool:
        if self._client is None:
            return False

        try:
            deleted = await self._client.delete(self._make_key(key))
            return deleted > 0
        except Exception as e:
            logger.error(f"Cache invalidate failed: {e}")
            return False

    async def clear(self) -> int:
        """Delete every key under this adapter's prefix."""
        if self._client is None:
            return 0

        try:
            cleared = 0
            async for full_key in self._client.scan_iter(match=f"{CACHE_PREFIX}*"):
                cleared += await self._client.delete(full_key)
            logger.info(f"Cleared {cleared} cached lookups")
            return cleared
        except Exception as e:
            logger.error(f"Cache clear failed: {e}")
            return 0
