"""
Token Bucket Rate Limiter
=========================

Client-side throttle placed in front of each knowledge source so the
service stays within the public APIs' fair-use limits.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable


class TokenBucketRateLimiter:
    """
    Non-blocking token bucket.

    Holds up to ``burst`` tokens and refills ``requests_per_minute``
    tokens per minute. ``try_acquire`` never waits: callers turn a
    rejection into a rate-limit error instead of retrying.
    """

    def __init__(
        self,
        requests_per_minute: int,
        burst: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the bucket (full).

        Args:
            requests_per_minute: Sustained refill rate.
            burst: Bucket capacity (defaults to requests_per_minute).
            clock: Monotonic time source in seconds.
        """
        if requests_per_minute < 1:
            raise ValueError("requests_per_minute must be at least 1")
        self._rate = requests_per_minute / 60.0
        self._capacity = float(burst if burst is not None else requests_per_minute)
        if self._capacity < 1:
            raise ValueError("burst must be at least 1")
        self._clock = clock
        self._tokens = self._capacity
        self._updated = clock()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return int(self._capacity)

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._updated)
        self._tokens = min(self._capacity, self._tokens + elapsed * self._rate)
        self._updated = now

    def try_acquire(self, tokens: int = 1) -> bool:
        """Take ``tokens`` if available; return False otherwise."""
        with self._lock:
            self._refill()
            if self._tokens >= tokens:
                self._tokens -= tokens
                return True
            return False

    def available(self) -> float:
        """Tokens currently available."""
        with self._lock:
            self._refill()
            return self._tokens
