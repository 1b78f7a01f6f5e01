"""
Logging utilities for API runtime.
"""

from __future__ import annotations

import logging
import time
from contextvars import ContextVar
from uuid import uuid4

TRACE_ID_HEADER = "X-Trace-Id"
NO_TRACE_ID = "-"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | [%(trace_id)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_trace_id: ContextVar[str | None] = ContextVar("trace_id", default=None)


def new_trace_id() -> str:
    return uuid4().hex


def get_trace_id() -> str | None:
    """Trace id of the request being handled, if any."""
    return _trace_id.get()


def set_trace_id(trace_id: str | None) -> object:
    """Bind a trace id to the current context; returns a reset token."""
    return _trace_id.set(trace_id)


def reset_trace_id(token: object) -> None:
    _trace_id.reset(token)  # type: ignore[arg-type]


class TraceIdFilter(logging.Filter):
    """Stamp every record with the current request's trace id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = _trace_id.get() or NO_TRACE_ID
        return True


class HealthLiveAccessFilter(logging.Filter):
    """Throttle /health/live access log entries to reduce log noise."""

    def __init__(self, min_interval_seconds: float = 120.0) -> None:
        super().__init__()
        self._min_interval_seconds = min_interval_seconds
        self._last_logged: float | None = None

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if "/health/live" not in message:
            return True

        now = time.monotonic()
        if self._last_logged is None or (now - self._last_logged) >= self._min_interval_seconds:
            self._last_logged = now
            return True

        return False


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with trace ids on every line."""
    logging.basicConfig(
        level=getattr(logging, level),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, TraceIdFilter) for f in handler.filters):
            handler.addFilter(TraceIdFilter())
