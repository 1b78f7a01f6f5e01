"""
Trace Id Middleware
===================

Pure ASGI middleware binding an ``X-Trace-Id`` to each HTTP request so
that every log line of the request carries it. The id is taken from the
request header when present and echoed on the response.
"""

from __future__ import annotations

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from history_fact_check.infrastructure.logging import (
    TRACE_ID_HEADER,
    new_trace_id,
    reset_trace_id,
    set_trace_id,
)

_MAX_TRACE_ID_LENGTH = 128


class TraceIdMiddleware:
    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        header_name = TRACE_ID_HEADER.lower().encode("latin-1")
        incoming = None
        for name, value in scope.get("headers", []):
            if name == header_name:
                incoming = value.decode("latin-1").strip()
                break
        trace_id = incoming[:_MAX_TRACE_ID_LENGTH] if incoming else new_trace_id()

        async def send_with_trace_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers[TRACE_ID_HEADER] = trace_id
            await send(message)

        token = set_trace_id(trace_id)
        try:
            await self.app(scope, receive, send_with_trace_id)
        finally:
            reset_trace_id(token)
