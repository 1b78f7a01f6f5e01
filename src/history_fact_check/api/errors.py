"""
Exception Handlers
==================

Maps the service's error taxonomy onto HTTP responses with a uniform
ErrorResponse body.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from history_fact_check.api.schemas.responses import ErrorResponse
from history_fact_check.infrastructure.logging import get_trace_id
from history_fact_check.ports.knowledge_source import (
    KnowledgeSourceError,
    KnowledgeSourceRateLimitedError,
)

logger = logging.getLogger(__name__)


def error_response(
    request: Request,
    status_code: int,
    message: str,
    headers: dict[str, str] | None = None,
) -> ORJSONResponse:
    body = ErrorResponse(
        status=status_code,
        error=HTTPStatus(status_code).phrase,
        message=message,
        path=request.url.path,
        trace_id=get_trace_id(),
    )
    return ORJSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True),
        headers=headers,
    )


async def _rate_limited(request: Request, exc: Exception) -> ORJSONResponse:
    logger.warning(f"Rate limited: {exc}")
    return error_response(request, 429, str(exc))


async def _knowledge_source_failed(request: Request, exc: Exception) -> ORJSONResponse:
    logger.error(f"Knowledge source failure: {exc}")
    return error_response(request, 502, str(exc))


async def _http_error(request: Request, exc: StarletteHTTPException) -> ORJSONResponse:
    return error_response(
        request,
        exc.status_code,
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def _validation_error(request: Request, exc: RequestValidationError) -> ORJSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    return error_response(request, 422, problems or "Invalid request")


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers on an application."""
    app.add_exception_handler(KnowledgeSourceRateLimitedError, _rate_limited)
    app.add_exception_handler(KnowledgeSourceError, _knowledge_source_failed)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
