"""
FastAPI Application Factory
===========================

Creates and configures the FastAPI application with routers and middleware.
"""

from __future__ import annotations

import secrets

import yaml
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse, Response
from fastapi.security import APIKeyHeader

from history_fact_check.api.errors import register_exception_handlers
from history_fact_check.api.middleware import TraceIdMiddleware
from history_fact_check.api.routes import fact_check, health, knowledge
from history_fact_check.infrastructure.config import get_settings
from history_fact_check.infrastructure.dependencies import lifespan_manager
from history_fact_check.infrastructure.logging import TRACE_ID_HEADER

# API Key header
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(api_key: str | None = Depends(api_key_header)) -> bool:
    """Verify API key if authentication is enabled."""
    settings = get_settings()

    # If no API key configured, skip auth
    if not settings.api.api_key:
        return True

    if not api_key or not secrets.compare_digest(api_key, settings.api.api_key):
        raise HTTPException(
            status_code=401,
            detail="Invalid or missing API key",
            headers={"WWW-Authenticate": "X-API-Key"},
        )
    return True


def create_app(*, enable_lifespan: bool = True) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        enable_lifespan: Connect adapters on startup. Tests disable it and
            override the dependency providers instead.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.api.title,
        version=settings.api.version,
        description=(
            "Verifies historical claims in chat messages. Claims are extracted "
            "from the text, grounded in Wikipedia, Wikidata and Wikiquote, and "
            "judged by a local Ollama model; results can be streamed as "
            "server-sent events."
        ),
        debug=settings.api.debug,
        lifespan=lifespan_manager if enable_lifespan else None,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        default_response_class=ORJSONResponse,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[TRACE_ID_HEADER],
    )
    app.add_middleware(TraceIdMiddleware)

    register_exception_handlers(app)

    # Include routers
    app.include_router(health.router, prefix="/health", tags=["Health"])
    app.include_router(
        fact_check.router,
        prefix="/api",
        tags=["Fact-Check"],
        dependencies=[Depends(verify_api_key)],
    )
    app.include_router(
        knowledge.router,
        prefix="/api",
        tags=["Knowledge"],
        dependencies=[Depends(verify_api_key)],
    )

    @app.get("/openapi.yaml", include_in_schema=False)
    def openapi_yaml() -> Response:
        schema = app.openapi()
        content = yaml.safe_dump(schema, sort_keys=False, allow_unicode=True)
        return Response(content=content, media_type="application/yaml")

    return app
