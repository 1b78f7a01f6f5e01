"""
Health Check Endpoints
======================

Liveness and readiness probes for Kubernetes/container orchestration.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from history_fact_check.infrastructure.config import get_settings
from history_fact_check.infrastructure.dependencies import get_health_checks

router = APIRouter()
logger = logging.getLogger(__name__)

HEALTH_CHECK_TIMEOUT_SECONDS = 5.0


class HealthStatus(BaseModel):
    """Health check response model."""

    status: Literal["healthy", "degraded", "unhealthy"]
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    version: str
    environment: str
    checks: dict[str, bool] = Field(default_factory=dict)


class ReadinessStatus(BaseModel):
    """Readiness check response with service details."""

    ready: bool
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    services: dict[str, dict[str, bool | str]] = Field(default_factory=dict)


async def _probe(name: str, check: Callable[[], Awaitable[bool]]) -> dict[str, bool | str]:
    try:
        connected = await asyncio.wait_for(check(), timeout=HEALTH_CHECK_TIMEOUT_SECONDS)
    except TimeoutError:
        logger.warning(f"Health check timed out: {name}")
        return {"connected": False, "status": "timeout"}
    except Exception as e:
        logger.warning(f"Health check failed: {name}: {e}")
        return {"connected": False, "status": "error"}
    return {"connected": bool(connected), "status": "ok" if connected else "unavailable"}


@router.get(
    "/live",
    response_model=HealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
    description="Check if the API is alive and responding.",
)
async def liveness() -> HealthStatus:
    """
    Liveness probe for container orchestration.

    Always returns healthy if the service is running.
    """
    settings = get_settings()
    return HealthStatus(
        status="healthy",
        version=settings.api.version,
        environment=settings.environment,
    )


@router.get(
    "/ready",
    response_model=ReadinessStatus,
    status_code=status.HTTP_200_OK,
    summary="Readiness probe",
    description="Check if the model backend, cache and knowledge sources are reachable.",
)
async def readiness(
    response: Response,
    checks: Annotated[dict[str, Callable[[], Awaitable[bool]]], Depends(get_health_checks)],
) -> ReadinessStatus:
    """
    Readiness probe checking all service dependencies.

    Returns ready=True only if adapters are initialized and every probe
    succeeds; otherwise responds with 503.
    """
    names = list(checks)
    results = await asyncio.gather(*(_probe(name, checks[name]) for name in names))
    services = dict(zip(names, results, strict=True))

    all_ready = bool(services) and all(svc["connected"] for svc in services.values())
    if not all_ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessStatus(ready=all_ready, services=services)


@router.get(
    "",
    response_model=HealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Simple health check endpoint.",
)
async def health() -> HealthStatus:
    """Basic health check - alias for liveness."""
    return await liveness()
