"""
Fact-Check API Endpoints
========================

Blocking and streaming (server-sent events) claim verification.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse
from pydantic import AliasChoices, BaseModel, Field

from history_fact_check.application.fact_check import FactCheckUseCase
from history_fact_check.domain.entities import StreamEvent, VerificationOutcome
from history_fact_check.infrastructure.dependencies import get_fact_check_use_case

router = APIRouter()
logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


# -----------------------------------------------------------------------------
# Request Schemas (API layer DTOs)
# -----------------------------------------------------------------------------


class FactCheckRequest(BaseModel):
    """Request body for blocking fact-checking."""

    model_config = {"populate_by_name": True}

    message: str = Field(
        ...,
        min_length=1,
        max_length=20_000,
        description="Message whose factual claims should be verified.",
        examples=["Mikołaj Kopernik urodził się w 1473 roku."],
    )
    subject_name: str | None = Field(
        default=None,
        max_length=300,
        validation_alias=AliasChoices("subjectName", "characterName", "subject_name"),
        description="Subject the message is about; used for Wikipedia and Wikiquote lookups.",
        examples=["Mikołaj Kopernik"],
    )
    caller_context: str | None = Field(
        default=None,
        max_length=10_000,
        validation_alias=AliasChoices("callerContext", "characterContext", "caller_context"),
        description="Extra background passed verbatim to the model.",
    )


# -----------------------------------------------------------------------------
# Server-sent events
# -----------------------------------------------------------------------------


def format_sse(event: StreamEvent) -> str:
    """Encode one event; multi-line payloads span several data lines."""
    payload = event.payload.replace("\r\n", "\n").replace("\r", "\n")
    lines = [f"event: {event.name}"]
    lines.extend(f"data: {line}" for line in payload.split("\n"))
    return "\n".join(lines) + "\n\n"


async def _sse_stream(events: AsyncIterator[StreamEvent]) -> AsyncIterator[str]:
    # Closing this generator (client disconnect) closes the use-case stream.
    async with aclosing(events) as stream:
        async for event in stream:
            yield format_sse(event)


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.post(
    "/factcheck",
    response_model=list[VerificationOutcome],
    status_code=status.HTTP_200_OK,
    summary="Fact-check a message",
    description=(
        "Extract factual claims from a message and verify each one with the "
        "model, grounded in Wikipedia and Wikiquote. Claims that cannot be "
        "checked come back as UNVERIFIABLE rather than as errors."
    ),
)
async def fact_check(
    request: FactCheckRequest,
    use_case: Annotated[FactCheckUseCase, Depends(get_fact_check_use_case)],
) -> list[VerificationOutcome]:
    start = time.perf_counter()
    logger.info(
        "Fact-check request started",
        extra={
            "message_length": len(request.message),
            "subject": request.subject_name,
        },
    )

    outcomes = await use_case.check(
        request.message,
        subject_name=request.subject_name,
        caller_context=request.caller_context,
    )

    logger.info(
        f"Fact-check request finished in {(time.perf_counter() - start) * 1000:.0f}ms",
        extra={"outcomes": len(outcomes)},
    )
    return outcomes


@router.get(
    "/factcheck/stream",
    summary="Fact-check a message with streamed progress",
    description=(
        "Server-sent events: start, wiki, prompt, chunk*, final (JSON outcome), "
        "complete; or a terminal error event."
    ),
    response_class=StreamingResponse,
)
async def fact_check_stream(
    use_case: Annotated[FactCheckUseCase, Depends(get_fact_check_use_case)],
    message: Annotated[str, Query(min_length=1, max_length=20_000)],
    subject_name: Annotated[str | None, Query(alias="subjectName", max_length=300)] = None,
    character_name: Annotated[str | None, Query(alias="characterName", max_length=300)] = None,
    caller_context: Annotated[str | None, Query(alias="callerContext", max_length=10_000)] = None,
    character_context: Annotated[
        str | None, Query(alias="characterContext", max_length=10_000)
    ] = None,
) -> StreamingResponse:
    events = use_case.check_stream(
        message,
        subject_name=subject_name or character_name,
        caller_context=caller_context or character_context,
    )
    return StreamingResponse(
        _sse_stream(events),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
