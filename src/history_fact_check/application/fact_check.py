"""
FactCheckUseCase
================

Primary application use-case: orchestrates claim verification.

Blocking flow (``check``):
1. Extract claims from the message
2. For each claim, in order: resolve context, build prompt, generate, parse
3. Return one outcome per claim

Streaming flow (``check_stream``):
start → wiki → prompt → chunk* → final → complete, or a single error
event that ends the stream.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Sequence
from contextlib import aclosing
from typing import TYPE_CHECKING, TypeVar

from history_fact_check.domain.entities import (
    ContextFound,
    StreamEvent,
    StreamEventType,
    VerificationOutcome,
)
from history_fact_check.domain.services.claim_extractor import guess_subject
from history_fact_check.domain.services.prompt_builder import FactCheckPromptBuilder
from history_fact_check.domain.services.response_parser import VerificationResponseParser
from history_fact_check.domain.services.stream_buffer import (
    DEFAULT_FLUSH_SIZE,
    StreamChunkBuffer,
)

if TYPE_CHECKING:
    from history_fact_check.domain.entities import Claim, ReferenceContext
    from history_fact_check.domain.services.context_resolver import ContextResolver
    from history_fact_check.domain.services.quote_resolver import QuoteResolver
    from history_fact_check.ports.claim_extractor import ClaimExtractor
    from history_fact_check.ports.generation import GenerationProvider

logger = logging.getLogger(__name__)

NO_CLAIMS_EXPLANATION = "No factual claims detected in message"
ERROR_EXPLANATION_PREFIX = "Error during verification: "

START_MESSAGE = "Starting verification..."
SOURCE_FOUND_MESSAGE = "Found Wikipedia info: {title}"
SOURCE_MISSING_MESSAGE = "No Wikipedia info found"
PROMPT_READY_MESSAGE = "Analyzing with AI..."
COMPLETE_MESSAGE = "Verification complete"
ERROR_MESSAGE = "Error: {error}"

DEFAULT_STREAM_TIMEOUT_SECONDS = 180.0

T = TypeVar("T")


class StreamTimeoutError(TimeoutError):
    """Raised when a streaming verification runs past its deadline."""

    pass


class FactCheckUseCase:
    """
    Orchestrates fact-checking through the pipeline's ports.

    Coordinates:
    - ClaimExtractor: Message → Claims
    - ContextResolver: Subject → ReferenceContext (cached, rate limited)
    - QuoteResolver: Subject → quotes (optional)
    - FactCheckPromptBuilder: Claim + context → prompt
    - GenerationProvider: Prompt → reply (blocking or streamed)
    - VerificationResponseParser: Reply → VerificationOutcome

    Claims of one request are verified sequentially. A failing claim
    becomes an UNVERIFIABLE outcome and never stops its siblings.
    """

    def __init__(
        self,
        extractor: ClaimExtractor,
        resolver: ContextResolver,
        generator: GenerationProvider,
        *,
        quote_resolver: QuoteResolver | None = None,
        prompt_builder: FactCheckPromptBuilder | None = None,
        parser: VerificationResponseParser | None = None,
        stream_flush_size: int = DEFAULT_FLUSH_SIZE,
        stream_timeout_seconds: float = DEFAULT_STREAM_TIMEOUT_SECONDS,
    ) -> None:
        """
        Initialize the use-case with required ports.

        Args:
            extractor: Claim extraction service.
            resolver: Reference context resolver.
            generator: Text-generation backend.
            quote_resolver: Optional quote lookup for explicit subjects.
            prompt_builder: Prompt renderer (default builder if omitted).
            parser: Reply parser (default parser if omitted).
            stream_flush_size: Chunk size that forces a flush when streaming.
            stream_timeout_seconds: Wall-clock bound of one streaming call.
        """
        self._extractor = extractor
        self._resolver = resolver
        self._generator = generator
        self._quotes = quote_resolver
        self._prompt_builder = prompt_builder or FactCheckPromptBuilder()
        self._parser = parser or VerificationResponseParser()
        self._flush_size = stream_flush_size
        self._stream_timeout = stream_timeout_seconds

    # -------------------------------------------------------------------------
    # Blocking path
    # -------------------------------------------------------------------------

    async def check(
        self,
        message: str,
        *,
        subject_name: str | None = None,
        caller_context: str | None = None,
    ) -> list[VerificationOutcome]:
        """
        Verify every claim found in a message.

        Args:
            message: Free-text message to check.
            subject_name: Subject the message is about, if known.
            caller_context: Extra context supplied by the caller.

        Returns:
            One outcome per claim in message order; a single UNVERIFIABLE
            outcome for the whole message when no claim was found.
        """
        claims = self._extractor.extract_claims(message)
        if not claims:
            logger.info("No factual claims detected")
            return [VerificationOutcome.unverifiable(message, NO_CLAIMS_EXPLANATION)]

        subject = _clean(subject_name)
        quotes = await self._quotes_for(subject)

        outcomes: list[VerificationOutcome] = []
        for claim in claims:
            outcome = await self.verify_claim(
                claim,
                subject_name=subject,
                caller_context=caller_context,
                quotes=quotes,
            )
            outcomes.append(outcome)

        logger.info(
            "Fact-check finished",
            extra={
                "claims": len(claims),
                "labels": [o.verification.value for o in outcomes],
            },
        )
        return outcomes

    async def verify_claim(
        self,
        claim: Claim,
        *,
        subject_name: str | None = None,
        caller_context: str | None = None,
        quotes: Sequence[str] = (),
    ) -> VerificationOutcome:
        """
        Verify a single claim; never raises.

        Without an explicit subject, the subject is guessed from the
        claim's capitalised words.
        """
        try:
            subject = subject_name or guess_subject(claim.text)
            context = await self._resolve_context(subject)
            prompt = self._prompt_builder.build(claim.text, caller_context, context, quotes)
            reply = await self._generator.generate(prompt)
            return self._parser.parse(claim.text, reply, context)
        except Exception as e:
            logger.warning(f"Verification failed for claim '{claim.text[:80]}': {e}")
            return VerificationOutcome.unverifiable(claim.text, f"{ERROR_EXPLANATION_PREFIX}{e}")

    # -------------------------------------------------------------------------
    # Streaming path
    # -------------------------------------------------------------------------

    async def check_stream(
        self,
        message: str,
        *,
        subject_name: str | None = None,
        caller_context: str | None = None,
    ) -> AsyncIterator[StreamEvent]:
        """
        Verify a whole message as one claim, streaming progress events.

        The model reply is forwarded as chunk events, re-buffered by
        StreamChunkBuffer. Any failure yields one error event and ends
        the stream. Closing this iterator closes the generation stream.

        Yields:
            StreamEvent instances in protocol order.
        """
        deadline = asyncio.get_running_loop().time() + self._stream_timeout
        yield StreamEvent(type=StreamEventType.START, data=START_MESSAGE)

        try:
            subject = _clean(subject_name)
            context = await self._before(deadline, self._resolve_context(subject))
            quotes = await self._before(deadline, self._quotes_for(subject))

            if context is not None:
                yield StreamEvent(
                    type=StreamEventType.SOURCE_FOUND,
                    data=SOURCE_FOUND_MESSAGE.format(title=context.title),
                )
            else:
                yield StreamEvent(type=StreamEventType.SOURCE_MISSING, data=SOURCE_MISSING_MESSAGE)

            prompt = self._prompt_builder.build(message, caller_context, context, quotes)
            yield StreamEvent(type=StreamEventType.PROMPT_READY, data=PROMPT_READY_MESSAGE)

            buffer = StreamChunkBuffer(self._flush_size)
            async with aclosing(self._generator.generate_stream(prompt)) as fragments:
                # The deadline scopes each read only; a yield never sits inside it.
                while True:
                    fragment = await self._before(deadline, anext(fragments, None))
                    if fragment is None:
                        break
                    chunk = buffer.append(fragment)
                    if chunk is not None:
                        yield StreamEvent(type=StreamEventType.CHUNK, data=chunk)

            remainder = buffer.drain()
            if remainder is not None:
                yield StreamEvent(type=StreamEventType.CHUNK, data=remainder)

            outcome = self._parser.parse(message, buffer.text, context)
            yield StreamEvent(type=StreamEventType.FINAL, outcome=outcome)
            yield StreamEvent(type=StreamEventType.COMPLETE, data=COMPLETE_MESSAGE)

        except Exception as e:
            logger.error(f"Streaming verification failed: {e}")
            yield StreamEvent(type=StreamEventType.ERROR, data=ERROR_MESSAGE.format(error=e))

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _before(self, deadline: float, awaitable: Awaitable[T]) -> T:
        """
        Await within the streaming deadline.

        Raises:
            StreamTimeoutError: If the deadline passes first.
        """
        if asyncio.get_running_loop().time() >= deadline:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise self._timeout_error()
        try:
            async with asyncio.timeout_at(deadline):
                return await awaitable
        except TimeoutError as e:
            raise self._timeout_error() from e

    def _timeout_error(self) -> StreamTimeoutError:
        return StreamTimeoutError(f"Verification exceeded {self._stream_timeout:g}s time limit")

    async def _resolve_context(self, subject: str | None) -> ReferenceContext | None:
        if not subject:
            return None
        lookup = await self._resolver.resolve(subject)
        if isinstance(lookup, ContextFound):
            return lookup.context
        logger.debug(f"No reference context for '{subject}': {lookup.reason}")
        return None

    async def _quotes_for(self, subject: str | None) -> list[str]:
        if not subject or self._quotes is None:
            return []
        try:
            return await self._quotes.get_quotes(subject)
        except Exception as e:
            logger.warning(f"Quote lookup failed for '{subject}': {e}")
            return []


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None
