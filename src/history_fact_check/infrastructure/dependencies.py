"""
Dependency Injection Container
==============================

Provides FastAPI dependency functions for injecting ports.
Wires adapters to ports based on configuration.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from history_fact_check.adapters.outbound.cache_memory import InMemoryCacheAdapter
from history_fact_check.adapters.outbound.cache_redis import RedisCacheAdapter
from history_fact_check.adapters.outbound.knowledge_sources import (
    WikidataEntityAdapter,
    WikipediaSummaryAdapter,
    WikiquoteAdapter,
)
from history_fact_check.adapters.outbound.llm_ollama import OllamaGenerationAdapter
from history_fact_check.application.fact_check import FactCheckUseCase
from history_fact_check.domain.services.claim_extractor import PatternClaimExtractor
from history_fact_check.domain.services.context_resolver import ContextResolver
from history_fact_check.domain.services.quote_resolver import QuoteResolver
from history_fact_check.infrastructure.config import Settings, get_settings
from history_fact_check.infrastructure.rate_limit import TokenBucketRateLimiter

if TYPE_CHECKING:
    from fastapi import FastAPI

    from history_fact_check.ports.cache import CacheProvider
    from history_fact_check.ports.knowledge_source import KnowledgeSource

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Singleton holders (initialized on app startup)
# -----------------------------------------------------------------------------

_generation_provider: OllamaGenerationAdapter | None = None
_cache_provider: CacheProvider | None = None
_knowledge_sources: list[KnowledgeSource] = []
_context_resolver: ContextResolver | None = None
_quote_resolver: QuoteResolver | None = None
_fact_check_use_case: FactCheckUseCase | None = None


# -----------------------------------------------------------------------------
# Lifecycle management
# -----------------------------------------------------------------------------


@asynccontextmanager
async def lifespan_manager(app: FastAPI) -> AsyncIterator[dict[str, Any]]:
    """
    Manage application lifecycle: initialize and cleanup adapters.

    Usage in FastAPI:
        app = FastAPI(lifespan=lifespan_manager)
    """
    await _initialize_adapters()
    try:
        yield {}
    finally:
        await _cleanup_adapters()


def _rate_limiter(settings: Settings) -> TokenBucketRateLimiter | None:
    if not settings.rate_limit.enabled:
        return None
    return TokenBucketRateLimiter(
        requests_per_minute=settings.rate_limit.requests_per_minute,
        burst=settings.rate_limit.burst,
    )


async def _build_cache(settings: Settings) -> CacheProvider | None:
    if not settings.cache.enabled:
        logger.info("Cache disabled")
        return None

    if settings.cache.backend == "redis":
        cache = RedisCacheAdapter(settings.cache)
        await cache.connect()
        logger.info(f"Cache connected: {settings.cache.redis_host}:{settings.cache.redis_port}")
        return cache

    logger.info(f"In-memory cache enabled (max {settings.cache.max_entries} entries)")
    return InMemoryCacheAdapter(
        default_ttl_seconds=settings.cache.ttl_seconds,
        max_entries=settings.cache.max_entries,
    )


async def _initialize_adapters() -> None:
    """
    Initialize all adapters based on configuration.

    This is where concrete adapter implementations are wired to ports.
    """
    global _generation_provider, _cache_provider, _knowledge_sources
    global _context_resolver, _quote_resolver, _fact_check_use_case

    settings = get_settings()
    knowledge = settings.knowledge
    logger.info(f"Initializing DI container - Environment: {settings.environment}")

    _generation_provider = OllamaGenerationAdapter(settings.ollama)
    logger.info(f"Generation provider initialized: {settings.ollama.model}")

    _cache_provider = await _build_cache(settings)

    # Each source gets its own bucket.
    summary_sources = [
        WikipediaSummaryAdapter(
            language=lang,
            base_url=knowledge.wikipedia_url_template.format(lang=lang),
            timeout=knowledge.timeout_seconds,
            max_connections=knowledge.max_connections,
            user_agent=knowledge.user_agent,
            rate_limiter=_rate_limiter(settings),
        )
        for lang in knowledge.languages
    ]
    quotation_sources = [
        WikiquoteAdapter(
            language=lang,
            api_url=knowledge.wikiquote_url_template.format(lang=lang),
            timeout=knowledge.timeout_seconds,
            max_connections=knowledge.max_connections,
            user_agent=knowledge.user_agent,
            rate_limiter=_rate_limiter(settings),
        )
        for lang in knowledge.languages
    ]
    entity_source = WikidataEntityAdapter(
        base_url=knowledge.wikidata_url,
        timeout=knowledge.timeout_seconds,
        max_connections=knowledge.max_connections,
        user_agent=knowledge.user_agent,
        rate_limiter=_rate_limiter(settings),
    )

    _knowledge_sources = [*summary_sources, entity_source, *quotation_sources]
    for source in _knowledge_sources:
        await source.connect()

    _context_resolver = ContextResolver(
        summary_sources=summary_sources,
        entity_source=entity_source,
        cache=_cache_provider,
        cache_ttl_seconds=settings.cache.ttl_seconds,
        expected_type_id=knowledge.human_type_id,
        citizenship_property=knowledge.citizenship_property,
        label_languages=(knowledge.primary_language, knowledge.fallback_language),
    )
    _quote_resolver = QuoteResolver(
        quotation_sources,
        cache=_cache_provider,
        max_quotes=knowledge.max_quotes,
        cache_ttl_seconds=settings.cache.ttl_seconds,
    )
    logger.info(f"Knowledge sources ready: languages={knowledge.languages}")

    _fact_check_use_case = FactCheckUseCase(
        extractor=PatternClaimExtractor(
            keywords=settings.factcheck.claim_keywords,
            min_length=settings.factcheck.min_claim_length,
        ),
        resolver=_context_resolver,
        generator=_generation_provider,
        quote_resolver=_quote_resolver if settings.factcheck.fetch_quotes else None,
        stream_flush_size=settings.factcheck.stream_flush_size,
        stream_timeout_seconds=settings.factcheck.stream_timeout_seconds,
    )
    logger.info("FactCheckUseCase initialized - DI container ready")


async def _cleanup_adapters() -> None:
    """
    Cleanup all adapter connections on shutdown.

    Each close is shielded and time-boxed so one slow adapter cannot
    keep the others open.
    """
    global _generation_provider, _cache_provider, _knowledge_sources
    global _context_resolver, _quote_resolver, _fact_check_use_case

    logger.info("Starting adapter cleanup...")

    for source in _knowledge_sources:
        try:
            await asyncio.shield(asyncio.wait_for(source.disconnect(), timeout=5.0))
        except TimeoutError:
            logger.warning(f"Knowledge source disconnect timed out: {source.source_name}")
        except Exception as e:
            logger.warning(f"Knowledge source disconnect failed: {e}")
    _knowledge_sources = []

    if _generation_provider is not None:
        try:
            await asyncio.shield(asyncio.wait_for(_generation_provider.close(), timeout=5.0))
        except TimeoutError:
            logger.warning("Generation provider close timed out")
        except Exception as e:
            logger.warning(f"Generation provider close failed: {e}")
        _generation_provider = None

    if _cache_provider is not None:
        try:
            await asyncio.shield(asyncio.wait_for(_cache_provider.disconnect(), timeout=5.0))
        except TimeoutError:
            logger.warning("Cache provider disconnect timed out")
        except Exception as e:
            logger.warning(f"Cache provider disconnect failed: {e}")
        _cache_provider = None

    _context_resolver = None
    _quote_resolver = None
    _fact_check_use_case = None
    logger.info("Adapter cleanup complete")


# -----------------------------------------------------------------------------
# FastAPI Dependency providers
# -----------------------------------------------------------------------------


async def get_health_checks() -> dict[str, Callable[[], Awaitable[bool]]]:
    """Dependency: Health probes of every initialized adapter, by name."""
    checks: dict[str, Callable[[], Awaitable[bool]]] = {}
    if _generation_provider is not None:
        checks["ollama"] = _generation_provider.health_check
    if _cache_provider is not None:
        checks["cache"] = _cache_provider.health_check
    for source in _knowledge_sources:
        checks[source.source_name] = source.health_check
    return checks


async def get_context_resolver() -> ContextResolver:
    """Dependency: Get context resolver instance."""
    if _context_resolver is None:
        raise RuntimeError("Context resolver not initialized. Check adapter configuration.")
    return _context_resolver


async def get_quote_resolver() -> QuoteResolver:
    """Dependency: Get quote resolver instance."""
    if _quote_resolver is None:
        raise RuntimeError("Quote resolver not initialized. Check adapter configuration.")
    return _quote_resolver


async def get_fact_check_use_case() -> FactCheckUseCase:
    """Dependency: Get the main fact-check use-case instance."""
    if _fact_check_use_case is None:
        raise RuntimeError("FactCheckUseCase not initialized. Check adapter configuration.")
    return _fact_check_use_case
