"""
Reference Context Resolver
==========================

Finds the encyclopedia summary to ground a claim in.

Lookup order:
1. Read-through cache, keyed by subject and language order
2. Primary language edition, then the fallback edition
3. Identity check of every hit against the structured-entity source

A result whose entity is missing or not of the expected type does not
stop the search; the next edition may link a different entity for an
ambiguous name.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from pydantic import ValidationError

from history_fact_check.domain.entities import (
    ContextFound,
    ContextLookup,
    ContextNotFound,
    ReferenceContext,
)
from history_fact_check.ports.knowledge_source import KnowledgeSourceError

if TYPE_CHECKING:
    from history_fact_check.ports.cache import CacheProvider
    from history_fact_check.ports.knowledge_source import EntitySource, SummarySource

logger = logging.getLogger(__name__)

HUMAN_TYPE_ID = "Q5"
CITIZENSHIP_PROPERTY = "P27"
UNKNOWN_NATIONALITY = "Unknown"

REASON_NOT_FOUND = "not found"
REASON_NO_ENTITY = "Unknown"
REASON_WRONG_TYPE = "Not a person"

_WHITESPACE = re.compile(r"\s+")


class ContextResolver:
    """
    Resolves a subject name to a validated ReferenceContext.

    Not-found results are returned as ContextNotFound. Transport errors
    (including rate limiting) raise only when the last edition tried
    failed that way; otherwise the fallback edition's answer wins.
    """

    def __init__(
        self,
        summary_sources: list[SummarySource],
        entity_source: EntitySource,
        cache: CacheProvider | None = None,
        *,
        cache_ttl_seconds: int | None = None,
        expected_type_id: str = HUMAN_TYPE_ID,
        citizenship_property: str = CITIZENSHIP_PROPERTY,
        label_languages: tuple[str, str] = ("pl", "en"),
    ) -> None:
        """
        Initialize the resolver.

        Args:
            summary_sources: Summary sources in lookup order (primary first).
            entity_source: Structured-entity source for identity checks.
            cache: Optional read-through cache.
            cache_ttl_seconds: TTL for cached lookups (None = cache default).
            expected_type_id: Entity type a subject must be an instance of.
            citizenship_property: Property holding the subject's citizenship.
            label_languages: Preferred and fallback label languages.
        """
        if not summary_sources:
            raise ValueError("At least one summary source is required")
        self._sources = summary_sources
        self._entities = entity_source
        self._cache = cache
        self._cache_ttl = cache_ttl_seconds
        self._expected_type = expected_type_id
        self._citizenship_property = citizenship_property
        self._label_languages = label_languages

    @property
    def languages(self) -> list[str]:
        return [source.language for source in self._sources]

    async def resolve(self, subject_name: str) -> ContextLookup:
        """
        Resolve a subject to its reference context.

        Args:
            subject_name: Name of the subject (e.g. "Mikołaj Kopernik").

        Returns:
            ContextFound with the validated summary, or ContextNotFound.

        Raises:
            KnowledgeSourceError: If the last edition tried failed with a
                transport error (KnowledgeSourceRateLimitedError when throttled).
        """
        subject = _WHITESPACE.sub(" ", subject_name).strip()
        if not subject:
            return ContextNotFound(subject=subject_name, reason=REASON_NOT_FOUND)

        cache_key = f"context:{'-'.join(self.languages)}:{subject}"
        cached = await self._cache_get(cache_key)
        if cached is not None:
            return cached

        reason = REASON_NOT_FOUND
        last_error: KnowledgeSourceError | None = None

        for source in self._sources:
            last_error = None
            try:
                context = await source.get_summary(subject)
                if context is None:
                    reason = REASON_NOT_FOUND
                    logger.debug(f"No {source.language} summary for '{subject}'")
                    continue

                rejection = await self._check_identity(context)
            except KnowledgeSourceError as e:
                logger.warning(f"{source.source_name} lookup failed for '{subject}': {e}")
                last_error = e
                continue

            if rejection is not None:
                reason = rejection
                logger.info(
                    f"Rejected {source.language} result '{context.title}' "
                    f"for '{subject}': {rejection}"
                )
                continue

            found = ContextFound(context=context, language=source.language)
            await self._cache_put(cache_key, found)
            return found

        if last_error is not None:
            raise last_error
        return ContextNotFound(subject=subject, reason=reason)

    async def resolve_nationality(self, entity_id: str) -> str:
        """
        Resolve the citizenship label of an entity.

        Args:
            entity_id: Structured-entity identifier.

        Returns:
            The label of the best-ranked citizenship claim, or "Unknown".

        Raises:
            KnowledgeSourceError: If the entity source cannot be read.
        """
        cache_key = f"nationality:{'-'.join(self._label_languages)}:{entity_id}"
        if self._cache is not None:
            cached = await self._cache.get(cache_key)
            if isinstance(cached, str):
                return cached

        country_id = await self._entities.get_best_claim_value(
            entity_id, self._citizenship_property
        )
        if not country_id:
            return UNKNOWN_NATIONALITY

        preferred, fallback = self._label_languages
        label = await self._entities.get_label(country_id, preferred, fallback)
        if not label:
            return UNKNOWN_NATIONALITY

        if self._cache is not None:
            await self._cache.put(cache_key, label, self._cache_ttl)
        return label

    async def _check_identity(self, context: ReferenceContext) -> str | None:
        """Return a rejection reason, or None when the entity is acceptable."""
        if not context.entity_id:
            return REASON_NO_ENTITY
        if not await self._entities.is_instance_of(context.entity_id, self._expected_type):
            return REASON_WRONG_TYPE
        return None

    async def _cache_get(self, key: str) -> ContextFound | None:
        if self._cache is None:
            return None
        data = await self._cache.get(key)
        if not isinstance(data, dict):
            return None
        try:
            return ContextFound(
                context=ReferenceContext.model_validate(data["context"]),
                language=str(data["language"]),
            )
        except (KeyError, ValidationError) as e:
            logger.warning(f"Discarding malformed cache entry {key}: {e}")
            await self._cache.invalidate(key)
            return None

    async def _cache_put(self, key: str, found: ContextFound) -> None:
        if self._cache is None:
            return
        payload = {
            "context": found.context.model_dump(mode="json"),
            "language": found.language,
        }
        await self._cache.put(key, payload, self._cache_ttl)
