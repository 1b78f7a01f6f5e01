"""
Tests for the Reference Context Resolver
========================================
"""

from __future__ import annotations

import pytest
from conftest import FakeEntitySource, FakeSummarySource

from history_fact_check.adapters.outbound.cache_memory import InMemoryCacheAdapter
from history_fact_check.domain.entities import (
    ContextFound,
    ContextNotFound,
    ReferenceContext,
)
from history_fact_check.domain.services.context_resolver import (
    REASON_NO_ENTITY,
    REASON_WRONG_TYPE,
    UNKNOWN_NATIONALITY,
    ContextResolver,
)
from history_fact_check.ports.knowledge_source import (
    KnowledgeSourceError,
    KnowledgeSourceRateLimitedError,
)


class TestResolve:
    """Tests for subject → context resolution."""

    @pytest.mark.asyncio
    async def test_primary_edition_hit(
        self,
        pl_summaries: FakeSummarySource,
        en_summaries: FakeSummarySource,
        entity_source: FakeEntitySource,
    ) -> None:
        resolver = ContextResolver([pl_summaries, en_summaries], entity_source)

        lookup = await resolver.resolve("Mikołaj Kopernik")

        assert isinstance(lookup, ContextFound)
        assert lookup.language == "pl"
        assert lookup.context.title == "Mikołaj Kopernik"
        assert en_summaries.calls == []

    @pytest.mark.asyncio
    async def test_fallback_when_primary_fails_identity_check(self) -> None:
        """A non-human primary hit does not stop the fallback edition."""
        pl = FakeSummarySource(
            "pl",
            {"Mercury": ReferenceContext(title="Merkury", entity_id="Q308")},
        )
        en = FakeSummarySource(
            "en",
            {"Mercury": ReferenceContext(title="Freddie Mercury", entity_id="Q15869")},
        )
        entities = FakeEntitySource(instances={"Q308": {"Q6999"}, "Q15869": {"Q5"}})
        resolver = ContextResolver([pl, en], entities)

        lookup = await resolver.resolve("Mercury")

        assert isinstance(lookup, ContextFound)
        assert lookup.language == "en"
        assert lookup.context.title == "Freddie Mercury"
        assert entities.instance_checks == ["Q308", "Q15869"]

    @pytest.mark.asyncio
    async def test_not_a_person(self) -> None:
        pl = FakeSummarySource("pl", {"Toruń": ReferenceContext(title="Toruń", entity_id="Q47554")})
        resolver = ContextResolver([pl], FakeEntitySource())

        lookup = await resolver.resolve("Toruń")

        assert lookup == ContextNotFound(subject="Toruń", reason=REASON_WRONG_TYPE)

    @pytest.mark.asyncio
    async def test_missing_entity_id(self) -> None:
        pl = FakeSummarySource("pl", {"Anonim": ReferenceContext(title="Anonim")})
        resolver = ContextResolver([pl], FakeEntitySource())

        lookup = await resolver.resolve("Anonim")

        assert isinstance(lookup, ContextNotFound)
        assert lookup.reason == REASON_NO_ENTITY

    @pytest.mark.asyncio
    async def test_not_found_anywhere(
        self,
        en_summaries: FakeSummarySource,
        entity_source: FakeEntitySource,
    ) -> None:
        resolver = ContextResolver([FakeSummarySource("pl"), en_summaries], entity_source)

        lookup = await resolver.resolve("Nobody Special")

        assert isinstance(lookup, ContextNotFound)
        assert lookup.reason == "not found"

    @pytest.mark.asyncio
    async def test_blank_subject(self, pl_summaries: FakeSummarySource) -> None:
        resolver = ContextResolver([pl_summaries], FakeEntitySource())

        lookup = await resolver.resolve("   ")

        assert isinstance(lookup, ContextNotFound)
        assert pl_summaries.calls == []

    @pytest.mark.asyncio
    async def test_whitespace_is_normalized(
        self,
        pl_summaries: FakeSummarySource,
        entity_source: FakeEntitySource,
    ) -> None:
        resolver = ContextResolver([pl_summaries], entity_source)

        lookup = await resolver.resolve("  Mikołaj   Kopernik ")

        assert isinstance(lookup, ContextFound)
        assert pl_summaries.calls == ["Mikołaj Kopernik"]

    @pytest.mark.asyncio
    async def test_primary_error_then_fallback_not_found(
        self,
        failing_summaries: FakeSummarySource,
        en_summaries: FakeSummarySource,
        entity_source: FakeEntitySource,
    ) -> None:
        """The fallback edition's clean answer wins over an earlier failure."""
        resolver = ContextResolver([failing_summaries, en_summaries], entity_source)

        lookup = await resolver.resolve("Mikołaj Kopernik")

        assert isinstance(lookup, ContextNotFound)

    @pytest.mark.asyncio
    async def test_error_on_last_edition_is_raised(
        self,
        entity_source: FakeEntitySource,
    ) -> None:
        en = FakeSummarySource("en", {"Kopernik": KnowledgeSourceRateLimitedError("Wikipedia (en)")})
        resolver = ContextResolver([FakeSummarySource("pl"), en], entity_source)

        with pytest.raises(KnowledgeSourceRateLimitedError):
            await resolver.resolve("Kopernik")

    @pytest.mark.asyncio
    async def test_identity_check_error_is_a_source_error(
        self,
        pl_summaries: FakeSummarySource,
    ) -> None:
        class _BrokenEntities(FakeEntitySource):
            async def is_instance_of(self, entity_id: str, type_id: str) -> bool:
                raise KnowledgeSourceError("Wikidata down")

        resolver = ContextResolver([pl_summaries], _BrokenEntities())

        with pytest.raises(KnowledgeSourceError):
            await resolver.resolve("Mikołaj Kopernik")

    def test_requires_a_source(self, entity_source: FakeEntitySource) -> None:
        with pytest.raises(ValueError):
            ContextResolver([], entity_source)


class TestResolveCaching:
    """Tests for read-through caching of lookups."""

    @pytest.mark.asyncio
    async def test_second_lookup_hits_cache(
        self,
        pl_summaries: FakeSummarySource,
        entity_source: FakeEntitySource,
        memory_cache: InMemoryCacheAdapter,
    ) -> None:
        resolver = ContextResolver([pl_summaries], entity_source, memory_cache)

        first = await resolver.resolve("Mikołaj Kopernik")
        second = await resolver.resolve("Mikołaj Kopernik")

        assert first == second
        assert pl_summaries.calls == ["Mikołaj Kopernik"]

    @pytest.mark.asyncio
    async def test_not_found_is_not_cached(
        self,
        entity_source: FakeEntitySource,
        memory_cache: InMemoryCacheAdapter,
    ) -> None:
        pl = FakeSummarySource("pl")
        resolver = ContextResolver([pl], entity_source, memory_cache)

        await resolver.resolve("Nikt")
        await resolver.resolve("Nikt")

        assert pl.calls == ["Nikt", "Nikt"]
        assert memory_cache.size() == 0

    @pytest.mark.asyncio
    async def test_malformed_entry_is_discarded(
        self,
        pl_summaries: FakeSummarySource,
        entity_source: FakeEntitySource,
        memory_cache: InMemoryCacheAdapter,
    ) -> None:
        resolver = ContextResolver([pl_summaries], entity_source, memory_cache)
        await memory_cache.put("context:pl:Mikołaj Kopernik", {"unexpected": True})

        lookup = await resolver.resolve("Mikołaj Kopernik")

        assert isinstance(lookup, ContextFound)
        assert pl_summaries.calls == ["Mikołaj Kopernik"]


class TestResolveNationality:
    """Tests for citizenship lookups."""

    @pytest.mark.asyncio
    async def test_preferred_language_label(
        self,
        pl_summaries: FakeSummarySource,
        entity_source: FakeEntitySource,
    ) -> None:
        resolver = ContextResolver([pl_summaries], entity_source)

        assert await resolver.resolve_nationality("Q619") == "Korona Królestwa Polskiego"

    @pytest.mark.asyncio
    async def test_fallback_language_label(self, pl_summaries: FakeSummarySource) -> None:
        entities = FakeEntitySource(
            claims={("Q1", "P27"): "Q145"},
            labels={"Q145": {"en": "United Kingdom"}},
        )
        resolver = ContextResolver([pl_summaries], entities)

        assert await resolver.resolve_nationality("Q1") == "United Kingdom"

    @pytest.mark.asyncio
    async def test_unknown_without_claim(self, pl_summaries: FakeSummarySource) -> None:
        resolver = ContextResolver([pl_summaries], FakeEntitySource())

        assert await resolver.resolve_nationality("Q1") == UNKNOWN_NATIONALITY

    @pytest.mark.asyncio
    async def test_unknown_without_label(self, pl_summaries: FakeSummarySource) -> None:
        entities = FakeEntitySource(claims={("Q1", "P27"): "Q145"})
        resolver = ContextResolver([pl_summaries], entities)

        assert await resolver.resolve_nationality("Q1") == UNKNOWN_NATIONALITY

    @pytest.mark.asyncio
    async def test_label_is_cached(
        self,
        pl_summaries: FakeSummarySource,
        entity_source: FakeEntitySource,
        memory_cache: InMemoryCacheAdapter,
    ) -> None:
        resolver = ContextResolver([pl_summaries], entity_source, memory_cache)
        await resolver.resolve_nationality("Q619")
        entity_source.labels.clear()

        assert await resolver.resolve_nationality("Q619") == "Korona Królestwa Polskiego"
