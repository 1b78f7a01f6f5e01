"""
Pytest Fixtures
===============

Shared fixtures and in-memory port fakes for all test modules.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import pytest

from history_fact_check.adapters.outbound.cache_memory import InMemoryCacheAdapter
from history_fact_check.domain.entities import Claim, ReferenceContext
from history_fact_check.ports.generation import GenerationProvider
from history_fact_check.ports.knowledge_source import (
    EntitySource,
    KnowledgeSourceError,
    QuotationSource,
    SummarySource,
)

# -----------------------------------------------------------------------------
# Port fakes
# -----------------------------------------------------------------------------


class FakeSummarySource(SummarySource):
    """Summary source backed by a dict; values may be exceptions to raise."""

    def __init__(
        self,
        language: str,
        pages: dict[str, ReferenceContext | Exception] | None = None,
        delay: float = 0.0,
    ) -> None:
        self._language = language
        self.pages = pages or {}
        self.delay = delay
        self.calls: list[str] = []

    @property
    def source_name(self) -> str:
        return f"Fake Wikipedia ({self._language})"

    @property
    def language(self) -> str:
        return self._language

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    async def health_check(self) -> bool:
        return True

    async def get_summary(self, title: str) -> ReferenceContext | None:
        self.calls.append(title)
        if self.delay:
            await asyncio.sleep(self.delay)
        page = self.pages.get(title)
        if isinstance(page, Exception):
            raise page
        return page


class FakeEntitySource(EntitySource):
    """Entity source with fixed instance-of, claim and label tables."""

    def __init__(
        self,
        instances: dict[str, set[str]] | None = None,
        claims: dict[tuple[str, str], str] | None = None,
        labels: dict[str, dict[str, str]] | None = None,
    ) -> None:
        self.instances = instances or {}
        self.claims = claims or {}
        self.labels = labels or {}
        self.instance_checks: list[str] = []

    @property
    def source_name(self) -> str:
        return "Fake Wikidata"

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    async def health_check(self) -> bool:
        return True

    async def is_instance_of(self, entity_id: str, type_id: str) -> bool:
        self.instance_checks.append(entity_id)
        return type_id in self.instances.get(entity_id, set())

    async def get_best_claim_value(self, entity_id: str, property_id: str) -> str | None:
        return self.claims.get((entity_id, property_id))

    async def get_label(
        self,
        entity_id: str,
        preferred_language: str,
        fallback_language: str,
    ) -> str | None:
        labels = self.labels.get(entity_id, {})
        return labels.get(preferred_language) or labels.get(fallback_language)


class FakeQuotationSource(QuotationSource):
    """Quotation source returning canned wikitext per title."""

    def __init__(self, language: str, pages: dict[str, str | Exception] | None = None) -> None:
        self._language = language
        self.pages = pages or {}
        self.calls: list[str] = []

    @property
    def source_name(self) -> str:
        return f"Fake Wikiquote ({self._language})"

    @property
    def language(self) -> str:
        return self._language

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    async def health_check(self) -> bool:
        return True

    async def get_page_wikitext(self, title: str) -> str | None:
        self.calls.append(title)
        page = self.pages.get(title)
        if isinstance(page, Exception):
            raise page
        return page


class FakeGenerationProvider(GenerationProvider):
    """Generation backend replaying a fixed reply, optionally as fragments."""

    def __init__(
        self,
        reply: str = "",
        fragments: list[str] | None = None,
        error: Exception | None = None,
        stall_seconds: float = 0.0,
    ) -> None:
        self.reply = reply
        self.stall_seconds = stall_seconds
        self.fragments = fragments if fragments is not None else [reply]
        self.error = error
        self.prompts: list[str] = []
        self.stream_closed = False

    @property
    def model_name(self) -> str:
        return "fake-model"

    async def generate(self, prompt: str, *, model: str | None = None) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply

    async def generate_stream(
        self,
        prompt: str,
        *,
        model: str | None = None,
    ) -> AsyncIterator[str]:
        self.prompts.append(prompt)
        try:
            for index, fragment in enumerate(self.fragments):
                if index and self.stall_seconds:
                    await asyncio.sleep(self.stall_seconds)
                yield fragment
            if self.error is not None:
                raise self.error
        finally:
            self.stream_closed = True

    async def health_check(self) -> bool:
        return True


# -----------------------------------------------------------------------------
# Domain fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def copernicus_message() -> str:
    return "Mikołaj Kopernik urodził się w 1473 roku."


@pytest.fixture
def copernicus_claim(copernicus_message: str) -> Claim:
    return Claim(text=copernicus_message, offset=0)


@pytest.fixture
def copernicus_context() -> ReferenceContext:
    """Polish Wikipedia summary of Copernicus, as the REST API returns it."""
    return ReferenceContext.model_validate(
        {
            "title": "Mikołaj Kopernik",
            "description": "astronom, matematyk, ekonomista",
            "extract": "Mikołaj Kopernik – polski astronom, urodzony 19 lutego 1473 w Toruniu.",
            "wikibase_item": "Q619",
            "content_urls": {
                "desktop": {"page": "https://pl.wikipedia.org/wiki/Miko%C5%82aj_Kopernik"},
                "mobile": {"page": "https://pl.m.wikipedia.org/wiki/Miko%C5%82aj_Kopernik"},
            },
        }
    )


@pytest.fixture
def true_reply() -> str:
    return "VERIFICATION: TRUE\nCONFIDENCE: 0.95\nEXPLANATION: Correct.\nSOURCE: Wikipedia"


# -----------------------------------------------------------------------------
# Port fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def memory_cache() -> InMemoryCacheAdapter:
    return InMemoryCacheAdapter(default_ttl_seconds=60, max_entries=100)


@pytest.fixture
def entity_source() -> FakeEntitySource:
    return FakeEntitySource(
        instances={"Q619": {"Q5"}},
        claims={("Q619", "P27"): "Q1649871"},
        labels={"Q1649871": {"pl": "Korona Królestwa Polskiego", "en": "Crown of the Kingdom of Poland"}},
    )


@pytest.fixture
def pl_summaries(copernicus_context: ReferenceContext) -> FakeSummarySource:
    return FakeSummarySource("pl", {"Mikołaj Kopernik": copernicus_context})


@pytest.fixture
def en_summaries() -> FakeSummarySource:
    return FakeSummarySource("en")


@pytest.fixture
def failing_summaries() -> FakeSummarySource:
    """Summary source whose every lookup fails."""

    class _Failing(FakeSummarySource):
        async def get_summary(self, title: str) -> ReferenceContext | None:
            self.calls.append(title)
            raise KnowledgeSourceError("connection refused")

    return _Failing("pl")
