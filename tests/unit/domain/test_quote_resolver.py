"""
Tests for Quote Extraction and Resolution
=========================================
"""

from __future__ import annotations

import pytest
from conftest import FakeQuotationSource

from history_fact_check.adapters.outbound.cache_memory import InMemoryCacheAdapter
from history_fact_check.domain.services.quote_resolver import (
    QuoteResolver,
    clean_wikitext_line,
    extract_quotes,
)
from history_fact_check.ports.knowledge_source import KnowledgeSourceError

JAN_PAWEL_WIKITEXT = """
'''Jan Paweł II''' – papież.
== Cytaty ==
* Pierwszy cytat.
* Nie lękajcie się!<ref>Homilia, 1978</ref>
* [[Miłość]] mi wszystko wyjaśniła.
* Pierwszy cytat.
"""


class TestCleanWikitextLine:
    """Tests for markup removal."""

    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ("* Prosty cytat.", "Prosty cytat."),
            ("** Zagnieżdżony cytat.", "Zagnieżdżony cytat."),
            ("* [[Toruń|Toruniu]] jest piękny.", "Toruniu jest piękny."),
            ("* [[Toruń]] jest piękny.", "Toruń jest piękny."),
            ("* '''Pogrubiony''' i ''kursywa''.", "Pogrubiony i kursywa."),
            ("* Tekst<ref name=\"a\">przypis</ref> dalej.", "Tekst dalej."),
            ("* Tekst<ref name=\"b\" /> dalej.", "Tekst dalej."),
            ("* {{cytat|{{lang|la|x}}}}Sam tekst.", "Sam tekst."),
            ("* Zobacz [https://example.org stronę] teraz.", "Zobacz stronę teraz."),
            ("* Tekst <small>mały</small>.", "Tekst mały."),
        ],
    )
    def test_markup(self, line: str, expected: str) -> None:
        assert clean_wikitext_line(line) == expected


class TestExtractQuotes:
    """Tests for picking quotes out of page wikitext."""

    def test_bullets_only_deduplicated(self) -> None:
        quotes = extract_quotes(JAN_PAWEL_WIKITEXT)

        assert quotes == [
            "Pierwszy cytat.",
            "Nie lękajcie się!",
            "Miłość mi wszystko wyjaśniła.",
        ]

    def test_skips_metadata_lines(self) -> None:
        wikitext = (
            "* Pierwszy cytat.\n"
            "* Opis: wyjaśnienie.\n"
            "* Źródło: książka.\n"
            "* Zobacz też: inne.\n"
        )

        assert extract_quotes(wikitext) == ["Pierwszy cytat."]

    def test_max_quotes(self) -> None:
        wikitext = "\n".join(f"* Cytat {i}." for i in range(10))

        assert extract_quotes(wikitext, max_quotes=5) == [f"Cytat {i}." for i in range(5)]

    def test_no_bullets(self) -> None:
        assert extract_quotes("Brak cytatów.") == []


class TestQuoteResolver:
    """Tests for language fallback and caching."""

    @pytest.mark.asyncio
    async def test_primary_edition(self) -> None:
        pl = FakeQuotationSource("pl", {"Jan Paweł II": JAN_PAWEL_WIKITEXT})
        en = FakeQuotationSource("en")
        resolver = QuoteResolver([pl, en])

        quotes = await resolver.get_quotes("Jan Paweł II")

        assert len(quotes) == 3
        assert quotes[0] == "Pierwszy cytat."
        assert en.calls == []

    @pytest.mark.asyncio
    async def test_fallback_when_primary_missing(self) -> None:
        pl = FakeQuotationSource("pl")
        en = FakeQuotationSource("en", {"Copernicus": "* Quote."})
        resolver = QuoteResolver([pl, en])

        assert await resolver.get_quotes("Copernicus") == ["Quote."]

    @pytest.mark.asyncio
    async def test_no_quotes_anywhere(self) -> None:
        pl = FakeQuotationSource("pl", {"Unknown": "Brak cytatów."})
        en = FakeQuotationSource("en")
        resolver = QuoteResolver([pl, en])

        assert await resolver.get_quotes("Unknown") == []
        assert en.calls == ["Unknown"]

    @pytest.mark.asyncio
    async def test_requested_language_goes_first(self) -> None:
        pl = FakeQuotationSource("pl", {"Copernicus": "* Cytat."})
        en = FakeQuotationSource("en", {"Copernicus": "* Quote."})
        resolver = QuoteResolver([pl, en])

        assert await resolver.get_quotes("Copernicus", "en") == ["Quote."]
        assert pl.calls == []

    @pytest.mark.asyncio
    async def test_source_failure_falls_through(self) -> None:
        pl = FakeQuotationSource("pl", {"Copernicus": KnowledgeSourceError("timeout")})
        en = FakeQuotationSource("en", {"Copernicus": "* Quote."})
        resolver = QuoteResolver([pl, en])

        assert await resolver.get_quotes("Copernicus") == ["Quote."]

    @pytest.mark.asyncio
    async def test_quotes_are_cached(self, memory_cache: InMemoryCacheAdapter) -> None:
        pl = FakeQuotationSource("pl", {"Copernicus": "* Cytat."})
        resolver = QuoteResolver([pl], memory_cache)

        await resolver.get_quotes("Copernicus")
        await resolver.get_quotes("Copernicus")

        assert pl.calls == ["Copernicus"]

    @pytest.mark.asyncio
    async def test_failed_empty_lookup_is_not_cached(
        self, memory_cache: InMemoryCacheAdapter
    ) -> None:
        pl = FakeQuotationSource("pl", {"Copernicus": KnowledgeSourceError("timeout")})
        resolver = QuoteResolver([pl], memory_cache)

        assert await resolver.get_quotes("Copernicus") == []
        assert memory_cache.size() == 0

    @pytest.mark.asyncio
    async def test_blank_name(self) -> None:
        pl = FakeQuotationSource("pl")

        assert await QuoteResolver([pl]).get_quotes("  ") == []
        assert pl.calls == []
