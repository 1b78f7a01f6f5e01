"""Unit tests for the Wikiquote Action API adapter."""

from __future__ import annotations

import httpx
import pytest

from history_fact_check.adapters.outbound.knowledge_sources.wikiquote import WikiquoteAdapter
from history_fact_check.ports.knowledge_source import (
    KnowledgeSourceError,
    KnowledgeSourceRateLimitedError,
)


async def connected(payload: dict, requests: list[httpx.Request] | None = None) -> WikiquoteAdapter:
    def respond(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return httpx.Response(200, json=payload)

    adapter = WikiquoteAdapter(language="pl", transport=httpx.MockTransport(respond))
    await adapter.connect()
    return adapter


class TestWikiquoteAdapter:
    """Test WikiquoteAdapter."""

    def test_initialization(self) -> None:
        adapter = WikiquoteAdapter(language="pl")

        assert adapter.language == "pl"
        assert adapter.source_name == "Wikiquote (pl)"
        assert adapter.base_url == "https://pl.wikiquote.org/w"

    @pytest.mark.asyncio
    async def test_get_page_wikitext(self) -> None:
        requests: list[httpx.Request] = []
        adapter = await connected(
            {"parse": {"title": "Jan Paweł II", "wikitext": "* Nie lękajcie się!"}},
            requests,
        )

        wikitext = await adapter.get_page_wikitext("Jan Paweł II")

        assert wikitext == "* Nie lękajcie się!"
        request = requests[0]
        assert request.url.path == "/w/api.php"
        assert request.url.params["action"] == "parse"
        assert request.url.params["prop"] == "wikitext"
        assert request.url.params["page"] == "Jan Paweł II"
        assert request.url.params["redirects"] == "1"

    @pytest.mark.asyncio
    async def test_legacy_format(self) -> None:
        adapter = await connected({"parse": {"wikitext": {"*": "* Cytat."}}})

        assert await adapter.get_page_wikitext("X") == "* Cytat."

    @pytest.mark.asyncio
    async def test_missing_title(self) -> None:
        adapter = await connected(
            {"error": {"code": "missingtitle", "info": "The page you specified doesn't exist."}}
        )

        assert await adapter.get_page_wikitext("Nobody") is None

    @pytest.mark.asyncio
    async def test_throttled(self) -> None:
        adapter = await connected({"error": {"code": "ratelimited", "info": "slow down"}})

        with pytest.raises(KnowledgeSourceRateLimitedError):
            await adapter.get_page_wikitext("X")

    @pytest.mark.asyncio
    async def test_other_api_error(self) -> None:
        adapter = await connected({"error": {"code": "internal_api_error", "info": "boom"}})

        with pytest.raises(KnowledgeSourceError, match="internal_api_error"):
            await adapter.get_page_wikitext("X")

    @pytest.mark.asyncio
    async def test_blank_title(self) -> None:
        requests: list[httpx.Request] = []
        adapter = await connected({}, requests)

        assert await adapter.get_page_wikitext("  ") is None
        assert requests == []

    @pytest.mark.asyncio
    async def test_empty_wikitext(self) -> None:
        adapter = await connected({"parse": {"wikitext": "   "}})

        assert await adapter.get_page_wikitext("X") is None
