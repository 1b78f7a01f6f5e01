"""
Quote Resolver
==============

Collects short quotations attributed to a subject from quotation
pages. Wikitext bullet lines are cleaned of markup and filtered of
metadata lines.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from history_fact_check.ports.knowledge_source import KnowledgeSourceError

if TYPE_CHECKING:
    from history_fact_check.ports.cache import CacheProvider
    from history_fact_check.ports.knowledge_source import QuotationSource

logger = logging.getLogger(__name__)

DEFAULT_MAX_QUOTES = 5

BULLET_PREFIXES = ("*", "•", "-")

# Lines starting with these labels describe the page rather than quote anyone.
METADATA_LABELS: tuple[str, ...] = (
    "opis:",
    "źródło:",
    "zrodlo:",
    "zobacz też:",
    "zobacz tez:",
    "description:",
    "source:",
    "see also:",
)

_BULLET = re.compile(r"^[*•#:\-]+\s*")
_REF = re.compile(r"<ref[^>/]*/>|<ref[^>]*>.*?</ref>", re.IGNORECASE | re.DOTALL)
_HTML_TAG = re.compile(r"<[^>]+>")
_TEMPLATE = re.compile(r"\{\{[^{}]*\}\}")
_PIPED_LINK = re.compile(r"\[\[[^\[\]|]*\|([^\[\]]*)\]\]")
_LINK = re.compile(r"\[\[([^\[\]]*)\]\]")
_EXTERNAL_LINK = re.compile(r"\[(?:https?:)?//\S+\s+([^\]]*)\]")
_BARE_EXTERNAL_LINK = re.compile(r"\[(?:https?:)?//[^\]\s]+\]")
_EMPHASIS = re.compile(r"'{2,}")
_WHITESPACE = re.compile(r"\s+")


def clean_wikitext_line(line: str) -> str:
    """Strip the bullet and wiki markup from a single line."""
    text = _BULLET.sub("", line.strip())
    text = _REF.sub("", text)
    # Nested templates collapse from the inside out.
    previous = None
    while previous != text:
        previous = text
        text = _TEMPLATE.sub("", text)
    text = _PIPED_LINK.sub(r"\1", text)
    text = _LINK.sub(r"\1", text)
    text = _EXTERNAL_LINK.sub(r"\1", text)
    text = _BARE_EXTERNAL_LINK.sub("", text)
    text = _EMPHASIS.sub("", text)
    text = _HTML_TAG.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def extract_quotes(wikitext: str, max_quotes: int = DEFAULT_MAX_QUOTES) -> list[str]:
    """
    Pick candidate quotes out of a page's wikitext.

    Args:
        wikitext: Raw page wikitext.
        max_quotes: Maximum number of quotes to return.

    Returns:
        Cleaned quotes in page order, without duplicates.
    """
    quotes: list[str] = []
    for line in wikitext.splitlines():
        stripped = line.strip()
        if not stripped.startswith(BULLET_PREFIXES):
            continue

        text = clean_wikitext_line(stripped)
        if not text or text.lower().startswith(METADATA_LABELS):
            continue
        if text in quotes:
            continue

        quotes.append(text)
        if len(quotes) >= max_quotes:
            break
    return quotes


class QuoteResolver:
    """
    Fetches quotes for a subject, trying language editions in order.

    The requested language (or the first configured one) goes first; the
    next edition is tried whenever the previous one yields no quotes.
    Quotes are optional prompt material, so source failures are logged
    and produce an empty list.
    """

    def __init__(
        self,
        sources: list[QuotationSource],
        cache: CacheProvider | None = None,
        *,
        max_quotes: int = DEFAULT_MAX_QUOTES,
        cache_ttl_seconds: int | None = None,
    ) -> None:
        if not sources:
            raise ValueError("At least one quotation source is required")
        self._sources = sources
        self._cache = cache
        self._max_quotes = max_quotes
        self._cache_ttl = cache_ttl_seconds

    def _ordered_sources(self, language: str | None) -> list[QuotationSource]:
        if not language:
            return list(self._sources)
        requested = [s for s in self._sources if s.language == language.lower()]
        others = [s for s in self._sources if s.language != language.lower()]
        return requested + others

    async def get_quotes(self, name: str, language: str | None = None) -> list[str]:
        """
        Get quotes attributed to a subject.

        Args:
            name: Subject name (page title).
            language: Preferred language edition.

        Returns:
            Up to ``max_quotes`` quotes; empty when none are found.
        """
        subject = _WHITESPACE.sub(" ", name).strip()
        if not subject:
            return []

        sources = self._ordered_sources(language)
        cache_key = f"quotes:{'-'.join(s.language for s in sources)}:{subject}"
        if self._cache is not None:
            cached = await self._cache.get(cache_key)
            if isinstance(cached, list):
                return [str(q) for q in cached]

        failed = False
        quotes: list[str] = []
        for source in sources:
            try:
                wikitext = await source.get_page_wikitext(subject)
            except KnowledgeSourceError as e:
                logger.warning(f"{source.source_name} quote lookup failed for '{subject}': {e}")
                failed = True
                continue

            if not wikitext:
                continue
            quotes = extract_quotes(wikitext, self._max_quotes)
            if quotes:
                break

        if self._cache is not None and (quotes or not failed):
            await self._cache.put(cache_key, quotes, self._cache_ttl)
        return quotes
