"""
HTTP Knowledge Sources
======================

Direct HTTP adapters for the Wikimedia APIs consulted during
context resolution.
"""

from history_fact_check.adapters.outbound.knowledge_sources.base import (
    HTTPKnowledgeSource,
)
from history_fact_check.adapters.outbound.knowledge_sources.wikidata import (
    WikidataEntityAdapter,
)
from history_fact_check.adapters.outbound.knowledge_sources.wikipedia_rest import (
    WikipediaSummaryAdapter,
)
from history_fact_check.adapters.outbound.knowledge_sources.wikiquote import WikiquoteAdapter

__all__ = [
    "HTTPKnowledgeSource",
    "WikidataEntityAdapter",
    "WikipediaSummaryAdapter",
    "WikiquoteAdapter",
]
