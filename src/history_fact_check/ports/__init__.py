"""
Ports Layer (Hexagonal Architecture)
====================================

Abstract interfaces defining the contracts between the fact-check core
and external systems.

Secondary Ports (driven):
- ClaimExtractor: Message → Claims
- SummarySource / EntitySource / QuotationSource: knowledge lookups
- GenerationProvider: Prompt → model reply (blocking or streamed)
- CacheProvider: Read-through cache for knowledge lookups
"""

from history_fact_check.ports.cache import CacheProvider
from history_fact_check.ports.claim_extractor import ClaimExtractor
from history_fact_check.ports.generation import GenerationError, GenerationProvider
from history_fact_check.ports.knowledge_source import (
    EntitySource,
    KnowledgeSource,
    KnowledgeSourceError,
    KnowledgeSourceRateLimitedError,
    QuotationSource,
    SummarySource,
)

__all__ = [
    "CacheProvider",
    "ClaimExtractor",
    "EntitySource",
    "GenerationError",
    "GenerationProvider",
    "KnowledgeSource",
    "KnowledgeSourceError",
    "KnowledgeSourceRateLimitedError",
    "QuotationSource",
    "SummarySource",
]
