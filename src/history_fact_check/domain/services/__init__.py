"""
Domain Services
===============

Business logic of the fact-check pipeline.
"""

from history_fact_check.domain.services.claim_extractor import (
    PatternClaimExtractor,
    guess_subject,
)
from history_fact_check.domain.services.context_resolver import ContextResolver
from history_fact_check.domain.services.prompt_builder import FactCheckPromptBuilder
from history_fact_check.domain.services.quote_resolver import QuoteResolver, extract_quotes
from history_fact_check.domain.services.response_parser import VerificationResponseParser
from history_fact_check.domain.services.stream_buffer import StreamChunkBuffer

__all__ = [
    "ContextResolver",
    "FactCheckPromptBuilder",
    "PatternClaimExtractor",
    "QuoteResolver",
    "StreamChunkBuffer",
    "VerificationResponseParser",
    "extract_quotes",
    "guess_subject",
]
