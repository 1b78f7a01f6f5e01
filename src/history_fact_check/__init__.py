"""
History Fact-Check Service
==========================

Verifies historical claims in chat messages against Wikipedia, Wikidata
and Wikiquote, using a local Ollama model as the judge.

Layers:
- domain: Entities (Claim, ReferenceContext, VerificationOutcome) and pure services
- ports: Abstract interfaces (ClaimExtractor, KnowledgeSource, GenerationProvider, CacheProvider)
- application: Use-case orchestration (FactCheckUseCase)
- adapters: Concrete implementations for external services
- infrastructure: Config, logging, rate limiting, DI wiring, entrypoint
- api: FastAPI routes, SSE streaming and request/response schemas
"""

__version__ = "0.1.0"
