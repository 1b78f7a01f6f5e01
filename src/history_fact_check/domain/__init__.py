"""
Domain Layer
============

Core business entities and value objects.
These are persistence-agnostic and contain no infrastructure dependencies.
"""

from history_fact_check.domain.entities import (
    Claim,
    ContextFound,
    ContextLookup,
    ContextNotFound,
    ReferenceContext,
    StreamEvent,
    StreamEventType,
    Thumbnail,
    VerificationLabel,
    VerificationOutcome,
)

__all__ = [
    "Claim",
    "ContextFound",
    "ContextLookup",
    "ContextNotFound",
    "ReferenceContext",
    "StreamEvent",
    "StreamEventType",
    "Thumbnail",
    "VerificationLabel",
    "VerificationOutcome",
]
