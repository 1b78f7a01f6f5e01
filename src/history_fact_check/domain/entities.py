"""
Domain Entities
===============

Core business objects of the fact-check pipeline: claims, reference
context about a subject, verification outcomes and streaming events.
These are immutable value objects with no infrastructure dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pydantic import AliasChoices, AliasPath, BaseModel, Field


class Claim(BaseModel):
    """
    A candidate factual statement extracted from a user message.

    The offset points at the first character of the trimmed claim text
    inside the original message.
    """

    text: str = Field(..., description="Trimmed claim text")
    offset: int = Field(default=0, ge=0, description="Character offset in the message")

    model_config = {"frozen": True}

    @property
    def source_span(self) -> tuple[int, int]:
        """Character span (start, end) of the claim in the original message."""
        return (self.offset, self.offset + len(self.text))


class Thumbnail(BaseModel):
    """Image reference attached to an encyclopedia summary."""

    source: str
    width: int | None = None
    height: int | None = None

    model_config = {"frozen": True}


class ReferenceContext(BaseModel):
    """
    Structured summary of a subject from the encyclopedia source.

    Field names follow the REST summary payload so that a raw response
    validates directly; cached copies use the Python field names.
    """

    title: str
    description: str | None = None
    extract: str | None = None
    entity_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("entity_id", "wikibase_item", "entityId"),
        description="Structured-entity identity key (e.g. Wikidata Q-id)",
    )
    thumbnail: Thumbnail | None = None
    url: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "url",
            AliasPath("content_urls", "desktop", "page"),
            AliasPath("contentUrls", "desktop", "page"),
        ),
        description="Canonical desktop page URL",
    )
    mobile_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "mobile_url",
            AliasPath("content_urls", "mobile", "page"),
            AliasPath("contentUrls", "mobile", "page"),
        ),
    )

    model_config = {"frozen": True, "populate_by_name": True}


class VerificationLabel(StrEnum):
    """Verdict assigned to a claim."""

    VERIFIED = "VERIFIED"
    FALSE = "FALSE"
    PARTIAL = "PARTIAL"
    UNVERIFIABLE = "UNVERIFIABLE"


class VerificationOutcome(BaseModel):
    """Result of verifying a single claim."""

    claim: str
    verification: VerificationLabel = Field(default=VerificationLabel.UNVERIFIABLE)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    explanation: str = Field(default="")
    source: str | None = Field(default=None)

    model_config = {"frozen": True}

    @classmethod
    def unverifiable(cls, claim: str, explanation: str) -> VerificationOutcome:
        """Build the degraded outcome used when a claim cannot be checked."""
        return cls(
            claim=claim,
            verification=VerificationLabel.UNVERIFIABLE,
            confidence=0.0,
            explanation=explanation,
            source=None,
        )


# -----------------------------------------------------------------------------
# Context lookup result
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ContextFound:
    """Resolved reference context, with the language edition it came from."""

    context: ReferenceContext
    language: str


@dataclass(frozen=True, slots=True)
class ContextNotFound:
    """No usable context: subject missing or failing the identity check."""

    subject: str
    reason: str = "not found"


ContextLookup = ContextFound | ContextNotFound


# -----------------------------------------------------------------------------
# Streaming protocol
# -----------------------------------------------------------------------------


class StreamEventType(StrEnum):
    """Kinds of events emitted on the streaming verification path."""

    START = "start"
    SOURCE_FOUND = "source_found"
    SOURCE_MISSING = "source_missing"
    PROMPT_READY = "prompt_ready"
    CHUNK = "chunk"
    FINAL = "final"
    COMPLETE = "complete"
    ERROR = "error"


_WIRE_NAMES: dict[StreamEventType, str] = {
    StreamEventType.SOURCE_FOUND: "wiki",
    StreamEventType.SOURCE_MISSING: "wiki",
    StreamEventType.PROMPT_READY: "prompt",
}


class StreamEvent(BaseModel):
    """
    One unit of the caller-visible streaming protocol.

    ``data`` carries the human-readable payload; ``outcome`` is set only
    for FINAL events.
    """

    type: StreamEventType
    data: str = ""
    outcome: VerificationOutcome | None = None

    model_config = {"frozen": True}

    @property
    def name(self) -> str:
        """Event name used on the wire."""
        return _WIRE_NAMES.get(self.type, self.type.value)

    @property
    def payload(self) -> str:
        """Wire payload; FINAL events carry the JSON-encoded outcome."""
        if self.type is StreamEventType.FINAL and self.outcome is not None:
            return self.outcome.model_dump_json()
        return self.data
