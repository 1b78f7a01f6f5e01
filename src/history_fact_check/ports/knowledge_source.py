"""
KnowledgeSource Ports
=====================

Abstract interfaces for the external encyclopedic sources consulted
while resolving reference context:

- SummarySource: encyclopedia summary by title (one language edition)
- EntitySource: structured-entity attributes (identity, citizenship)
- QuotationSource: raw wikitext of a quotation page by title
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from history_fact_check.domain.entities import ReferenceContext


class KnowledgeSourceError(Exception):
    """Exception raised when a knowledge source cannot be reached or read."""

    pass


class KnowledgeSourceRateLimitedError(KnowledgeSourceError):
    """Exception raised when a knowledge source call is throttled."""

    def __init__(self, source_name: str, message: str | None = None) -> None:
        self.source_name = source_name
        super().__init__(
            message or f"{source_name} rate limit exceeded. Please try again later."
        )


class KnowledgeSource(ABC):
    """Lifecycle shared by all knowledge sources."""

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Human-readable name of this knowledge source."""
        ...

    @abstractmethod
    async def connect(self) -> None:
        """Open the underlying client."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the underlying client."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Check whether the source is reachable."""
        ...


class SummarySource(KnowledgeSource):
    """Port for encyclopedia summaries in one language edition."""

    @property
    @abstractmethod
    def language(self) -> str:
        """Language code of the edition this source reads."""
        ...

    @abstractmethod
    async def get_summary(self, title: str) -> ReferenceContext | None:
        """
        Look up the summary of a page by exact title.

        Args:
            title: Page title; spaces are normalized by the implementation.

        Returns:
            The summary, or None when the page does not exist.

        Raises:
            KnowledgeSourceRateLimitedError: If the call was throttled.
            KnowledgeSourceError: On any other transport or decode failure.
        """
        ...


class EntitySource(KnowledgeSource):
    """Port for structured-entity attribute lookups."""

    @abstractmethod
    async def is_instance_of(self, entity_id: str, type_id: str) -> bool:
        """
        Check whether an entity carries an instance-of claim for a type.

        Args:
            entity_id: Entity identifier (e.g. "Q619").
            type_id: Expected type identifier (e.g. "Q5" for human).

        Returns:
            True when any instance-of claim points at the type.
        """
        ...

    @abstractmethod
    async def get_best_claim_value(self, entity_id: str, property_id: str) -> str | None:
        """
        Return the target entity id of the best-ranked claim for a property.

        Preferred rank wins; otherwise the first normal-rank claim; otherwise
        the first claim of any rank.
        """
        ...

    @abstractmethod
    async def get_label(
        self,
        entity_id: str,
        preferred_language: str,
        fallback_language: str,
    ) -> str | None:
        """Return the entity label in the preferred or the fallback language."""
        ...


class QuotationSource(KnowledgeSource):
    """Port for quotation pages in one language edition."""

    @property
    @abstractmethod
    def language(self) -> str:
        """Language code of the edition this source reads."""
        ...

    @abstractmethod
    async def get_page_wikitext(self, title: str) -> str | None:
        """
        Fetch the raw wikitext of a page.

        Returns:
            The wikitext, or None when the page does not exist.
        """
        ...
