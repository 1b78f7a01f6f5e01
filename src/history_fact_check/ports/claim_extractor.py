"""
ClaimExtractor Port
===================

Abstract interface for splitting a free-text message into candidate
factual claims.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from history_fact_check.domain.entities import Claim


class ClaimExtractor(ABC):
    """
    Port for claim extraction from user messages.

    Responsibilities:
    - Segment the message into sentence-like units
    - Keep only the units that look verifiable
    - Record where each claim starts in the message
    """

    @abstractmethod
    def extract_claims(self, message: str) -> list[Claim]:
        """
        Extract candidate claims from a message.

        Args:
            message: Free-text user input.

        Returns:
            Claims in message order; empty when nothing looks verifiable.
        """
        ...
