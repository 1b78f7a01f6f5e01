"""
GenerationProvider Port
=======================

Abstract interface for the text-generation backend that judges claims.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator


class GenerationError(Exception):
    """Exception raised when the generation backend fails."""

    pass


class GenerationProvider(ABC):
    """
    Port for prompt-in, text-out generation.

    Responsibilities:
    - Blocking generation returning the complete reply
    - Streaming generation yielding ordered, non-overlapping fragments
    - Health checking the backend
    """

    @abstractmethod
    async def generate(self, prompt: str, *, model: str | None = None) -> str:
        """
        Generate a complete reply for a prompt.

        Args:
            prompt: Prompt text.
            model: Optional model override.

        Returns:
            The concatenated reply text (may be empty).

        Raises:
            GenerationError: If the backend cannot be reached or rejects the call.
        """
        ...

    @abstractmethod
    def generate_stream(self, prompt: str, *, model: str | None = None) -> AsyncIterator[str]:
        """
        Stream reply fragments as they are produced.

        The iterator ends once the backend signals completion. Closing it
        early (``aclose()``) stops reading from the backend and releases
        the connection.

        Args:
            prompt: Prompt text.
            model: Optional model override.

        Yields:
            Text fragments in arrival order.

        Raises:
            GenerationError: If the backend cannot be reached or rejects the call.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Default model used for generation."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Check whether the backend is reachable."""
        ...
