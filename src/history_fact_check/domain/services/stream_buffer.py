"""
Stream Chunk Buffer
===================

Re-buffers model fragments into caller-visible chunks.
"""

from __future__ import annotations

FLUSH_CHARACTERS = frozenset(".,!?:;)")
DEFAULT_FLUSH_SIZE = 24


class StreamChunkBuffer:
    """
    Accumulates fragments and releases them at natural break points.

    The buffer is flushed as soon as its last character is whitespace or
    one of ``FLUSH_CHARACTERS``, or once it holds ``flush_size``
    characters. Everything appended is also kept in ``text`` so the
    full reply can be parsed at the end.
    """

    def __init__(self, flush_size: int = DEFAULT_FLUSH_SIZE) -> None:
        if flush_size < 1:
            raise ValueError("flush_size must be positive")
        self._flush_size = flush_size
        self._pending: list[str] = []
        self._pending_length = 0
        self._received: list[str] = []

    @property
    def text(self) -> str:
        """Everything appended so far."""
        return "".join(self._received)

    @property
    def pending(self) -> str:
        """Text appended but not yet flushed."""
        return "".join(self._pending)

    def append(self, fragment: str) -> str | None:
        """
        Add a fragment.

        Returns:
            The flushed chunk when the fragment completes one, else None.
        """
        if not fragment:
            return None

        self._received.append(fragment)
        self._pending.append(fragment)
        self._pending_length += len(fragment)

        last = fragment[-1]
        if last.isspace() or last in FLUSH_CHARACTERS or self._pending_length >= self._flush_size:
            return self.drain()
        return None

    def drain(self) -> str | None:
        """Flush whatever is pending; None when nothing is."""
        if not self._pending:
            return None
        chunk = "".join(self._pending)
        self._pending.clear()
        self._pending_length = 0
        return chunk
