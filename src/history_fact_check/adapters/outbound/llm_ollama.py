"""
Ollama Generation Adapter
=========================

Adapter for Ollama's native /api/generate endpoint.

Replies are newline-delimited JSON objects, each carrying a ``response``
text fragment; the last one has ``done: true``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator, Iterable
from typing import TYPE_CHECKING, Any

import httpx

from history_fact_check.ports.generation import GenerationError, GenerationProvider

if TYPE_CHECKING:
    from history_fact_check.infrastructure.config import OllamaSettings

logger = logging.getLogger(__name__)

GENERATE_PATH = "/api/generate"


def _decode_line(line: str) -> dict[str, Any] | None:
    """Decode one NDJSON line; None for blank or unparsable lines."""
    line = line.strip()
    if not line:
        return None
    try:
        data = json.loads(line)
    except json.JSONDecodeError:
        logger.debug(f"Skipping unparsable Ollama line: {line[:120]!r}")
        return None
    return data if isinstance(data, dict) else None


def _check_error(data: dict[str, Any]) -> None:
    error = data.get("error")
    if error:
        raise GenerationError(f"Ollama error: {error}")


def concatenate_fragments(lines: Iterable[str]) -> str:
    """Join the ``response`` fields of NDJSON lines in arrival order."""
    parts: list[str] = []
    for line in lines:
        data = _decode_line(line)
        if data is None:
            continue
        _check_error(data)
        fragment = data.get("response")
        if isinstance(fragment, str):
            parts.append(fragment)
        if data.get("done") is True:
            break
    return "".join(parts)


class OllamaGenerationAdapter(GenerationProvider):
    """
    Adapter for a local Ollama server.

    The read timeout bounds the wait for each piece of data, not the
    whole reply, so long streamed answers are not cut off.
    """

    def __init__(
        self,
        settings: OllamaSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the adapter with configuration.

        Args:
            settings: Ollama connection settings.
            transport: Optional httpx transport (used by tests).
        """
        self._settings = settings
        self._model = settings.model
        self._client = httpx.AsyncClient(
            base_url=settings.base_url.rstrip("/"),
            timeout=httpx.Timeout(
                connect=settings.connect_timeout_seconds,
                read=settings.read_timeout_seconds,
                write=30.0,
                pool=5.0,
            ),
            limits=httpx.Limits(
                max_connections=settings.max_connections,
                max_keepalive_connections=max(1, settings.max_connections // 2),
            ),
            headers={"Accept": "application/x-ndjson, application/json"},
            transport=transport,
        )

    @property
    def model_name(self) -> str:
        return self._model

    def _payload(self, prompt: str, model: str | None, stream: bool) -> dict[str, Any]:
        return {"model": model or self._model, "prompt": prompt, "stream": stream}

    async def generate(self, prompt: str, *, model: str | None = None) -> str:
        """
        Generate a complete reply.

        Args:
            prompt: Prompt text.
            model: Optional model override.

        Returns:
            Concatenated reply text; empty if the backend sent none.
        """
        try:
            response = await self._client.post(
                GENERATE_PATH,
                json=self._payload(prompt, model, stream=False),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Ollama returned HTTP {e.response.status_code}")
            raise GenerationError(
                f"Ollama returned HTTP {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Ollama request failed: {e}")
            raise GenerationError(f"Failed to call Ollama API: {e}") from e

        text = concatenate_fragments(response.text.splitlines())
        logger.debug(f"Ollama reply: {len(text)} chars")
        return text

    async def generate_stream(
        self,
        prompt: str,
        *,
        model: str | None = None,
    ) -> AsyncIterator[str]:
        """
        Stream reply fragments as they arrive.

        Stops at the first ``done: true`` line even if more data is
        buffered; unparsable lines are skipped. Closing the iterator
        closes the HTTP response.

        Yields:
            Non-empty text fragments in arrival order.
        """
        try:
            async with self._client.stream(
                "POST",
                GENERATE_PATH,
                json=self._payload(prompt, model, stream=True),
            ) as response:
                if response.status_code >= 400:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    raise GenerationError(
                        f"Ollama returned HTTP {response.status_code}: {body[:200]}"
                    )

                async for line in response.aiter_lines():
                    data = _decode_line(line)
                    if data is None:
                        continue
                    _check_error(data)
                    fragment = data.get("response")
                    if isinstance(fragment, str) and fragment:
                        yield fragment
                    if data.get("done") is True:
                        break
        except httpx.HTTPError as e:
            logger.error(f"Ollama streaming error: {e}")
            raise GenerationError(f"Streaming failed: {e}") from e

    async def health_check(self) -> bool:
        """Check if the Ollama server responds."""
        try:
            response = await self._client.get("/api/tags", timeout=5.0)
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning(f"Ollama health check failed: {e}")
            return False

    async def close(self) -> None:
        """Release pooled connections."""
        await self._client.aclose()
