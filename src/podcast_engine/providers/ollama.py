"""Ollama backend streaming newline-delimited JSON over HTTP."""

from __future__ import annotations

import json
import logging
from contextlib import aclosing
from typing import Any, AsyncIterator, Optional

import httpx

from ..errors import GenerationStreamError
from .base import TextGenerationProvider
from .types import DEFAULT_CONFIGS, BackendConfig, GenerationChunk, LLMProvider

logger = logging.getLogger(__name__)


class NdjsonDecoder:
    """Incrementally decode newline-delimited JSON records from raw bytes.

    A read may hold any number of complete records plus a partial trailing
    one; the partial record is kept until a later read completes it.
    Records that fail to parse are logged and dropped.
    """

    def __init__(self, separator: bytes = b"\n"):
        self._separator = separator
        self._buffer = bytearray()
        self.skipped = 0

    def feed(self, data: bytes) -> list[dict[str, Any]]:
        self._buffer.extend(data)
        *complete, remainder = bytes(self._buffer).split(self._separator)
        self._buffer = bytearray(remainder)
        return [frame for frame in map(self._parse, complete) if frame is not None]

    def flush(self) -> list[dict[str, Any]]:
        """Decode whatever is left once the stream has ended."""

        remainder = bytes(self._buffer)
        self._buffer.clear()
        frame = self._parse(remainder)
        return [frame] if frame is not None else []

    def _parse(self, record: bytes) -> Optional[dict[str, Any]]:
        text = record.decode("utf-8", errors="replace").strip()
        if not text:
            return None
        try:
            frame = json.loads(text)
        except json.JSONDecodeError as exc:
            self.skipped += 1
            logger.warning(
                "Skipping malformed Ollama frame: %s (%r)", exc, text[:200]
            )
            return None
        if not isinstance(frame, dict):
            self.skipped += 1
            logger.warning("Skipping non-object Ollama frame: %r", text[:200])
            return None
        return frame


def _frame_to_chunk(frame: dict[str, Any]) -> GenerationChunk:
    error = frame.get("error")
    if error:
        raise GenerationStreamError(f"ollama stream failed: {error}")
    message = frame.get("message")
    content = message.get("content") if isinstance(message, dict) else None
    return GenerationChunk(
        content=content if isinstance(content, str) else "",
        is_final=bool(frame.get("done", False)),
    )


class OllamaProvider(TextGenerationProvider):
    """Stream a chat reply from an Ollama server's `/api/chat` endpoint."""

    transport_errors = (httpx.HTTPError,)

    def __init__(
        self,
        config: BackendConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        *,
        timeout: float = 120.0,
    ):
        super().__init__(config)
        self._http_client = http_client
        self._timeout = timeout

    @property
    def _base_url(self) -> str:
        base = self.config.base_url or DEFAULT_CONFIGS[LLMProvider.OLLAMA].base_url
        return str(base).rstrip("/")

    def _payload(self, prompt: str, system_prompt: str) -> dict[str, Any]:
        return {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "stream": True,
            "options": {
                "temperature": self.config.temperature,
                "num_predict": self.config.max_tokens,
            },
        }

    async def _stream(
        self, prompt: str, system_prompt: str
    ) -> AsyncIterator[GenerationChunk]:
        if self._http_client is not None:
            stream = self._stream_with(self._http_client, prompt, system_prompt)
            async with aclosing(stream) as chunks:
                async for chunk in chunks:
                    yield chunk
            return

        timeout = httpx.Timeout(self._timeout, connect=10.0)
        async with httpx.AsyncClient(timeout=timeout) as client:
            stream = self._stream_with(client, prompt, system_prompt)
            async with aclosing(stream) as chunks:
                async for chunk in chunks:
                    yield chunk

    async def _stream_with(
        self, client: httpx.AsyncClient, prompt: str, system_prompt: str
    ) -> AsyncIterator[GenerationChunk]:
        decoder = NdjsonDecoder()
        async with client.stream(
            "POST",
            f"{self._base_url}/api/chat",
            json=self._payload(prompt, system_prompt),
        ) as response:
            if response.status_code >= 400:
                body = await response.aread()
                detail = body.decode("utf-8", errors="ignore") or response.reason_phrase
                raise GenerationStreamError(
                    f"ollama returned HTTP {response.status_code}: {detail}"
                )

            async for data in response.aiter_bytes():
                for frame in decoder.feed(data):
                    yield _frame_to_chunk(frame)

        for frame in decoder.flush():
            yield _frame_to_chunk(frame)


__all__ = ["NdjsonDecoder", "OllamaProvider"]
