"""Gemini backend using the google-genai SDK."""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .base import TextGenerationProvider
from .types import BackendConfig, GenerationChunk

logger = logging.getLogger(__name__)

# Stands in for the model's reply to the synthetic system turn
SYSTEM_ACKNOWLEDGEMENT = "I understand and will follow these instructions."


def build_history(system_prompt: str) -> list[types.Content]:
    """Return the leading exchange that carries the system instructions."""

    return [
        types.Content(role="user", parts=[types.Part(text=system_prompt)]),
        types.Content(role="model", parts=[types.Part(text=SYSTEM_ACKNOWLEDGEMENT)]),
    ]


class GeminiProvider(TextGenerationProvider):
    """Stream a chat reply from Gemini.

    Gemini's stream carries content deltas only, so the final chunk is
    synthesized once the native stream is exhausted.
    """

    transport_errors = (genai_errors.APIError, httpx.HTTPError)

    def __init__(self, config: BackendConfig, client: Optional[Any] = None):
        super().__init__(config)
        self._owns_client = client is None
        self._client = client or genai.Client(api_key=config.api_key)

    async def _stream(
        self, prompt: str, system_prompt: str
    ) -> AsyncIterator[GenerationChunk]:
        try:
            chat = self._client.aio.chats.create(
                model=self.config.model,
                history=build_history(system_prompt),
                config=types.GenerateContentConfig(
                    temperature=self.config.temperature,
                    max_output_tokens=self.config.max_tokens,
                ),
            )
            logger.debug("Opening Gemini chat stream (model=%s)", self.config.model)
            async for response in await chat.send_message_stream(prompt):
                yield GenerationChunk(content=response.text or "", is_final=False)

            yield GenerationChunk(content="", is_final=True)
        finally:
            if self._owns_client:
                await self._client.aio.aclose()


__all__ = ["GeminiProvider", "SYSTEM_ACKNOWLEDGEMENT", "build_history"]
