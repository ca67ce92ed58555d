"""OpenAI-compatible chat completions backend (OpenAI, Groq, Anthropic, Mistral)."""

from __future__ import annotations

import logging
from typing import AsyncIterator, Optional

import httpx
import openai

from .base import TextGenerationProvider
from .types import BackendConfig, GenerationChunk

logger = logging.getLogger(__name__)


class OpenAICompatibleProvider(TextGenerationProvider):
    """Stream chat completions from any endpoint speaking the OpenAI protocol."""

    transport_errors = (openai.APIError,)

    def __init__(
        self,
        config: BackendConfig,
        client: Optional[openai.AsyncOpenAI] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(config)
        # A client built here without a shared transport is closed after its stream
        self._owns_client = client is None and http_client is None
        self._client = client or openai.AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            http_client=http_client,
        )

    async def _stream(
        self, prompt: str, system_prompt: str
    ) -> AsyncIterator[GenerationChunk]:
        logger.debug(
            "Opening %s completion stream (model=%s)",
            self.config.provider.value,
            self.config.model,
        )
        try:
            stream = await self._client.chat.completions.create(
                model=self.config.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
                stream=True,
            )
            async with stream:
                async for frame in stream:
                    if not frame.choices:
                        continue
                    choice = frame.choices[0]
                    delta = choice.delta.content if choice.delta else None
                    yield GenerationChunk(
                        content=delta or "",
                        is_final=choice.finish_reason is not None,
                    )
        finally:
            if self._owns_client:
                await self._client.close()


__all__ = ["OpenAICompatibleProvider"]
