"""Map a resolved backend configuration onto a provider implementation."""

from __future__ import annotations

from typing import Optional

import httpx

from ..errors import ProviderConfigError
from .base import TextGenerationProvider
from .gemini import GeminiProvider
from .ollama import OllamaProvider
from .openai_compatible import OpenAICompatibleProvider
from .types import BackendConfig, LLMProvider

OPENAI_COMPATIBLE = frozenset(
    {
        LLMProvider.GROQ,
        LLMProvider.OPENAI,
        LLMProvider.ANTHROPIC,
        LLMProvider.MISTRAL,
    }
)


def create_provider(
    config: BackendConfig,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
    timeout: float = 120.0,
) -> TextGenerationProvider:
    """Return the provider implementation for `config.provider`."""

    if config.provider in OPENAI_COMPATIBLE:
        return OpenAICompatibleProvider(config, http_client=http_client)
    if config.provider is LLMProvider.GEMINI:
        return GeminiProvider(config)
    if config.provider is LLMProvider.OLLAMA:
        return OllamaProvider(config, http_client, timeout=timeout)
    raise ProviderConfigError(f"Unsupported LLM provider: {config.provider}")


__all__ = ["OPENAI_COMPATIBLE", "create_provider"]
