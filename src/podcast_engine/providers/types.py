"""Shared types for text-generation providers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class LLMProvider(str, Enum):
    """Supported text-generation backends, in preference-fallback order."""

    GROQ = "groq"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    MISTRAL = "mistral"
    GEMINI = "gemini"
    OLLAMA = "ollama"


DEFAULT_PROVIDER = LLMProvider.GROQ


@dataclass(frozen=True)
class ProviderDefaults:
    model: str
    base_url: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 2000


DEFAULT_CONFIGS: dict[LLMProvider, ProviderDefaults] = {
    LLMProvider.GROQ: ProviderDefaults(
        model="deepseek-r1-distill-qwen-32b",
        base_url="https://api.groq.com/openai/v1",
    ),
    LLMProvider.OPENAI: ProviderDefaults(model="gpt-4-turbo-preview"),
    LLMProvider.ANTHROPIC: ProviderDefaults(
        model="claude-3-opus-20240229",
        base_url="https://api.anthropic.com/v1",
    ),
    LLMProvider.MISTRAL: ProviderDefaults(
        model="mistral-large-latest",
        base_url="https://api.mistral.ai/v1",
    ),
    LLMProvider.GEMINI: ProviderDefaults(model="gemini-pro"),
    LLMProvider.OLLAMA: ProviderDefaults(
        model="llama2",
        base_url="http://localhost:11434",
    ),
}


@dataclass(frozen=True)
class CustomConfig:
    """Per-request credential/model overrides supplied by the caller."""

    api_key: Optional[str] = None
    model: Optional[str] = None


@dataclass(frozen=True)
class BackendConfig:
    """Fully resolved settings for one job's text-generation backend."""

    provider: LLMProvider
    api_key: str = field(repr=False)
    model: str
    base_url: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 2000
    is_custom_model: bool = False


@dataclass(frozen=True)
class GenerationChunk:
    """One increment of generated text."""

    content: str
    is_final: bool = False


__all__ = [
    "BackendConfig",
    "CustomConfig",
    "DEFAULT_CONFIGS",
    "DEFAULT_PROVIDER",
    "GenerationChunk",
    "LLMProvider",
    "ProviderDefaults",
]
