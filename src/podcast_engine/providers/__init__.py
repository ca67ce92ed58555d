"""Text-generation provider package."""

from .base import TextGenerationProvider
from .config import ProviderResolver
from .factory import create_provider
from .types import (
    BackendConfig,
    CustomConfig,
    DEFAULT_PROVIDER,
    GenerationChunk,
    LLMProvider,
)

__all__ = [
    "BackendConfig",
    "CustomConfig",
    "DEFAULT_PROVIDER",
    "GenerationChunk",
    "LLMProvider",
    "ProviderResolver",
    "TextGenerationProvider",
    "create_provider",
]
