"""Resolve a requested provider into a validated backend configuration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from ..errors import ProviderConfigError
from .types import (
    DEFAULT_CONFIGS,
    DEFAULT_PROVIDER,
    BackendConfig,
    CustomConfig,
    LLMProvider,
)

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger(__name__)


# Environment variable names for each provider's credential and model override
ENV_KEYS: dict[LLMProvider, str] = {
    provider: f"{provider.value.upper()}_API_KEY" for provider in LLMProvider
}
MODEL_ENV_KEYS: dict[LLMProvider, str] = {
    provider: f"{provider.value.upper()}_MODEL" for provider in LLMProvider
}


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def parse_provider(name: str) -> LLMProvider:
    """Map a provider name from a request onto `LLMProvider`."""

    try:
        return LLMProvider(name.strip().lower())
    except ValueError:
        raise ProviderConfigError(f"Unsupported LLM provider: {name}") from None


class ProviderResolver:
    """Turn a provider name plus credentials into a `BackendConfig`.

    Settings are only consulted when the caller did not supply its own API
    key, so a request carrying custom credentials never touches the
    environment-backed configuration.
    """

    def __init__(self, settings: Settings):
        self._settings = settings

    def _api_key(self, provider: LLMProvider) -> Optional[str]:
        secret = getattr(self._settings, f"{provider.value}_api_key", None)
        if secret is None:
            return None
        return _clean(secret.get_secret_value())

    def _model_override(self, provider: LLMProvider) -> Optional[str]:
        return _clean(getattr(self._settings, f"{provider.value}_model", None))

    def _base_url(self, provider: LLMProvider) -> Optional[str]:
        if provider is LLMProvider.OLLAMA and self._settings.ollama_base_url:
            return str(self._settings.ollama_base_url).rstrip("/")
        return DEFAULT_CONFIGS[provider].base_url

    def available_providers(self) -> list[LLMProvider]:
        """Return providers with a configured credential, in enumeration order."""

        return [provider for provider in LLMProvider if self._api_key(provider)]

    def default_provider(self) -> LLMProvider:
        """Prefer the designated default, else the first available provider."""

        available = self.available_providers()
        if DEFAULT_PROVIDER in available:
            return DEFAULT_PROVIDER
        if not available:
            raise ProviderConfigError(
                "No LLM providers configured. Please set at least one provider's "
                "API key in environment variables."
            )
        return available[0]

    def resolve(
        self,
        provider: Optional[LLMProvider | str] = None,
        custom_config: Optional[CustomConfig] = None,
    ) -> BackendConfig:
        """Return the backend configuration for one job."""

        if provider is not None:
            provider = parse_provider(provider)

        custom_key = _clean(custom_config.api_key) if custom_config else None
        if custom_config is not None and custom_key:
            return self._from_custom(
                provider or DEFAULT_PROVIDER, custom_config, custom_key
            )

        if provider is None:
            provider = self.default_provider()

        api_key = self._api_key(provider)
        if not api_key:
            raise ProviderConfigError(
                f"API key not found for provider {provider.value}. Please set "
                f"{ENV_KEYS[provider]} environment variable or provide a custom "
                "API key."
            )

        defaults = DEFAULT_CONFIGS[provider]
        custom_model = self._model_override(provider)
        config = BackendConfig(
            provider=provider,
            api_key=api_key,
            model=custom_model or defaults.model,
            base_url=self._base_url(provider),
            temperature=defaults.temperature,
            max_tokens=defaults.max_tokens,
            is_custom_model=custom_model is not None,
        )
        logger.debug("Resolved backend %s from settings", config)
        return config

    @staticmethod
    def _from_custom(
        provider: LLMProvider, custom_config: CustomConfig, api_key: str
    ) -> BackendConfig:
        defaults = DEFAULT_CONFIGS[provider]
        custom_model = _clean(custom_config.model)
        config = BackendConfig(
            provider=provider,
            api_key=api_key,
            model=custom_model or defaults.model,
            base_url=defaults.base_url,
            temperature=defaults.temperature,
            max_tokens=defaults.max_tokens,
            is_custom_model=custom_model is not None,
        )
        logger.debug("Resolved backend %s from request credentials", config)
        return config


__all__ = ["ENV_KEYS", "MODEL_ENV_KEYS", "ProviderResolver", "parse_provider"]
