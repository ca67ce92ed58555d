"""Application configuration using environment variables."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, AnyHttpUrl, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root once so that `.env` is discovered regardless of CWD
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Load configuration from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Text-generation credentials, one per provider
    groq_api_key: SecretStr | None = Field(
        default=None, validation_alias=AliasChoices("GROQ_API_KEY", "groq_api_key")
    )
    openai_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "openai_api_key"),
    )
    anthropic_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("ANTHROPIC_API_KEY", "anthropic_api_key"),
    )
    mistral_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("MISTRAL_API_KEY", "mistral_api_key"),
    )
    gemini_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "gemini_api_key"),
    )
    ollama_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("OLLAMA_API_KEY", "ollama_api_key"),
    )

    # Optional model overrides
    groq_model: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("GROQ_MODEL", "groq_model")
    )
    openai_model: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("OPENAI_MODEL", "openai_model")
    )
    anthropic_model: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("ANTHROPIC_MODEL", "anthropic_model"),
    )
    mistral_model: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MISTRAL_MODEL", "mistral_model"),
    )
    gemini_model: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("GEMINI_MODEL", "gemini_model")
    )
    ollama_model: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("OLLAMA_MODEL", "ollama_model")
    )
    ollama_base_url: Optional[AnyHttpUrl] = Field(
        default=None,
        validation_alias=AliasChoices("OLLAMA_BASE_URL", "ollama_base_url"),
    )

    # Content fetching (Firecrawl)
    firecrawl_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("FIRECRAWL_API_KEY", "firecrawl_api_key"),
    )
    firecrawl_base_url: AnyHttpUrl = Field(
        default_factory=lambda: AnyHttpUrl("https://api.firecrawl.dev/v1"),
        validation_alias=AliasChoices("FIRECRAWL_BASE_URL", "firecrawl_base_url"),
    )

    # Audio synthesis (ElevenLabs)
    elevenlabs_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("ELEVENLABS_API_KEY", "elevenlabs_api_key"),
    )
    elevenlabs_base_url: AnyHttpUrl = Field(
        default_factory=lambda: AnyHttpUrl("https://api.elevenlabs.io/v1"),
        validation_alias=AliasChoices("ELEVENLABS_BASE_URL", "elevenlabs_base_url"),
    )
    # "Rachel"
    elevenlabs_voice_id: str = Field(
        default="21m00Tcm4TlvDq8ikWAM",
        validation_alias=AliasChoices("ELEVENLABS_VOICE_ID", "elevenlabs_voice_id"),
    )
    elevenlabs_model_id: str = Field(
        default="eleven_turbo_v2",
        validation_alias=AliasChoices("ELEVENLABS_MODEL_ID", "elevenlabs_model_id"),
    )
    elevenlabs_output_format: str = Field(
        default="mp3_44100_128",
        validation_alias=AliasChoices(
            "ELEVENLABS_OUTPUT_FORMAT", "elevenlabs_output_format"
        ),
    )
    audio_output_dir: Path = Field(
        default_factory=lambda: Path("public"),
        validation_alias=AliasChoices("AUDIO_OUTPUT_DIR", "audio_output_dir"),
    )

    request_timeout: float = Field(
        default=120.0,
        validation_alias=AliasChoices("REQUEST_TIMEOUT", "timeout"),
        ge=1,
    )

    # Prompt template overrides; `{date}` and `{content}` are substituted
    system_prompt_template: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "SYSTEM_PROMPT_TEMPLATE", "system_prompt_template"
        ),
    )
    user_prompt_template: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("USER_PROMPT_TEMPLATE", "user_prompt_template"),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    return Settings()  # pyright: ignore[reportCallIssue]


__all__ = ["PROJECT_ROOT", "Settings", "get_settings"]
