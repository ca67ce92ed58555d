"""Pydantic models for podcast generation requests."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..pipeline.orchestrator import Job
from ..providers.types import CustomConfig


class CustomModelConfig(BaseModel):
    """Caller-supplied credentials and model for the chosen provider."""

    api_key: Optional[str] = Field(default=None, alias="apiKey")
    model: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PodcastRequest(BaseModel):
    """Incoming podcast generation request payload."""

    urls: List[str] = Field(min_length=1)
    provider: Optional[str] = None
    custom_config: Optional[CustomModelConfig] = Field(
        default=None, alias="customConfig"
    )
    system_prompt: Optional[str] = Field(default=None, alias="systemPrompt")
    user_prompt: Optional[str] = Field(default=None, alias="userPrompt")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("urls")
    @classmethod
    def _strip_urls(cls, value: List[str]) -> List[str]:
        urls = [url.strip() for url in value if url and url.strip()]
        if not urls:
            raise ValueError("At least one URL is required")
        return urls

    @field_validator("provider", mode="before")
    @classmethod
    def _blank_provider(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip().lower()
            return value or None
        return value

    @field_validator("system_prompt", "user_prompt", mode="before")
    @classmethod
    def _blank_prompt(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_job(self) -> Job:
        custom = None
        if self.custom_config is not None:
            custom = CustomConfig(
                api_key=self.custom_config.api_key,
                model=self.custom_config.model,
            )
        return Job(
            urls=tuple(self.urls),
            provider=self.provider,
            system_prompt=self.system_prompt,
            user_prompt=self.user_prompt,
            custom_config=custom,
        )


__all__ = ["CustomModelConfig", "PodcastRequest"]
