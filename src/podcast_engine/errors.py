"""Error taxonomy for the podcast generation pipeline."""

from __future__ import annotations


class PodcastEngineError(Exception):
    """Base class for pipeline failures surfaced to the caller."""


class ContentFetchError(PodcastEngineError):
    """A single URL could not be fetched. Tolerated by the collector."""

    def __init__(self, url: str, detail: str):
        super().__init__(f"Failed to fetch {url}: {detail}")
        self.url = url
        self.detail = detail


class NoContentError(PodcastEngineError):
    """Every URL of a job failed to produce content."""


class ProviderConfigError(PodcastEngineError):
    """A text-generation backend could not be configured."""


class GenerationStreamError(PodcastEngineError):
    """The generation stream failed before producing a final chunk."""


class AudioSynthesisError(PodcastEngineError):
    """The synthesis service failed to produce audio for the script."""


__all__ = [
    "AudioSynthesisError",
    "ContentFetchError",
    "GenerationStreamError",
    "NoContentError",
    "PodcastEngineError",
    "ProviderConfigError",
]
