"""Pipeline orchestrator turning a job's URLs into a narrated podcast."""

from __future__ import annotations

import logging
from contextlib import aclosing
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import AsyncIterator, Callable, Optional

from ..errors import GenerationStreamError, PodcastEngineError
from ..providers import (
    BackendConfig,
    CustomConfig,
    LLMProvider,
    ProviderResolver,
    TextGenerationProvider,
    create_provider,
)
from ..services.content import ContentCollector, ContentFragment, aggregate_fragments
from ..services.tts_service import AudioSynthesizer
from .events import (
    CompleteEvent,
    ContentEvent,
    ErrorEvent,
    ProgressEvent,
    UpdateEvent,
)
from .prompts import PromptPair, build_prompts

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An error occurred while generating the podcast"


class JobState(str, Enum):
    FETCHING = "fetching"
    AGGREGATING = "aggregating"
    RESOLVING = "resolving"
    GENERATING = "generating"
    SYNTHESIZING = "synthesizing"
    COMPLETE = "complete"
    ERROR = "error"


_TRANSITIONS: dict[JobState, frozenset[JobState]] = {
    JobState.FETCHING: frozenset({JobState.AGGREGATING, JobState.ERROR}),
    JobState.AGGREGATING: frozenset({JobState.RESOLVING, JobState.ERROR}),
    JobState.RESOLVING: frozenset({JobState.GENERATING, JobState.ERROR}),
    JobState.GENERATING: frozenset({JobState.SYNTHESIZING, JobState.ERROR}),
    JobState.SYNTHESIZING: frozenset({JobState.COMPLETE, JobState.ERROR}),
    JobState.COMPLETE: frozenset(),
    JobState.ERROR: frozenset(),
}


@dataclass(frozen=True)
class Job:
    """One podcast request; immutable once accepted."""

    urls: tuple[str, ...]
    provider: Optional[LLMProvider | str] = None
    system_prompt: Optional[str] = None
    user_prompt: Optional[str] = None
    custom_config: Optional[CustomConfig] = None


ProviderFactory = Callable[[BackendConfig], TextGenerationProvider]


@dataclass
class PipelineServices:
    """Collaborators shared by every job, passed explicitly to each orchestrator."""

    collector: ContentCollector
    resolver: ProviderResolver
    synthesizer: AudioSynthesizer
    provider_factory: ProviderFactory = create_provider
    system_prompt_template: Optional[str] = None
    user_prompt_template: Optional[str] = None
    clock: Callable[[], datetime] = field(default=datetime.now)


class PipelineOrchestrator:
    """Drive one job from fetching to a synthesized audio file.

    `run()` yields progress events in order and always ends with exactly one
    `CompleteEvent` or `ErrorEvent`. The backend configuration and the
    transcript belong to this instance alone.
    """

    def __init__(self, job: Job, services: PipelineServices):
        self.job = job
        self._services = services
        self.state = JobState.FETCHING
        self.fragments: list[ContentFragment] = []
        self.backend: Optional[BackendConfig] = None
        self.transcript: list[str] = []

    def _transition(self, new_state: JobState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Invalid job transition {self.state.value} -> {new_state.value}"
            )
        logger.debug("Job state %s -> %s", self.state.value, new_state.value)
        self.state = new_state

    def _fail(self, message: str) -> ErrorEvent:
        self._transition(JobState.ERROR)
        return ErrorEvent(message)

    async def run(self) -> AsyncIterator[ProgressEvent]:
        if self.state is not JobState.FETCHING:
            raise RuntimeError("A pipeline orchestrator runs a single job once")

        logger.info("Starting podcast job for %d URL(s)", len(self.job.urls))
        try:
            async for event in self._run_stages():
                yield event
        except PodcastEngineError as exc:
            logger.warning("Podcast job failed during %s: %s", self.state.value, exc)
            yield self._fail(str(exc))
        except Exception:
            logger.exception("Unexpected error during %s", self.state.value)
            yield self._fail(GENERIC_ERROR_MESSAGE)

    async def _run_stages(self) -> AsyncIterator[ProgressEvent]:
        services = self._services

        yield UpdateEvent("Gathering news from various sources...")
        now = services.clock()
        self.fragments = await services.collector.collect(self.job.urls)
        self._transition(JobState.AGGREGATING)

        yield UpdateEvent("Analyzing the latest headlines...")
        content = aggregate_fragments(self.fragments)
        prompts = build_prompts(
            content,
            now,
            system_template=self.job.system_prompt or services.system_prompt_template,
            user_template=self.job.user_prompt or services.user_prompt_template,
        )
        self._transition(JobState.RESOLVING)

        self.backend = services.resolver.resolve(
            self.job.provider, self.job.custom_config
        )
        provider = services.provider_factory(self.backend)
        self._transition(JobState.GENERATING)

        yield UpdateEvent(
            "Compiling the most interesting stories using "
            f"{self.backend.provider.value}..."
        )
        yield UpdateEvent("Crafting witty commentary...")
        async for event in self._generate(provider, prompts):
            yield event

        script = "".join(self.transcript)
        if not script.strip():
            raise GenerationStreamError("The language model returned an empty script")
        self._transition(JobState.SYNTHESIZING)

        yield UpdateEvent("Preparing your personalized news roundup...")
        audio_file_name = await services.synthesizer.synthesize(script)
        self._transition(JobState.COMPLETE)
        logger.info("Podcast job complete: %s", audio_file_name)
        yield CompleteEvent(audio_file_name)

    async def _generate(
        self, provider: TextGenerationProvider, prompts: PromptPair
    ) -> AsyncIterator[ContentEvent]:
        async with aclosing(provider.generate(prompts.user, prompts.system)) as chunks:
            async for chunk in chunks:
                # Empty deltas carry no script text and are not relayed
                if chunk.content:
                    self.transcript.append(chunk.content)
                    yield ContentEvent(chunk.content)
                if chunk.is_final:
                    break
        logger.debug(
            "Generation finished with %d characters",
            sum(len(part) for part in self.transcript),
        )


__all__ = [
    "GENERIC_ERROR_MESSAGE",
    "Job",
    "JobState",
    "PipelineOrchestrator",
    "PipelineServices",
]
