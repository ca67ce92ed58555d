"""End-to-end tests for the podcast pipeline orchestrator."""

from __future__ import annotations

from datetime import datetime
from typing import Any, AsyncIterator

import pytest

from podcast_engine.errors import (
    AudioSynthesisError,
    ContentFetchError,
)
from podcast_engine.pipeline import (
    CompleteEvent,
    ContentEvent,
    ErrorEvent,
    Job,
    JobState,
    PipelineOrchestrator,
    PipelineServices,
    ProgressEvent,
    UpdateEvent,
)
from podcast_engine.pipeline.orchestrator import GENERIC_ERROR_MESSAGE
from podcast_engine.providers import (
    BackendConfig,
    CustomConfig,
    GenerationChunk,
    LLMProvider,
    ProviderResolver,
    TextGenerationProvider,
)
from podcast_engine.services.content import ContentCollector


class StubFetcher:
    def __init__(self, pages: dict[str, str | None]) -> None:
        self.pages = pages
        self.calls: list[str] = []

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        text = self.pages.get(url)
        if text is None:
            raise ContentFetchError(url, "unreachable")
        return text


class ScriptedProvider(TextGenerationProvider):
    def __init__(
        self,
        config: BackendConfig,
        chunks: list[GenerationChunk],
        error: Exception | None = None,
    ) -> None:
        super().__init__(config)
        self.chunks = chunks
        self.error = error
        self.prompts: list[tuple[str, str]] = []

    async def _stream(
        self, prompt: str, system_prompt: str
    ) -> AsyncIterator[GenerationChunk]:
        self.prompts.append((prompt, system_prompt))
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error


class RecordingFactory:
    def __init__(
        self, chunks: list[GenerationChunk], error: Exception | None = None
    ) -> None:
        self.chunks = chunks
        self.error = error
        self.configs: list[BackendConfig] = []
        self.providers: list[ScriptedProvider] = []

    def __call__(self, config: BackendConfig) -> TextGenerationProvider:
        self.configs.append(config)
        provider = ScriptedProvider(config, self.chunks, self.error)
        provider.transport_errors = (ConnectionError,)
        self.providers.append(provider)
        return provider


class StubSynthesizer:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.texts: list[str] = []

    async def synthesize(self, text: str) -> str:
        self.texts.append(text)
        if self.error is not None:
            raise self.error
        return "2026-10-19T09-00-00-000Z.mp3"


class ExplodingSettings:
    def __getattr__(self, name: str) -> Any:
        raise AssertionError(f"settings.{name} must not be read")


DEFAULT_CHUNKS = [
    GenerationChunk("Welcome ", False),
    GenerationChunk("to the show.", False),
    GenerationChunk("", True),
]


def make_services(
    settings: Any,
    pages: dict[str, str | None],
    *,
    factory: RecordingFactory | None = None,
    synthesizer: StubSynthesizer | None = None,
) -> PipelineServices:
    return PipelineServices(
        collector=ContentCollector(StubFetcher(pages)),
        resolver=ProviderResolver(settings),
        synthesizer=synthesizer or StubSynthesizer(),
        provider_factory=factory or RecordingFactory(DEFAULT_CHUNKS),
        clock=lambda: datetime(2026, 10, 19, 9, 0),
    )


async def run_job(orchestrator: PipelineOrchestrator) -> list[ProgressEvent]:
    return [event async for event in orchestrator.run()]


def terminal_events(events: list[ProgressEvent]) -> list[ProgressEvent]:
    return [event for event in events if event.terminal]


@pytest.mark.asyncio
async def test_partial_fetch_failure_still_completes(make_settings) -> None:
    factory = RecordingFactory(DEFAULT_CHUNKS)
    synthesizer = StubSynthesizer()
    services = make_services(
        make_settings(groq_api_key="gsk"),
        {"u1": "First story", "u2": None, "u3": "Third story"},
        factory=factory,
        synthesizer=synthesizer,
    )
    orchestrator = PipelineOrchestrator(Job(urls=("u1", "u2", "u3")), services)

    events = await run_job(orchestrator)

    assert terminal_events(events) == [CompleteEvent("2026-10-19T09-00-00-000Z.mp3")]
    assert events[-1] == terminal_events(events)[0]
    user_prompt, system_prompt = factory.providers[0].prompts[0]
    assert "From u1:\nFirst story" in user_prompt
    assert "From u3:\nThird story" in user_prompt
    assert "u2" not in user_prompt
    assert user_prompt.index("u1") < user_prompt.index("u3")
    assert "Monday, October 19, 2026" in user_prompt
    assert "witty tech news podcaster" in system_prompt
    assert [event.content for event in events if isinstance(event, ContentEvent)] == [
        "Welcome ",
        "to the show.",
    ]
    assert synthesizer.texts == ["Welcome to the show."]
    assert orchestrator.state is JobState.COMPLETE
    assert orchestrator.backend is not None
    assert orchestrator.backend.provider is LLMProvider.GROQ


@pytest.mark.asyncio
async def test_every_fetch_failing_emits_single_error(make_settings) -> None:
    factory = RecordingFactory(DEFAULT_CHUNKS)
    services = make_services(
        make_settings(groq_api_key="gsk"),
        {"u1": None, "u2": None},
        factory=factory,
    )
    orchestrator = PipelineOrchestrator(Job(urls=("u1", "u2")), services)

    events = await run_job(orchestrator)

    assert terminal_events(events) == [ErrorEvent("No content could be scraped")]
    assert not any(isinstance(event, ContentEvent) for event in events)
    assert factory.configs == []
    assert orchestrator.state is JobState.ERROR


@pytest.mark.asyncio
async def test_no_configured_provider_reports_missing_configuration(
    make_settings,
) -> None:
    factory = RecordingFactory(DEFAULT_CHUNKS)
    services = make_services(make_settings(), {"u1": "Story"}, factory=factory)
    orchestrator = PipelineOrchestrator(Job(urls=("u1",)), services)

    events = await run_job(orchestrator)

    error = events[-1]
    assert isinstance(error, ErrorEvent)
    assert "No LLM providers configured" in error.message
    assert terminal_events(events) == [error]
    assert not any(isinstance(event, ContentEvent) for event in events)
    updates = [event.message for event in events if isinstance(event, UpdateEvent)]
    assert not any("Compiling" in message for message in updates)
    assert factory.configs == []


@pytest.mark.asyncio
async def test_unknown_provider_name_ends_job_with_error(make_settings) -> None:
    factory = RecordingFactory(DEFAULT_CHUNKS)
    services = make_services(
        make_settings(groq_api_key="gsk"), {"u1": "Story"}, factory=factory
    )
    orchestrator = PipelineOrchestrator(
        Job(urls=("u1",), provider="cohere"), services
    )

    events = await run_job(orchestrator)

    assert terminal_events(events) == [ErrorEvent("Unsupported LLM provider: cohere")]
    assert factory.configs == []
    assert orchestrator.state is JobState.ERROR


@pytest.mark.asyncio
async def test_custom_config_bypasses_environment_credentials() -> None:
    factory = RecordingFactory(DEFAULT_CHUNKS)
    services = make_services(ExplodingSettings(), {"u1": "Story"}, factory=factory)
    job = Job(
        urls=("u1",),
        provider=LLMProvider.OPENAI,
        custom_config=CustomConfig(api_key="caller-key"),
    )

    events = await run_job(PipelineOrchestrator(job, services))

    assert isinstance(events[-1], CompleteEvent)
    assert factory.configs[0].api_key == "caller-key"
    assert factory.configs[0].provider is LLMProvider.OPENAI


@pytest.mark.asyncio
async def test_generation_failure_keeps_partial_content_and_never_completes(
    make_settings,
) -> None:
    factory = RecordingFactory(
        [GenerationChunk("Partial ", False)], error=ConnectionError("reset by peer")
    )
    synthesizer = StubSynthesizer()
    services = make_services(
        make_settings(openai_api_key="sk"),
        {"u1": "Story"},
        factory=factory,
        synthesizer=synthesizer,
    )
    orchestrator = PipelineOrchestrator(Job(urls=("u1",)), services)

    events = await run_job(orchestrator)

    assert ContentEvent("Partial ") in events
    assert len(terminal_events(events)) == 1
    assert isinstance(events[-1], ErrorEvent)
    assert "reset by peer" in events[-1].message
    assert synthesizer.texts == []
    assert orchestrator.state is JobState.ERROR


@pytest.mark.asyncio
async def test_chunks_after_final_are_not_relayed(make_settings) -> None:
    factory = RecordingFactory(
        [
            GenerationChunk("Done.", True),
            GenerationChunk("Should not appear", False),
        ]
    )
    synthesizer = StubSynthesizer()
    services = make_services(
        make_settings(groq_api_key="gsk"),
        {"u1": "Story"},
        factory=factory,
        synthesizer=synthesizer,
    )

    events = await run_job(PipelineOrchestrator(Job(urls=("u1",)), services))

    assert [event for event in events if isinstance(event, ContentEvent)] == [
        ContentEvent("Done.")
    ]
    assert synthesizer.texts == ["Done."]


@pytest.mark.asyncio
async def test_empty_script_is_a_generation_error(make_settings) -> None:
    factory = RecordingFactory([GenerationChunk("", True)])
    services = make_services(
        make_settings(groq_api_key="gsk"), {"u1": "Story"}, factory=factory
    )

    events = await run_job(PipelineOrchestrator(Job(urls=("u1",)), services))

    assert isinstance(events[-1], ErrorEvent)
    assert "empty script" in events[-1].message


@pytest.mark.asyncio
async def test_synthesis_failure_emits_error(make_settings) -> None:
    services = make_services(
        make_settings(groq_api_key="gsk"),
        {"u1": "Story"},
        synthesizer=StubSynthesizer(AudioSynthesisError("quota exceeded")),
    )
    orchestrator = PipelineOrchestrator(Job(urls=("u1",)), services)

    events = await run_job(orchestrator)

    assert terminal_events(events) == [ErrorEvent("quota exceeded")]
    assert orchestrator.state is JobState.ERROR


@pytest.mark.asyncio
async def test_unexpected_exception_becomes_generic_error(make_settings) -> None:
    services = make_services(
        make_settings(groq_api_key="gsk"),
        {"u1": "Story"},
        synthesizer=StubSynthesizer(KeyError("oops")),
    )

    events = await run_job(PipelineOrchestrator(Job(urls=("u1",)), services))

    assert terminal_events(events) == [ErrorEvent(GENERIC_ERROR_MESSAGE)]


@pytest.mark.asyncio
async def test_job_prompt_overrides_win(make_settings) -> None:
    factory = RecordingFactory(DEFAULT_CHUNKS)
    services = make_services(
        make_settings(groq_api_key="gsk"), {"u1": "Story"}, factory=factory
    )
    services.system_prompt_template = "configured system"
    services.user_prompt_template = "configured user {content}"
    job = Job(
        urls=("u1",),
        system_prompt="Briefing for {date}",
        user_prompt="Digest: {content}",
    )

    await run_job(PipelineOrchestrator(job, services))

    user_prompt, system_prompt = factory.providers[0].prompts[0]
    assert system_prompt == "Briefing for Monday, October 19, 2026"
    assert user_prompt == "Digest: \n\nFrom u1:\nStory"


@pytest.mark.asyncio
async def test_orchestrator_runs_only_once(make_settings) -> None:
    services = make_services(make_settings(groq_api_key="gsk"), {"u1": "Story"})
    orchestrator = PipelineOrchestrator(Job(urls=("u1",)), services)
    await run_job(orchestrator)

    with pytest.raises(RuntimeError):
        await run_job(orchestrator)
