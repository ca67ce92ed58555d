"""Application factory for the FastAPI service."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from functools import partial
from pathlib import Path

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pydantic import SecretStr

from .config import PROJECT_ROOT, Settings, get_settings
from .pipeline import PipelineServices, ProgressEventEmitter
from .providers import ProviderResolver, create_provider
from .routers.podcast import router as podcast_router
from .services.content import ContentCollector, FirecrawlFetcher
from .services.tts_service import ElevenLabsSynthesizer


def _configure_logging() -> None:
    """Configure logging based on LOG_LEVEL environment variable."""
    # Load .env file first to ensure LOG_FILE is available
    load_dotenv()

    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handlers: list[logging.Handler] = []

    log_file = os.getenv("LOG_FILE")
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    logging.getLogger("podcast_engine").setLevel(log_level)
    logging.getLogger("uvicorn").setLevel(log_level)
    logging.getLogger("uvicorn.access").setLevel(log_level)
    logging.getLogger("uvicorn.error").setLevel(log_level)

    # Quiet noisy transport logs unless debugging
    if log_level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


def _secret(value: SecretStr | None) -> str | None:
    return value.get_secret_value() if value is not None else None


def _resolve_under(base: Path, p: Path) -> Path:
    # Allow absolute paths as-is (useful for tests and external mounts).
    if p.is_absolute():
        return p.resolve()
    resolved = (base / p).resolve()
    if not resolved.is_relative_to(base):
        raise ValueError(f"Configured path {resolved} escapes project root {base}")
    return resolved


def build_pipeline_services(
    settings: Settings, http_client: httpx.AsyncClient, audio_dir: Path
) -> PipelineServices:
    """Wire the collaborators shared by every podcast job."""

    fetcher = FirecrawlFetcher(
        _secret(settings.firecrawl_api_key),
        base_url=str(settings.firecrawl_base_url),
        http_client=http_client,
    )
    synthesizer = ElevenLabsSynthesizer(
        _secret(settings.elevenlabs_api_key),
        audio_dir,
        http_client=http_client,
        base_url=str(settings.elevenlabs_base_url),
        voice_id=settings.elevenlabs_voice_id,
        model_id=settings.elevenlabs_model_id,
        output_format=settings.elevenlabs_output_format,
    )
    return PipelineServices(
        collector=ContentCollector(fetcher),
        resolver=ProviderResolver(settings),
        synthesizer=synthesizer,
        provider_factory=partial(
            create_provider,
            http_client=http_client,
            timeout=settings.request_timeout,
        ),
        system_prompt_template=settings.system_prompt_template,
        user_prompt_template=settings.user_prompt_template,
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    # Configure logging first thing
    _configure_logging()

    settings = settings or get_settings()

    audio_dir = _resolve_under(PROJECT_ROOT, settings.audio_output_dir)
    audio_dir.mkdir(parents=True, exist_ok=True)

    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout, connect=10.0),
        limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            await http_client.aclose()

    app = FastAPI(
        title="Podcast Engine",
        version="0.1.0",
        description="Turns web pages into a narrated podcast briefing.",
        lifespan=lifespan,
    )

    app.state.pipeline_services = build_pipeline_services(
        settings, http_client, audio_dir
    )
    app.state.event_emitter = ProgressEventEmitter()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(podcast_router)
    app.mount("/audio", StaticFiles(directory=audio_dir), name="audio")

    @app.get("/health", tags=["health"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return app


__all__ = ["build_pipeline_services", "create_app"]
