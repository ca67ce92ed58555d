"""Podcast generation API routes."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Request
from sse_starlette.sse import EventSourceResponse

from ..errors import ProviderConfigError
from ..pipeline import PipelineOrchestrator, PipelineServices, ProgressEventEmitter
from ..providers import LLMProvider
from ..schemas.podcast import PodcastRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["podcast"])


@router.post("/generate-podcast", response_model=None, status_code=200)
async def generate_podcast(
    payload: PodcastRequest,
    request: Request,
) -> EventSourceResponse:
    """Stream podcast progress, script text and the audio file name as SSE."""

    services: PipelineServices = request.app.state.pipeline_services
    emitter: ProgressEventEmitter = request.app.state.event_emitter

    logger.info("Podcast request received for %d URL(s)", len(payload.urls))
    orchestrator = PipelineOrchestrator(payload.to_job(), services)
    return EventSourceResponse(
        emitter.stream(orchestrator.run()),
        headers={"Cache-Control": "no-store"},
    )


@router.get("/providers", status_code=200)
async def list_providers(request: Request) -> dict[str, Any]:
    """Return supported providers and those with configured credentials."""

    services: PipelineServices = request.app.state.pipeline_services
    available = services.resolver.available_providers()
    try:
        default: str | None = services.resolver.default_provider().value
    except ProviderConfigError:
        default = None
    return {
        "providers": [provider.value for provider in LLMProvider],
        "available": [provider.value for provider in available],
        "default": default,
    }


__all__ = ["router"]
