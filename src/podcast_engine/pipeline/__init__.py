"""Podcast generation pipeline package."""

from .events import (
    CompleteEvent,
    ContentEvent,
    ErrorEvent,
    ProgressEvent,
    ProgressEventEmitter,
    UpdateEvent,
)
from .orchestrator import Job, JobState, PipelineOrchestrator, PipelineServices

__all__ = [
    "CompleteEvent",
    "ContentEvent",
    "ErrorEvent",
    "Job",
    "JobState",
    "PipelineOrchestrator",
    "PipelineServices",
    "ProgressEvent",
    "ProgressEventEmitter",
    "UpdateEvent",
]
