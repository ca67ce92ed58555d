"""Progress events and their Server-Sent Events encoding."""

from __future__ import annotations

import json
import logging
from contextlib import aclosing
from dataclasses import dataclass
from typing import Any, AsyncIterator, ClassVar, Union

from sse_starlette.sse import ServerSentEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateEvent:
    message: str

    terminal: ClassVar[bool] = False

    def to_payload(self) -> dict[str, Any]:
        return {"type": "update", "message": self.message}


@dataclass(frozen=True)
class ContentEvent:
    content: str

    terminal: ClassVar[bool] = False

    def to_payload(self) -> dict[str, Any]:
        return {"type": "content", "content": self.content}


@dataclass(frozen=True)
class CompleteEvent:
    audio_file_name: str

    terminal: ClassVar[bool] = True

    def to_payload(self) -> dict[str, Any]:
        return {"type": "complete", "audioFileName": self.audio_file_name}


@dataclass(frozen=True)
class ErrorEvent:
    message: str

    terminal: ClassVar[bool] = True

    def to_payload(self) -> dict[str, Any]:
        return {"type": "error", "message": self.message}


ProgressEvent = Union[UpdateEvent, ContentEvent, CompleteEvent, ErrorEvent]

MISSING_TERMINAL_MESSAGE = "The podcast stream ended unexpectedly"


class ProgressEventEmitter:
    """Serialize progress events onto the wire, closing after the terminal one."""

    sep = "\n"

    def encode(self, event: ProgressEvent) -> ServerSentEvent:
        """Return the `data: <json>` frame for one event."""

        return ServerSentEvent(data=json.dumps(event.to_payload()), sep=self.sep)

    async def stream(
        self, events: AsyncIterator[ProgressEvent]
    ) -> AsyncIterator[ServerSentEvent]:
        async with aclosing(events):
            async for event in events:
                yield self.encode(event)
                if event.terminal:
                    return

        logger.error("Event source finished without a terminal event")
        yield self.encode(ErrorEvent(MISSING_TERMINAL_MESSAGE))


__all__ = [
    "CompleteEvent",
    "ContentEvent",
    "ErrorEvent",
    "ProgressEvent",
    "ProgressEventEmitter",
    "UpdateEvent",
]
