"""Base class shared by every text-generation backend."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator, ClassVar

from ..errors import GenerationStreamError
from .types import BackendConfig, GenerationChunk

logger = logging.getLogger(__name__)


class TextGenerationProvider(ABC):
    """Stream generated text as `GenerationChunk`s.

    Subclasses implement `_stream` in terms of their native API. `generate`
    wraps it so every backend honours the same contract: the sequence ends
    with exactly one chunk flagged `is_final`, and transport failures surface
    as `GenerationStreamError` after any chunks already delivered.
    """

    # Native exceptions that indicate a transport or API failure
    transport_errors: ClassVar[tuple[type[BaseException], ...]] = ()

    def __init__(self, config: BackendConfig):
        self.config = config

    @abstractmethod
    def _stream(
        self, prompt: str, system_prompt: str
    ) -> AsyncIterator[GenerationChunk]:
        """Yield chunks from the native streaming API."""

    async def generate(
        self, prompt: str, system_prompt: str
    ) -> AsyncIterator[GenerationChunk]:
        stream = self._stream(prompt, system_prompt)
        try:
            async for chunk in stream:
                yield chunk
                if chunk.is_final:
                    return
        except GenerationStreamError:
            raise
        except self.transport_errors as exc:
            raise GenerationStreamError(
                f"{self.config.provider.value} stream failed: {exc}"
            ) from exc
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

        logger.warning(
            "%s stream ended without a completion signal",
            self.config.provider.value,
        )
        yield GenerationChunk(content="", is_final=True)


__all__ = ["TextGenerationProvider"]
