"""Audio synthesis for finished podcast scripts."""

import asyncio
import logging
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional, Protocol

import httpx

from ..errors import AudioSynthesisError

logger = logging.getLogger(__name__)


class AudioSynthesizer(Protocol):
    async def synthesize(self, text: str) -> str:
        """Render `text` to audio and return a reference to the stored file."""
        ...


def timestamped_file_name(
    now: datetime, tag: Optional[str] = None, suffix: str = ".mp3"
) -> str:
    """Build a filesystem-safe name like `2024-01-02T19-30-00-000Z-1a2b3c.mp3`.

    The optional `tag` keeps jobs finishing in the same millisecond apart.
    """

    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    stamp = stamp.replace("+00:00", "Z").replace(":", "-").replace(".", "-")
    if tag:
        stamp = f"{stamp}-{tag}"
    return stamp + suffix


class ElevenLabsSynthesizer:
    """
    Text-to-speech through the ElevenLabs REST API.

    Audio is streamed from ElevenLabs, written to `output_dir`, and the file
    name (relative to `output_dir`) is returned so it can be served under
    `/audio/`.
    """

    def __init__(
        self,
        api_key: Optional[str],
        output_dir: Path,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: str = "https://api.elevenlabs.io/v1",
        voice_id: str = "21m00Tcm4TlvDq8ikWAM",
        model_id: str = "eleven_turbo_v2",
        output_format: str = "mp3_44100_128",
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._api_key = api_key
        self._output_dir = output_dir
        self._http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(120.0, connect=10.0)
        )
        self._base_url = base_url.rstrip("/")
        self._voice_id = voice_id
        self._model_id = model_id
        self._output_format = output_format
        self._clock = clock

    async def synthesize(self, text: str) -> str:
        if not self._api_key:
            raise AudioSynthesisError("ELEVENLABS_API_KEY is not configured")

        url = f"{self._base_url}/text-to-speech/{self._voice_id}/stream"
        headers = {
            "xi-api-key": self._api_key,
            "Content-Type": "application/json",
            "Accept": "audio/mpeg",
        }
        payload = {"text": text, "model_id": self._model_id}

        logger.info("Synthesizing %d characters of script", len(text))
        audio = bytearray()
        try:
            async with self._http_client.stream(
                "POST",
                url,
                params={"output_format": self._output_format},
                headers=headers,
                json=payload,
            ) as response:
                if response.status_code >= 400:
                    body = await response.aread()
                    detail = body.decode("utf-8", errors="ignore")[:200]
                    raise AudioSynthesisError(
                        f"ElevenLabs returned HTTP {response.status_code}: {detail}"
                    )
                async for chunk in response.aiter_bytes():
                    audio.extend(chunk)
        except httpx.HTTPError as exc:
            raise AudioSynthesisError(f"ElevenLabs request failed: {exc}") from exc

        if not audio:
            raise AudioSynthesisError("ElevenLabs returned no audio")

        file_name = timestamped_file_name(self._clock(), secrets.token_hex(3))
        path = self._output_dir / file_name
        try:
            await asyncio.to_thread(self._write, path, bytes(audio))
        except OSError as exc:
            raise AudioSynthesisError(f"Could not save audio file: {exc}") from exc

        logger.info("Audio file saved: %s (%d bytes)", path, len(audio))
        return file_name

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)


__all__ = ["AudioSynthesizer", "ElevenLabsSynthesizer", "timestamped_file_name"]
