"""Collect page content for a job's URLs."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

import httpx

from ..errors import ContentFetchError, NoContentError

logger = logging.getLogger(__name__)


class ContentFetcher(Protocol):
    async def fetch(self, url: str) -> str:
        """Return normalized text for `url` or raise `ContentFetchError`."""
        ...


@dataclass(frozen=True)
class ContentFragment:
    source_url: str
    text: str
    ok: bool
    error: Optional[str] = None


class FirecrawlFetcher:
    """Scrape pages to markdown through the Firecrawl REST API."""

    def __init__(
        self,
        api_key: Optional[str],
        *,
        base_url: str = "https://api.firecrawl.dev/v1",
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(60.0, connect=10.0)
        )

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def fetch(self, url: str) -> str:
        if not self._api_key:
            raise ContentFetchError(url, "FIRECRAWL_API_KEY is not configured")

        try:
            response = await self._http_client.post(
                f"{self._base_url}/scrape",
                headers=self._headers,
                json={"url": url, "formats": ["markdown"]},
            )
        except httpx.HTTPError as exc:
            raise ContentFetchError(url, str(exc)) from exc

        if response.status_code >= 400:
            raise ContentFetchError(
                url, f"HTTP {response.status_code}: {response.text[:200]}"
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise ContentFetchError(url, "invalid JSON response") from exc

        if not isinstance(body, dict) or not body.get("success"):
            detail = body.get("error") if isinstance(body, dict) else None
            raise ContentFetchError(url, str(detail or "scrape was not successful"))

        data = body.get("data") or {}
        markdown = data.get("markdown") if isinstance(data, dict) else None
        if not isinstance(markdown, str) or not markdown.strip():
            raise ContentFetchError(url, "no markdown content returned")
        return markdown


class ContentCollector:
    """Fetch every URL concurrently, keeping failures as non-ok fragments."""

    def __init__(self, fetcher: ContentFetcher):
        self._fetcher = fetcher

    async def _fetch_one(self, url: str) -> ContentFragment:
        try:
            text = await self._fetcher.fetch(url)
        except ContentFetchError as exc:
            logger.warning("Excluding %s from the briefing: %s", url, exc.detail)
            return ContentFragment(
                source_url=url, text="", ok=False, error=exc.detail
            )
        logger.info("Fetched %d characters from %s", len(text), url)
        return ContentFragment(source_url=url, text=text, ok=True)

    async def collect(self, urls: Sequence[str]) -> list[ContentFragment]:
        """Return one fragment per URL, in input order."""

        return list(await asyncio.gather(*(self._fetch_one(url) for url in urls)))


def aggregate_fragments(fragments: Sequence[ContentFragment]) -> str:
    """Join successful fragments with a source header, in input order."""

    combined = "".join(
        f"\n\nFrom {fragment.source_url}:\n{fragment.text}"
        for fragment in fragments
        if fragment.ok
    )
    if not combined:
        raise NoContentError("No content could be scraped")
    return combined


__all__ = [
    "ContentCollector",
    "ContentFetcher",
    "ContentFragment",
    "FirecrawlFetcher",
    "aggregate_fragments",
]
