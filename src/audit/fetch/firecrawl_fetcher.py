"""Firecrawl page fetcher implementation."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from firecrawl import AsyncFirecrawl

from src.audit.errors import FetchError

logger = logging.getLogger(__name__)


def _extract_html(response: Any) -> str:
    """Pull raw HTML out of a Firecrawl response (dict or Document object)."""
    if isinstance(response, dict):
        return response.get("rawHtml") or response.get("raw_html") or response.get("html") or ""
    return getattr(response, "raw_html", None) or getattr(response, "html", None) or ""


class FirecrawlFetcher:
    """Fetches rendered page HTML through the Firecrawl API."""

    def __init__(
        self,
        api_key: str,
        api_url: str = "",
        timeout: float = 30.0,
        client: Any | None = None,
    ) -> None:
        if client is None:
            kwargs: dict = {"api_key": api_key}
            if api_url:
                kwargs["api_url"] = api_url
            client = AsyncFirecrawl(**kwargs)
        self._client = client
        self._timeout = timeout

    async def fetch_html(self, url: str) -> str:
        logger.debug("fetching page", extra={"url": url, "provider": "firecrawl"})
        try:
            response = await asyncio.wait_for(
                self._client.scrape(url, formats=["rawHtml"]),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise FetchError(url, f"timed out after {self._timeout:g}s") from exc
        except Exception as exc:
            raise FetchError(url, f"firecrawl error: {exc}") from exc

        html = _extract_html(response)
        if not html.strip():
            raise FetchError(url, "firecrawl returned no HTML")
        logger.debug("page fetched", extra={"url": url, "length": len(html)})
        return html
