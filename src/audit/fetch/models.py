"""Fetcher protocol shared by the page providers."""

from __future__ import annotations

from typing import Protocol


class PageFetcher(Protocol):
    """Retrieves the raw HTML of a page.

    Implementations raise :class:`src.audit.errors.FetchError` on network
    errors, timeouts, HTTP error statuses and empty bodies.
    """

    async def fetch_html(self, url: str) -> str: ...
