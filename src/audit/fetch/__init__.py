"""Page fetching submodule with configurable providers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .firecrawl_fetcher import FirecrawlFetcher
from .http_fetcher import HttpFetcher
from .models import PageFetcher

if TYPE_CHECKING:
    from src.config import Settings

__all__ = [
    "FirecrawlFetcher",
    "HttpFetcher",
    "PageFetcher",
    "build_fetcher",
]

logger = logging.getLogger(__name__)


def build_fetcher(settings: Settings) -> PageFetcher:
    """Build the page fetcher selected by ``settings.fetcher_provider``."""
    if settings.fetcher_provider == "firecrawl":
        if not settings.firecrawl_api_key:
            raise ValueError("FIRECRAWL_API_KEY is required when FETCHER_PROVIDER=firecrawl")
        fetcher: PageFetcher = FirecrawlFetcher(
            api_key=settings.firecrawl_api_key,
            api_url=settings.firecrawl_api_url,
            timeout=settings.fetch_timeout_seconds,
        )
    else:
        fetcher = HttpFetcher(
            user_agent=settings.fetch_user_agent,
            timeout=settings.fetch_timeout_seconds,
        )
    logger.info("page fetcher configured", extra={"provider": settings.fetcher_provider})
    return fetcher
