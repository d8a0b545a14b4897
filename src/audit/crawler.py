"""Site crawler — fetch the start page, follow its menu, score every page."""

from __future__ import annotations

import asyncio
import logging
import time

from src.api.schemas import AggregateReport
from src.audit.aggregate import aggregate
from src.audit.checks import PageResult, check_page
from src.audit.document import parse_html
from src.audit.events import EventCallback, emit_event
from src.audit.errors import StartPageError
from src.audit.fetch import PageFetcher
from src.audit.links import extract_menu_links

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 10


def _summarize(result: PageResult) -> dict[str, object]:
    passed = sum(1 for c in result.checks if c.passed)
    return {"url": result.url, "passed": passed, "total": len(result.checks)}


class SiteCrawler:
    """Crawls at most ``max_pages`` same-site pages and aggregates their checks.

    The start page is fetched first; its navigation menu supplies up to
    ``max_pages - 1`` further pages, which are fetched concurrently. Only a
    start-page failure is fatal. Any other page that fails is logged and left
    out of the report.
    """

    def __init__(self, fetcher: PageFetcher, max_pages: int = DEFAULT_MAX_PAGES) -> None:
        if max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        self._fetcher = fetcher
        self._max_pages = max_pages

    async def crawl(
        self,
        start_url: str,
        on_event: EventCallback | None = None,
    ) -> AggregateReport:
        """Crawl from *start_url* and return the aggregated report.

        Raises :class:`StartPageError` if the start page cannot be fetched or parsed.
        """
        started = time.monotonic()
        logger.info("crawl started", extra={"url": start_url, "max_pages": self._max_pages})
        await emit_event(on_event, "started", {"url": start_url, "max_pages": self._max_pages})

        try:
            html = await self._fetcher.fetch_html(start_url)
            document = parse_html(html, start_url)
            home = check_page(document, start_url)
        except Exception as exc:
            logger.warning("start page failed", extra={"url": start_url}, exc_info=True)
            raise StartPageError(start_url, exc) from exc
        await emit_event(on_event, "page", _summarize(home))

        seen: set[str] = {start_url}
        candidates = extract_menu_links(document, start_url, seen)[: self._max_pages - 1]
        logger.info(
            "menu links discovered",
            extra={"url": start_url, "candidates": len(candidates)},
        )

        tasks = []
        for url in candidates:
            if url in seen:
                continue
            seen.add(url)
            tasks.append(self._crawl_page(url, on_event))
        secondary = await asyncio.gather(*tasks)

        results = [home] + [r for r in secondary if r is not None]
        report = aggregate(results)

        logger.info(
            "crawl completed",
            extra={
                "url": start_url,
                "pages_attempted": len(tasks) + 1,
                "pages_crawled": report.pages_crawled,
                "average_score": report.summary.average_score,
                "elapsed_s": round(time.monotonic() - started, 2),
            },
        )
        await emit_event(
            on_event,
            "aggregated",
            {"pages_crawled": report.pages_crawled, "average_score": report.summary.average_score},
        )
        return report

    async def _crawl_page(self, url: str, on_event: EventCallback | None) -> PageResult | None:
        """Fetch, parse and check one secondary page; ``None`` on any failure."""
        try:
            html = await self._fetcher.fetch_html(url)
            result = check_page(parse_html(html, url), url)
        except Exception as exc:
            logger.warning("page skipped", extra={"url": url, "error": str(exc)}, exc_info=True)
            await emit_event(on_event, "page_failed", {"url": url})
            return None
        await emit_event(on_event, "page", _summarize(result))
        return result
