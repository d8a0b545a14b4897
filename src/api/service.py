"""Service layer — orchestrates analysis operations for the API routes."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncGenerator

from src.api.schemas import AnalyzeResponse, StoredReport
from src.audit.aggregate import interpret_score
from src.audit.crawler import SiteCrawler
from src.audit.errors import AnalysisError, InvalidURLError
from src.audit.urls import normalize_start_url
from src.cache.redis import ReportCache
from src.mail.mailer import ReportMailer

logger = logging.getLogger(__name__)

# Holds running stream crawls so they finish after a client disconnect.
_background_tasks: set[asyncio.Task[None]] = set()


class ReportNotFoundError(LookupError):
    """No live report exists for the given id."""


async def analyze_site(
    crawler: SiteCrawler,
    cache: ReportCache,
    raw_url: str,
) -> AnalyzeResponse:
    """Crawl the site, cache the full report and return the summary.

    Raises :class:`InvalidURLError` or :class:`StartPageError`; no score is
    produced in either case.
    """
    url = normalize_start_url(raw_url)
    report = await crawler.crawl(url)
    report_id = await cache.put(url, report)
    if report_id is None:
        logger.warning("report not cached, email unavailable", extra={"url": url})

    return AnalyzeResponse(
        report_id=report_id,
        url=url,
        pages_crawled=report.pages_crawled,
        summary=report.summary,
        interpretation=interpret_score(report.summary.average_score),
    )


async def stream_analysis(
    crawler: SiteCrawler,
    cache: ReportCache,
    raw_url: str,
) -> AsyncGenerator[dict[str, str], None]:
    """Yield SSE-formatted crawl progress followed by the summary.

    If the client disconnects, the crawl continues in the background so the
    report still gets cached.
    """
    try:
        url = normalize_start_url(raw_url)
    except InvalidURLError as exc:
        yield {"event": "error", "data": json.dumps({"message": str(exc)})}
        yield {"event": "done", "data": "{}"}
        return

    logger.info("streaming analysis started", extra={"url": url})
    queue: asyncio.Queue[tuple[str, dict[str, Any]] | None] = asyncio.Queue()

    async def on_event(event: str, data: dict[str, Any]) -> None:
        await queue.put((event, data))

    async def run_and_signal_done() -> None:
        try:
            report = await crawler.crawl(url, on_event=on_event)
            report_id = await cache.put(url, report)
            response = AnalyzeResponse(
                report_id=report_id,
                url=url,
                pages_crawled=report.pages_crawled,
                summary=report.summary,
                interpretation=interpret_score(report.summary.average_score),
            )
            await queue.put(("result", response.model_dump(mode="json")))
        except AnalysisError:
            logger.warning("streaming analysis failed", extra={"url": url}, exc_info=True)
            await queue.put(("error", {"message": "The analysis could not be completed."}))
        except Exception:
            logger.exception("streaming analysis crashed", extra={"url": url})
            await queue.put(("error", {"message": "The analysis could not be completed."}))
        finally:
            await queue.put(None)  # sentinel

    task = asyncio.create_task(run_and_signal_done())
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)

    while True:
        item = await queue.get()
        if item is None:
            break
        event, data = item
        yield {"event": event, "data": json.dumps(data)}
    yield {"event": "done", "data": "{}"}


async def get_report(cache: ReportCache, report_id: str) -> StoredReport | None:
    """Retrieve a cached report by id."""
    return await cache.get(report_id)


async def send_report(
    cache: ReportCache,
    mailer: ReportMailer,
    report_id: str,
    recipient: str,
) -> StoredReport:
    """Email the detailed report and drop it from the cache.

    Raises :class:`ReportNotFoundError` if the report expired, and
    :class:`src.mail.mailer.MailError` if delivery fails (the report is kept so
    the caller can retry).
    """
    stored = await cache.get(report_id)
    if stored is None:
        raise ReportNotFoundError(report_id)

    await mailer.send_report(recipient, stored.url, stored.report)
    await cache.delete(report_id)
    logger.info("report sent", extra={"report_id": report_id, "url": stored.url})
    return stored
