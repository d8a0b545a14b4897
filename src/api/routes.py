"""POST /analyze, GET /reports/{id}, POST /reports/{id}/send endpoint handlers."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sse_starlette.sse import EventSourceResponse

from src.api import service
from src.api.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    SendReportRequest,
    SendReportResponse,
    StoredReport,
)
from src.audit.crawler import SiteCrawler
from src.audit.errors import InvalidURLError, StartPageError
from src.cache.redis import ReportCache
from src.mail.mailer import MailError, MailNotConfiguredError, ReportMailer

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_crawler(request: Request) -> SiteCrawler:
    return request.app.state.crawler


def _get_cache(request: Request) -> ReportCache:
    return request.app.state.cache


def _get_mailer(request: Request) -> ReportMailer:
    return request.app.state.mailer


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(
    body: AnalyzeRequest,
    crawler: SiteCrawler = Depends(_get_crawler),
    cache: ReportCache = Depends(_get_cache),
):
    try:
        return await service.analyze_site(crawler, cache, body.url)
    except InvalidURLError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except StartPageError as exc:
        raise HTTPException(
            status_code=502,
            detail=f"The analysis could not be completed: {exc.cause}",
        )


@router.post("/analyze/stream")
async def analyze_stream(
    body: AnalyzeRequest,
    crawler: SiteCrawler = Depends(_get_crawler),
    cache: ReportCache = Depends(_get_cache),
):
    return EventSourceResponse(service.stream_analysis(crawler, cache, body.url))


@router.get("/reports/{report_id}", response_model=StoredReport)
async def get_report(
    report_id: str,
    cache: ReportCache = Depends(_get_cache),
):
    stored = await service.get_report(cache, report_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="Report not found or expired")
    return stored


@router.post("/reports/{report_id}/send", response_model=SendReportResponse)
async def send_report(
    report_id: str,
    body: SendReportRequest,
    cache: ReportCache = Depends(_get_cache),
    mailer: ReportMailer = Depends(_get_mailer),
):
    try:
        await service.send_report(cache, mailer, report_id, body.email)
    except service.ReportNotFoundError:
        raise HTTPException(status_code=404, detail="Report not found or expired")
    except MailNotConfiguredError:
        raise HTTPException(status_code=503, detail="Email delivery is not configured")
    except MailError:
        logger.warning("report email failed", extra={"report_id": report_id}, exc_info=True)
        raise HTTPException(status_code=502, detail="The report email could not be sent")
    return SendReportResponse(report_id=report_id, email=body.email)
