"""FastAPI app entrypoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.api.routes import router
from src.audit.crawler import SiteCrawler
from src.audit.fetch import build_fetcher
from src.cache.redis import ReportCache, create_redis_client
from src.config import get_settings
from src.logging_config import setup_logging
from src.mail.mailer import ReportMailer

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # Initialize logging FIRST so all subsequent operations produce JSON logs
    setup_logging(settings.log_level)
    logger.info("starting geo readiness service")

    redis_client = await create_redis_client(settings.redis_url)
    cache = ReportCache(redis_client, default_ttl=settings.report_ttl_seconds)

    crawler = SiteCrawler(build_fetcher(settings), max_pages=settings.max_pages)
    mailer = ReportMailer(
        api_url=settings.mail_api_url,
        api_key=settings.mail_api_key,
        sender=settings.mail_from,
        timeout=settings.mail_timeout_seconds,
    )

    # Attach to app state for dependency injection
    app.state.settings = settings
    app.state.cache = cache
    app.state.crawler = crawler
    app.state.mailer = mailer

    logger.info(
        "geo readiness service ready",
        extra={
            "fetcher_provider": settings.fetcher_provider,
            "max_pages": settings.max_pages,
            "report_ttl_seconds": settings.report_ttl_seconds,
            "mail_enabled": mailer.configured,
        },
    )

    yield

    logger.info("shutting down geo readiness service")
    await redis_client.aclose()


app = FastAPI(title="GEO Readiness Service", lifespan=lifespan)
app.include_router(router)


@app.get("/health")
async def health():
    return {"status": "ok"}
