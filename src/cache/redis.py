"""Redis report cache — unique ids, TTL eviction."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone

import redis.asyncio as redis
from redis.backoff import ExponentialBackoff
from redis.retry import Retry

from src.api.schemas import AggregateReport, StoredReport

logger = logging.getLogger(__name__)

KEY_PREFIX = "report:"
_MAX_ID_ATTEMPTS = 3


def _generate_report_id() -> str:
    return uuid.uuid4().hex


class ReportCache:
    """Async store of completed reports, each expiring after a fixed TTL."""

    def __init__(self, client: redis.Redis, default_ttl: int = 3600) -> None:
        self._client = client
        self._default_ttl = default_ttl

    async def put(
        self, url: str, report: AggregateReport, ttl: int | None = None
    ) -> str | None:
        """Store *report* under a fresh id and return the id, or ``None`` on error."""
        effective_ttl = ttl if ttl is not None else self._default_ttl
        created_at = datetime.now(timezone.utc)
        try:
            for _ in range(_MAX_ID_ATTEMPTS):
                report_id = _generate_report_id()
                stored = StoredReport(
                    report_id=report_id,
                    url=url,
                    report=report,
                    created_at=created_at,
                    expires_at=created_at + timedelta(seconds=effective_ttl),
                )
                # NX: never overwrite an existing handle
                if await self._client.set(
                    f"{KEY_PREFIX}{report_id}",
                    stored.model_dump_json(),
                    ex=effective_ttl,
                    nx=True,
                ):
                    logger.debug("cache put", extra={"report_id": report_id, "ttl": effective_ttl})
                    return report_id
                logger.warning("report id collision", extra={"report_id": report_id})
        except redis.RedisError:
            logger.warning("cache put failed", extra={"url": url}, exc_info=True)
        return None

    async def get(self, report_id: str) -> StoredReport | None:
        """Return the cached report, or ``None`` on miss / error."""
        try:
            raw = await self._client.get(f"{KEY_PREFIX}{report_id}")
            if raw is None:
                logger.debug("cache miss", extra={"report_id": report_id})
                return None
            logger.debug("cache hit", extra={"report_id": report_id})
            return StoredReport.model_validate_json(raw)
        except redis.RedisError:
            logger.warning("cache get failed", extra={"report_id": report_id}, exc_info=True)
            return None

    async def delete(self, report_id: str) -> bool:
        """Remove a report. Returns ``True`` if it existed."""
        try:
            removed = await self._client.delete(f"{KEY_PREFIX}{report_id}")
            logger.debug("cache delete", extra={"report_id": report_id, "removed": removed})
            return bool(removed)
        except redis.RedisError:
            logger.warning("cache delete failed", extra={"report_id": report_id}, exc_info=True)
            return False


async def create_redis_client(redis_url: str) -> redis.Redis:
    # Strip credentials for logging (everything before @ if present)
    safe_url = redis_url.split("@")[-1] if "@" in redis_url else redis_url
    logger.info("connecting to redis", extra={"redis_url": safe_url})
    retry = Retry(ExponentialBackoff(), retries=3)
    return redis.from_url(
        redis_url,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        health_check_interval=30,
        retry=retry,
        retry_on_error=[redis.ConnectionError, redis.TimeoutError],
    )
