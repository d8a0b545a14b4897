"""Fixtures — mock Redis, page documents."""

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis

from src.audit.document import PageDocument, parse_html
from src.cache.redis import ReportCache


@pytest_asyncio.fixture
async def report_cache():
    """ReportCache backed by an in-memory FakeRedis instance."""
    client = FakeRedis(decode_responses=True)
    cache = ReportCache(client, default_ttl=3600)
    yield cache
    await client.aclose()


@pytest.fixture
def make_page():
    """Build a PageDocument from an HTML string."""

    def _make(html: str, url: str = "https://example.com/") -> PageDocument:
        return parse_html(html, url)

    return _make
