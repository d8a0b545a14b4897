"""HTTP route tests against an app wired with fakes."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from fakeredis.aioredis import FakeRedis
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.routes import router
from src.audit.crawler import SiteCrawler
from src.audit.errors import FetchError
from src.cache.redis import ReportCache
from src.mail.mailer import MailError, MailNotConfiguredError

HOME = (
    "<html><head><title>Home</title></head><body>"
    '<nav><a href="/about">About</a></nav><h1>Home</h1></body></html>'
)
ABOUT = "<html><head><title>About</title></head><body><h1>About</h1></body></html>"


class DictFetcher:
    def __init__(self, pages: dict[str, str]) -> None:
        self.pages = pages

    async def fetch_html(self, url: str) -> str:
        if url not in self.pages:
            raise FetchError(url, "HTTP 404")
        return self.pages[url]


@pytest.fixture
def redis_client():
    return FakeRedis(decode_responses=True)


@pytest.fixture
def mailer():
    mock = MagicMock()
    mock.send_report = AsyncMock()
    return mock


@pytest.fixture
def app(redis_client, mailer) -> FastAPI:
    app = FastAPI()
    app.include_router(router)
    app.state.crawler = SiteCrawler(
        DictFetcher({"https://example.com/": HOME, "https://example.com/about": ABOUT})
    )
    app.state.cache = ReportCache(redis_client, default_ttl=600)
    app.state.mailer = mailer
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


def test_analyze_returns_summary_and_report_id(client: TestClient):
    resp = client.post("/analyze", json={"url": "example.com"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["url"] == "https://example.com/"
    assert body["pages_crawled"] == 2
    assert body["report_id"]
    assert 0 <= body["summary"]["average_score"] <= 100
    assert body["summary"]["check_stats"]["Title Tag"] == {"passed": 2, "total": 2}
    assert "detailed_report" not in body
    assert "interpretation" in body


def test_full_report_is_retrievable(client: TestClient):
    report_id = client.post("/analyze", json={"url": "https://example.com"}).json()["report_id"]
    resp = client.get(f"/reports/{report_id}")
    assert resp.status_code == 200
    stored = resp.json()
    assert stored["url"] == "https://example.com/"
    assert stored["report"]["pages_crawled"] == 2
    assert len(stored["report"]["detailed_report"]) == 19


def test_unknown_report_is_404(client: TestClient):
    assert client.get("/reports/does-not-exist").status_code == 404


def test_invalid_url_is_422(client: TestClient):
    resp = client.post("/analyze", json={"url": "ftp://example.com"})
    assert resp.status_code == 422


def test_unreachable_start_page_reports_failure_not_score(client: TestClient):
    resp = client.post("/analyze", json={"url": "https://unreachable.example"})
    assert resp.status_code == 502
    body = resp.json()
    assert "could not be completed" in body["detail"]
    assert "summary" not in body


def test_send_report_emails_and_deletes(client: TestClient, mailer):
    report_id = client.post("/analyze", json={"url": "example.com"}).json()["report_id"]

    resp = client.post(f"/reports/{report_id}/send", json={"email": "owner@example.org"})

    assert resp.status_code == 200
    assert resp.json() == {"status": "sent", "report_id": report_id, "email": "owner@example.org"}
    recipient, url, report = mailer.send_report.await_args.args
    assert (recipient, url) == ("owner@example.org", "https://example.com/")
    assert report.pages_crawled == 2
    assert client.get(f"/reports/{report_id}").status_code == 404


def test_send_report_unknown_id(client: TestClient, mailer):
    resp = client.post("/reports/nope/send", json={"email": "owner@example.org"})
    assert resp.status_code == 404
    mailer.send_report.assert_not_awaited()


def test_send_report_rejects_bad_email(client: TestClient):
    report_id = client.post("/analyze", json={"url": "example.com"}).json()["report_id"]
    resp = client.post(f"/reports/{report_id}/send", json={"email": "not-an-email"})
    assert resp.status_code == 422


def test_send_report_mail_failure_keeps_report(client: TestClient, mailer):
    mailer.send_report.side_effect = MailError("boom")
    report_id = client.post("/analyze", json={"url": "example.com"}).json()["report_id"]

    resp = client.post(f"/reports/{report_id}/send", json={"email": "owner@example.org"})

    assert resp.status_code == 502
    assert client.get(f"/reports/{report_id}").status_code == 200


def test_send_report_mail_not_configured(client: TestClient, mailer):
    mailer.send_report.side_effect = MailNotConfiguredError("no key")
    report_id = client.post("/analyze", json={"url": "example.com"}).json()["report_id"]
    resp = client.post(f"/reports/{report_id}/send", json={"email": "owner@example.org"})
    assert resp.status_code == 503


def _sse_events(text: str) -> list[tuple[str, dict]]:
    events = []
    for chunk in text.replace("\r\n", "\n").split("\n\n"):
        event, data = None, None
        for line in chunk.splitlines():
            if line.startswith("event:"):
                event = line.split(":", 1)[1].strip()
            elif line.startswith("data:"):
                data = json.loads(line.split(":", 1)[1].strip())
        if event:
            events.append((event, data))
    return events


def test_stream_emits_progress_then_result(client: TestClient):
    resp = client.post("/analyze/stream", json={"url": "example.com"})
    assert resp.status_code == 200
    events = _sse_events(resp.text)
    names = [name for name, _ in events]
    assert names[0] == "started"
    assert names.count("page") == 2
    assert names[-2:] == ["result", "done"]
    result = events[-2][1]
    assert result["pages_crawled"] == 2
    assert result["report_id"]


def test_stream_reports_fatal_error(client: TestClient):
    resp = client.post("/analyze/stream", json={"url": "https://unreachable.example"})
    names = [name for name, _ in _sse_events(resp.text)]
    assert "error" in names
    assert "result" not in names
    assert names[-1] == "done"


def test_stream_rejects_invalid_url(client: TestClient):
    resp = client.post("/analyze/stream", json={"url": "   "})
    events = _sse_events(resp.text)
    assert [name for name, _ in events] == ["error", "done"]
