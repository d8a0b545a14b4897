"""Report email rendering and delivery through a transactional email API."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from src.api.schemas import AggregateReport
from src.audit.aggregate import PASSING_PERCENT, interpret_score, percent

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
)


class MailError(Exception):
    """The email could not be delivered."""


class MailNotConfiguredError(MailError):
    """No email API key or sender address is configured."""


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for exponential-backoff retry on the send POST."""

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0


_DEFAULT_RETRY = RetryConfig()

_RETRYABLE = (
    httpx.ConnectError,
    httpx.ConnectTimeout,
    httpx.ReadTimeout,
    httpx.WriteTimeout,
    httpx.PoolTimeout,
)


def report_subject(url: str) -> str:
    return f"Your AI Readiness Report for {url}"


def render_report_email(url: str, report: AggregateReport) -> str:
    """Render the detailed report as an HTML email body."""
    score = report.summary.average_score
    rows = []
    for name, detail in report.detailed_report.items():
        pass_percent = percent(detail.passed_count, detail.total_count)
        rows.append(
            {
                "name": name,
                "passed": detail.passed_count,
                "total": detail.total_count,
                "percent": pass_percent,
                "ok": pass_percent >= PASSING_PERCENT,
                "failures": detail.failures,
            }
        )
    template = _env.get_template("report_email.html")
    return template.render(
        url=url,
        score=score,
        interpretation=interpret_score(score),
        pages_crawled=report.pages_crawled,
        checks=rows,
    )


class ReportMailer:
    """Sends HTML email through a Resend-compatible HTTP API."""

    def __init__(
        self,
        *,
        api_url: str,
        api_key: str,
        sender: str,
        timeout: float = 10.0,
        retry_config: RetryConfig = _DEFAULT_RETRY,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_url = api_url
        self._api_key = api_key
        self._sender = sender
        self._timeout = timeout
        self._retry = retry_config
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._api_key and self._sender)

    async def send(self, recipient: str, subject: str, html_body: str) -> None:
        """POST the message, retrying network errors with exponential backoff.

        HTTP error statuses are not retried. Raises :class:`MailError` when the
        message could not be delivered.
        """
        if not self.configured:
            raise MailNotConfiguredError("email delivery is not configured")

        payload = {
            "from": self._sender,
            "to": [recipient],
            "subject": subject,
            "html": html_body,
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}

        for attempt in range(1 + self._retry.max_retries):
            try:
                async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                    resp = await client.post(self._api_url, json=payload, headers=headers)
                    resp.raise_for_status()
                logger.info("report email sent", extra={"recipient": recipient, "attempt": attempt + 1})
                return
            except _RETRYABLE as exc:
                if attempt < self._retry.max_retries:
                    delay = min(self._retry.base_delay * (2 ** attempt), self._retry.max_delay)
                    logger.warning(
                        "email send failed (attempt %d/%d), retrying in %.1fs: %s",
                        attempt + 1, self._retry.max_retries + 1, delay, exc,
                    )
                    await asyncio.sleep(delay)
                else:
                    raise MailError(
                        f"email send failed after {self._retry.max_retries + 1} attempts"
                    ) from exc
            except httpx.HTTPStatusError as exc:
                raise MailError(f"email API returned HTTP {exc.response.status_code}") from exc
            except httpx.HTTPError as exc:
                raise MailError(f"email send failed: {exc}") from exc

    async def send_report(self, recipient: str, url: str, report: AggregateReport) -> None:
        await self.send(recipient, report_subject(url), render_report_email(url, report))
