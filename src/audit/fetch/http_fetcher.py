"""Direct HTTP page fetcher (httpx)."""

from __future__ import annotations

import asyncio
import logging

import httpx

from src.audit.errors import FetchError

logger = logging.getLogger(__name__)


class HttpFetcher:
    """Fetches pages with a plain GET, presenting a desktop browser User-Agent.

    ``timeout`` bounds the whole request, body included, not just each
    connect or read phase.
    """

    def __init__(
        self,
        *,
        user_agent: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._user_agent = user_agent
        self._timeout = timeout
        self._transport = transport

    async def _get(self, url: str) -> httpx.Response:
        async with httpx.AsyncClient(
            follow_redirects=True,
            headers={"User-Agent": self._user_agent, "Accept": "text/html,*/*;q=0.8"},
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp

    async def fetch_html(self, url: str) -> str:
        logger.debug("fetching page", extra={"url": url, "provider": "direct"})
        try:
            resp = await asyncio.wait_for(self._get(url), timeout=self._timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise FetchError(url, f"timed out after {self._timeout:g}s") from exc
        except httpx.HTTPStatusError as exc:
            raise FetchError(url, f"HTTP {exc.response.status_code}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(url, str(exc) or type(exc).__name__) from exc

        html = resp.text
        if not html.strip():
            raise FetchError(url, "empty response body")
        logger.debug(
            "page fetched",
            extra={"url": url, "status": resp.status_code, "length": len(html)},
        )
        return html
