"""Analysis error taxonomy."""

from __future__ import annotations


class AnalysisError(Exception):
    """Base class for failures that abort an analysis."""


class InvalidURLError(AnalysisError):
    """The start URL cannot be parsed into an absolute http(s) URL."""


class FetchError(AnalysisError):
    """A page could not be retrieved (network error, timeout, HTTP error)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class StartPageError(AnalysisError):
    """The start page could not be fetched or parsed; no report is produced."""

    def __init__(self, url: str, cause: Exception) -> None:
        super().__init__(f"Could not analyze start page {url}: {cause}")
        self.url = url
        self.cause = cause
