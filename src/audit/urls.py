"""URL helpers that never raise on malformed input."""

from __future__ import annotations

from urllib.parse import SplitResult, urljoin, urlsplit

from src.audit.errors import InvalidURLError

_VALID_SCHEMES = {"http", "https"}
_DEFAULT_PORTS = {"http": 80, "https": 443}


def parse_url(url: str, base: str | None = None) -> SplitResult | None:
    """Resolve *url* against *base* and split it, or return ``None`` if malformed."""
    try:
        absolute = urljoin(base, url) if base else url
        parts = urlsplit(absolute)
        # .port raises ValueError on out-of-range or non-numeric ports
        parts.port
    except (ValueError, TypeError):
        return None
    return parts


def hostname_of(url: str, base: str | None = None) -> str:
    """Return the lower-cased hostname of *url*, or ``""`` if there is none."""
    parts = parse_url(url, base)
    if parts is None:
        return ""
    return parts.hostname or ""


def origin_of(parts: SplitResult) -> tuple[str, str, int | None]:
    """Return the (scheme, host, port) origin triple, with default ports filled in."""
    scheme = parts.scheme.lower()
    port = parts.port if parts.port is not None else _DEFAULT_PORTS.get(scheme)
    return scheme, parts.hostname or "", port


def canonical_url(parts: SplitResult) -> str:
    """Fragment-free URL with a lower-cased scheme and host, no default port, and a non-empty path."""
    scheme = parts.scheme.lower()
    userinfo, at, hostport = parts.netloc.rpartition("@")
    hostport = hostport.lower()
    if parts.port is not None and parts.port == _DEFAULT_PORTS.get(scheme):
        hostport = hostport.rsplit(":", 1)[0]
    return parts._replace(
        scheme=scheme,
        netloc=f"{userinfo}{at}{hostport}",
        path=parts.path or "/",
        fragment="",
    ).geturl()


def canonicalize(url: str) -> str | None:
    parts = parse_url(url)
    return canonical_url(parts) if parts is not None else None


def normalize_start_url(raw: str) -> str:
    """Turn user input into an absolute http(s) URL.

    Input without a scheme gets ``https://`` prepended. Raises
    :class:`InvalidURLError` when the result has no host or a non-http scheme.
    """
    candidate = raw.strip()
    if not candidate:
        raise InvalidURLError("URL is empty")
    if "://" not in candidate:
        candidate = f"https://{candidate}"

    parts = parse_url(candidate)
    if parts is None or parts.scheme.lower() not in _VALID_SCHEMES or not parts.hostname:
        raise InvalidURLError(f"Not a valid website URL: {raw!r}")
    return canonical_url(parts)
