"""Navigation-menu link discovery for the crawl frontier."""

from __future__ import annotations

import logging
from collections.abc import Collection

from src.audit.document import PageDocument
from src.audit.urls import canonical_url, canonicalize, origin_of, parse_url

logger = logging.getLogger(__name__)

# Most specific first. The first tier that matches any anchor is used on its own.
MENU_SELECTOR_TIERS: tuple[str, ...] = (
    ", ".join(
        f"{sel} a"
        for sel in (
            "#main-nav", "#main-navigation", "#main-menu",
            "#primary-nav", "#primary-navigation", "#primary-menu",
            ".main-nav", ".main-navigation", ".main-menu",
            ".primary-nav", ".primary-navigation", ".primary-menu",
        )
    ),
    "header a",
    '[role="navigation"] a',
    "nav a",
)


def _menu_anchors(page: PageDocument):
    for tier, selector in enumerate(MENU_SELECTOR_TIERS):
        anchors = page.select(selector)
        if anchors:
            logger.debug("menu tier matched", extra={"url": page.url, "tier": tier, "anchors": len(anchors)})
            return anchors
    return []


def extract_menu_links(
    page: PageDocument,
    base_url: str,
    already_seen: Collection[str],
) -> list[str]:
    """Return same-origin menu URLs not in *already_seen*, deduplicated, in discovery order."""
    base = parse_url(base_url)
    if base is None:
        return []
    base_origin = origin_of(base)
    seen = {canonicalize(u) for u in already_seen}

    found: dict[str, None] = {}
    for anchor in _menu_anchors(page):
        href = anchor.get("href")
        if not isinstance(href, str):
            continue
        href = href.strip()
        if not href or href.startswith("#"):
            continue

        parts = parse_url(href, base_url)
        if parts is None:
            continue
        if origin_of(parts) != base_origin:
            continue

        url = canonical_url(parts)
        if url in seen or url in found:
            continue
        found[url] = None

    return list(found)
