"""Progress event helpers for the crawl pipeline."""

from __future__ import annotations

import logging
from typing import Any, Callable, Coroutine

logger = logging.getLogger(__name__)

# Async callback receiving (event_name, payload); used to stream crawl progress.
EventCallback = Callable[[str, dict[str, Any]], Coroutine[Any, Any, None]]


async def emit_event(
    on_event: EventCallback | None,
    event: str,
    data: dict[str, Any] | None = None,
) -> None:
    """Emit a crawl event if a callback is registered.

    A failing callback is logged and ignored so a disconnected listener never
    aborts the crawl.
    """
    if on_event is None:
        return
    logger.debug("crawl event emitted", extra={"event": event})
    try:
        await on_event(event, data or {})
    except Exception:
        logger.warning("event callback failed", extra={"event": event}, exc_info=True)
