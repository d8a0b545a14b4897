"""JSON-LD structured data extraction."""

from __future__ import annotations

import json
import logging
from typing import Any

from src.audit.document import PageDocument

logger = logging.getLogger(__name__)

JSONLD_SELECTOR = 'script[type="application/ld+json"]'


def _entities(payload: Any) -> list[Any]:
    """Normalize a block payload to a list of entity objects."""
    if isinstance(payload, dict):
        graph = payload.get("@graph")
        if isinstance(graph, list):
            return graph
        return [payload]
    if isinstance(payload, list):
        return payload
    return []


def extract_schema_types(page: PageDocument) -> list[str]:
    """Return every declared ``@type`` across all JSON-LD blocks, in document order.

    A ``@type`` given as a list is flattened one level. Duplicates are kept.
    Blocks that are not valid JSON are skipped.
    """
    types: list[str] = []
    for index, script in enumerate(page.select(JSONLD_SELECTOR)):
        raw = script.string if script.string is not None else script.get_text()
        try:
            payload = json.loads(raw)
        except ValueError:
            logger.warning(
                "invalid json-ld block skipped",
                extra={"url": page.url, "block": index},
                exc_info=True,
            )
            continue

        for entity in _entities(payload):
            if not isinstance(entity, dict):
                continue
            declared = entity.get("@type")
            if isinstance(declared, str) and declared:
                types.append(declared)
            elif isinstance(declared, list):
                types.extend(t for t in declared if isinstance(t, str))
    return types
