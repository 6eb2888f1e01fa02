from __future__ import annotations

import logging
from typing import Any

QUERY_PREVIEW_LIMIT = 120


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def log_extra(**kwargs: Any) -> dict[str, Any]:
    return {k: v for k, v in kwargs.items() if v is not None}


def query_preview(query: str | None, limit: int = QUERY_PREVIEW_LIMIT) -> str | None:
    """Single-line, truncated form of a statement for log records."""
    if query is None:
        return None
    collapsed = " ".join(query.split())
    if len(collapsed) <= limit:
        return collapsed
    return collapsed[: limit - 3] + "..."
