"""Scatter/gather helpers for running independent statements concurrently.

The executor is synchronous, so each statement runs in a worker thread via
``asyncio.to_thread``. Statements passed to ``gather_queries`` have no
ordering guarantee relative to each other; callers that need ordering await
one batch before issuing the next.
"""

from __future__ import annotations

import asyncio
from typing import Iterable

from .client import SqlExecutor
from .models import QueryResult


async def run_query(executor: SqlExecutor, query: str) -> QueryResult:
    return await asyncio.to_thread(executor.execute, query)


async def gather_queries(executor: SqlExecutor, queries: Iterable[str]) -> list[QueryResult]:
    """Start every query before awaiting any; results keep the input order."""
    return list(await asyncio.gather(*(run_query(executor, q) for q in queries)))
