"""Client for the backend's generic SQL execution endpoint."""

from .client import (
    DirectExecutor,
    ExecutionContext,
    ProxiedExecutor,
    SqlExecutor,
    build_execute_url,
    select_executor,
)
from .fanout import gather_queries, run_query
from .models import QueryResult, ResponseShape, decode_response

__all__ = [
    "DirectExecutor",
    "ExecutionContext",
    "ProxiedExecutor",
    "QueryResult",
    "ResponseShape",
    "SqlExecutor",
    "build_execute_url",
    "decode_response",
    "gather_queries",
    "run_query",
    "select_executor",
]
