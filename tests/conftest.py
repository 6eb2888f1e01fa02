from __future__ import annotations

import threading
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest

from gym_admin.emails import EmailResult, GymMailer
from gym_admin.flux import QueryResult


class FakeExecutor:
    """Stands in for an SQL executor; answers by matching query fragments."""

    def __init__(self) -> None:
        self.queries: list[str] = []
        self._handlers: list[tuple[str, QueryResult | Callable[[str], QueryResult]]] = []
        self._lock = threading.Lock()

    def on(self, fragment: str, result: QueryResult | Callable[[str], QueryResult]) -> "FakeExecutor":
        self._handlers.append((fragment, result))
        return self

    def execute(self, query: str) -> QueryResult:
        with self._lock:
            self.queries.append(query)
        for fragment, result in self._handlers:
            if fragment in query:
                return result(query) if callable(result) else result
        return QueryResult(rows=[], raw={"rowCount": 1})

    def matching(self, fragment: str) -> list[str]:
        return [q for q in self.queries if fragment in q]


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def mailer() -> MagicMock:
    mock = MagicMock(spec=GymMailer)
    for name in ("send_welcome", "send_rejection", "send_status_change", "send_promotional"):
        getattr(mock, name).return_value = EmailResult(True)
    return mock
