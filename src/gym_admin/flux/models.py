"""Result types for the SQL execution endpoint.

The remote backend answers in several JSON layouts depending on the
statement and the backend version. ``decode_response`` maps each of them to a
single tagged value, trying the known layouts in a fixed order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ResponseShape(str, Enum):
    BARE_LIST = "bare_list"
    ROWS_FIELD = "rows_field"
    SUCCESS_DATA = "success_data"
    SUCCESS_RESULT_ROWS = "success_result_rows"
    NO_ROWS = "no_rows"


@dataclass(frozen=True)
class DecodedResponse:
    shape: ResponseShape
    rows: list[dict[str, Any]]
    raw: Any = None


@dataclass
class QueryResult:
    rows: list[dict[str, Any]] = field(default_factory=list)
    error: Exception | None = None
    raw: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _bare_list(body: Any) -> list | None:
    return body if isinstance(body, list) else None


def _rows_field(body: Any) -> list | None:
    if isinstance(body, dict) and isinstance(body.get("rows"), list):
        return body["rows"]
    return None


def _success_data(body: Any) -> list | None:
    if isinstance(body, dict) and body.get("success") and isinstance(body.get("data"), list):
        return body["data"]
    return None


def _success_result_rows(body: Any) -> list | None:
    if not isinstance(body, dict) or not body.get("success"):
        return None
    result = body.get("result")
    if isinstance(result, dict) and isinstance(result.get("rows"), list):
        return result["rows"]
    return None


_DECODERS = (
    (ResponseShape.BARE_LIST, _bare_list),
    (ResponseShape.ROWS_FIELD, _rows_field),
    (ResponseShape.SUCCESS_DATA, _success_data),
    (ResponseShape.SUCCESS_RESULT_ROWS, _success_result_rows),
)


def decode_response(body: Any) -> DecodedResponse:
    for shape, decoder in _DECODERS:
        rows = decoder(body)
        if rows is not None:
            return DecodedResponse(shape=shape, rows=rows)
    # Statements without a result set (INSERT/UPDATE/DELETE) keep the raw
    # body so callers can read affected-row metadata.
    return DecodedResponse(shape=ResponseShape.NO_ROWS, rows=[], raw=body)
