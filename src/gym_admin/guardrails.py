from __future__ import annotations

import math
import re
from typing import Any, Iterable, Mapping

from .errors import GuardrailError

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def sanitize_identifier(identifier: str, field_name: str) -> str:
    if not _IDENTIFIER_RE.match(identifier):
        raise GuardrailError(f"Invalid identifier for {field_name}")
    return identifier


def sql_literal(value: Any) -> str:
    """Render a Python value as a SQL literal.

    Strings are single-quoted with embedded quotes doubled, so interpolated
    operator input cannot terminate the literal.
    """
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise GuardrailError(f"Cannot render non-finite number {value!r} as SQL")
        return repr(value)
    text = str(value)
    return "'" + text.replace("'", "''") + "'"


def sql_literal_list(values: Iterable[Any]) -> str:
    rendered = [sql_literal(v) for v in values]
    if not rendered:
        raise GuardrailError("Cannot render an empty value list")
    return "(" + ", ".join(rendered) + ")"


def detect_statement_type(sql: str) -> str:
    stripped = sql.strip().split()
    if not stripped:
        return ""
    return stripped[0].upper()


def is_read_only(sql: str) -> bool:
    return detect_statement_type(sql) in {"SELECT", "WITH", "SHOW", "DESCRIBE", "EXPLAIN"}


def build_insert(table: str, values: Mapping[str, Any]) -> str:
    if not values:
        raise GuardrailError("INSERT requires at least one column")
    columns = ", ".join(sanitize_identifier(c, "column") for c in values)
    literals = ", ".join(sql_literal(v) for v in values.values())
    return f"INSERT INTO {sanitize_identifier(table, 'table')} ({columns}) VALUES ({literals})"


def build_update(table: str, values: Mapping[str, Any], where: Mapping[str, Any]) -> str:
    if not values:
        raise GuardrailError("UPDATE requires at least one column")
    if not where:
        raise GuardrailError("UPDATE requires a WHERE condition")
    assignments = ", ".join(
        f"{sanitize_identifier(c, 'column')} = {sql_literal(v)}" for c, v in values.items()
    )
    conditions = " AND ".join(
        f"{sanitize_identifier(c, 'column')} = {sql_literal(v)}" for c, v in where.items()
    )
    return f"UPDATE {sanitize_identifier(table, 'table')} SET {assignments} WHERE {conditions}"
