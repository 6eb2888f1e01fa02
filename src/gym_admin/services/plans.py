from __future__ import annotations

import datetime as dt
import uuid
from typing import Any, Iterable, Mapping

from ..errors import InvalidRequestError, QueryError
from ..flux import SqlExecutor, run_query
from ..guardrails import build_insert, build_update, sql_literal
from .models import Plan

PLAN_COLUMNS = frozenset({"plan_name", "price", "duration_days", "description", "is_active"})


def filter_plans(plans: Iterable[Plan], term: str | None) -> list[Plan]:
    if not term:
        return list(plans)
    needle = term.lower()
    return [p for p in plans if needle in (p.plan_name or "").lower()]


def _checked_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(fields) - PLAN_COLUMNS
    if unknown:
        raise InvalidRequestError(f"Unknown plan field(s): {', '.join(sorted(unknown))}")
    price = fields.get("price")
    if price is not None and price < 0:
        raise InvalidRequestError("Plan price cannot be negative")
    duration = fields.get("duration_days")
    if duration is not None and duration <= 0:
        raise InvalidRequestError("Plan duration must be at least one day")
    return dict(fields)


class PlanService:
    def __init__(self, executor: SqlExecutor) -> None:
        self._executor = executor

    async def list(self, gym_id: str) -> list[Plan]:
        result = await run_query(
            self._executor,
            f"SELECT * FROM plans WHERE gym_id = {sql_literal(gym_id)} ORDER BY created_at DESC",
        )
        if result.error:
            raise QueryError(f"Failed to load plans: {result.error}")
        return [Plan.from_row(row) for row in result.rows]

    async def add(self, gym_id: str, fields: Mapping[str, Any]) -> Plan:
        values = _checked_fields(fields)
        if not values.get("plan_name"):
            raise InvalidRequestError("Plan name is required")
        if values.get("price") is None:
            raise InvalidRequestError("Plan price is required")
        values.setdefault("is_active", True)
        row = {
            "id": str(uuid.uuid4()),
            "gym_id": gym_id,
            "created_at": dt.datetime.now(dt.timezone.utc).isoformat(),
            **values,
        }
        result = await run_query(self._executor, build_insert("plans", row))
        if result.error:
            raise QueryError(f"Failed to add plan: {result.error}")
        return Plan.from_row(row)

    async def update(self, gym_id: str, plan_id: str, fields: Mapping[str, Any]) -> None:
        values = _checked_fields(fields)
        query = build_update("plans", values, {"id": plan_id, "gym_id": gym_id})
        result = await run_query(self._executor, query)
        if result.error:
            raise QueryError(f"Failed to update plan: {result.error}")

    async def delete(self, gym_id: str, plan_id: str) -> None:
        result = await run_query(
            self._executor,
            f"DELETE FROM plans WHERE id = {sql_literal(plan_id)} AND gym_id = {sql_literal(gym_id)}",
        )
        if result.error:
            raise QueryError(f"Failed to delete plan: {result.error}")
