from __future__ import annotations

import datetime as dt
import uuid
from typing import Any, Iterable, Mapping

from ..errors import InvalidRequestError, QueryError
from ..flux import SqlExecutor, run_query
from ..guardrails import build_insert, build_update, sql_literal
from .models import Member

MEMBER_COLUMNS = frozenset(
    {
        "plan_id",
        "member_id",
        "name",
        "email",
        "membership_status",
        "age",
        "phone_number",
        "join_date",
        "expiry_date",
    }
)


def filter_members(members: Iterable[Member], term: str | None) -> list[Member]:
    if not term:
        return list(members)
    needle = term.lower()
    return [
        m
        for m in members
        if needle in (m.name or "").lower() or needle in (m.email or "").lower()
    ]


def _checked_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(fields) - MEMBER_COLUMNS
    if unknown:
        raise InvalidRequestError(f"Unknown member field(s): {', '.join(sorted(unknown))}")
    return dict(fields)


class MemberService:
    def __init__(self, executor: SqlExecutor) -> None:
        self._executor = executor

    async def list(self, gym_id: str) -> list[Member]:
        query = (
            "SELECT m.*, p.plan_name, p.price "
            "FROM members m "
            "LEFT JOIN plans p ON m.plan_id = p.id "
            f"WHERE m.gym_id = {sql_literal(gym_id)} "
            "ORDER BY m.created_at DESC"
        )
        result = await run_query(self._executor, query)
        if result.error:
            raise QueryError(f"Failed to load members: {result.error}")
        return [Member.from_row(row) for row in result.rows]

    async def add(self, gym_id: str, fields: Mapping[str, Any]) -> Member:
        values = _checked_fields(fields)
        if not values.get("name"):
            raise InvalidRequestError("Member name is required")
        values.setdefault("membership_status", "active")
        row = {
            "id": str(uuid.uuid4()),
            "gym_id": gym_id,
            "created_at": dt.datetime.now(dt.timezone.utc).isoformat(),
            **values,
        }
        result = await run_query(self._executor, build_insert("members", row))
        if result.error:
            raise QueryError(f"Failed to add member: {result.error}")
        return Member.from_row(row)

    async def update(self, gym_id: str, member_id: str, fields: Mapping[str, Any]) -> None:
        values = _checked_fields(fields)
        query = build_update("members", values, {"id": member_id, "gym_id": gym_id})
        result = await run_query(self._executor, query)
        if result.error:
            raise QueryError(f"Failed to update member: {result.error}")

    async def delete(self, gym_id: str, member_id: str) -> None:
        # Check-ins reference the member and go first.
        check_ins = await run_query(
            self._executor,
            f"DELETE FROM check_ins WHERE member_id = {sql_literal(member_id)} "
            f"AND gym_id = {sql_literal(gym_id)}",
        )
        if check_ins.error:
            raise QueryError(f"Failed to delete member check-ins: {check_ins.error}")
        result = await run_query(
            self._executor,
            f"DELETE FROM members WHERE id = {sql_literal(member_id)} "
            f"AND gym_id = {sql_literal(gym_id)}",
        )
        if result.error:
            raise QueryError(f"Failed to delete member: {result.error}")
