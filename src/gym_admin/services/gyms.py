from __future__ import annotations

import asyncio
import copy
import logging
from dataclasses import dataclass, field, replace
from typing import Iterable

from ..emails import GymMailer
from ..errors import InvalidRequestError, QueryError
from ..flux import QueryResult, SqlExecutor, gather_queries, run_query
from ..guardrails import sql_literal, sql_literal_list
from ..logging_utils import log_extra
from .models import GYM_STATUSES, INACTIVE_STATUSES, Gym, Notice, as_number
from .notices import describe_failure

# Tables holding rows that reference gyms.id; cleared before the gym row.
CASCADE_TABLES = ("check_ins", "members", "plans", "announcements")

_ACTIVE_MEMBER_PRICES_SQL = (
    "SELECT m.id, m.gym_id, m.membership_status, p.price "
    "FROM members m "
    "LEFT JOIN plans p ON m.plan_id = p.id "
    "WHERE m.membership_status = 'active'"
)


class GymCache:
    """Last successfully loaded gym list, served when the database is unreachable."""

    def __init__(self) -> None:
        self._gyms: list[Gym] = []

    def store(self, gyms: Iterable[Gym]) -> None:
        self._gyms = [copy.copy(g) for g in gyms]

    def load(self) -> list[Gym]:
        return [copy.copy(g) for g in self._gyms]

    def discard(self, gym_ids: Iterable[str]) -> None:
        ids = set(gym_ids)
        self._gyms = [g for g in self._gyms if g.id not in ids]

    def set_status(self, gym_ids: Iterable[str], status: str) -> None:
        ids = set(gym_ids)
        self._gyms = [replace(g, status=status) if g.id in ids else g for g in self._gyms]


@dataclass
class GymListing:
    gyms: list[Gym]
    from_cache: bool = False
    notice: Notice | None = None


@dataclass
class GymStats:
    total_active_members: int
    gyms: list[Gym]
    notice: Notice | None = None


@dataclass
class BulkOutcome:
    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    notices: list[Notice] = field(default_factory=list)


@dataclass
class StatusOutcome:
    status: str
    updated: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    emails_sent: int = 0
    emails_failed: int = 0
    notices: list[Notice] = field(default_factory=list)


@dataclass
class EmailOutcome:
    sent: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    notices: list[Notice] = field(default_factory=list)


def filter_gyms(gyms: Iterable[Gym], term: str | None) -> list[Gym]:
    if not term:
        return list(gyms)
    needle = term.lower()
    return [
        g
        for g in gyms
        if any(
            needle in value.lower()
            for value in (g.name, g.owner_email, g.formatted_gym_id, g.id, g.status)
        )
    ]


def _gyms_from_rows(rows: Iterable[dict]) -> list[Gym]:
    return [gym for gym in (Gym.from_row(row) for row in rows) if gym is not None]


class GymService:
    def __init__(
        self, executor: SqlExecutor, mailer: GymMailer, cache: GymCache | None = None
    ) -> None:
        self._executor = executor
        self._mailer = mailer
        self._cache = cache or GymCache()
        self._log = logging.getLogger(__name__)

    async def list_gyms(self) -> GymListing:
        result = await run_query(self._executor, "SELECT * FROM gyms ORDER BY created_at DESC")
        if result.error:
            self._log.warning(
                "Falling back to cached gyms",
                extra=log_extra(error_message=str(result.error)),
            )
            return GymListing(
                gyms=self._cache.load(),
                from_cache=True,
                notice=describe_failure(
                    result.error, "Failed to Fetch Gyms", "Showing cached gyms."
                ),
            )

        gyms = _gyms_from_rows(result.rows)
        self._cache.store(gyms)
        return GymListing(gyms=gyms)

    async def member_stats(self, gyms: list[Gym]) -> GymStats:
        """Attach active member counts and monthly revenue to ``gyms``."""
        zeroed = [replace(g, active_members_count=0, monthly_revenue=0.0) for g in gyms]
        if not gyms:
            return GymStats(total_active_members=0, gyms=zeroed)

        result = await run_query(self._executor, _ACTIVE_MEMBER_PRICES_SQL)
        if result.error:
            return GymStats(
                total_active_members=0,
                gyms=zeroed,
                notice=describe_failure(
                    result.error, "Error Fetching Member Stats", "Stats may be inaccurate."
                ),
            )

        counts: dict[str, int] = {}
        revenue: dict[str, float] = {}
        for member in result.rows:
            gym_id = str(member.get("gym_id") or "")
            counts[gym_id] = counts.get(gym_id, 0) + 1
            revenue[gym_id] = revenue.get(gym_id, 0.0) + as_number(member.get("price"))

        return GymStats(
            total_active_members=len(result.rows),
            gyms=[
                replace(
                    g,
                    active_members_count=counts.get(g.id, 0),
                    monthly_revenue=revenue.get(g.id, 0.0),
                )
                for g in gyms
            ],
        )

    async def list_gyms_with_stats(self) -> tuple[GymListing, GymStats]:
        listing = await self.list_gyms()
        stats = await self.member_stats(listing.gyms)
        listing.gyms = stats.gyms
        return listing, stats

    async def fetch_gyms(self, gym_ids: Iterable[str]) -> list[Gym]:
        ids = list(dict.fromkeys(gym_ids))
        if not ids:
            return []
        result = await run_query(
            self._executor, f"SELECT * FROM gyms WHERE id IN {sql_literal_list(ids)}"
        )
        if result.error:
            raise QueryError(f"Failed to load gyms: {result.error}")
        return _gyms_from_rows(result.rows)

    async def existing_formatted_ids(self) -> set[str]:
        result = await run_query(self._executor, "SELECT formatted_gym_id FROM gyms")
        if result.error:
            raise QueryError(f"Failed to load gym ids: {result.error}")
        return {str(row.get("formatted_gym_id")) for row in result.rows if row.get("formatted_gym_id")}

    async def delete_gyms(self, gym_ids: Iterable[str]) -> BulkOutcome:
        ids = list(dict.fromkeys(gym_ids))
        outcome = BulkOutcome()
        if not ids:
            outcome.notices.append(
                Notice("No Gyms Selected", "Please select gyms to delete.", "default")
            )
            return outcome

        results = await asyncio.gather(*(self._delete_gym(gym_id) for gym_id in ids))
        for gym_id, result in zip(ids, results):
            if result.error:
                outcome.failed[gym_id] = str(result.error)
            else:
                outcome.succeeded.append(gym_id)

        self._cache.discard(outcome.succeeded)
        if outcome.succeeded:
            outcome.notices.append(
                Notice(
                    f"{len(outcome.succeeded)} Gym(s) Deleted",
                    "Selected gym(s) have been permanently removed from the database.",
                    "default",
                )
            )
        if outcome.failed:
            last_error = list(outcome.failed.values())[-1]
            outcome.notices.append(
                Notice(
                    "Some Deletes Failed",
                    f"Could not delete all selected gym(s): {last_error}",
                )
            )
        return outcome

    async def _delete_gym(self, gym_id: str) -> QueryResult:
        literal = sql_literal(gym_id)
        children = await gather_queries(
            self._executor,
            [f"DELETE FROM {table} WHERE gym_id = {literal}" for table in CASCADE_TABLES],
        )
        for table, child in zip(CASCADE_TABLES, children):
            if child.error:
                self._log.warning(
                    "Cascade delete failed",
                    extra=log_extra(gym_id=gym_id, table=table, error_message=str(child.error)),
                )
        return await run_query(self._executor, f"DELETE FROM gyms WHERE id = {literal}")

    async def set_status(self, gym_ids: Iterable[str], status: str) -> StatusOutcome:
        if status not in GYM_STATUSES:
            raise InvalidRequestError(f"Unsupported gym status: {status}")
        ids = list(dict.fromkeys(gym_ids))
        outcome = StatusOutcome(status=status)
        if not ids:
            outcome.notices.append(
                Notice("No Gyms Selected", "Please select gyms to update their status.", "default")
            )
            return outcome

        results = await gather_queries(
            self._executor,
            [
                f"UPDATE gyms SET status = {sql_literal(status)} WHERE id = {sql_literal(gym_id)}"
                for gym_id in ids
            ],
        )
        for gym_id, result in zip(ids, results):
            if result.error:
                self._log.warning(
                    "Gym status update failed",
                    extra=log_extra(gym_id=gym_id, error_message=str(result.error)),
                )
                outcome.failed[gym_id] = str(result.error)
            else:
                outcome.updated.append(gym_id)
        self._cache.set_status(outcome.updated, status)

        if status in INACTIVE_STATUSES and outcome.updated:
            await self._notify_status_change(outcome)

        if outcome.updated:
            outcome.notices.append(
                Notice(
                    "Gym Status Updated",
                    f"{len(outcome.updated)} gym(s) successfully marked as {status}.",
                    "default",
                )
            )
        if outcome.failed:
            outcome.notices.append(
                Notice(
                    "Some Status Updates Failed",
                    f"Failed to update status for {len(outcome.failed)} gym(s) in the database.",
                )
            )
        if outcome.emails_sent:
            outcome.notices.append(
                Notice(
                    "Owner Notifications Sent",
                    f"Successfully notified {outcome.emails_sent} gym owner(s).",
                    "default",
                )
            )
        if outcome.emails_failed:
            outcome.notices.append(
                Notice(
                    "Some Owner Notifications Failed",
                    f"Failed to notify {outcome.emails_failed} gym owner(s).",
                )
            )
        return outcome

    async def _notify_status_change(self, outcome: StatusOutcome) -> None:
        try:
            gyms = await self.fetch_gyms(outcome.updated)
        except QueryError as exc:
            self._log.warning(
                "Could not load gyms for status emails",
                extra=log_extra(error_message=str(exc)),
            )
            outcome.emails_failed += len(outcome.updated)
            return

        for gym in gyms:
            result = await asyncio.to_thread(
                self._mailer.send_status_change,
                gym.name,
                gym.owner_email,
                gym.formatted_gym_id,
                outcome.status,
            )
            if result.success:
                outcome.emails_sent += 1
            else:
                outcome.emails_failed += 1
                self._log.warning(
                    "Status change email failed",
                    extra=log_extra(recipient=gym.owner_email, error_message=result.error),
                )

    async def send_custom_email(
        self, gym_ids: Iterable[str], subject: str, body: str
    ) -> EmailOutcome:
        if not subject.strip() or not body.strip():
            raise InvalidRequestError("Email subject and body are required")
        gyms = await self.fetch_gyms(gym_ids)
        outcome = EmailOutcome()
        if not gyms:
            outcome.notices.append(
                Notice("No Gyms Selected", "Please select gyms to send emails.", "default")
            )
            return outcome

        for gym in gyms:
            result = await asyncio.to_thread(
                self._mailer.send_promotional, gym.name, gym.owner_email, subject, body
            )
            if result.success:
                outcome.sent.append(gym.id)
            else:
                outcome.failed[gym.id] = result.error or "Unknown email error"

        if outcome.sent:
            outcome.notices.append(
                Notice(
                    "Custom Emails Sent",
                    f"Successfully sent {len(outcome.sent)} custom email(s).",
                    "default",
                )
            )
        if outcome.failed:
            outcome.notices.append(
                Notice(
                    "Some Custom Emails Failed",
                    f"Failed to send {len(outcome.failed)} custom email(s).",
                )
            )
        return outcome
