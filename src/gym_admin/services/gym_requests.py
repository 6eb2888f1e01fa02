from __future__ import annotations

import asyncio
import datetime as dt
import logging
import secrets
import string
import uuid
from dataclasses import dataclass, field

from ..emails import GymMailer
from ..errors import InvalidRequestError, NotFoundError, QueryError
from ..flux import QueryResult, SqlExecutor, run_query
from ..guardrails import build_insert, sql_literal
from ..logging_utils import log_extra
from .gyms import GymService
from .models import Gym, GymRequest, Notice

FORMATTED_ID_LENGTH = 8
_FORMATTED_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_formatted_gym_id(existing: set[str] | frozenset[str] = frozenset()) -> str:
    while True:
        candidate = "".join(
            secrets.choice(_FORMATTED_ID_ALPHABET) for _ in range(FORMATTED_ID_LENGTH)
        )
        if candidate not in existing:
            return candidate


@dataclass
class ApprovalOutcome:
    gym: Gym
    warnings: list[Notice] = field(default_factory=list)


@dataclass
class RejectionOutcome:
    request_id: str
    warnings: list[Notice] = field(default_factory=list)


class GymRequestService:
    """Review of pending gym sign-ups.

    Approval creates the gym first and only then marks the request; a failure
    to mark it, or to email the owner, is reported as a warning because the
    gym already exists at that point.
    """

    def __init__(self, executor: SqlExecutor, mailer: GymMailer, gyms: GymService) -> None:
        self._executor = executor
        self._mailer = mailer
        self._gyms = gyms
        self._log = logging.getLogger(__name__)

    async def list_pending(self) -> list[GymRequest]:
        result = await run_query(
            self._executor,
            "SELECT * FROM gym_requests WHERE status = 'pending' ORDER BY created_at ASC",
        )
        if result.error:
            raise QueryError(f"Error fetching requests: {result.error}")
        return [GymRequest.from_row(row) for row in result.rows]

    async def get(self, request_id: str) -> GymRequest:
        result = await run_query(
            self._executor,
            f"SELECT * FROM gym_requests WHERE id = {sql_literal(request_id)} LIMIT 1",
        )
        if result.error:
            raise QueryError(f"Error fetching request: {result.error}")
        if not result.rows:
            raise NotFoundError(f"Gym request {request_id} not found")
        return GymRequest.from_row(result.rows[0])

    async def _pending(self, request_id: str) -> GymRequest:
        request = await self.get(request_id)
        if request.status != "pending":
            raise InvalidRequestError(f"Gym request {request_id} is already {request.status}")
        return request

    async def _mark(self, request_id: str, status: str) -> QueryResult:
        return await run_query(
            self._executor,
            f"UPDATE gym_requests SET status = {sql_literal(status)} "
            f"WHERE id = {sql_literal(request_id)}",
        )

    async def approve(self, request_id: str) -> ApprovalOutcome:
        request = await self._pending(request_id)
        existing = await self._gyms.existing_formatted_ids()

        gym = Gym(
            id=str(uuid.uuid4()),
            name=request.gym_name,
            owner_email=request.email,
            formatted_gym_id=generate_formatted_gym_id(existing),
            creation_date=dt.datetime.now(dt.timezone.utc).isoformat(),
            status="active",
        )
        insert = build_insert(
            "gyms",
            {
                "id": gym.id,
                "name": gym.name,
                "owner_email": gym.owner_email,
                "formatted_gym_id": gym.formatted_gym_id,
                "created_at": gym.creation_date,
                "status": gym.status,
            },
        )
        result = await run_query(self._executor, insert)
        if result.error:
            raise QueryError(f"Failed to create gym: {result.error}")
        self._log.info(
            "Gym approved",
            extra=log_extra(request_id=request_id, gym_id=gym.id, formatted_gym_id=gym.formatted_gym_id),
        )

        outcome = ApprovalOutcome(gym=gym)
        marked = await self._mark(request_id, "approved")
        if marked.error:
            outcome.warnings.append(
                Notice(
                    "Database Warning",
                    f"Gym created, but failed to update request status: {marked.error}.",
                    "warning",
                )
            )

        email = await asyncio.to_thread(
            self._mailer.send_welcome, gym.name, gym.owner_email, gym.formatted_gym_id
        )
        if not email.success:
            outcome.warnings.append(
                Notice(
                    "Email Failed",
                    email.error or "Gym created, but failed to send welcome email.",
                    "warning",
                )
            )
        return outcome

    async def reject(self, request_id: str) -> RejectionOutcome:
        request = await self._pending(request_id)
        marked = await self._mark(request_id, "rejected")
        if marked.error:
            raise QueryError(f"Failed to update request status: {marked.error}")
        self._log.info("Gym request rejected", extra=log_extra(request_id=request_id))

        outcome = RejectionOutcome(request_id=request_id)
        email = await asyncio.to_thread(self._mailer.send_rejection, request.gym_name, request.email)
        if not email.success:
            outcome.warnings.append(
                Notice(
                    "Email Failed",
                    email.error or "Request rejected, but failed to send rejection email.",
                    "warning",
                )
            )
        return outcome
