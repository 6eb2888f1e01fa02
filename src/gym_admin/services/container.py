from __future__ import annotations

from dataclasses import dataclass

from ..config import EmailConfig
from ..emails import GymMailer
from ..flux import SqlExecutor
from .auth import AuthService
from .gym_requests import GymRequestService
from .gyms import GymCache, GymService
from .members import MemberService
from .plans import PlanService


@dataclass(frozen=True)
class DashboardServices:
    auth: AuthService
    gyms: GymService
    requests: GymRequestService
    members: MemberService
    plans: PlanService


def build_services(
    executor: SqlExecutor, email: EmailConfig, mailer: GymMailer | None = None
) -> DashboardServices:
    """Wire every service to one shared executor and mailer."""
    mailer = mailer or GymMailer(email)
    gyms = GymService(executor, mailer, GymCache())
    return DashboardServices(
        auth=AuthService(executor),
        gyms=gyms,
        requests=GymRequestService(executor, mailer, gyms),
        members=MemberService(executor),
        plans=PlanService(executor),
    )
