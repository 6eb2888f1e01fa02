"""Dashboard operations built on the SQL executor."""

from .auth import AuthService, LoginResult
from .container import DashboardServices, build_services
from .gym_requests import GymRequestService
from .gyms import GymCache, GymService, filter_gyms
from .members import MemberService, filter_members
from .models import Gym, GymRequest, Member, Notice, Plan
from .plans import PlanService, filter_plans

__all__ = [
    "AuthService",
    "DashboardServices",
    "Gym",
    "GymCache",
    "GymRequest",
    "GymRequestService",
    "GymService",
    "LoginResult",
    "Member",
    "MemberService",
    "Notice",
    "Plan",
    "PlanService",
    "build_services",
    "filter_gyms",
    "filter_members",
    "filter_plans",
]
