from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

GYM_STATUSES = ("active", "inactive", "inactive soon")
INACTIVE_STATUSES = frozenset({"inactive", "inactive soon"})
REQUEST_STATUSES = ("pending", "approved", "rejected")


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _optional_text(value: Any) -> str | None:
    return None if value is None else str(value)


def as_number(value: Any) -> float:
    """Numeric column values arrive as JSON numbers or, for NUMERIC, as strings."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


@dataclass(frozen=True)
class Notice:
    title: str
    description: str
    variant: str = "destructive"


@dataclass
class Gym:
    id: str
    name: str
    owner_email: str
    formatted_gym_id: str
    creation_date: str
    status: str = "active"
    active_members_count: int = 0
    monthly_revenue: float = 0.0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Gym | None:
        """Map a ``gyms`` row (or a cached dict); rows without id or name are dropped."""
        gym_id = _text(row.get("id"))
        name = _text(row.get("name"))
        if not gym_id or not name:
            return None
        status = row.get("status")
        return cls(
            id=gym_id,
            name=name,
            owner_email=_text(row.get("owner_email")),
            formatted_gym_id=_text(row.get("formatted_gym_id")),
            creation_date=_text(row.get("created_at") or row.get("creation_date")),
            status=status if status in GYM_STATUSES else "active",
            active_members_count=int(as_number(row.get("active_members_count"))),
            monthly_revenue=as_number(row.get("monthly_revenue")),
        )


@dataclass
class GymRequest:
    id: str
    gym_name: str
    owner_name: str
    email: str
    phone: str
    city: str
    status: str
    created_at: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> GymRequest:
        return cls(
            id=_text(row.get("id")),
            gym_name=_text(row.get("gym_name")),
            owner_name=_text(row.get("owner_name")),
            email=_text(row.get("email")),
            phone=_text(row.get("phone")),
            city=_text(row.get("city")),
            status=_text(row.get("status")) or "pending",
            created_at=_text(row.get("created_at")),
        )


@dataclass
class Member:
    id: str
    gym_id: str | None = None
    plan_id: str | None = None
    member_id: str | None = None
    name: str | None = None
    email: str | None = None
    membership_status: str | None = None
    created_at: str | None = None
    age: int | None = None
    phone_number: str | None = None
    join_date: str | None = None
    expiry_date: str | None = None
    plan_name: str | None = None
    plan_price: float | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Member:
        # Joined plan columns come either flattened or nested under "plans".
        plan = row.get("plans") if isinstance(row.get("plans"), Mapping) else {}
        price = row.get("price", plan.get("price"))
        age = row.get("age")
        return cls(
            id=_text(row.get("id")),
            gym_id=_optional_text(row.get("gym_id")),
            plan_id=_optional_text(row.get("plan_id")),
            member_id=_optional_text(row.get("member_id")),
            name=_optional_text(row.get("name")),
            email=_optional_text(row.get("email")),
            membership_status=_optional_text(row.get("membership_status")),
            created_at=_optional_text(row.get("created_at")),
            age=int(as_number(age)) if age is not None else None,
            phone_number=_optional_text(row.get("phone_number")),
            join_date=_optional_text(row.get("join_date")),
            expiry_date=_optional_text(row.get("expiry_date")),
            plan_name=_optional_text(row.get("plan_name", plan.get("plan_name"))),
            plan_price=as_number(price) if price is not None else None,
        )


@dataclass
class Plan:
    id: str
    gym_id: str | None = None
    plan_name: str | None = None
    price: float = 0.0
    duration_days: int | None = None
    description: str | None = None
    is_active: bool | None = None
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Plan:
        duration = row.get("duration_days")
        is_active = row.get("is_active")
        return cls(
            id=_text(row.get("id")),
            gym_id=_optional_text(row.get("gym_id")),
            plan_name=_optional_text(row.get("plan_name")),
            price=as_number(row.get("price")),
            duration_days=int(as_number(duration)) if duration is not None else None,
            description=_optional_text(row.get("description")),
            is_active=bool(is_active) if is_active is not None else None,
            created_at=_optional_text(row.get("created_at")),
        )
