"""Request bodies accepted by the dashboard API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

GymStatus = Literal["active", "inactive", "inactive soon"]


class LoginRequest(BaseModel):
    email: str
    password: str


class GymIdsRequest(BaseModel):
    gym_ids: list[str] = Field(default_factory=list)


class GymStatusRequest(GymIdsRequest):
    status: GymStatus


class CustomEmailRequest(GymIdsRequest):
    subject: str = Field(min_length=1)
    body: str = Field(min_length=1)


class MemberFields(BaseModel):
    plan_id: str | None = None
    member_id: str | None = None
    name: str | None = None
    email: str | None = None
    membership_status: str | None = None
    age: int | None = Field(default=None, ge=0)
    phone_number: str | None = None
    join_date: str | None = None
    expiry_date: str | None = None


class PlanFields(BaseModel):
    plan_name: str | None = None
    price: float | None = Field(default=None, ge=0)
    duration_days: int | None = Field(default=None, gt=0)
    description: str | None = None
    is_active: bool | None = None
