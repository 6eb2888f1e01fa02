"""JSON routes backing the super-admin dashboard."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from ..errors import GuardrailError, InvalidRequestError, NotFoundError, QueryError
from ..services import DashboardServices, filter_gyms, filter_members, filter_plans
from .schemas import (
    CustomEmailRequest,
    GymIdsRequest,
    GymStatusRequest,
    LoginRequest,
    MemberFields,
    PlanFields,
)


def install_error_handlers(app: FastAPI) -> None:
    """Map service exceptions to HTTP statuses."""

    @app.exception_handler(QueryError)
    async def query_error(request: Request, exc: QueryError) -> JSONResponse:
        return JSONResponse({"detail": str(exc)}, status_code=502)

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse({"detail": str(exc)}, status_code=404)

    async def bad_request(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse({"detail": str(exc)}, status_code=400)

    app.add_exception_handler(InvalidRequestError, bad_request)
    app.add_exception_handler(GuardrailError, bad_request)


def create_dashboard_router(services: DashboardServices) -> APIRouter:
    router = APIRouter(prefix="/api")

    @router.post("/login")
    async def login(payload: LoginRequest) -> JSONResponse:
        result = await services.auth.login(payload.email, payload.password)
        return JSONResponse(asdict(result), status_code=200 if result.success else 401)

    @router.get("/gyms")
    async def list_gyms(search: str | None = None) -> dict[str, Any]:
        listing, stats = await services.gyms.list_gyms_with_stats()
        notices = [n for n in (listing.notice, stats.notice) if n is not None]
        return {
            "gyms": [asdict(g) for g in filter_gyms(listing.gyms, search)],
            "total_gyms": len(listing.gyms),
            "total_active_members": stats.total_active_members,
            "from_cache": listing.from_cache,
            "notices": [asdict(n) for n in notices],
        }

    @router.post("/gyms/status")
    async def set_gym_status(payload: GymStatusRequest) -> dict[str, Any]:
        outcome = await services.gyms.set_status(payload.gym_ids, payload.status)
        return asdict(outcome)

    @router.post("/gyms/delete")
    async def delete_gyms(payload: GymIdsRequest) -> dict[str, Any]:
        outcome = await services.gyms.delete_gyms(payload.gym_ids)
        return asdict(outcome)

    @router.post("/gyms/email")
    async def email_gyms(payload: CustomEmailRequest) -> dict[str, Any]:
        outcome = await services.gyms.send_custom_email(
            payload.gym_ids, payload.subject, payload.body
        )
        return asdict(outcome)

    @router.get("/gym-requests")
    async def pending_requests() -> list[dict[str, Any]]:
        return [asdict(r) for r in await services.requests.list_pending()]

    @router.post("/gym-requests/{request_id}/approve")
    async def approve_request(request_id: str) -> dict[str, Any]:
        return asdict(await services.requests.approve(request_id))

    @router.post("/gym-requests/{request_id}/reject")
    async def reject_request(request_id: str) -> dict[str, Any]:
        return asdict(await services.requests.reject(request_id))

    @router.get("/gyms/{gym_id}/members")
    async def list_members(gym_id: str, search: str | None = None) -> list[dict[str, Any]]:
        members = await services.members.list(gym_id)
        return [asdict(m) for m in filter_members(members, search)]

    @router.post("/gyms/{gym_id}/members", status_code=201)
    async def add_member(gym_id: str, payload: MemberFields) -> dict[str, Any]:
        member = await services.members.add(gym_id, payload.model_dump(exclude_none=True))
        return asdict(member)

    @router.patch("/gyms/{gym_id}/members/{member_id}")
    async def update_member(gym_id: str, member_id: str, payload: MemberFields) -> dict[str, str]:
        await services.members.update(gym_id, member_id, payload.model_dump(exclude_unset=True))
        return {"status": "updated"}

    @router.delete("/gyms/{gym_id}/members/{member_id}")
    async def delete_member(gym_id: str, member_id: str) -> dict[str, str]:
        await services.members.delete(gym_id, member_id)
        return {"status": "deleted"}

    @router.get("/gyms/{gym_id}/plans")
    async def list_plans(gym_id: str, search: str | None = None) -> list[dict[str, Any]]:
        plans = await services.plans.list(gym_id)
        return [asdict(p) for p in filter_plans(plans, search)]

    @router.post("/gyms/{gym_id}/plans", status_code=201)
    async def add_plan(gym_id: str, payload: PlanFields) -> dict[str, Any]:
        plan = await services.plans.add(gym_id, payload.model_dump(exclude_none=True))
        return asdict(plan)

    @router.patch("/gyms/{gym_id}/plans/{plan_id}")
    async def update_plan(gym_id: str, plan_id: str, payload: PlanFields) -> dict[str, str]:
        await services.plans.update(gym_id, plan_id, payload.model_dump(exclude_unset=True))
        return {"status": "updated"}

    @router.delete("/gyms/{gym_id}/plans/{plan_id}")
    async def delete_plan(gym_id: str, plan_id: str) -> dict[str, str]:
        await services.plans.delete(gym_id, plan_id)
        return {"status": "deleted"}

    return router
