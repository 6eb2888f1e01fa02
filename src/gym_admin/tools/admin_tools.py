"""Dashboard operations exposed as MCP tools.

The tools mirror the JSON API so an assistant can review sign-ups and manage
gyms through the same services the dashboard uses.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from ..services import DashboardServices, filter_gyms


def register_admin_tools(mcp_server: Any, services: DashboardServices) -> None:
    """Register all dashboard MCP tools with the server.

    Args:
        mcp_server: The FastMCP server instance
        services: Dashboard services sharing one SQL executor
    """

    @mcp_server.tool()
    async def list_gyms(search: str | None = None) -> dict[str, Any]:
        """List gyms with active member counts and monthly revenue, optionally filtered."""
        listing, stats = await services.gyms.list_gyms_with_stats()
        return {
            "gyms": [asdict(g) for g in filter_gyms(listing.gyms, search)],
            "total_active_members": stats.total_active_members,
            "from_cache": listing.from_cache,
        }

    @mcp_server.tool()
    async def pending_gym_requests() -> list[dict[str, Any]]:
        """List gym sign-up requests that are waiting for review, oldest first."""
        return [asdict(r) for r in await services.requests.list_pending()]

    @mcp_server.tool()
    async def approve_gym_request(request_id: str) -> dict[str, Any]:
        """Approve a pending request: creates the gym and emails the owner."""
        return asdict(await services.requests.approve(request_id))

    @mcp_server.tool()
    async def reject_gym_request(request_id: str) -> dict[str, Any]:
        """Reject a pending request and notify the applicant."""
        return asdict(await services.requests.reject(request_id))

    @mcp_server.tool()
    async def set_gym_status(gym_ids: list[str], status: str) -> dict[str, Any]:
        """Set gyms to 'active', 'inactive' or 'inactive soon'.

        Owners of gyms moved to an inactive status receive an email.
        """
        return asdict(await services.gyms.set_status(gym_ids, status))

    @mcp_server.tool()
    async def list_gym_members(gym_id: str) -> list[dict[str, Any]]:
        """List the members of one gym with their plan name and price."""
        return [asdict(m) for m in await services.members.list(gym_id)]

    @mcp_server.tool()
    async def list_gym_plans(gym_id: str) -> list[dict[str, Any]]:
        """List the membership plans offered by one gym."""
        return [asdict(p) for p in await services.plans.list(gym_id)]
