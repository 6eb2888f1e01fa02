"""Super-admin dashboard backend for a multi-tenant gym-management service."""

# Submodules are imported explicitly so a script that only needs to run SQL
# does not pull in FastAPI or FastMCP:
# from gym_admin.flux import select_executor
# from gym_admin.services import build_services
# from gym_admin.server.app import create_app

__all__ = [
    "config",
    "emails",
    "flux",
    "services",
    "server",
]
