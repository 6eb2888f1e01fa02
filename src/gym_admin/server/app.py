"""FastAPI application for the gym admin dashboard backend.

This module builds the application by:
1. Loading configuration and configuring logging
2. Building one SQL executor for the process and the services that share it
3. Registering the dashboard operations as MCP tools
4. Combining MCP routes with the SQL proxy and dashboard JSON routes

The executor is created here and injected everywhere; nothing is constructed
at import time, so uvicorn serves the app through ``create_app`` as a factory.
"""

from __future__ import annotations

import os
from pathlib import Path

from fastapi import FastAPI
from fastmcp import FastMCP

from ..config import AppConfig, load_config
from ..flux import SqlExecutor, select_executor
from ..logging_utils import configure_logging
from ..services import DashboardServices, build_services
from ..tools import register_admin_tools
from .proxy import create_proxy_router
from .routes import create_dashboard_router, install_error_handlers


def _config_path() -> Path:
    """Get the configuration file path from environment or default."""
    path = os.environ.get("GYM_ADMIN_CONFIG", "config.example.yml")
    return Path(path)


def create_app(
    config_path: Path | None = None,
    config: AppConfig | None = None,
    executor: SqlExecutor | None = None,
    services: DashboardServices | None = None,
) -> FastAPI:
    """Create and configure the dashboard application.

    Args:
        config_path: Optional path to config file. If None, uses default from environment.
        config: Already loaded configuration; takes precedence over ``config_path``.
        executor: SQL executor to inject. Built from the configuration if omitted.
        services: Prebuilt services. Built around ``executor`` if omitted.

    Returns:
        FastAPI: the combined application
    """
    if config is None:
        config = load_config(config_path or _config_path())
    configure_logging(config.observability.log_level)

    if services is None:
        executor = executor or select_executor(config)
        services = build_services(executor, config.email)

    mcp_server = FastMCP(name="gym-admin")
    register_admin_tools(mcp_server, services)
    mcp_app = mcp_server.http_app()

    app = FastAPI(
        title="Gym Admin API",
        description="Super-admin dashboard backend",
        version="0.1.0",
        lifespan=mcp_app.lifespan,
    )

    @app.get("/", include_in_schema=False)
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"message": "Gym admin server is running", "status": "healthy"}

    app.include_router(
        create_proxy_router(timeout=config.executor.request_timeout_seconds)
    )
    app.include_router(create_dashboard_router(services))

    combined_app = FastAPI(
        title="Gym Admin App",
        routes=[
            *mcp_app.routes,
            *app.routes,
        ],
        lifespan=mcp_app.lifespan,
    )
    install_error_handlers(combined_app)

    return combined_app
