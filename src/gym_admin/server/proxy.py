"""Same-origin SQL proxy.

Untrusted callers post ``{"query": ...}`` here; the handler attaches the
server-held credentials and forwards a single request to the backend. The
backend body is returned verbatim, so response-shape normalization stays with
the caller's executor.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

import requests
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ..config import resolve_flux_credentials
from ..flux.client import PROXY_PATH, build_execute_url, is_success, send_sql_request
from ..logging_utils import log_extra, query_preview


def create_proxy_router(
    session: requests.Session | None = None,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> APIRouter:
    """Build the ``POST /api/sql`` router.

    Args:
        session: HTTP session used for forwarding. A new one is created if omitted.
        env: Environment to read credentials from on every request. Defaults to
            the process environment.
        timeout: Optional timeout in seconds for the forwarded request.
    """
    router = APIRouter()
    http = session or requests.Session()
    log = logging.getLogger(__name__)

    def _forward(query: Any) -> JSONResponse:
        credentials = resolve_flux_credentials(env)
        if not credentials.complete:
            log.error(
                "Proxy configuration missing",
                extra=log_extra(missing=",".join(credentials.missing())),
            )
            return JSONResponse({"error": "Proxy Configuration Missing"}, status_code=500)

        response = send_sql_request(
            http,
            build_execute_url(credentials.endpoint),
            {"query": query, "projectId": credentials.project_id},
            api_key=credentials.api_key,
            timeout=timeout,
        )
        if not is_success(response):
            log.error(
                "Backend returned error",
                extra=log_extra(
                    status_code=response.status_code,
                    body=response.text[:500],
                    query=query_preview(query) if isinstance(query, str) else None,
                ),
            )
            return JSONResponse(
                {"error": f"Fluxbase error: {response.status_code}"},
                status_code=response.status_code,
            )
        return JSONResponse(response.json())

    @router.post(PROXY_PATH)
    async def sql_proxy(request: Request) -> JSONResponse:
        try:
            body = await request.json()
            query = body.get("query") if isinstance(body, dict) else None
            return await asyncio.to_thread(_forward, query)
        except Exception:
            log.exception("SQL proxy error")
            return JSONResponse({"error": "Internal Server Error"}, status_code=500)

    return router
