from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest
import requests
from fastapi import FastAPI
from fastapi.testclient import TestClient

from gym_admin.server.proxy import create_proxy_router

ENV = {
    "FLUX_API_URL": "https://flux.example.com",
    "FLUX_PROJECT_ID": "project-123",
    "FLUX_API_KEY": "server-key",
}


def make_response(status: int = 200, body: Any = None, text: str = "") -> MagicMock:
    response = MagicMock(spec=requests.Response)
    response.status_code = status
    response.ok = 200 <= status < 300
    response.text = text
    response.json.return_value = body
    return response


def make_client(session: MagicMock, env: dict[str, str]) -> TestClient:
    app = FastAPI()
    app.include_router(create_proxy_router(session=session, env=env))
    return TestClient(app)


@pytest.fixture
def session() -> MagicMock:
    return MagicMock(spec=requests.Session)


def test_forwards_query_with_server_credentials(session: MagicMock) -> None:
    session.post.return_value = make_response(body={"success": True, "data": [{"n": 1}]})
    client = make_client(session, ENV)

    response = client.post("/api/sql", json={"query": "SELECT 1"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": [{"n": 1}]}
    args, kwargs = session.post.call_args
    assert args[0] == "https://flux.example.com/execute-sql"
    assert kwargs["headers"]["Authorization"] == "Bearer server-key"
    assert kwargs["json"] == {"query": "SELECT 1", "projectId": "project-123"}


def test_missing_configuration(session: MagicMock) -> None:
    client = make_client(session, {"FLUX_API_URL": "https://flux.example.com"})

    response = client.post("/api/sql", json={"query": "SELECT 1"})

    assert response.status_code == 500
    assert response.json() == {"error": "Proxy Configuration Missing"}
    session.post.assert_not_called()


def test_fallback_names_are_used(session: MagicMock) -> None:
    session.post.return_value = make_response(body=[])
    env = {
        "PUBLIC_FLUX_API_URL": "https://public.example.com/",
        "PUBLIC_FLUX_PROJECT_ID": "public-project",
        "PUBLIC_FLUX_API_KEY": "public-key",
    }
    client = make_client(session, env)

    response = client.post("/api/sql", json={"query": "SELECT 1"})

    assert response.status_code == 200
    args, kwargs = session.post.call_args
    assert args[0] == "https://public.example.com/execute-sql"
    assert kwargs["headers"]["Authorization"] == "Bearer public-key"


def test_backend_error_status_is_passed_through(session: MagicMock) -> None:
    session.post.return_value = make_response(403, text="forbidden")
    client = make_client(session, ENV)

    response = client.post("/api/sql", json={"query": "SELECT 1"})

    assert response.status_code == 403
    assert response.json() == {"error": "Fluxbase error: 403"}


def test_forwarding_is_attempted_once(session: MagicMock) -> None:
    session.post.return_value = make_response(500, text="boom")
    client = make_client(session, ENV)

    client.post("/api/sql", json={"query": "SELECT 1"})

    assert session.post.call_count == 1


def test_network_failure_is_internal_error(session: MagicMock) -> None:
    session.post.side_effect = requests.ConnectionError("refused")
    client = make_client(session, ENV)

    response = client.post("/api/sql", json={"query": "SELECT 1"})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error"}


def test_invalid_request_body_is_internal_error(session: MagicMock) -> None:
    client = make_client(session, ENV)

    response = client.post(
        "/api/sql", content=b"not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error"}
    session.post.assert_not_called()


def test_redirect_status_is_not_success(session: MagicMock) -> None:
    session.post.return_value = make_response(302, text="moved")
    client = make_client(session, ENV)

    response = client.post("/api/sql", json={"query": "SELECT 1"})

    assert response.status_code == 302
    assert response.json() == {"error": "Fluxbase error: 302"}
