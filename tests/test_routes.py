from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from gym_admin.config import AppConfig, EmailConfig
from gym_admin.errors import ConfigError, GuardrailError, InvalidRequestError, TransportError
from gym_admin.flux import QueryResult
from gym_admin.server.app import create_app
from gym_admin.server.routes import create_dashboard_router, install_error_handlers
from gym_admin.services import build_services

GYM_ROW = {
    "id": "g1",
    "name": "Iron Temple",
    "owner_email": "owner1@example.com",
    "formatted_gym_id": "AB12CD34",
    "created_at": "2024-05-01T10:00:00Z",
    "status": "active",
}


@pytest.fixture
def client(fake_executor, mailer) -> TestClient:
    app = FastAPI()
    app.include_router(create_dashboard_router(build_services(fake_executor, EmailConfig(), mailer)))
    install_error_handlers(app)
    return TestClient(app)


def test_login(client: TestClient, fake_executor) -> None:
    fake_executor.on("FROM super_admins", QueryResult(rows=[{"id": "a1", "password_hash": "pw"}]))

    ok = client.post("/api/login", json={"email": "admin@example.com", "password": "pw"})
    denied = client.post("/api/login", json={"email": "admin@example.com", "password": "nope"})

    assert ok.status_code == 200
    assert ok.json()["admin_id"] == "a1"
    assert denied.status_code == 401
    assert denied.json()["notice"]["title"] == "Login Failed"


def test_list_gyms_with_search(client: TestClient, fake_executor) -> None:
    fake_executor.on(
        "FROM gyms ORDER BY",
        QueryResult(rows=[GYM_ROW, {**GYM_ROW, "id": "g2", "name": "Flex Factory"}]),
    )
    fake_executor.on(
        "membership_status = 'active'",
        QueryResult(rows=[{"id": "m1", "gym_id": "g1", "price": 25}]),
    )

    response = client.get("/api/gyms", params={"search": "iron"})

    body = response.json()
    assert response.status_code == 200
    assert [g["id"] for g in body["gyms"]] == ["g1"]
    assert body["gyms"][0]["monthly_revenue"] == 25.0
    assert body["total_gyms"] == 2
    assert body["total_active_members"] == 1
    assert body["from_cache"] is False
    assert body["notices"] == []


def test_set_status_validates_status(client: TestClient, fake_executor) -> None:
    response = client.post("/api/gyms/status", json={"gym_ids": ["g1"], "status": "closed"})

    assert response.status_code == 422
    assert fake_executor.queries == []


def test_set_status(client: TestClient) -> None:
    response = client.post("/api/gyms/status", json={"gym_ids": ["g1"], "status": "active"})

    assert response.status_code == 200
    assert response.json()["updated"] == ["g1"]


def test_delete_gyms(client: TestClient) -> None:
    response = client.post("/api/gyms/delete", json={"gym_ids": ["g1"]})

    assert response.json()["succeeded"] == ["g1"]


def test_custom_email_requires_subject(client: TestClient) -> None:
    response = client.post("/api/gyms/email", json={"gym_ids": ["g1"], "subject": "", "body": "x"})

    assert response.status_code == 422


def test_query_error_maps_to_bad_gateway(client: TestClient, fake_executor) -> None:
    fake_executor.on("FROM gym_requests", QueryResult(rows=[], error=TransportError("HTTP error 500")))

    response = client.get("/api/gym-requests")

    assert response.status_code == 502
    assert "HTTP error 500" in response.json()["detail"]


def test_unknown_request_maps_to_not_found(client: TestClient) -> None:
    response = client.post("/api/gym-requests/missing/approve")

    assert response.status_code == 404


def test_approve_request(client: TestClient, fake_executor, mailer) -> None:
    fake_executor.on(
        "FROM gym_requests WHERE id",
        QueryResult(rows=[{"id": "r1", "gym_name": "Iron Temple", "email": "o@example.com", "status": "pending"}]),
    )

    response = client.post("/api/gym-requests/r1/approve")

    assert response.status_code == 200
    assert response.json()["gym"]["name"] == "Iron Temple"
    mailer.send_welcome.assert_called_once()


def test_member_routes(client: TestClient, fake_executor) -> None:
    created = client.post("/api/gyms/g1/members", json={"name": "Ana"})
    missing_name = client.post("/api/gyms/g1/members", json={"email": "x@example.com"})
    updated = client.patch("/api/gyms/g1/members/m1", json={"phone_number": "555"})
    deleted = client.delete("/api/gyms/g1/members/m1")

    assert created.status_code == 201
    assert created.json()["membership_status"] == "active"
    assert missing_name.status_code == 400
    assert updated.json() == {"status": "updated"}
    assert deleted.json() == {"status": "deleted"}
    assert "UPDATE members SET phone_number = '555' WHERE id = 'm1' AND gym_id = 'g1'" in fake_executor.queries


def test_plan_routes(client: TestClient, fake_executor) -> None:
    fake_executor.on("SELECT * FROM plans", QueryResult(rows=[{"id": "p1", "plan_name": "Gold", "price": 40}]))

    negative = client.post("/api/gyms/g1/plans", json={"plan_name": "Gold", "price": -5})
    created = client.post("/api/gyms/g1/plans", json={"plan_name": "Gold", "price": 40})
    listed = client.get("/api/gyms/g1/plans", params={"search": "gold"})

    assert negative.status_code == 422
    assert created.status_code == 201
    assert [p["id"] for p in listed.json()] == ["p1"]


def test_create_app_serves_health_check(fake_executor, mailer) -> None:
    services = build_services(fake_executor, EmailConfig(), mailer)
    app = create_app(config=AppConfig(), services=services)

    response = TestClient(app).get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_only_request_validation_errors_map_to_bad_request() -> None:
    app = FastAPI()
    install_error_handlers(app)

    @app.get("/bad-input")
    async def bad_input() -> None:
        raise InvalidRequestError("Plan price cannot be negative")

    @app.get("/bad-literal")
    async def bad_literal() -> None:
        raise GuardrailError("Invalid identifier for column")

    @app.get("/misconfigured")
    async def misconfigured() -> None:
        raise ConfigError("proxy_base_url is required")

    client = TestClient(app, raise_server_exceptions=False)

    assert client.get("/bad-input").status_code == 400
    assert client.get("/bad-literal").status_code == 400
    assert client.get("/misconfigured").status_code == 500
