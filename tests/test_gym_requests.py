from __future__ import annotations

import asyncio
import re
from email.errors import HeaderParseError
from unittest.mock import patch

import pytest

from gym_admin.config import EmailConfig
from gym_admin.emails import EmailResult, GymMailer
from gym_admin.errors import NotFoundError, QueryError, TransportError
from gym_admin.flux import QueryResult
from gym_admin.services import GymCache, GymRequestService, GymService
from gym_admin.services.gym_requests import generate_formatted_gym_id

PENDING = {
    "id": "r1",
    "gym_name": "O'Neil Strength",
    "owner_name": "Pat O'Neil",
    "email": "pat@example.com",
    "phone": "555-0100",
    "city": "Austin",
    "status": "pending",
    "created_at": "2024-06-01T09:00:00Z",
}


def failed(message: str) -> QueryResult:
    return QueryResult(rows=[], error=TransportError(message))


def make_service(fake_executor, mailer) -> GymRequestService:
    return GymRequestService(fake_executor, mailer, GymService(fake_executor, mailer, GymCache()))


def test_generate_formatted_gym_id_avoids_existing() -> None:
    gym_id = generate_formatted_gym_id({"AAAAAAAA"})

    assert re.fullmatch(r"[A-Z0-9]{8}", gym_id)
    assert gym_id != "AAAAAAAA"


def test_list_pending_oldest_first(fake_executor, mailer) -> None:
    fake_executor.on("FROM gym_requests WHERE status = 'pending'", QueryResult(rows=[PENDING]))

    requests = asyncio.run(make_service(fake_executor, mailer).list_pending())

    assert [r.id for r in requests] == ["r1"]
    assert fake_executor.queries[0].endswith("ORDER BY created_at ASC")


def test_list_pending_raises_on_error(fake_executor, mailer) -> None:
    fake_executor.on("FROM gym_requests", failed("HTTP error 500"))

    with pytest.raises(QueryError):
        asyncio.run(make_service(fake_executor, mailer).list_pending())


def test_approve_creates_gym_then_marks_request(fake_executor, mailer) -> None:
    fake_executor.on("FROM gym_requests WHERE id", QueryResult(rows=[PENDING]))
    fake_executor.on("SELECT formatted_gym_id FROM gyms", QueryResult(rows=[{"formatted_gym_id": "AB12CD34"}]))

    outcome = asyncio.run(make_service(fake_executor, mailer).approve("r1"))

    gym = outcome.gym
    assert gym.name == "O'Neil Strength"
    assert gym.owner_email == "pat@example.com"
    assert gym.status == "active"
    assert re.fullmatch(r"[A-Z0-9]{8}", gym.formatted_gym_id)
    assert outcome.warnings == []

    insert = fake_executor.matching("INSERT INTO gyms")[0]
    assert "'O''Neil Strength'" in insert
    update = fake_executor.matching("UPDATE gym_requests")[0]
    assert update == "UPDATE gym_requests SET status = 'approved' WHERE id = 'r1'"
    assert fake_executor.queries.index(insert) < fake_executor.queries.index(update)
    mailer.send_welcome.assert_called_once_with(
        "O'Neil Strength", "pat@example.com", gym.formatted_gym_id
    )


def test_approve_fails_when_gym_insert_fails(fake_executor, mailer) -> None:
    fake_executor.on("FROM gym_requests WHERE id", QueryResult(rows=[PENDING]))
    fake_executor.on("INSERT INTO gyms", failed("HTTP error 400 - duplicate key"))

    with pytest.raises(QueryError, match="Failed to create gym"):
        asyncio.run(make_service(fake_executor, mailer).approve("r1"))

    assert fake_executor.matching("UPDATE gym_requests") == []
    mailer.send_welcome.assert_not_called()


def test_approve_warns_when_request_update_or_email_fails(fake_executor, mailer) -> None:
    fake_executor.on("FROM gym_requests WHERE id", QueryResult(rows=[PENDING]))
    fake_executor.on("UPDATE gym_requests", failed("HTTP error 500"))
    mailer.send_welcome.return_value = EmailResult(False, "SMTP auth failed")

    outcome = asyncio.run(make_service(fake_executor, mailer).approve("r1"))

    assert [w.title for w in outcome.warnings] == ["Database Warning", "Email Failed"]
    assert all(w.variant == "warning" for w in outcome.warnings)
    assert outcome.warnings[1].description == "SMTP auth failed"


def test_approve_requires_pending_request(fake_executor, mailer) -> None:
    fake_executor.on("FROM gym_requests WHERE id", QueryResult(rows=[{**PENDING, "status": "approved"}]))

    with pytest.raises(ValueError):
        asyncio.run(make_service(fake_executor, mailer).approve("r1"))

    assert fake_executor.matching("INSERT INTO gyms") == []


def test_unknown_request(fake_executor, mailer) -> None:
    fake_executor.on("FROM gym_requests WHERE id", QueryResult(rows=[]))

    with pytest.raises(NotFoundError):
        asyncio.run(make_service(fake_executor, mailer).reject("missing"))


def test_reject_marks_request_and_notifies(fake_executor, mailer) -> None:
    fake_executor.on("FROM gym_requests WHERE id", QueryResult(rows=[PENDING]))

    outcome = asyncio.run(make_service(fake_executor, mailer).reject("r1"))

    assert outcome.request_id == "r1"
    assert outcome.warnings == []
    assert fake_executor.matching("UPDATE gym_requests") == [
        "UPDATE gym_requests SET status = 'rejected' WHERE id = 'r1'"
    ]
    mailer.send_rejection.assert_called_once_with("O'Neil Strength", "pat@example.com")


def test_reject_raises_when_update_fails(fake_executor, mailer) -> None:
    fake_executor.on("FROM gym_requests WHERE id", QueryResult(rows=[PENDING]))
    fake_executor.on("UPDATE gym_requests", failed("HTTP error 500"))

    with pytest.raises(QueryError):
        asyncio.run(make_service(fake_executor, mailer).reject("r1"))

    mailer.send_rejection.assert_not_called()


def test_reject_warns_when_email_fails(fake_executor, mailer) -> None:
    fake_executor.on("FROM gym_requests WHERE id", QueryResult(rows=[PENDING]))
    mailer.send_rejection.return_value = EmailResult(False, None)

    outcome = asyncio.run(make_service(fake_executor, mailer).reject("r1"))

    assert outcome.warnings[0].title == "Email Failed"
    assert "rejection email" in outcome.warnings[0].description


def smtp_mailer() -> GymMailer:
    return GymMailer(
        EmailConfig(
            smtp_host="smtp.example.com",
            smtp_user="mailer@example.com",
            smtp_password="app-password",
        )
    )


def test_approve_with_line_break_in_gym_name_sends_welcome(fake_executor) -> None:
    fake_executor.on(
        "FROM gym_requests WHERE id",
        QueryResult(rows=[{**PENDING, "gym_name": "Iron Barn\nNote: hi"}]),
    )
    service = make_service(fake_executor, smtp_mailer())

    with patch("gym_admin.emails.sender.smtplib.SMTP") as smtp:
        server = smtp.return_value.__enter__.return_value
        server.send_message.side_effect = lambda message: message.as_string()
        outcome = asyncio.run(service.approve("r1"))

    assert outcome.warnings == []
    assert "\n" not in server.send_message.call_args.args[0]["Subject"]


def test_approve_survives_unrenderable_welcome_email(fake_executor) -> None:
    fake_executor.on("FROM gym_requests WHERE id", QueryResult(rows=[PENDING]))
    service = make_service(fake_executor, smtp_mailer())

    with patch("gym_admin.emails.sender.smtplib.SMTP") as smtp:
        server = smtp.return_value.__enter__.return_value
        server.send_message.side_effect = HeaderParseError("embedded header")
        outcome = asyncio.run(service.approve("r1"))

    assert [w.title for w in outcome.warnings] == ["Email Failed"]
    assert fake_executor.matching("UPDATE gym_requests SET status = 'approved'")
