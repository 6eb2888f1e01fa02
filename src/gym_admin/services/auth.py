from __future__ import annotations

import logging
from dataclasses import dataclass

from ..flux import SqlExecutor, run_query
from ..guardrails import sql_literal
from ..logging_utils import log_extra
from .models import Notice
from .notices import describe_failure


@dataclass(frozen=True)
class LoginResult:
    success: bool
    admin_id: str | None = None
    notice: Notice | None = None


class AuthService:
    """Operator login against the ``super_admins`` table.

    This is an existence check: the stored ``password_hash`` column is compared
    to the submitted password as plain text. It is not a secure login and only
    reproduces how the dashboard currently behaves.
    """

    def __init__(self, executor: SqlExecutor) -> None:
        self._executor = executor
        self._log = logging.getLogger(__name__)

    async def login(self, email: str, password: str) -> LoginResult:
        email = (email or "").strip()
        if not email or not password:
            return LoginResult(
                False, notice=Notice("Login Failed", "Email and password are required.")
            )

        query = (
            "SELECT id, password_hash FROM super_admins "
            f"WHERE email = {sql_literal(email)} LIMIT 1"
        )
        result = await run_query(self._executor, query)
        if result.error:
            self._log.warning(
                "Admin lookup failed", extra=log_extra(error_message=str(result.error))
            )
            return LoginResult(False, notice=describe_failure(result.error, "Login Error"))

        admin = result.rows[0] if result.rows else None
        if admin and admin.get("password_hash") == password:
            self._log.info("Admin logged in", extra=log_extra(admin_id=str(admin.get("id"))))
            return LoginResult(True, admin_id=str(admin.get("id")))

        return LoginResult(False, notice=Notice("Login Failed", "Invalid email or password."))
