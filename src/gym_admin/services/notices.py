"""User-facing descriptions of failed backend calls."""

from __future__ import annotations

from .models import Notice

CONNECTIVITY_PHRASES = ("failed to fetch", "failed to reach", "connection", "timed out")


def is_connectivity_error(error: BaseException | None) -> bool:
    if error is None:
        return False
    message = str(error).lower()
    return any(phrase in message for phrase in CONNECTIVITY_PHRASES)


def describe_failure(error: BaseException | None, title: str, fallback_hint: str = "") -> Notice:
    """Build a notice that tells connectivity problems apart from database errors."""
    suffix = f" {fallback_hint}" if fallback_hint else ""
    if is_connectivity_error(error):
        return Notice(
            title="Network Error",
            description=(
                "Could not connect to the database. Please check your network and "
                f"the backend URL/key configuration.{suffix}"
            ),
        )
    detail = str(error) if error else "Details in server log"
    return Notice(title=title, description=f"Database error: {detail}.{suffix}")
