from __future__ import annotations


class ConfigError(ValueError):
    """Configuration is missing or invalid."""


class TransportError(RuntimeError):
    """The SQL endpoint could not be reached or answered with a non-success status."""

    def __init__(
        self, message: str, status_code: int | None = None, body: str | None = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ResponseParseError(TransportError):
    """The SQL endpoint answered with a body that is not valid JSON."""


class QueryError(RuntimeError):
    """Query execution failed in a user-facing way."""


class GuardrailError(ValueError):
    """Value cannot be placed into a SQL statement safely."""


class NotFoundError(LookupError):
    """Requested record does not exist."""


class InvalidRequestError(ValueError):
    """Caller-supplied input was rejected before reaching the database."""
