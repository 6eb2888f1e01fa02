from __future__ import annotations

import logging
import time
import uuid
from enum import Enum
from typing import Any, Callable, Mapping

import requests

from ..config import AppConfig, FluxCredentials, resolve_flux_credentials
from ..errors import ConfigError, ResponseParseError, TransportError
from ..guardrails import detect_statement_type, is_read_only
from ..logging_utils import log_extra, query_preview
from .models import QueryResult, decode_response

EXECUTE_SQL_SUFFIX = "/execute-sql"
PROXY_PATH = "/api/sql"
_BODY_SNIPPET_LIMIT = 500


class ExecutionContext(str, Enum):
    TRUSTED = "trusted"
    UNTRUSTED = "untrusted"


def build_execute_url(endpoint: str) -> str:
    if endpoint.endswith(EXECUTE_SQL_SUFFIX):
        return endpoint
    return endpoint.rstrip("/") + EXECUTE_SQL_SUFFIX


def send_sql_request(
    session: requests.Session,
    url: str,
    payload: Mapping[str, Any],
    api_key: str | None = None,
    timeout: float | None = None,
) -> requests.Response:
    """POST one SQL payload. Only attaches a bearer token when ``api_key`` is given."""
    headers = {"Content-Type": "application/json", "Cache-Control": "no-store"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    try:
        return session.post(url, json=dict(payload), headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        raise TransportError(f"Failed to reach SQL endpoint {url}: {exc}") from exc


def is_success(response: requests.Response) -> bool:
    return 200 <= response.status_code < 300


def _read_json(response: requests.Response) -> Any:
    if not is_success(response):
        message = f"HTTP error {response.status_code}"
        body = None
        try:
            body = response.text[:_BODY_SNIPPET_LIMIT]
        except Exception:
            body = None
        if body:
            message += f" - {body}"
        raise TransportError(message, status_code=response.status_code, body=body)
    try:
        return response.json()
    except ValueError as exc:
        raise ResponseParseError(
            f"SQL endpoint returned invalid JSON: {exc}", status_code=response.status_code
        ) from exc


class SqlExecutor:
    """Runs one SQL statement against the backend and normalizes the answer.

    Every failure (configuration, network, HTTP status, JSON) is retried with
    linear backoff: after failed attempt ``n`` the executor waits
    ``n * backoff_seconds``. Once attempts are exhausted the last error is
    returned inside the ``QueryResult``; ``execute`` itself never raises.

    Statements are re-sent verbatim on retry. A mutating statement whose
    response was lost after it committed can therefore apply more than once.
    """

    transport = "base"

    def __init__(
        self,
        *,
        max_attempts: int = 3,
        backoff_seconds: float = 1.0,
        request_timeout: float | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ConfigError("max_attempts must be at least 1")
        self._max_attempts = max_attempts
        self._backoff_seconds = backoff_seconds
        self._request_timeout = request_timeout
        self._session = session or requests.Session()
        self._sleep = sleep
        self._log = logging.getLogger(__name__)

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def execute(self, query: str) -> QueryResult:
        query_id = str(uuid.uuid4())
        statement_type = detect_statement_type(query)
        last_error: Exception | None = None

        for attempt in range(1, self._max_attempts + 1):
            try:
                result = self._attempt(query)
            except Exception as exc:
                last_error = exc
                self._log.warning(
                    "SQL attempt failed",
                    extra=log_extra(
                        query_id=query_id,
                        transport=self.transport,
                        statement_type=statement_type,
                        attempt=attempt,
                        max_attempts=self._max_attempts,
                        error_message=str(exc),
                    ),
                )
                if attempt < self._max_attempts:
                    if not is_read_only(query):
                        self._log.warning(
                            "Retrying non-idempotent statement",
                            extra=log_extra(query_id=query_id, statement_type=statement_type),
                        )
                    self._sleep(attempt * self._backoff_seconds)
                continue

            self._log.debug(
                "SQL executed",
                extra=log_extra(
                    query_id=query_id,
                    transport=self.transport,
                    statement_type=statement_type,
                    attempt=attempt,
                    row_count=len(result.rows),
                ),
            )
            return result

        self._log.error(
            "SQL failed after retries",
            extra=log_extra(
                query_id=query_id,
                transport=self.transport,
                statement_type=statement_type,
                query=query_preview(query),
                error_message=str(last_error),
            ),
        )
        return QueryResult(rows=[], error=last_error)

    def _attempt(self, query: str) -> QueryResult:
        body = _read_json(self._send(query))
        decoded = decode_response(body)
        return QueryResult(rows=decoded.rows, error=None, raw=decoded.raw)

    def _send(self, query: str) -> requests.Response:
        raise NotImplementedError


class DirectExecutor(SqlExecutor):
    """Talks to the backend directly with server-held credentials."""

    transport = "direct"

    def __init__(self, credentials: FluxCredentials, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._credentials = credentials
        if not credentials.complete:
            self._log.warning(
                "Backend configuration is incomplete",
                extra=log_extra(missing=",".join(credentials.missing())),
            )

    def _send(self, query: str) -> requests.Response:
        credentials = self._credentials
        if not credentials.complete:
            raise ConfigError(
                "Direct executor is missing required configuration: "
                + ", ".join(credentials.missing())
            )
        return send_sql_request(
            self._session,
            build_execute_url(credentials.endpoint),
            {"query": query, "projectId": credentials.project_id},
            api_key=credentials.api_key,
            timeout=self._request_timeout,
        )


class ProxiedExecutor(SqlExecutor):
    """Posts to the same-origin ``/api/sql`` proxy and never handles credentials."""

    transport = "proxied"

    def __init__(self, base_url: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._url = base_url.rstrip("/") + PROXY_PATH

    @property
    def url(self) -> str:
        return self._url

    def _send(self, query: str) -> requests.Response:
        return send_sql_request(
            self._session, self._url, {"query": query}, timeout=self._request_timeout
        )


def select_executor(
    config: AppConfig,
    context: ExecutionContext | None = None,
    credentials: FluxCredentials | None = None,
    session: requests.Session | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> SqlExecutor:
    """Build the executor for the hosting process.

    Trusted processes get a ``DirectExecutor``; untrusted ones a
    ``ProxiedExecutor``, which is never handed credentials.
    """
    executor_config = config.executor
    if context is None:
        context = (
            ExecutionContext.UNTRUSTED
            if executor_config.mode == "proxied"
            else ExecutionContext.TRUSTED
        )
    options: dict[str, Any] = {
        "max_attempts": executor_config.max_attempts,
        "backoff_seconds": executor_config.backoff_seconds,
        "request_timeout": executor_config.request_timeout_seconds,
        "session": session,
        "sleep": sleep,
    }

    if context is ExecutionContext.UNTRUSTED:
        if not executor_config.proxy_base_url:
            raise ConfigError("proxy_base_url is required for the proxied executor")
        return ProxiedExecutor(executor_config.proxy_base_url, **options)

    if credentials is None:
        credentials = resolve_flux_credentials()
    return DirectExecutor(credentials, **options)
