from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigError

_EXECUTOR_MODES = {"direct", "proxied"}

# Server-only name first, publicly exposed fallback second.
CREDENTIAL_ENV_NAMES: dict[str, tuple[str, str]] = {
    "endpoint": ("FLUX_API_URL", "PUBLIC_FLUX_API_URL"),
    "project_id": ("FLUX_PROJECT_ID", "PUBLIC_FLUX_PROJECT_ID"),
    "api_key": ("FLUX_API_KEY", "PUBLIC_FLUX_API_KEY"),
}


@dataclass(frozen=True)
class FluxCredentials:
    endpoint: str
    project_id: str
    api_key: str

    @property
    def complete(self) -> bool:
        return bool(self.endpoint and self.project_id and self.api_key)

    def missing(self) -> list[str]:
        return [name for name in CREDENTIAL_ENV_NAMES if not getattr(self, name)]


@dataclass(frozen=True)
class ExecutorConfig:
    mode: str = "direct"
    proxy_base_url: str | None = None
    max_attempts: int = 3
    backoff_seconds: float = 1.0
    request_timeout_seconds: float | None = None


@dataclass(frozen=True)
class EmailConfig:
    app_name: str = "GymTrack Pro"
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    from_address: str | None = None
    from_name: str | None = None

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_password)


@dataclass(frozen=True)
class ObservabilityConfig:
    log_level: str = "info"


@dataclass(frozen=True)
class AppConfig:
    executor: ExecutorConfig = field(default_factory=ExecutorConfig)
    email: EmailConfig = field(default_factory=EmailConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)


def _resolve_env(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1]
            if key not in env:
                raise ConfigError(f"Environment variable {key} is required but not set")
            return env[key]
        return value
    if isinstance(value, list):
        return [_resolve_env(v, env) for v in value]
    if isinstance(value, dict):
        return {k: _resolve_env(v, env) for k, v in value.items()}
    return value


def _first_set(env: Mapping[str, str], names: tuple[str, ...]) -> str:
    for name in names:
        value = env.get(name)
        if value:
            return value
    return ""


def resolve_flux_credentials(env: Mapping[str, str] | None = None) -> FluxCredentials:
    """Read the backend credentials, preferring server-only variable names."""
    env = os.environ if env is None else env
    return FluxCredentials(
        **{name: _first_set(env, names) for name, names in CREDENTIAL_ENV_NAMES.items()}
    )


def _build_executor(raw: Mapping[str, Any]) -> ExecutorConfig:
    mode = str(raw.get("mode", "direct")).lower()
    if mode not in _EXECUTOR_MODES:
        raise ConfigError(f"Unsupported executor mode: {mode}")

    try:
        max_attempts = int(raw.get("max_attempts", 3))
        backoff_seconds = float(raw.get("backoff_seconds", 1.0))
        timeout_raw = raw.get("request_timeout_seconds")
        timeout = float(timeout_raw) if timeout_raw is not None else None
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid executor setting: {exc}") from exc

    if max_attempts < 1:
        raise ConfigError("max_attempts must be at least 1")
    if backoff_seconds < 0:
        raise ConfigError("backoff_seconds cannot be negative")
    if timeout is not None and timeout <= 0:
        raise ConfigError("request_timeout_seconds must be greater than 0")

    proxy_base_url = raw.get("proxy_base_url") or None
    if mode == "proxied" and not proxy_base_url:
        raise ConfigError("proxy_base_url is required when executor mode is proxied")

    return ExecutorConfig(
        mode=mode,
        proxy_base_url=proxy_base_url,
        max_attempts=max_attempts,
        backoff_seconds=backoff_seconds,
        request_timeout_seconds=timeout,
    )


def _build_email(raw: Mapping[str, Any]) -> EmailConfig:
    try:
        port = int(raw.get("smtp_port", 587))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid smtp_port: {raw.get('smtp_port')}") from exc
    return EmailConfig(
        app_name=str(raw.get("app_name") or EmailConfig.app_name),
        smtp_host=raw.get("smtp_host") or None,
        smtp_port=port,
        smtp_user=raw.get("smtp_user") or None,
        smtp_password=raw.get("smtp_password") or None,
        from_address=raw.get("from_address") or None,
        from_name=raw.get("from_name") or None,
    )


def load_config(path: str | Path | None = None, env: Mapping[str, str] | None = None) -> AppConfig:
    env = os.environ if env is None else env
    if path is None or not Path(path).exists():
        logging.getLogger(__name__).info(
            "No config file found, using defaults", extra={"config_path": str(path)}
        )
        raw: Any = {}
    else:
        raw = yaml.safe_load(Path(path).read_text()) or {}
    if not isinstance(raw, dict):
        raise ConfigError("Config file must contain a mapping")
    resolved = _resolve_env(raw, env)

    executor = _build_executor(resolved.get("executor") or {})
    email = _build_email(resolved.get("email") or {})
    observability_raw = resolved.get("observability") or {}
    observability = ObservabilityConfig(
        log_level=str(observability_raw.get("log_level", "info")),
    )

    return AppConfig(executor=executor, email=email, observability=observability)
