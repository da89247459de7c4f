"""Typed settings management for the Gigboard client.

Wraps user configuration in Pydantic models so the CLI and the notification
service can rely on validated settings. The API bearer token is kept in the
OS keyring through ``SecretStore`` and is never written to the JSON file.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import keyring
from keyring.errors import PasswordDeleteError
from pydantic import BaseModel, Field, ValidationError, field_validator

from gigboard.errors import InvalidConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".gigboard" / "config.json"
DEFAULT_SECRETS_SERVICE = "gigboard"
DEFAULT_API_URL = "http://localhost:3005/api/v1"
AUTH_TOKEN_KEY = "api:auth_token"


class ApiSettings(BaseModel):
    """Connection settings for the marketplace API."""

    base_url: str = Field(default=DEFAULT_API_URL, description="API root URL")
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Per-request timeout",
    )

    @field_validator("base_url")
    @classmethod
    def _validate_base_url(cls, value: str) -> str:
        if not value.startswith("http://") and not value.startswith("https://"):
            raise ValueError("base_url must start with http:// or https://")
        return value.rstrip("/")


class NotificationSettings(BaseModel):
    """Admin notification client behavior.

    Attributes:
        refresh_interval_seconds: Period of the authoritative active-set refetch
        modal_close_delay_ms: Delay before the closed modal's notification is cleared
        toast_duration_ms: Lifetime of the low-priority acknowledgement toast
        rollback_preferences_on_failure: Restore cached preferences when a PUT fails
    """

    refresh_interval_seconds: int = Field(default=300, ge=10, le=86400)
    modal_close_delay_ms: int = Field(default=300, ge=0, le=5000)
    toast_duration_ms: int = Field(default=3000, ge=0, le=60000)
    rollback_preferences_on_failure: bool = Field(
        default=False,
        description="Restore cached preferences when the server rejects an update",
    )


class Settings(BaseModel):
    """Root configuration state."""

    api: ApiSettings = Field(default_factory=ApiSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        name = (value or "INFO").upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"Unknown log level: {value}")
        return name


@dataclass
class SecretStore:
    """Keyring abstraction for storing credentials."""

    service_name: str = DEFAULT_SECRETS_SERVICE
    keyring_module: Any = field(default=keyring)

    def set_secret(self, key: str, value: str) -> None:
        if self.keyring_module is None:
            raise RuntimeError("Keyring module not configured")
        self.keyring_module.set_password(self.service_name, key, value)

    def get_secret(self, key: str) -> Optional[str]:
        if self.keyring_module is None:
            return None
        return self.keyring_module.get_password(self.service_name, key)

    def delete_secret(self, key: str) -> None:
        if self.keyring_module is None:
            return
        try:
            self.keyring_module.delete_password(self.service_name, key)
        except PasswordDeleteError:
            return


def load_settings(path: Path = DEFAULT_CONFIG_PATH) -> Settings:
    """Load settings from disk or raise if missing or invalid."""

    if not path.exists():
        raise FileNotFoundError(f"Settings file not found at {path}")
    try:
        payload = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise InvalidConfigError(f"Settings file is not valid JSON: {exc}") from exc
    try:
        return Settings.model_validate(payload)
    except ValidationError as exc:
        raise InvalidConfigError(f"Invalid configuration: {exc}") from exc


def save_settings(settings: Settings, path: Path = DEFAULT_CONFIG_PATH) -> None:
    """Persist settings to disk."""

    payload = settings.model_dump(mode="json")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2))


def bootstrap_settings(
    *,
    path: Path = DEFAULT_CONFIG_PATH,
    overrides: Optional[Dict[str, Any]] = None,
) -> Settings:
    """Create or load settings respecting explicit and environment overrides."""

    overrides = overrides or {}

    if path.exists():
        settings = load_settings(path)
    else:
        settings = Settings()
        save_settings(settings, path)
        logger.info(f"Wrote default settings to {path}")

    merged = settings.model_dump(mode="python")
    merged = _apply_overrides(merged, overrides)
    merged = _apply_env_overrides(merged)

    try:
        return Settings.model_validate(merged)
    except ValidationError as exc:
        raise InvalidConfigError(f"Invalid configuration override: {exc}") from exc


def resolve_auth_token(secret_store: Optional[SecretStore] = None) -> Optional[str]:
    """Return the API bearer token from the environment or the keyring."""

    env_token = os.getenv("GIGBOARD_AUTH_TOKEN")
    if env_token:
        return env_token.strip() or None
    secret_store = secret_store or SecretStore()
    return secret_store.get_secret(AUTH_TOKEN_KEY)


def store_auth_token(token: str, secret_store: Optional[SecretStore] = None) -> None:
    """Persist the API bearer token in the keyring."""

    secret_store = secret_store or SecretStore()
    secret_store.set_secret(AUTH_TOKEN_KEY, token)


def clear_auth_token(secret_store: Optional[SecretStore] = None) -> None:
    secret_store = secret_store or SecretStore()
    secret_store.delete_secret(AUTH_TOKEN_KEY)


def _apply_overrides(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = base.copy()
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    api = data.setdefault("api", {})
    _set_env_override(api, "base_url", "GIGBOARD_API_URL")
    _set_env_override(api, "timeout_seconds", "GIGBOARD_API_TIMEOUT", cast_float=True)
    _set_env_override(data, "log_level", "GIGBOARD_LOG_LEVEL")

    notifications = data.setdefault("notifications", {})
    _set_env_override(
        notifications,
        "refresh_interval_seconds",
        "GIGBOARD_REFRESH_INTERVAL",
        cast_int=True,
    )
    _set_env_override(
        notifications,
        "rollback_preferences_on_failure",
        "GIGBOARD_ROLLBACK_PREFERENCES",
        cast_bool=True,
    )
    return data


def _set_env_override(
    mapping: Dict[str, Any],
    key: str,
    env_name: str,
    *,
    cast_bool: bool = False,
    cast_int: bool = False,
    cast_float: bool = False,
) -> None:
    raw = os.getenv(env_name)
    if raw is None:
        return
    try:
        if cast_bool:
            mapping[key] = raw.lower() in {"1", "true", "yes"}
        elif cast_int:
            mapping[key] = int(raw)
        elif cast_float:
            mapping[key] = float(raw)
        else:
            mapping[key] = raw
    except ValueError as exc:
        raise InvalidConfigError(f"{env_name} has invalid value {raw!r}") from exc
