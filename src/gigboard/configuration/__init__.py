"""Configuration loading utilities for the Gigboard client."""

from .settings import (
    DEFAULT_CONFIG_PATH,
    ApiSettings,
    NotificationSettings,
    SecretStore,
    Settings,
    bootstrap_settings,
    load_settings,
    resolve_auth_token,
    save_settings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ApiSettings",
    "NotificationSettings",
    "SecretStore",
    "Settings",
    "bootstrap_settings",
    "load_settings",
    "resolve_auth_token",
    "save_settings",
]
