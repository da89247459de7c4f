"""CLI commands for managing Gigboard client settings."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List

import typer

from gigboard.configuration.settings import (
    DEFAULT_CONFIG_PATH,
    Settings,
    bootstrap_settings,
    clear_auth_token,
    load_settings,
    resolve_auth_token,
    save_settings,
    store_auth_token,
)
from gigboard.errors import InvalidConfigError


config_app = typer.Typer(help="Manage Gigboard client configuration")


@config_app.command("show")
def show_config(
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", help="Path to config"),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Display effective configuration (token presence only)."""

    settings = bootstrap_settings(path=config_path)
    token_present = resolve_auth_token() is not None

    if output_json:
        payload = settings.model_dump(mode="json")
        payload["auth_token_present"] = token_present
        typer.echo(json.dumps(payload))
        return

    typer.echo(_summarize_settings(settings, token_present))


@config_app.command("set")
def set_config(
    key: str = typer.Argument(..., help="Configuration key, e.g. api.base_url"),
    value: str = typer.Argument(..., help="New value"),
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", help="Path to config"),
) -> None:
    """Update a configuration value."""

    settings = load_settings(config_path) if config_path.exists() else Settings()
    payload = settings.model_dump(mode="python")
    _assign(payload, key.split("."), value)
    try:
        updated = Settings.model_validate(payload)
    except ValueError as exc:
        raise InvalidConfigError(f"Invalid value for {key}: {exc}") from exc
    save_settings(updated, config_path)
    typer.echo(f"Updated {key}")


@config_app.command("set-token")
def set_token(
    token: str = typer.Argument(..., help="API bearer token"),
) -> None:
    """Store the API token in the OS keyring."""

    store_auth_token(token.strip())
    typer.echo("Token stored in keyring")


@config_app.command("clear-token")
def clear_token() -> None:
    """Remove the API token from the OS keyring."""

    clear_auth_token()
    typer.echo("Token removed")


def _assign(payload: dict, path: List[str], value: Any) -> None:
    cursor = payload
    for key in path[:-1]:
        if key not in cursor or not isinstance(cursor[key], dict):
            raise typer.BadParameter(f"Unknown configuration section: {key}")
        cursor = cursor[key]
    if path[-1] not in cursor:
        raise typer.BadParameter(f"Unknown configuration key: {'.'.join(path)}")
    cursor[path[-1]] = value


def _summarize_settings(settings: Settings, token_present: bool) -> str:
    api = settings.api
    notifications = settings.notifications
    lines = [
        f"API URL: {api.base_url}",
        f"API timeout: {api.timeout_seconds}s",
        f"Auth token: {'stored' if token_present else 'missing'}",
        f"Refresh interval: {notifications.refresh_interval_seconds}s",
        f"Modal close delay: {notifications.modal_close_delay_ms}ms",
        f"Toast duration: {notifications.toast_duration_ms}ms",
        f"Rollback preferences on failure: {notifications.rollback_preferences_on_failure}",
        f"Log level: {settings.log_level}",
    ]
    return "\n".join(lines)
