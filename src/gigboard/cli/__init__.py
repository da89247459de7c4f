"""Command line entry points for the Gigboard client."""

import logging
import os
from pathlib import Path
from typing import Optional

from typer import Option, Typer

from ..configuration.cli import config_app
from ..configuration.settings import DEFAULT_CONFIG_PATH, load_settings
from ..errors import InvalidConfigError
from .notifications import notifications_app


cli = Typer(help="Gigboard command line tools")
cli.add_typer(notifications_app, name="notifications")
cli.add_typer(config_app, name="config")


def resolve_log_level(log_level: Optional[str], config_path: Path = DEFAULT_CONFIG_PATH) -> int:
    """Pick the log level: option, then GIGBOARD_LOG_LEVEL, then the config file."""
    level_name = log_level or os.getenv("GIGBOARD_LOG_LEVEL")
    if not level_name and config_path.exists():
        try:
            level_name = load_settings(config_path).log_level
        except InvalidConfigError:
            # The subcommand reports the broken file
            level_name = None

    level = logging.getLevelName((level_name or "WARNING").upper())
    return level if isinstance(level, int) else logging.WARNING


@cli.callback()
def main(
    log_level: Optional[str] = Option(
        None,
        "--log-level",
        help="DEBUG, INFO, WARNING or ERROR (defaults to GIGBOARD_LOG_LEVEL, then log_level in config)",
    ),
    config_path: Path = Option(
        DEFAULT_CONFIG_PATH, "--log-config", help="Config file to read log_level from"
    ),
) -> None:
    """Gigboard command line tools."""
    logging.basicConfig(
        level=resolve_log_level(log_level, config_path),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


__all__ = ["cli", "config_app", "notifications_app", "resolve_log_level"]
