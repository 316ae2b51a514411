"""Shared types and helpers for CLI commands.

This module provides the output format enum and the config/manager
lookup shared by the command modules.
"""

from enum import Enum
from pathlib import Path

import typer

from trustctl.core.config import ConfigError, TrustConfig, load_config_or_default
from trustctl.trust.manager import TrustFileManager
from trustctl.utils.formatting import print_error


class OutputFormat(str, Enum):
    """Output format options for listing commands."""

    TABLE = "table"
    JSON = "json"


def get_config_path(ctx: typer.Context) -> Path | None:
    """Config file path given with the global --config option, if any."""
    obj = ctx.find_root().obj or {}
    return obj.get("config_path")


def require_config(ctx: typer.Context) -> TrustConfig:
    """Load the effective configuration or exit with an error message.

    Raises:
        typer.Exit: If the config file exists but cannot be loaded.
    """
    try:
        return load_config_or_default(get_config_path(ctx))
    except ConfigError as e:
        print_error(f"Failed to load config: {e}")
        raise typer.Exit(code=1) from e


def get_manager(config: TrustConfig) -> TrustFileManager:
    """Create the trust file manager for a configuration."""
    return TrustFileManager.from_config(config)
