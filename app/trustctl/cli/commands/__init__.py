"""CLI commands for trustctl.

This package contains all subcommand implementations.
"""

from trustctl.cli.commands import config, file, history

__all__ = ["config", "file", "history"]
