"""CLI package for trustctl.

This package contains the Typer application and all subcommands.
"""

from trustctl.cli.main import app

__all__ = ["app"]
