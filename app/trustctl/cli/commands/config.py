"""Configuration commands.

Provides commands to show the effective configuration and to write a
default configuration file.
"""

from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from trustctl.cli.types import get_config_path, require_config
from trustctl.core.config import ConfigError, TrustConfig, config_to_dict, save_config
from trustctl.core.paths import get_config_path as get_default_config_path
from trustctl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or initialize the trustctl configuration.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def show(ctx: typer.Context) -> None:
    """Show the effective configuration."""
    config = require_config(ctx)
    path = get_config_path(ctx) or get_default_config_path()

    table = Table(
        title="trustctl Configuration",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Setting", style="bold")
    table.add_column("Value")

    values = config_to_dict(config)
    values.setdefault("lock_file", "-")
    for key, value in values.items():
        table.add_row(key, escape(str(value)))

    console.print(table)
    source = str(path) if path.exists() else f"defaults ({path} not found)"
    console.print(f"\n[dim]Source: {escape(source)}[/dim]")


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing configuration file."),
    ] = False,
) -> None:
    """Write a configuration file with default settings."""
    path = get_config_path(ctx) or get_default_config_path()

    if path.exists() and not force:
        print_error(f"Config already exists: {escape(str(path))}")
        print_info("Use --force to overwrite it.")
        raise typer.Exit(code=1)

    try:
        saved = save_config(TrustConfig(), path)
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {escape(str(saved))}")
