"""Trust database file commands.

Provides commands to add files to the trust store, delete and rehash
records by path prefix, list the trusted files and check them against
the filesystem.
"""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from trustctl.cli.types import OutputFormat, get_manager, require_config
from trustctl.core.config import TrustConfig
from trustctl.models.history import HistoryActionType
from trustctl.trust.errors import TrustError
from trustctl.trust.history import record_trust_action
from trustctl.trust.manager import TrustMismatch
from trustctl.trust.models import TrustRecord
from trustctl.utils.formatting import (
    console,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Manage trusted files.",
    invoke_without_command=True,
    no_args_is_help=True,
)

TrustFileOption = Annotated[
    str | None,
    typer.Option(
        "--trust-file",
        "-t",
        help="Fragment file path relative to the trust directory.",
    ),
]


@app.command()
def add(
    ctx: typer.Context,
    paths: Annotated[
        list[Path],
        typer.Argument(help="Files or directories to trust."),
    ],
    trust_file: TrustFileOption = None,
) -> None:
    """Add files to the trust database.

    Directories are added recursively. Files that are already trusted
    are skipped.
    """
    config = require_config(ctx)
    manager = get_manager(config)

    resolved: list[Path] = []
    for path in paths:
        if not path.exists():
            print_error(f"Path does not exist: {escape(str(path))}")
            raise typer.Exit(code=1)
        resolved.append(path.resolve())

    try:
        result = manager.add_paths(resolved, trust_file=trust_file)
    except (TrustError, ValueError) as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    if result.already_trusted:
        print_info(f"{len(result.already_trusted)} file(s) already trusted, skipped.")
        for path_str in result.already_trusted:
            logger.debug("Already trusted: %s", path_str)

    if not result.added:
        print_warning("Nothing was added to the trust database.")
        raise typer.Exit(code=1)

    print_success(f"Added {result.added} file(s) to {escape(str(result.destination))}")
    added_paths = [str(p) for p in resolved]
    _record(config, HistoryActionType.TRUST_ADD, added_paths, result.added, trust_file)


@app.command()
def delete(
    ctx: typer.Context,
    path: Annotated[
        str,
        typer.Argument(help="Path prefix of the records to delete."),
    ],
    trust_file: TrustFileOption = None,
) -> None:
    """Delete every record whose path starts with PATH."""
    config = require_config(ctx)
    manager = get_manager(config)

    try:
        count = manager.delete_path(path, trust_file=trust_file)
    except (TrustError, ValueError) as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    if not count:
        print_error(f"'{escape(path)}' is not in the trust database")
        raise typer.Exit(code=1)

    print_success(f"Deleted {count} record(s) matching {escape(path)}")
    _record(config, HistoryActionType.TRUST_DELETE, [path], count, trust_file)


@app.command()
def update(
    ctx: typer.Context,
    path: Annotated[
        str,
        typer.Argument(help="Path prefix of the records to rehash (default: all)."),
    ] = "",
    trust_file: TrustFileOption = None,
) -> None:
    """Recompute size and hash of every record whose path starts with PATH."""
    config = require_config(ctx)
    manager = get_manager(config)

    try:
        count = manager.update_path(path, trust_file=trust_file)
    except (TrustError, ValueError) as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from e

    target = escape(path) if path else "the trust database"
    if not count:
        print_error(f"No records updated for {target}")
        raise typer.Exit(code=1)

    print_success(f"Updated {count} record(s) for {target}")
    _record(config, HistoryActionType.TRUST_UPDATE, [path], count, trust_file)


@app.command("list")
def list_records(
    ctx: typer.Context,
    prefix: Annotated[
        str,
        typer.Option("--prefix", "-p", help="Only show paths starting with this prefix."),
    ] = "",
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """List the trusted files of the primary file and all fragments."""
    config = require_config(ctx)
    store = get_manager(config).load_all()
    records = store.select_prefix(prefix)

    if output_format == OutputFormat.JSON:
        _print_json(records)
        return

    if not records:
        print_info("No trusted files found.")
        return

    _print_table(records)
    total_size = sum(r.size for r in records)
    console.print(f"\n[dim]{len(records)} trusted file(s) ({format_size(total_size)} total)[/dim]")


@app.command()
def check(ctx: typer.Context) -> None:
    """Check trusted files against their recorded size and hash."""
    config = require_config(ctx)
    mismatches = get_manager(config).verify_all()

    if not mismatches:
        print_success("All trusted files match the trust database.")
        return

    _print_mismatches(mismatches)
    print_warning(f"{len(mismatches)} trusted file(s) changed or missing.")
    raise typer.Exit(code=1)


# === Private helper functions ===


def _record(
    config: TrustConfig,
    action_type: HistoryActionType,
    paths: list[str],
    count: int,
    trust_file: str | None,
) -> None:
    """Record a mutation to history unless disabled."""
    if not config.record_history:
        return
    try:
        record_trust_action(
            action_type,
            paths,
            count,
            trust_file=trust_file,
            command=f"trustctl file {action_type.value.removeprefix('trust_')}",
        )
    except (OSError, RuntimeError) as e:
        print_warning(f"Could not record to history: {e}")


def _print_table(records: list[TrustRecord]) -> None:
    """Display trust records as a Rich table."""
    table = Table(
        title="Trusted Files",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Path", style="trust.path", no_wrap=True)
    table.add_column("Size", justify="right")
    table.add_column("SHA256", style="trust.hash")

    for record in records:
        table.add_row(escape(record.path), str(record.size), record.hash)

    console.print(table)


def _print_json(records: list[TrustRecord]) -> None:
    """Display trust records as JSON."""
    data = [{"path": r.path, "size": r.size, "hash": r.hash} for r in records]
    console.print_json(json.dumps(data))


def _print_mismatches(mismatches: list[TrustMismatch]) -> None:
    """Display check failures as a Rich table."""
    table = Table(
        title="Trust Check Failures",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Path", style="trust.path", no_wrap=True)
    table.add_column("Problem", width=8)
    table.add_column("Expected", style="muted")
    table.add_column("Actual")

    for m in mismatches:
        table.add_row(
            escape(m.path),
            f"[removed]{m.kind.value}[/]",
            m.expected or "-",
            escape(m.actual or "-"),
        )

    console.print(table)
