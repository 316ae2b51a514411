"""History command for viewing past trust store changes.

This module provides the `trustctl history` command for viewing the
audit trail of added, deleted and rehashed trust records.
"""

import json
from datetime import datetime
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from trustctl.core.state import StateManager
from trustctl.models.history import HistoryActionType, HistoryEntry
from trustctl.utils.formatting import console, print_info

app = typer.Typer(
    name="history",
    help="View history of trust database changes.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def history(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            help="Maximum number of entries to show.",
        ),
    ] = 20,
    since: Annotated[
        str | None,
        typer.Option(
            "--since",
            help="Show entries since date (YYYY-MM-DD).",
        ),
    ] = None,
    action_type: Annotated[
        HistoryActionType | None,
        typer.Option(
            "--type",
            "-t",
            help="Only show entries of this action type.",
            case_sensitive=False,
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show history of trust database changes.

    Examples:
        trustctl history              # Show last 20 entries
        trustctl history -n 50        # Show last 50 entries
        trustctl history --since 2026-01-01
        trustctl history -t trust_delete  # Only deletions
        trustctl history --json       # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    entries = StateManager().get_history(limit=limit, action_type=action_type)

    if since:
        try:
            since_parsed = datetime.fromisoformat(since)
        except ValueError:
            typer.echo(f"Invalid date format: {since}. Use YYYY-MM-DD.", err=True)
            raise typer.Exit(code=1) from None
        if since_parsed.tzinfo is None:
            # Naive dates compare against the UTC date of each entry
            since_date = since_parsed.strftime("%Y-%m-%d")
            entries = [e for e in entries if e.timestamp[:10] >= since_date]
        else:
            entries = [e for e in entries if _parse_timestamp(e.timestamp) >= since_parsed]

    if not entries:
        print_info("No history entries found.")
        return

    if json_output:
        _print_json(entries)
    else:
        _print_table(entries)


def _print_table(entries: list[HistoryEntry]) -> None:
    """Print history as Rich table.

    Args:
        entries: List of history entries to display.
    """
    table = Table(title="Trust Database History")
    table.add_column("ID", style="dim")
    table.add_column("Timestamp", style="info")
    table.add_column("Action", style="success")
    table.add_column("Paths", style="text")
    table.add_column("Records", justify="right")

    for entry in entries:
        path_count = len(entry.paths)
        shown = ", ".join(p or "(all)" for p in entry.paths[:3])
        if path_count > 3:
            shown += f" (+{path_count - 3} more)"

        table.add_row(
            entry.id[:8],
            _format_timestamp(entry.timestamp),
            entry.action_type.value,
            escape(shown),
            str(entry.count),
        )

    console.print(table)


def _parse_timestamp(iso_timestamp: str) -> datetime:
    return datetime.fromisoformat(iso_timestamp.replace("Z", "+00:00"))


def _format_timestamp(iso_timestamp: str) -> str:
    """Format ISO timestamp for display (YYYY-MM-DD HH:MM)."""
    return _parse_timestamp(iso_timestamp).strftime("%Y-%m-%d %H:%M")


def _print_json(entries: list[HistoryEntry]) -> None:
    """Print history as JSON for scripting."""
    output = [entry.to_dict() for entry in entries]
    console.print_json(json.dumps(output))
