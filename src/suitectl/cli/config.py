"""
CLI: ``suitectl config`` — configuration inspection.
"""

from __future__ import annotations

import typer
from rich.table import Table

from suitectl.cli.utils import console, get_invocation

app = typer.Typer(no_args_is_help=True)

_MASK = "********"


def _masked(settings_dump: dict) -> dict:
    if settings_dump.get("access_token"):
        settings_dump["access_token"] = _MASK
    return settings_dump


@app.command("show")
def show_config(
    ctx: typer.Context,
    format: str = typer.Option("table", "--format", "-f", help="Output format: table, json, env"),
) -> None:
    """Show the resolved configuration."""
    settings = get_invocation(ctx).settings
    values = _masked(settings.model_dump())

    if format == "json":
        console.print_json(data=values)
        return

    if format == "env":
        for key, value in sorted(values.items()):
            console.print(f"SUITECTL_{key.upper()}={value}", markup=False, highlight=False, soft_wrap=True)
        return

    if format != "table":
        raise typer.BadParameter(f"unknown format {format!r}", param_hint="--format")

    table = Table()
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in sorted(values.items()):
        table.add_row(key, str(value))
    console.print(table)
