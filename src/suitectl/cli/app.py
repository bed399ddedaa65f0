"""
Root Typer application for the suitectl CLI.

Global options live on the root callback, which resolves the settings and
builds the :class:`InvocationContext` every verb receives through
``ctx.obj``.  Resource groups are plain click groups generated from flag
tables and attached in :func:`build_cli`.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import click
import typer
from typer.core import TyperGroup

from suitectl import __version__
from suitectl.api.client import ApiClient
from suitectl.cli import revisions, spreadsheets, threads, useraliases, users
from suitectl.cli.config import app as config_app
from suitectl.cli.utils import fail, report_error
from suitectl.core.config import get_settings
from suitectl.core.errors import SuiteError
from suitectl.core.logging import configure_logging
from suitectl.execution.context import InvocationContext

RESOURCES = (revisions, spreadsheets, threads, useraliases, users)


class SuiteGroup(TyperGroup):
    """Root group; every failure, usage errors included, exits with code 1."""

    def main(self, *args: Any, standalone_mode: bool = True, **kwargs: Any) -> Any:
        if not standalone_mode:
            return super().main(*args, standalone_mode=False, **kwargs)
        try:
            rv = super().main(*args, standalone_mode=False, **kwargs)
        except click.ClickException as e:
            e.show()
            sys.exit(1)
        except click.Abort:
            click.echo("Aborted!", err=True)
            sys.exit(1)
        except SuiteError as e:
            report_error(e)
            sys.exit(1)
        sys.exit(rv if isinstance(rv, int) else 0)


app = typer.Typer(
    cls=SuiteGroup,
    name="suitectl",
    help="suitectl — bulk administration of a hosted office suite from the command line.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"suitectl {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    compress_output: bool = typer.Option(False, "--compressOutput", help="Print compact JSON."),
    stream_output: bool = typer.Option(
        False, "--streamOutput", help="Print one JSON document per result as it completes (implies compact)."
    ),
    delay: int | None = typer.Option(None, "--delay", help="Pause after every remote call, in milliseconds."),
    retry_on: list[int] | None = typer.Option(None, "--retryOn", help="Also retry this HTTP status (repeatable)."),
    log_level: str | None = typer.Option(None, "--logLevel", help="Log level: DEBUG, INFO, WARNING, ERROR."),
    log_format: str | None = typer.Option(None, "--logFormat", help="Log format: console, json."),
    config_file: Path | None = typer.Option(None, "--config", help="TOML config file."),
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Run verbs against the mail, drive, sheets and directory APIs, one call or one CSV at a time."""
    if log_format is not None and log_format.lower() not in ("console", "json"):
        raise typer.BadParameter("must be 'console' or 'json'", param_hint="--logFormat")

    # a pre-seeded context only contributes how clients are built
    seeded = ctx.obj if isinstance(ctx.obj, InvocationContext) else None
    try:
        settings = get_settings(config_file=config_file)
        configure_logging(
            level=log_level or settings.log_level,
            json_format=(log_format or settings.log_format).lower() == "json",
            force=True,
        )
        invocation = InvocationContext(
            settings=settings,
            compress_output=compress_output,
            stream_output=stream_output,
            delay_ms=delay,
            retry_on=tuple(retry_on or ()),
            client_factory=seeded.client_factory if seeded else ApiClient.from_settings,
        )
    except SuiteError as e:
        fail(e)

    ctx.obj = invocation
    ctx.call_on_close(invocation.close)


app.add_typer(config_app, name="config", help="Configuration inspection.")


def build_cli() -> click.Group:
    """The root click group with every resource attached."""
    cli = typer.main.get_command(app)
    for resource in RESOURCES:
        resource.register(cli)
    return cli


def run() -> None:
    """Console-script entry point."""
    build_cli()(prog_name="suitectl")
