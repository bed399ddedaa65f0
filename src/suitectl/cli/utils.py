"""
CLI utility helpers: consoles, error reporting, invocation lookup.
"""

from __future__ import annotations

from typing import NoReturn

import click
import typer
from rich.console import Console
from rich.markup import escape

from suitectl.core.errors import SuiteError
from suitectl.execution.context import InvocationContext

console = Console()
err_console = Console(stderr=True, highlight=False)


def report_error(error: SuiteError) -> None:
    """Print ``error`` to stderr in the CLI's error format."""
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {escape(error.message)}")
    column = error.context.column
    if column:
        err_console.print(f"  column: {escape(column)}")
    if error.context.line is not None:
        err_console.print(f"  line: {error.context.line}")


def fail(error: SuiteError) -> NoReturn:
    """Report ``error`` and exit with code 1."""
    report_error(error)
    raise typer.Exit(code=1)


def get_invocation(ctx: click.Context) -> InvocationContext:
    """The :class:`InvocationContext` built by the root callback."""
    invocation = ctx.find_object(InvocationContext)
    if invocation is None:
        raise click.UsageError("suitectl commands must be run through the suitectl root command")
    return invocation
