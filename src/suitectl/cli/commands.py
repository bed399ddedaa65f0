"""
Verb runners shared by every resource.

A resource is a flag table plus a list of :class:`Verb` objects.  Each verb
knows how to build one :class:`ApiRequest` from a row; the runners here
execute it once (single call) or once per CSV row through the
:class:`BatchEngine`.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import partial
from typing import Any

import click
import typer

from suitectl.api.client import ApiRequest
from suitectl.cli.utils import fail, get_invocation
from suitectl.core.errors import ConfigError, SuiteError
from suitectl.core.logging import LogContext
from suitectl.execution.context import InvocationContext
from suitectl.execution.engine import BatchEngine, error_key
from suitectl.execution.retry import RetryContext, log_retry
from suitectl.execution.sinks import emit, make_sink
from suitectl.framework.csv_rows import read_rows
from suitectl.framework.flags import FlagTable, Row
from suitectl.framework.registry import BatchOptions, check_required, merge_rows, register

RequestBuilder = Callable[[Row, InvocationContext], ApiRequest]


@dataclass(frozen=True)
class Verb:
    """One verb of a resource.

    Attributes:
        name: Verb name, also the key into the flag table
        build: Builds the request for a row
        keys: Flags identifying a row in results and diagnostics
        action: Delete-style verb whose result is a success bit
        help: Help text
        batch: Offer the ``batch`` subcommand
    """

    name: str
    build: RequestBuilder
    keys: tuple[str, ...] = ()
    action: bool = False
    help: str = ""
    batch: bool = True


def run_single(resource: str, verb: Verb, ctx: click.Context, row: Row) -> None:
    invocation = get_invocation(ctx)
    keys = {name: row[name].value for name in verb.keys if row[name].is_set}
    key = error_key(keys.values())
    with LogContext(resource=resource, verb=verb.name, request_id=invocation.request_id):
        try:
            request = verb.build(row, invocation)
            retry = RetryContext(invocation.retry_policy, on_retry=log_retry(key), cancel=invocation.cancel)
            result = retry.run(invocation.client.execute, request)
            if verb.action:
                result = {**keys, "result": bool(result)}
            emit(
                result,
                sys.stdout,
                stream_output=invocation.stream_output,
                compress=invocation.compress_output,
            )
        except SuiteError as e:
            fail(e.with_context(resource=resource, verb=verb.name))


def run_batch(
    resource: str,
    table: FlagTable,
    verb: Verb,
    ctx: click.Context,
    options: BatchOptions,
    shared: Row,
) -> None:
    invocation = get_invocation(ctx)
    verb_flags = table.for_verb(verb.name)

    with LogContext(resource=resource, verb=verb.name, request_id=invocation.request_id):
        try:
            workers = invocation.resolve_workers(options.batch_threads)
            # one client shared by all workers; a missing token fails before any row is read
            client = invocation.client

            def operation(row: Row) -> Callable[[], Any]:
                check_required(row, verb_flags, verb.name)
                request = verb.build(row, invocation)
                return partial(client.execute, request)

            rows = read_rows(
                options.path,
                table,
                verb.name,
                delimiter=options.delimiter,
                header=not options.skip_header,
                skip_first=options.skip_header,
            )
            engine = BatchEngine(
                operation,
                keys=verb.keys,
                action=verb.action,
                workers=workers,
                policy=invocation.retry_policy,
                pacing=invocation.pacing,
                fail_fast=options.fail_fast,
                cancel=invocation.cancel,
            )
            sink = make_sink(
                sys.stdout,
                stream_output=invocation.stream_output,
                compress=invocation.compress_output,
            )
            summary = engine.run(merge_rows(rows, shared, table, verb.name), sink)
        except SuiteError as e:
            fail(e.with_context(resource=resource, verb=verb.name))

    if summary.exit_code:
        raise typer.Exit(code=summary.exit_code)


def add_resource(
    root: click.Group,
    name: str,
    table: FlagTable,
    verbs: Sequence[Verb],
    *,
    help: str = "",
) -> click.Group:
    """Register resource ``name`` with one group per verb under ``root``."""
    unknown = [verb.name for verb in verbs if verb.name not in table.verbs]
    if unknown:
        raise ConfigError(f"Resource {name}: verbs without flags: {', '.join(unknown)}")
    for verb in verbs:
        names = {flag.name for flag in table.for_verb(verb.name)}
        missing = [key for key in verb.keys if key not in names]
        if missing:
            raise ConfigError(f"Resource {name}: {verb.name} keys are not flags of the verb: {missing}")

    group = click.Group(name=name, help=help)
    for verb in verbs:
        register(
            group,
            table,
            verb.name,
            partial(run_single, name, verb),
            run_batch=partial(run_batch, name, table, verb) if verb.batch else None,
            help=verb.help,
        )
    root.add_command(group)
    return group


__all__ = ["RequestBuilder", "Verb", "add_resource", "run_batch", "run_single"]
