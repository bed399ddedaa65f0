"""
Flag registry: materializes flag tables as click commands.

Each verb of a resource becomes a click group named after the verb.  The
group runs the single-call form when invoked on its own, and its ``batch``
subcommand runs the CSV-driven form::

    suitectl revisions delete --fileId F1 --revisionId R1
    suitectl revisions delete batch --path revisions.csv --batchThreads 8

Option names are the flag identifiers verbatim (``--fileId``).  Required
flags are not enforced by click; :func:`collect` and :func:`check_required`
raise :class:`MissingRequiredError` instead, so single calls and batch rows
fail the same way.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any

import click

from suitectl.core.errors import ConfigError, MissingRequiredError
from suitectl.framework.flags import LIST_SEPARATOR, Flag, FlagKind, FlagTable, Row, Value

# Reserved flags of every ``batch`` subcommand.
BATCH_FLAGS = FlagTable(
    [
        Flag("path", FlagKind.STRING, "Path to the CSV file with one row per call", available_for={"batch"},
             required_for={"batch"}),
        Flag("delimiter", FlagKind.STRING, "CSV field delimiter", available_for={"batch"},
             defaults={"batch": ","}),
        Flag("skipHeader", FlagKind.BOOL, "Drop the first record and map columns by position",
             available_for={"batch"}),
        Flag("batchThreads", FlagKind.INT, "Number of concurrent workers", available_for={"batch"}),
        Flag("failFast", FlagKind.BOOL, "Stop taking new rows after the first failed row",
             available_for={"batch"}),
    ]
)

VerbCallback = Callable[[click.Context, Row], Any]
BatchCallback = Callable[[click.Context, "BatchOptions", Row], Any]


@dataclass(frozen=True)
class BatchOptions:
    """Parsed reserved flags of a ``batch`` subcommand."""

    path: str
    delimiter: str = ","
    skip_header: bool = False
    batch_threads: int | None = None
    fail_fast: bool = False

    @classmethod
    def from_row(cls, row: Row) -> BatchOptions:
        threads = row["batchThreads"]
        return cls(
            path=row["path"].get_string(),
            delimiter=row["delimiter"].get_string() or ",",
            skip_header=row["skipHeader"].get_bool(),
            batch_threads=threads.get_int() if threads.is_set else None,
            fail_fast=row["failFast"].get_bool(),
        )


def cli_value(flag: Flag, raw: Any) -> Value:
    """Convert what click parsed for ``flag`` into a :class:`Value`.

    An explicit empty string on the command line counts as set, so that
    ``--title=""`` clears a field.  String-list flags may be repeated and
    each occurrence may hold ``;``-separated items, as a CSV cell does,
    except key=value flags where every occurrence is one item.
    """
    if flag.kind is FlagKind.STRING_LIST:
        items: list[str] = []
        for occurrence in raw:
            if flag.key_value:
                items.append(occurrence)
            else:
                items.extend(part for part in occurrence.split(LIST_SEPARATOR) if part != "")
        return Value(flag.name, flag.kind, is_set=True, raw=LIST_SEPARATOR.join(raw), value=items)
    if flag.kind is FlagKind.STRING:
        return Value(flag.name, flag.kind, is_set=True, raw=raw, value=raw)
    return flag.parse(raw)


def make_option(flag: Flag) -> click.Option:
    """Build the click option for ``flag``; values are parsed by :func:`cli_value`."""
    if flag.kind is FlagKind.STRING_LIST:
        return click.Option([f"--{flag.name}", flag.name], multiple=True, help=flag.description)
    if flag.kind is FlagKind.BOOL:
        # ``--flag`` alone means true; ``--flag=false`` clears
        return click.Option(
            [f"--{flag.name}", flag.name],
            is_flag=False,
            flag_value="true",
            default=None,
            metavar="[BOOLEAN]",
            help=flag.description,
        )
    return click.Option([f"--{flag.name}", flag.name], default=None, help=flag.description)


def collect(ctx: click.Context, flags: Iterable[Flag], verb: str) -> Row:
    """Snapshot every flag in ``flags`` as seen by ``verb``.

    Flags the user did not supply take their per-verb default, which counts
    as set only when it is non-zero.
    """
    row = Row()
    for flag in flags:
        raw = ctx.params.get(flag.name)
        if raw is None or raw == ():
            row[flag.name] = flag.default_value(verb)
        else:
            row[flag.name] = cli_value(flag, raw)
    return row


def check_required(row: Row, flags: Iterable[Flag], verb: str) -> None:
    """Raise :class:`MissingRequiredError` for the first required flag not set in ``row``."""
    for flag in flags:
        if flag.required(verb) and not row[flag.name].is_set:
            message = f"Missing required flag --{flag.name} for {verb}"
            if row.line is not None:
                message = f"Line {row.line}: missing required value {flag.name} for {verb}"
            raise MissingRequiredError(flag.name, verb, message).with_context(line=row.line)


def merge_row(row: Row, shared: Row, table: FlagTable, verb: str) -> Row:
    """Complete a CSV row: a set cell wins, then a batch-wide value, then the default."""
    merged = Row(line=row.line)
    for flag in table.for_verb(verb):
        value = row.get(flag.name)
        if value is not None and value.is_set:
            merged[flag.name] = value
        elif flag.name in shared and shared[flag.name].is_set:
            merged[flag.name] = shared[flag.name]
        else:
            merged[flag.name] = flag.default_value(verb)
    return merged


def merge_rows(rows: Iterable[Row], shared: Row, table: FlagTable, verb: str) -> Iterator[Row]:
    for row in rows:
        yield merge_row(row, shared, table, verb)


def register(
    parent: click.Group,
    table: FlagTable,
    verb: str,
    run: VerbCallback,
    *,
    run_batch: BatchCallback | None = None,
    help: str = "",
    batch_help: str | None = None,
) -> click.Group:
    """Attach ``verb`` to ``parent`` with the options of ``table``.

    Args:
        parent: Resource group (``revisions``, ``users`` ...)
        table: Flag table shared by the resource's verbs
        verb: Verb name; also the key into the table's per-verb sets
        run: Called with the collected row for a single call
        run_batch: Called with the batch options and the batch-wide row;
            when omitted the verb has no ``batch`` subcommand
    """
    verb_flags = table.for_verb(verb)

    @click.pass_context
    def invoke_single(ctx: click.Context, **_: Any) -> Any:
        if ctx.invoked_subcommand is not None:
            return None
        row = collect(ctx, verb_flags, verb)
        check_required(row, verb_flags, verb)
        return run(ctx, row)

    group = click.Group(
        name=verb,
        callback=invoke_single,
        params=[make_option(flag) for flag in verb_flags],
        help=help,
        invoke_without_command=True,
    )

    if run_batch is not None:
        recursive = table.recursive_for(verb)
        clash = {flag.name for flag in recursive} & {flag.name for flag in BATCH_FLAGS}
        if clash:
            raise ConfigError(f"Flags {sorted(clash)} of {verb} clash with reserved batch flags")

        @click.pass_context
        def invoke_batch(ctx: click.Context, **_: Any) -> Any:
            reserved = collect(ctx, BATCH_FLAGS, "batch")
            check_required(reserved, BATCH_FLAGS, "batch")
            shared = collect(ctx, recursive, verb)
            return run_batch(ctx, BatchOptions.from_row(reserved), shared)

        group.add_command(
            click.Command(
                name="batch",
                callback=invoke_batch,
                params=[make_option(flag) for flag in [*BATCH_FLAGS, *recursive]],
                help=batch_help or f"Run {verb} once per row of a CSV file.",
            )
        )

    parent.add_command(group)
    return group


__all__ = [
    "BATCH_FLAGS",
    "BatchOptions",
    "check_required",
    "cli_value",
    "collect",
    "make_option",
    "merge_row",
    "merge_rows",
    "register",
]
