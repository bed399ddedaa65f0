"""
CSV row iterator for batch verbs.

Joins a CSV file against a verb's flag table and yields one :class:`Row`
per record.  The header is read and validated eagerly, so an unknown
column fails the whole batch before a single row reaches a worker; the
records themselves are read lazily.

Example::

    rows = read_rows("revisions.csv", table, "delete")
    for row in rows:
        print(row["fileId"].get_string())
"""

from __future__ import annotations

import csv
from collections.abc import Iterator
from pathlib import Path
from typing import IO, Any

from suitectl.core.errors import ConfigError, MalformedRowError, SchemaMismatchError, SuiteError
from suitectl.core.logging import get_logger
from suitectl.framework.flags import FlagTable, Row

logger = get_logger(__name__)


def _is_blank(record: list[str]) -> bool:
    return all(cell.strip() == "" for cell in record)


def _open(path: str | Path) -> IO[str]:
    try:
        return open(path, newline="", encoding="utf-8-sig")
    except OSError as e:
        raise ConfigError(f"Cannot open CSV file {path}: {e.strerror or e}", cause=e) from e


def _header_columns(record: list[str], table: FlagTable, verb: str) -> list[str]:
    accepted = set(table.batch_columns(verb))
    columns: list[str] = []
    for cell in record:
        name = cell.strip()
        if name not in accepted:
            raise SchemaMismatchError(
                f"CSV column {name!r} is not a flag accepted by {verb}",
            ).with_context(column=name, verb=verb)
        if name in columns:
            raise SchemaMismatchError(f"CSV column {name!r} appears more than once").with_context(
                column=name, verb=verb
            )
        columns.append(name)
    return columns


def read_rows(
    path: str | Path,
    table: FlagTable,
    verb: str,
    *,
    delimiter: str = ",",
    header: bool = True,
    skip_first: bool = False,
) -> Iterator[Row]:
    """Open ``path`` and return a lazy iterator of rows for ``verb``.

    Args:
        path: CSV file (UTF-8, RFC 4180 quoting)
        table: Flag table of the resource
        verb: Verb whose batch columns the file is joined against
        delimiter: Single-character field delimiter
        header: If True the first non-empty record names the columns;
            otherwise columns follow ``table.batch_columns(verb)`` positionally
        skip_first: Drop the first non-empty record (only with ``header=False``)

    Raises:
        ConfigError: The file cannot be opened or the delimiter is invalid
        SchemaMismatchError: The header names a column the verb does not accept
    """
    if len(delimiter) != 1:
        raise ConfigError(f"Delimiter must be a single character, got {delimiter!r}")

    handle = _open(path)
    try:
        reader = csv.reader(handle, delimiter=delimiter, strict=True)
        if header or skip_first:
            first = _next_record(reader)
            if header:
                columns = _header_columns(first or [], table, verb)
            else:
                columns = table.batch_columns(verb)
        else:
            columns = table.batch_columns(verb)
    except BaseException:
        handle.close()
        raise

    logger.debug("csv.opened", path=str(path), verb=verb, columns=columns)
    return _iter_rows(handle, reader, columns, table)


def _next_record(reader: Any) -> list[str] | None:
    try:
        for record in reader:
            if not _is_blank(record):
                return record
    except csv.Error as e:
        raise MalformedRowError(f"Malformed CSV record: {e}", line=reader.line_num) from e
    return None


def _iter_rows(handle: IO[str], reader: Any, columns: list[str], table: FlagTable) -> Iterator[Row]:
    with handle:
        while True:
            try:
                record = next(reader)
            except StopIteration:
                return
            except csv.Error as e:
                raise MalformedRowError(f"Malformed CSV record: {e}", line=reader.line_num) from e

            if _is_blank(record):
                continue

            line = reader.line_num
            if len(record) > len(columns):
                raise MalformedRowError(
                    f"Line {line} has {len(record)} columns, expected at most {len(columns)}",
                    line=line,
                )

            values = {}
            for name, cell in zip(columns, record):
                try:
                    values[name] = table[name].parse(cell)
                except SuiteError as e:
                    e.with_context(line=line, column=name)
                    raise
            yield Row(values, line=line)


__all__ = ["read_rows"]
