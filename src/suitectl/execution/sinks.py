"""
Output sinks: JSON on stdout.

* :class:`StreamingSink` writes each result as its own JSON document as
  soon as it arrives (always compact, one per line).
* :class:`AggregateSink` collects results in arrival order and writes one
  JSON array on :meth:`~AggregateSink.close`.

Encoding or write failures raise :class:`OutputError`, which is fatal to
the invocation.
"""

from __future__ import annotations

import json
from typing import IO, Any

from suitectl.core.errors import OutputError


def encode(data: Any, *, compress: bool = False) -> str:
    """Encode ``data`` as compact or pretty JSON."""
    try:
        if compress:
            return json.dumps(data, separators=(",", ":"), ensure_ascii=False)
        return json.dumps(data, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise OutputError(f"Cannot encode output as JSON: {e}", cause=e) from e


def _write(stream: IO[str], text: str) -> None:
    try:
        stream.write(text)
        stream.flush()
    except OSError as e:
        raise OutputError(f"Cannot write output: {e}", cause=e) from e


def _as_dict(result: Any) -> Any:
    return result.to_dict() if hasattr(result, "to_dict") else result


class StreamingSink:
    """Writes one compact JSON document per result."""

    def __init__(self, stream: IO[str]):
        self._stream = stream
        self.written = 0

    def write(self, result: Any) -> None:
        _write(self._stream, encode(_as_dict(result), compress=True) + "\n")
        self.written += 1

    def close(self) -> None:
        pass


class AggregateSink:
    """Collects results and writes them as one JSON array on close."""

    def __init__(self, stream: IO[str], *, compress: bool = False):
        self._stream = stream
        self._compress = compress
        self.items: list[Any] = []
        self._closed = False

    def write(self, result: Any) -> None:
        self.items.append(_as_dict(result))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        _write(self._stream, encode(self.items, compress=self._compress) + "\n")


def make_sink(stream: IO[str], *, stream_output: bool, compress: bool) -> StreamingSink | AggregateSink:
    if stream_output:
        return StreamingSink(stream)
    return AggregateSink(stream, compress=compress)


def emit(data: Any, stream: IO[str], *, stream_output: bool = False, compress: bool = False) -> None:
    """Write the result of a single (non-batch) call.

    With ``stream_output`` a list is written one element per line.
    """
    if stream_output and isinstance(data, list):
        sink = StreamingSink(stream)
        for item in data:
            sink.write(item)
        return
    _write(stream, encode(data, compress=compress or stream_output) + "\n")


__all__ = ["AggregateSink", "StreamingSink", "emit", "encode", "make_sink"]
