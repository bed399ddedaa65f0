"""Batch execution engine: CSV rows in, one result per row out.

ARCHITECTURE
────────────
::

    reader thread ──► work queue (maxsize=W) ──► W worker threads
                                                    │  build request once
                                                    │  RetryContext.run
                                                    │  pace (cancel-aware)
                                                    ▼
    caller thread  ◄── results queue (maxsize=W) ◄──┘
        │
        └── sink.write(result) ... sink.close()

* At most W remote calls are in flight: each worker runs one at a time.
* Every row taken by a worker yields exactly one :class:`BatchResult`;
  failures become results, they are never dropped.
* Result order follows completion, not input; each result carries the
  row's identifying keys.
* Cancellation (fail-fast, Ctrl-C, or an external event) stops workers
  from taking new rows; in-flight calls finish, every thread exits and
  the results queue is drained before :meth:`BatchEngine.run` returns.

Example::

    engine = BatchEngine(operation, keys=("fileId", "revisionId"), action=True, workers=4)
    summary = engine.run(rows, AggregateSink(sys.stdout, compress=True))
    print(summary.succeeded, summary.failed)
"""

from __future__ import annotations

import queue
import threading
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from suitectl.core.errors import CancelledError, ConfigError, OutputError, RemoteError, SuiteError
from suitectl.core.logging import get_logger
from suitectl.execution.retry import RetryContext, RetryPolicy, log_retry
from suitectl.framework.flags import Row

logger = get_logger(__name__)

_DONE = object()
_POLL_SECONDS = 0.1

Operation = Callable[[Row], Callable[[], Any]]


class ResultSink(Protocol):
    def write(self, result: BatchResult) -> None: ...

    def close(self) -> None: ...


def error_key(values: Iterable[Any]) -> str:
    """Join identifying values for diagnostics: ``F1 - R1``."""
    return " - ".join(str(value) for value in values)


def describe_error(error: BaseException) -> dict[str, Any]:
    """Compact, JSON-ready description of a row failure."""
    body: dict[str, Any] = {"type": type(error).__name__, "message": str(error)}
    if isinstance(error, RemoteError) and error.status is not None:
        body["status"] = error.status
    if isinstance(error, SuiteError) and error.context.line is not None:
        body["line"] = error.context.line
    return body


@dataclass
class BatchResult:
    """Outcome of one row.

    For action verbs (delete-style) the result is the success bit; for
    every other verb it is the decoded API object, or an ``error`` entry.
    """

    keys: dict[str, Any]
    ok: bool
    payload: Any = None
    error: BaseException | None = None
    attempts: int = 0
    action: bool = False

    def to_dict(self) -> dict[str, Any]:
        body = dict(self.keys)
        if self.action:
            body["result"] = self.ok
        elif self.ok:
            body["result"] = self.payload
        else:
            body["error"] = describe_error(self.error) if self.error is not None else {}
        return body


@dataclass
class BatchSummary:
    """Aggregate outcome of a batch run."""

    workers: int
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    aborted: bool = False
    cancelled: bool = False
    duration_seconds: float = 0.0
    max_in_flight: int = 0

    def record(self, result: BatchResult) -> None:
        self.total += 1
        if result.ok:
            self.succeeded += 1
        else:
            self.failed += 1

    @property
    def exit_code(self) -> int:
        """1 when the batch stopped early, 0 otherwise; row failures alone do not count."""
        return 1 if self.aborted or self.cancelled else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "workers": self.workers,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "aborted": self.aborted,
            "cancelled": self.cancelled,
            "duration_seconds": round(self.duration_seconds, 3),
        }


@dataclass
class _InFlight:
    lock: threading.Lock = field(default_factory=threading.Lock)
    current: int = 0
    peak: int = 0

    def __enter__(self) -> None:
        with self.lock:
            self.current += 1
            self.peak = max(self.peak, self.current)

    def __exit__(self, *args: Any) -> None:
        with self.lock:
            self.current -= 1


class BatchEngine:
    """Bounded worker pool driving one remote operation per row.

    Parameters
    ----------
    operation:
        Builds the call for a row: ``operation(row)`` returns a no-argument
        callable that performs the request.  The request is built once, so
        every retry sends the same body.
    keys:
        Flags identifying a row in results and diagnostics.
    action:
        Delete-style verb: results carry ``result: true|false``.
    workers:
        Worker count W (must be positive).
    policy:
        Retry policy applied to every call.
    pacing:
        Pause after each call, in seconds.
    fail_fast:
        Stop taking rows after the first failed row.
    cancel:
        External cancellation signal.
    sleep:
        Retry sleep override (tests use a fake clock).
    """

    def __init__(
        self,
        operation: Operation,
        *,
        keys: Sequence[str] = (),
        action: bool = False,
        workers: int = 4,
        policy: RetryPolicy | None = None,
        pacing: float = 0.2,
        fail_fast: bool = False,
        cancel: threading.Event | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        if workers <= 0:
            raise ConfigError(f"Worker count must be positive, got {workers}")
        if pacing < 0:
            raise ConfigError(f"Pacing delay must not be negative, got {pacing}")
        self._operation = operation
        self._keys = tuple(keys)
        self._action = action
        self._workers = workers
        self._policy = policy or RetryPolicy()
        self._pacing = pacing
        self._fail_fast = fail_fast
        self._cancel = cancel or threading.Event()
        self._sleep = sleep
        self._fatal: BaseException | None = None
        self._aborted = False
        self._in_flight = _InFlight()

    @property
    def cancel_event(self) -> threading.Event:
        return self._cancel

    @property
    def workers(self) -> int:
        return self._workers

    # ── Per-row work ─────────────────────────────────────────────────

    def _keys_of(self, row: Row) -> dict[str, Any]:
        keys = {}
        for name in self._keys:
            value = row.get(name)
            if value is not None and value.is_set:
                keys[name] = value.value
        return keys

    def _process(self, row: Row) -> BatchResult:
        keys = self._keys_of(row)
        key = error_key(keys.values())
        retry = RetryContext(self._policy, on_retry=log_retry(key), sleep=self._sleep, cancel=self._cancel)
        try:
            call = self._operation(row)
            with self._in_flight:
                payload = retry.run(call)
        except Exception as e:
            logger.warning(
                "batch.row_failed",
                key=key,
                line=row.line,
                attempts=retry.attempts,
                error=str(e),
            )
            return BatchResult(keys, ok=False, error=e, attempts=retry.attempts, action=self._action)
        return BatchResult(keys, ok=True, payload=payload, attempts=retry.attempts, action=self._action)

    # ── Threads ──────────────────────────────────────────────────────

    def _read(self, rows: Iterable[Row], work: queue.Queue) -> None:
        iterator = iter(rows)
        try:
            for row in iterator:
                while not self._cancel.is_set():
                    try:
                        work.put(row, timeout=_POLL_SECONDS)
                        break
                    except queue.Full:
                        continue
                if self._cancel.is_set():
                    break
        except Exception as e:
            self._fatal = e
            self._cancel.set()
        finally:
            close = getattr(iterator, "close", None)
            if close is not None:
                close()
            for _ in range(self._workers):
                work.put(_DONE)

    def _work(self, work: queue.Queue, results: queue.Queue) -> None:
        try:
            while True:
                row = work.get()
                if row is _DONE:
                    break
                if self._cancel.is_set():
                    continue
                result = self._process(row)
                # stop the other workers before blocking on a full results queue
                if not result.ok and self._fail_fast and not self._cancel.is_set():
                    self._aborted = True
                    self._cancel.set()
                    logger.warning("batch.fail_fast", key=error_key(result.keys.values()))
                results.put(result)
                if self._pacing > 0:
                    self._cancel.wait(self._pacing)
        finally:
            results.put(_DONE)

    # ── Run ──────────────────────────────────────────────────────────

    def run(self, rows: Iterable[Row], sink: ResultSink) -> BatchSummary:
        """Execute the batch and deliver every result to ``sink``.

        Returns:
            :class:`BatchSummary` of the run.

        Raises:
            SchemaMismatchError, MalformedRowError: Raised by the row source
            OutputError: Writing to the sink failed
            CancelledError: Interrupted with Ctrl-C
        """
        summary = BatchSummary(workers=self._workers)
        externally_cancelled = self._cancel.is_set()
        work: queue.Queue = queue.Queue(maxsize=self._workers)
        results: queue.Queue = queue.Queue(maxsize=self._workers)
        started = time.monotonic()

        logger.info("batch.start", workers=self._workers, fail_fast=self._fail_fast)

        threads = [threading.Thread(target=self._read, args=(rows, work), name="batch-reader", daemon=True)]
        threads += [
            threading.Thread(target=self._work, args=(work, results), name=f"batch-worker-{i}", daemon=True)
            for i in range(self._workers)
        ]
        for thread in threads:
            thread.start()

        output_error: OutputError | None = None
        interrupted = False
        done = 0
        while done < self._workers:
            try:
                item = results.get(timeout=_POLL_SECONDS)
            except queue.Empty:
                continue
            except KeyboardInterrupt:
                interrupted = True
                self._cancel.set()
                continue
            if item is _DONE:
                done += 1
                continue
            summary.record(item)
            if output_error is None:
                try:
                    sink.write(item)
                except OutputError as e:
                    output_error = e
                    self._cancel.set()

        for thread in threads:
            thread.join()

        summary.duration_seconds = time.monotonic() - started
        summary.max_in_flight = self._in_flight.peak
        summary.aborted = self._aborted
        summary.cancelled = interrupted or (
            self._cancel.is_set() and not self._aborted and self._fatal is None and output_error is None
        ) or externally_cancelled

        if self._fatal is not None:
            logger.error("batch.failed", error=str(self._fatal), **summary.to_dict())
            raise self._fatal
        if output_error is not None:
            raise output_error

        sink.close()
        logger.info("batch.complete", **summary.to_dict())
        if interrupted:
            raise CancelledError("Batch interrupted")
        return summary


__all__ = [
    "BatchEngine",
    "BatchResult",
    "BatchSummary",
    "ResultSink",
    "describe_error",
    "error_key",
]
