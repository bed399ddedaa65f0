"""Retry policy with exponential backoff and multiplicative jitter.

Every remote call runs under a :class:`RetryPolicy`:

    Start -> Attempting -> Succeeded
                 |  ^
      retryable  |  |  sleep next_delay(attempt)
                 v  |
              (backoff)
                 |
                 +--> Failed   (fatal error or attempts exhausted)

Classification is pure: :meth:`RetryPolicy.classify` only looks at the
error.  Time is injected: :class:`RetryContext` takes a ``sleep`` callable,
so tests run with a fake clock.

Example:
    >>> from suitectl.execution.retry import RetryContext, RetryPolicy
    >>>
    >>> policy = RetryPolicy(max_attempts=5, base_delay=1.0, max_delay=32.0)
    >>> ctx = RetryContext(policy)
    >>> result = ctx.run(lambda: client.execute(request))
    >>> ctx.attempts
    1
"""

from __future__ import annotations

import random
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from suitectl.core.errors import CancelledError, RemoteError, is_retryable
from suitectl.core.logging import get_logger

T = TypeVar("T")

logger = get_logger(__name__)

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff.

    Delay before retry number ``attempt`` (1-based) is
    ``min(base_delay * 2 ** (attempt - 1), max_delay) * uniform(*jitter)``.

    Attributes:
        max_attempts: Total attempts including the first one
        base_delay: Delay before the first retry, in seconds
        max_delay: Cap applied before jitter
        jitter: Multiplicative jitter range
        retry_on: Extra HTTP statuses to treat as retryable
    """

    max_attempts: int = 5
    base_delay: float = 1.0
    max_delay: float = 32.0
    jitter: tuple[float, float] = (0.5, 1.5)
    retry_on: frozenset[int] = field(default_factory=frozenset)
    rng: random.Random | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.retry_on, frozenset):
            object.__setattr__(self, "retry_on", frozenset(self.retry_on))

    @classmethod
    def from_settings(cls, settings: Any, *, retry_on: Iterable[int] = ()) -> RetryPolicy:
        return cls(
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
            retry_on=frozenset(settings.retry_on) | frozenset(retry_on),
        )

    def next_delay(self, attempt: int) -> float:
        """Delay in seconds after failed attempt number ``attempt`` (1-based)."""
        delay = min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)
        low, high = self.jitter
        uniform = self.rng.uniform if self.rng is not None else random.uniform
        return delay * uniform(low, high)

    def classify(self, error: BaseException) -> bool:
        """True if ``error`` warrants another attempt.

        Retryable iff the error is a transient transport failure, or carries
        a status in {429, 500, 502, 503, 504} or in ``retry_on``.
        """
        status = getattr(error, "status", None)
        if status is not None and status in self.retry_on:
            return True
        if isinstance(error, RemoteError) and status in RETRYABLE_STATUSES:
            return True
        return isinstance(error, Exception) and is_retryable(error)

    def should_retry(self, attempt: int, error: BaseException) -> bool:
        return attempt < self.max_attempts and self.classify(error)


def cancellable_sleep(cancel: threading.Event | None) -> Callable[[float], None]:
    """A sleep that returns early and raises :class:`CancelledError` once ``cancel`` is set."""

    def _sleep(seconds: float) -> None:
        if cancel is None:
            threading.Event().wait(seconds)
            return
        if cancel.wait(seconds):
            raise CancelledError("Cancelled while waiting to retry")

    return _sleep


@dataclass
class RetryContext:
    """Retry state for one operation.

    Tracks the attempt count and every failure.  ``sleep`` defaults to a
    cancel-aware wait on ``cancel``.

    Example:
        >>> ctx = RetryContext(RetryPolicy(max_attempts=3), sleep=fake_sleep)
        >>> ctx.run(flaky_call)
    """

    policy: RetryPolicy
    on_retry: Callable[[int, BaseException, float], None] | None = None
    sleep: Callable[[float], None] | None = None
    cancel: threading.Event | None = None
    attempt: int = field(default=0, init=False)
    last_error: BaseException | None = field(default=None, init=False)
    terminal: bool = field(default=False, init=False)
    errors: list[tuple[int, BaseException]] = field(default_factory=list, init=False)
    delays: list[float] = field(default_factory=list, init=False)

    @property
    def attempts(self) -> int:
        """Number of attempts made."""
        return self.attempt

    def run(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Call ``func`` until it succeeds, fails fatally, or attempts run out.

        The same ``func`` (and therefore the same prebuilt request) is called
        on every attempt.

        Raises:
            The last error once the operation is terminal
            CancelledError: Cancellation was requested between attempts
        """
        if self.terminal:
            raise RuntimeError("RetryContext already finished")
        sleep = self.sleep or cancellable_sleep(self.cancel)

        while True:
            if self.cancel is not None and self.cancel.is_set() and self.attempt > 0:
                self.terminal = True
                raise CancelledError("Cancelled before retry") from self.last_error
            self.attempt += 1
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                self.last_error = e
                self.errors.append((self.attempt, e))

                if not self.policy.should_retry(self.attempt, e):
                    self.terminal = True
                    raise

                delay = self.policy.next_delay(self.attempt)
                self.delays.append(delay)
                if self.on_retry:
                    self.on_retry(self.attempt, e, delay)
                try:
                    sleep(delay)
                except CancelledError:
                    self.terminal = True
                    raise
            else:
                self.terminal = True
                return result


def log_retry(key: str) -> Callable[[int, BaseException, float], None]:
    """``on_retry`` hook that logs ``retry.scheduled`` with the row's error key."""

    def _log(attempt: int, error: BaseException, delay: float) -> None:
        logger.info("retry.scheduled", key=key, attempt=attempt, delay=round(delay, 3), error=str(error))

    return _log


__all__ = [
    "RETRYABLE_STATUSES",
    "RetryContext",
    "RetryPolicy",
    "cancellable_sleep",
    "log_retry",
]
