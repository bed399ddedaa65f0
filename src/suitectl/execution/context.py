"""
Invocation-scoped context.

One :class:`InvocationContext` is built per command-line invocation from
the resolved settings plus the global flags.  It carries the output mode,
pacing, retry policy and the API client, and is passed explicitly to every
verb; nothing here is process-global.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from suitectl.api.client import ApiClient
from suitectl.core.config import SuiteSettings
from suitectl.core.errors import ConfigError
from suitectl.core.logging import get_logger
from suitectl.execution.retry import RetryPolicy

logger = get_logger(__name__)


@dataclass
class InvocationContext:
    """Context passed to every verb.

    Attributes:
        settings: Resolved :class:`SuiteSettings`
        compress_output: Compact JSON instead of indented
        stream_output: One JSON document per result (implies compact)
        delay_ms: Pause after every remote call
        retry_on: Extra HTTP statuses to retry, on top of the settings
        client_factory: Builds the API client on first use
        cancel: Cancellation signal shared with running batches
        request_id: Unique ID of this invocation, bound into log context
    """

    settings: SuiteSettings
    compress_output: bool = False
    stream_output: bool = False
    delay_ms: int | None = None
    retry_on: tuple[int, ...] = ()
    client_factory: Callable[[SuiteSettings], Any] = ApiClient.from_settings
    cancel: threading.Event = field(default_factory=threading.Event)
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    _client: Any = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.compress_output = self.compress_output or self.settings.compress_output
        self.stream_output = self.stream_output or self.settings.stream_output
        if self.stream_output:
            self.compress_output = True
        if self.delay_ms is not None and self.delay_ms < 0:
            raise ConfigError(f"--delay must not be negative, got {self.delay_ms}")

    @property
    def pacing(self) -> float:
        """Pause after each remote call, in seconds."""
        delay = self.delay_ms if self.delay_ms is not None else self.settings.standard_delay_ms
        return delay / 1000.0

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy.from_settings(self.settings, retry_on=self.retry_on)

    @property
    def client(self) -> Any:
        """API client, created on first use and shared by all workers."""
        if self._client is None:
            self._client = self.client_factory(self.settings)
        return self._client

    def resolve_workers(self, flag: int | None = None) -> int:
        """Worker count: ``--batchThreads``, else ``batch_threads`` from settings.

        Values above ``max_threads`` are capped.

        Raises:
            ConfigError: The resulting count is not positive
        """
        workers = flag if flag is not None else self.settings.batch_threads
        if workers <= 0:
            raise ConfigError(f"batchThreads must be positive, got {workers}")
        if workers > self.settings.max_threads:
            logger.warning("batch.threads_capped", requested=workers, max_threads=self.settings.max_threads)
            workers = self.settings.max_threads
        return workers

    def close(self) -> None:
        if self._client is not None and hasattr(self._client, "close"):
            self._client.close()
        self._client = None
