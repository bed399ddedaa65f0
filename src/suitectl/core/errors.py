"""
Structured error types for suitectl.

Every failure the tool can report is a :class:`SuiteError`.  Errors carry a
category, an explicit retry flag, structured context and an optional chained
cause, so that the retry policy, the batch engine and the CLI can all decide
what to do with an error without string matching.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                          SuiteError                           │
        │            (category, retryable, context, cause)              │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  ConfigError            SchemaMismatchError   MalformedRowError│
        │  (CONFIG)               (SCHEMA)              (SCHEMA)        │
        │     │                        │                                │
        │  MissingRequiredError   KindMismatchError                     │
        │  UnknownFlagError                                             │
        │                                                               │
        │  RemoteError            OutputError           CancelledError  │
        │  (REMOTE, status)       (OUTPUT)              (CANCELLED)     │
        │     │                                                         │
        │  RemoteTransientError (retryable=True)                        │
        │  RemoteFatalError     (retryable=False)                       │
        └──────────────────────────────────────────────────────────────┘

Scope:
    *Engine-scoped* errors (ConfigError, SchemaMismatchError,
    MalformedRowError, OutputError) abort an invocation with exit code 1.
    *Row-scoped* errors (RemoteError and anything raised while building a
    single request) become a failed result for that row only.

Usage:
    from suitectl.core.errors import RemoteFatalError, is_retryable

    try:
        client.execute(request)
    except RemoteFatalError as e:
        logger.warning("row_failed", status=e.status, error=e.message)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and reporting."""

    CONFIG = "CONFIG"
    SCHEMA = "SCHEMA"
    REMOTE = "REMOTE"
    NETWORK = "NETWORK"
    OUTPUT = "OUTPUT"
    CANCELLED = "CANCELLED"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """Structured metadata attached to an error.

    Attributes:
        verb: Verb being executed (``delete``, ``update`` ...)
        resource: Resource group (``revisions``, ``users`` ...)
        flag: Flag identifier involved, if any
        column: CSV column involved, if any
        line: CSV line number (1-based), if any
        url: Request URL for remote errors
        http_status: HTTP status for remote errors
        metadata: Additional key/value pairs
    """

    verb: str | None = None
    resource: str | None = None
    flag: str | None = None
    column: str | None = None
    line: int | None = None
    url: str | None = None
    http_status: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["verb", "resource", "flag", "column", "line", "url", "http_status"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class SuiteError(Exception):
    """
    Base exception for all suitectl errors.

    Subclasses set ``default_category`` and ``default_retryable``; callers may
    override either per instance.

    Examples:
        >>> error = SuiteError("Something went wrong")
        >>> error.retryable
        False
        >>> error.with_context(verb="delete").context.verb
        'delete'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SuiteError:
        """
        Add context to this error (fluent API).

        Usage:
            raise SchemaMismatchError("bad column").with_context(column="foo")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(SuiteError):
    """
    Invalid flag combination or settings.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG


class MissingRequiredError(ConfigError):
    """A flag required for the invoked verb was not supplied."""

    def __init__(self, flag: str, verb: str, message: str | None = None):
        self.flag = flag
        self.verb = verb
        super().__init__(
            message or f"Missing required flag --{flag} for {verb}",
            context=ErrorContext(flag=flag, verb=verb),
        )


class UnknownFlagError(ConfigError):
    """A flag identifier that the registry does not know about."""

    def __init__(self, flag: str, message: str | None = None):
        self.flag = flag
        super().__init__(message or f"Unknown flag: {flag}", context=ErrorContext(flag=flag))


# =============================================================================
# INPUT SCHEMA ERRORS
# =============================================================================


class SchemaMismatchError(SuiteError):
    """CSV input does not match the verb's flag schema."""

    default_category = ErrorCategory.SCHEMA


class KindMismatchError(SchemaMismatchError):
    """A value does not match the declared kind of its flag."""

    def __init__(self, flag: str, expected: str, message: str | None = None):
        self.flag = flag
        self.expected = expected
        super().__init__(
            message or f"Flag {flag} expects a {expected} value",
            context=ErrorContext(flag=flag),
        )


class MalformedRowError(SuiteError):
    """A CSV record violates the structural rules of the input format."""

    default_category = ErrorCategory.SCHEMA

    def __init__(self, message: str, *, line: int | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.line = line
        if line is not None:
            self.context.line = line


# =============================================================================
# REMOTE ERRORS
# =============================================================================


class RemoteError(SuiteError):
    """Error returned by (or while talking to) the remote API."""

    default_category = ErrorCategory.REMOTE

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        reason: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.status = status
        self.reason = reason
        if status is not None:
            self.context.http_status = status

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.status is not None:
            result["status"] = self.status
        if self.reason:
            result["reason"] = self.reason
        return result


class RemoteTransientError(RemoteError):
    """Transport failure or retryable remote status (429, 5xx)."""

    default_category = ErrorCategory.NETWORK
    default_retryable = True


class RemoteFatalError(RemoteError):
    """Non-retryable remote error (4xx other than 429, validation failures)."""

    default_retryable = False


# =============================================================================
# OUTPUT / LIFECYCLE ERRORS
# =============================================================================


class OutputError(SuiteError):
    """Encoding or stdout write failure."""

    default_category = ErrorCategory.OUTPUT


class CancelledError(SuiteError):
    """Work was abandoned because cancellation was requested."""

    default_category = ErrorCategory.CANCELLED


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, SuiteError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SuiteError",
    "ConfigError",
    "MissingRequiredError",
    "UnknownFlagError",
    "SchemaMismatchError",
    "KindMismatchError",
    "MalformedRowError",
    "RemoteError",
    "RemoteTransientError",
    "RemoteFatalError",
    "OutputError",
    "CancelledError",
    "is_retryable",
]
