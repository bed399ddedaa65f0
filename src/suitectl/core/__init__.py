"""
Core primitives shared by every suitectl layer: errors, logging, settings.
"""

from suitectl.core.errors import (
    CancelledError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    KindMismatchError,
    MalformedRowError,
    MissingRequiredError,
    OutputError,
    RemoteError,
    RemoteFatalError,
    RemoteTransientError,
    SchemaMismatchError,
    SuiteError,
    UnknownFlagError,
    is_retryable,
)
from suitectl.core.logging import LogContext, configure_logging, get_logger

__all__ = [
    "CancelledError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "KindMismatchError",
    "MalformedRowError",
    "MissingRequiredError",
    "OutputError",
    "RemoteError",
    "RemoteFatalError",
    "RemoteTransientError",
    "SchemaMismatchError",
    "SuiteError",
    "UnknownFlagError",
    "is_retryable",
    "LogContext",
    "configure_logging",
    "get_logger",
]
