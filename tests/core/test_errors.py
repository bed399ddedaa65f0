"""Tests for suitectl.core.errors — error hierarchy and helpers."""

from __future__ import annotations

from suitectl.core.errors import (
    CancelledError,
    ConfigError,
    ErrorCategory,
    KindMismatchError,
    MalformedRowError,
    MissingRequiredError,
    OutputError,
    RemoteFatalError,
    RemoteTransientError,
    SchemaMismatchError,
    SuiteError,
    UnknownFlagError,
    is_retryable,
)


class TestHierarchy:
    def test_config_errors(self):
        assert issubclass(MissingRequiredError, ConfigError)
        assert issubclass(UnknownFlagError, ConfigError)
        assert ConfigError("x").category == ErrorCategory.CONFIG

    def test_schema_errors(self):
        assert issubclass(KindMismatchError, SchemaMismatchError)
        assert MalformedRowError("x").category == ErrorCategory.SCHEMA

    def test_remote_errors(self):
        transient = RemoteTransientError("Error 503: backend", status=503)
        fatal = RemoteFatalError("Error 404: gone", status=404)
        assert transient.retryable and not fatal.retryable
        assert transient.context.http_status == 503

    def test_lifecycle_errors(self):
        assert OutputError("x").category == ErrorCategory.OUTPUT
        assert CancelledError("x").category == ErrorCategory.CANCELLED


class TestContext:
    def test_missing_required_carries_flag_and_verb(self):
        error = MissingRequiredError("fileId", "delete")
        assert error.message == "Missing required flag --fileId for delete"
        assert (error.context.flag, error.context.verb) == ("fileId", "delete")

    def test_with_context_is_fluent(self):
        error = SchemaMismatchError("bad column").with_context(column="owner", verb="delete", hint="check header")
        assert error.context.column == "owner"
        assert error.context.metadata == {"hint": "check header"}

    def test_malformed_row_line(self):
        error = MalformedRowError("too many cells", line=4)
        assert error.line == 4
        assert error.context.line == 4

    def test_to_dict(self):
        error = RemoteFatalError("Error 404: gone", status=404, reason="notFound")
        data = error.to_dict()
        assert data["error_type"] == "RemoteFatalError"
        assert data["status"] == 404
        assert data["reason"] == "notFound"
        assert data["context"] == {"http_status": 404}

    def test_cause_is_chained(self):
        cause = OSError("disk")
        error = OutputError("cannot write", cause=cause)
        assert error.__cause__ is cause
        assert error.to_dict()["cause"] == "disk"


class TestHelpers:
    def test_is_retryable(self):
        assert is_retryable(RemoteTransientError("x"))
        assert is_retryable(ConnectionError())
        assert not is_retryable(ValueError())
        assert not is_retryable(SuiteError("x"))
