"""Tests for suitectl.cli.utils — error reporting and context lookup."""

from __future__ import annotations

import click
import pytest
import typer

from suitectl.cli.utils import fail, get_invocation, report_error
from suitectl.core.errors import SchemaMismatchError


class TestReportError:
    def test_prints_category_message_and_context(self, capsys):
        error = SchemaMismatchError("CSV column 'owner' is not a flag accepted by delete")
        report_error(error.with_context(column="owner", line=1))
        err = capsys.readouterr().err
        assert "Error (SCHEMA)" in err
        assert "column: owner" in err
        assert "line: 1" in err

    def test_fail_exits_one(self):
        with pytest.raises(typer.Exit) as exc:
            fail(SchemaMismatchError("bad"))
        assert exc.value.exit_code == 1


class TestGetInvocation:
    def test_missing_context(self):
        ctx = click.Context(click.Command("x"))
        with pytest.raises(click.UsageError):
            get_invocation(ctx)

    def test_found_on_parent(self, invocation):
        parent = click.Context(click.Group("root"), obj=invocation)
        child = click.Context(click.Command("x"), parent=parent)
        assert get_invocation(child) is invocation
