"""End-to-end tests for the suitectl command line with a fake API client."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from suitectl import __version__
from suitectl.cli.app import build_cli
from suitectl.core.config import SuiteSettings
from suitectl.core.errors import RemoteFatalError
from suitectl.execution.context import InvocationContext

REVISIONS_CSV = "fileId,revisionId\nF1,R1\nF2,R2\nF3,R3\n"


@pytest.fixture(autouse=True)
def fast_settings(monkeypatch):
    monkeypatch.setenv("SUITECTL_STANDARD_DELAY_MS", "0")
    monkeypatch.setenv("SUITECTL_RETRY_BASE_DELAY", "0")
    monkeypatch.setenv("SUITECTL_RETRY_MAX_DELAY", "0")


@pytest.fixture
def cli():
    return build_cli()


@pytest.fixture
def invoke(cli, fake_client):
    """Run suitectl with ``fake_client`` standing in for the API."""

    def _invoke(*args: str):
        seeded = InvocationContext(settings=SuiteSettings(), client_factory=lambda _: fake_client)
        return CliRunner().invoke(cli, list(args), obj=seeded)

    return _invoke


def not_found_for(file_id: str):
    def handler(request):
        if f"/files/{file_id}/" in request.url:
            raise RemoteFatalError(f"Error 404: File not found: {file_id}.", status=404)
        return True

    return handler


class TestBatch:
    def test_all_rows_succeed(self, invoke, write_csv, fake_client):
        path = write_csv(REVISIONS_CSV)
        result = invoke("--compressOutput", "revisions", "delete", "batch", "--path", str(path), "--batchThreads", "2")
        assert result.exit_code == 0, result.output
        results = json.loads(result.stdout)
        assert sorted(results, key=lambda item: item["fileId"]) == [
            {"fileId": "F1", "revisionId": "R1", "result": True},
            {"fileId": "F2", "revisionId": "R2", "result": True},
            {"fileId": "F3", "revisionId": "R3", "result": True},
        ]
        assert sorted(request.url.rsplit("/files/", 1)[1] for request in fake_client.requests) == [
            "F1/revisions/R1",
            "F2/revisions/R2",
            "F3/revisions/R3",
        ]
        assert {request.method for request in fake_client.requests} == {"DELETE"}

    def test_row_failure_keeps_exit_code_zero(self, invoke, write_csv, fake_client):
        fake_client.handler = not_found_for("F2")
        path = write_csv(REVISIONS_CSV)
        result = invoke("--compressOutput", "revisions", "delete", "batch", "--path", str(path))
        assert result.exit_code == 0, result.output
        by_file = {item["fileId"]: item["result"] for item in json.loads(result.stdout)}
        assert by_file == {"F1": True, "F2": False, "F3": True}
        assert "batch.row_failed" in result.stderr
        assert "F2 - R2" in result.stderr

    def test_unknown_column_aborts_before_any_call(self, invoke, write_csv, fake_client):
        path = write_csv("fileId,owner\nF1,x\n")
        result = invoke("revisions", "delete", "batch", "--path", str(path))
        assert result.exit_code == 1
        assert result.stdout == ""
        assert "owner" in result.stderr
        assert fake_client.requests == []

    def test_missing_file(self, invoke):
        result = invoke("revisions", "delete", "batch", "--path", "missing.csv")
        assert result.exit_code == 1
        assert "missing.csv" in result.stderr

    def test_fail_fast_exits_one(self, invoke, write_csv, fake_client):
        fake_client.handler = not_found_for("F1")
        path = write_csv(REVISIONS_CSV)
        result = invoke(
            "--compressOutput", "revisions", "delete", "batch", "--path", str(path), "--batchThreads", "1", "--failFast"
        )
        assert result.exit_code == 1
        assert {"fileId": "F1", "revisionId": "R1", "result": False} in json.loads(result.stdout)

    def test_stream_output(self, invoke, write_csv):
        path = write_csv(REVISIONS_CSV)
        result = invoke("--streamOutput", "revisions", "delete", "batch", "--path", str(path))
        assert result.exit_code == 0, result.output
        lines = result.stdout.splitlines()
        assert len(lines) == 3
        assert all(json.loads(line)["result"] is True for line in lines)

    def test_batch_wide_value_and_cell_override(self, invoke, write_csv, fake_client):
        path = write_csv("fileId,revisionId,published\nF1,R1,\nF2,R2,true\n")
        result = invoke("revisions", "update", "batch", "--path", str(path), "--published=false")
        assert result.exit_code == 0, result.output
        bodies = {request.url.rsplit("/files/", 1)[1]: request.wire_body() for request in fake_client.requests}
        assert bodies == {"F1/revisions/R1": {"published": False}, "F2/revisions/R2": {"published": True}}

    def test_skip_header_maps_by_position(self, invoke, write_csv, fake_client):
        path = write_csv("file,revision\nF1,R1\n")
        result = invoke("revisions", "delete", "batch", "--path", str(path), "--skipHeader")
        assert result.exit_code == 0, result.output
        assert fake_client.requests[0].url.endswith("/files/F1/revisions/R1")

    def test_empty_required_cell_fails_only_that_row(self, invoke, write_csv, fake_client):
        path = write_csv("fileId,revisionId\nF1,\nF2,R2\n")
        result = invoke("--compressOutput", "revisions", "delete", "batch", "--path", str(path))
        assert result.exit_code == 0, result.output
        assert {"fileId": "F1", "result": False} in json.loads(result.stdout)
        assert len(fake_client.requests) == 1

    def test_zero_threads_is_rejected(self, invoke, write_csv, fake_client):
        path = write_csv(REVISIONS_CSV)
        result = invoke("revisions", "delete", "batch", "--path", str(path), "--batchThreads", "0")
        assert result.exit_code == 1
        assert fake_client.requests == []

    def test_retry_on_opt_in(self, invoke, write_csv, fake_client):
        calls = []

        def quota_once(request):
            calls.append(request)
            if len(calls) == 1:
                raise RemoteFatalError("Error 403: User rate limit exceeded.", status=403)
            return True

        fake_client.handler = quota_once
        path = write_csv("fileId,revisionId\nF1,R1\n")
        result = invoke("--compressOutput", "--retryOn", "403", "revisions", "delete", "batch", "--path", str(path))
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == [{"fileId": "F1", "revisionId": "R1", "result": True}]
        assert len(calls) == 2


class TestSingle:
    def test_action_verb(self, invoke):
        result = invoke("--compressOutput", "revisions", "delete", "--fileId", "F1", "--revisionId", "R1")
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"fileId": "F1", "revisionId": "R1", "result": True}

    def test_update_force_sends_false(self, invoke, fake_client):
        result = invoke("revisions", "update", "--fileId", "F1", "--revisionId", "R1", "--published=false")
        assert result.exit_code == 0, result.output
        assert fake_client.requests[0].wire_body() == {"published": False}

    def test_missing_required_flag(self, invoke, fake_client):
        result = invoke("revisions", "delete", "--fileId", "F1")
        assert result.exit_code == 1
        assert "--revisionId" in result.stderr
        assert fake_client.requests == []

    def test_remote_error_exits_one(self, invoke, fake_client):
        fake_client.handler = not_found_for("F9")
        result = invoke("revisions", "delete", "--fileId", "F9", "--revisionId", "R1")
        assert result.exit_code == 1
        assert "404" in result.stderr

    def test_list_is_printed(self, invoke, fake_client):
        fake_client.handler = lambda request: [{"id": "T1"}, {"id": "T2"}]
        result = invoke("--streamOutput", "threads", "list", "--q", "from:ada")
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == ['{"id":"T1"}', '{"id":"T2"}']
        assert fake_client.requests[0].url.endswith("/users/me/threads")

    def test_unknown_option_exits_one(self, invoke):
        result = invoke("revisions", "delete", "--nope", "x")
        assert result.exit_code == 1

    def test_missing_token(self, cli):
        result = CliRunner().invoke(cli, ["revisions", "delete", "--fileId", "F1", "--revisionId", "R1"])
        assert result.exit_code == 1
        assert "SUITECTL_ACCESS_TOKEN" in result.stderr


class TestRoot:
    def test_version(self, cli):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert result.stdout.strip() == f"suitectl {__version__}"

    def test_resources_are_registered(self, cli):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("revisions", "users", "userAliases", "threads", "spreadsheets", "config"):
            assert name in result.stdout

    def test_negative_delay(self, invoke):
        result = invoke("--delay", "-1", "revisions", "delete", "--fileId", "F1", "--revisionId", "R1")
        assert result.exit_code == 1

    def test_bad_log_format(self, invoke):
        result = invoke("--logFormat", "xml", "config", "show")
        assert result.exit_code == 1
