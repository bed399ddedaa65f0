"""Tests for the per-resource request builders in suitectl.api."""

from __future__ import annotations

import pytest

from suitectl.api import directory, drive, gmail, sheets
from suitectl.cli.revisions import REVISION_FLAGS
from suitectl.cli.spreadsheets import SPREADSHEET_FLAGS
from suitectl.cli.threads import THREAD_FLAGS
from suitectl.cli.useraliases import USER_ALIAS_FLAGS
from suitectl.cli.users import USER_FLAGS
from suitectl.core.errors import ConfigError
from suitectl.framework.flags import FlagKind, FlagTable, Row
from suitectl.framework.registry import cli_value


def row_for(table: FlagTable, verb: str, **texts) -> Row:
    """A row for ``verb`` with defaults, overridden by ``texts`` parsed per flag kind."""
    row = Row({flag.name: flag.default_value(verb) for flag in table.for_verb(verb)})
    for name, text in texts.items():
        flag = table[name]
        raw = (text,) if flag.kind is FlagKind.STRING_LIST else text
        row[name] = cli_value(flag, raw)
    return row


class TestDrive:
    def test_delete(self, invocation):
        request = drive.delete_revision(row_for(REVISION_FLAGS, "delete", fileId="F1", revisionId="R1"), invocation)
        assert request.method == "DELETE"
        assert request.url == "https://www.googleapis.com/drive/v3/files/F1/revisions/R1"
        assert request.action

    def test_update_force_sends_false(self, invocation):
        row = row_for(REVISION_FLAGS, "update", fileId="F1", revisionId="R1", published="false")
        request = drive.update_revision(row, invocation)
        assert request.method == "PATCH"
        assert request.wire_body() == {"published": False}
        assert request.body.force_send_fields == ["published"]

    def test_update_without_flags_sends_empty_body(self, invocation):
        request = drive.update_revision(row_for(REVISION_FLAGS, "update", fileId="F1", revisionId="R1"), invocation)
        assert request.wire_body() == {}

    def test_list_paginates(self, invocation):
        request = drive.list_revisions(row_for(REVISION_FLAGS, "list", fileId="F1", fields="revisions(id)"), invocation)
        assert request.items_key == "revisions"
        assert request.query() == {"fields": "nextPageToken,revisions(id)"}

    def test_get_params(self, invocation):
        row = row_for(REVISION_FLAGS, "get", fileId="F1", revisionId="R1", acknowledgeAbuse="true")
        assert drive.get_revision(row, invocation).query() == {"acknowledgeAbuse": True}


class TestDirectory:
    def test_insert_user(self, invocation):
        row = row_for(
            USER_FLAGS,
            "insert",
            primaryEmail="ada@example.com",
            givenName="Ada",
            familyName="Lovelace",
            password="secret",
            suspended="false",
        )
        body = directory.insert_user(row, invocation).wire_body()
        assert body == {
            "primaryEmail": "ada@example.com",
            "name": {"familyName": "Lovelace", "givenName": "Ada"},
            "password": "secret",
            "suspended": False,
        }

    def test_update_user_emails(self, invocation):
        row = row_for(USER_FLAGS, "update", userKey="ada@example.com")
        row["emails"] = cli_value(USER_FLAGS["emails"], ("address=ada@example.org;type=work;primary=false",))
        request = directory.update_user(row, invocation)
        assert request.method == "PUT"
        assert request.url.endswith("/users/ada@example.com")
        assert request.wire_body() == {"emails": [{"address": "ada@example.org", "type": "work", "primary": False}]}

    def test_list_users_defaults_to_my_customer(self, invocation):
        request = directory.list_users(row_for(USER_FLAGS, "list"), invocation)
        assert request.query() == {"customer": "my_customer"}
        assert request.items_key == "users"

    def test_list_users_domain_replaces_customer(self, invocation):
        request = directory.list_users(row_for(USER_FLAGS, "list", domain="example.com"), invocation)
        assert request.query() == {"domain": "example.com"}

    def test_alias_requests(self, invocation):
        row = row_for(USER_ALIAS_FLAGS, "insert", userKey="ada@example.com", alias="countess@example.com")
        request = directory.insert_alias(row, invocation)
        assert request.url.endswith("/users/ada@example.com/aliases")
        assert request.wire_body() == {"alias": "countess@example.com"}

        delete = directory.delete_alias(row_for(USER_ALIAS_FLAGS, "delete", userKey="u", alias="a@x"), invocation)
        assert delete.url.endswith("/users/u/aliases/a@x")
        assert delete.action


class TestGmail:
    def test_user_id_defaults_to_me(self, invocation):
        request = gmail.trash_thread(row_for(THREAD_FLAGS, "trash", id="T1"), invocation)
        assert request.url == "https://gmail.googleapis.com/gmail/v1/users/me/threads/T1/trash"

    def test_modify(self, invocation):
        row = row_for(THREAD_FLAGS, "modify", id="T1", addLabelIds="STARRED;IMPORTANT")
        request = gmail.modify_thread(row, invocation)
        assert request.url.endswith("/threads/T1/modify")
        assert request.wire_body() == {"addLabelIds": ["STARRED", "IMPORTANT"]}

    def test_list(self, invocation):
        row = row_for(THREAD_FLAGS, "list", q="from:ada", includeSpamTrash="true")
        request = gmail.list_threads(row, invocation)
        assert request.items_key == "threads"
        assert request.query() == {"q": "from:ada", "includeSpamTrash": True}


class TestSheets:
    def test_create_with_title(self, invocation):
        request = sheets.create_spreadsheet(row_for(SPREADSHEET_FLAGS, "create", title="Budget"), invocation)
        assert request.method == "POST"
        assert request.wire_body() == {"properties": {"title": "Budget"}}

    def test_create_with_upload(self, invocation, write_csv):
        path = write_csv("a,b\n1,2\n", "q1.csv")
        row = row_for(SPREADSHEET_FLAGS, "create", title="Budget")
        row["csvFileToUpload"] = cli_value(SPREADSHEET_FLAGS["csvFileToUpload"], (f"title=Q1;path={path}",))
        body = sheets.create_spreadsheet(row, invocation).wire_body()
        sheet = body["sheets"][0]
        assert sheet["properties"] == {"title": "Q1"}
        cells = [[cell["userEnteredValue"]["stringValue"] for cell in r["values"]] for r in sheet["data"][0]["rowData"]]
        assert cells == [["a", "b"], ["1", "2"]]

    def test_upload_without_path(self, invocation):
        row = row_for(SPREADSHEET_FLAGS, "create", title="Budget")
        row["csvFileToUpload"] = cli_value(SPREADSHEET_FLAGS["csvFileToUpload"], ("title=Q1",))
        with pytest.raises(ConfigError):
            sheets.create_spreadsheet(row, invocation)

    def test_batch_update_adds_missing_sheet(self, invocation, fake_client, write_csv):
        fake_client.handler = lambda request: {"sheets": [{"properties": {"title": "Existing", "sheetId": 7}}]}
        path = write_csv("x,y\n", "data.csv")
        row = row_for(SPREADSHEET_FLAGS, "batchUpdate", spreadsheetId="S1")
        row["csvFileToUpload"] = cli_value(
            SPREADSHEET_FLAGS["csvFileToUpload"],
            (f"title=Existing;path={path}", f"title=New;path={path}"),
        )
        request = sheets.batch_update_spreadsheet(row, invocation)
        assert request.url == "https://sheets.googleapis.com/v4/spreadsheets/S1:batchUpdate"
        requests = request.wire_body()["requests"]
        assert requests[0]["pasteData"]["coordinate"] == {"sheetId": 7}
        added = requests[1]["addSheet"]["properties"]
        assert added["title"] == "New"
        assert requests[2]["pasteData"]["coordinate"] == {"sheetId": added["sheetId"]}
        assert requests[2]["pasteData"]["data"] == "x,y\n"
        # the lookup of existing sheets is the only call made while building
        assert len(fake_client.requests) == 1
