"""
CLI: ``suitectl spreadsheets`` — Sheets spreadsheets.

``--csvFileToUpload "title=Q1;path=./q1.csv"`` may be repeated, one sheet
per occurrence.
"""

from __future__ import annotations

import click

from suitectl.api import sheets
from suitectl.cli.commands import Verb, add_resource
from suitectl.framework.flags import Flag, FlagKind, FlagTable

_ALL = {"batchUpdate", "create", "get"}

SPREADSHEET_FLAGS = FlagTable(
    [
        Flag("spreadsheetId", FlagKind.STRING, "The spreadsheet to operate on",
             available_for={"batchUpdate", "get"}, required_for={"batchUpdate", "get"}),
        Flag("title", FlagKind.STRING, "Title of the spreadsheet",
             available_for={"create"}, required_for={"create"}),
        Flag("csvFileToUpload", FlagKind.STRING_LIST,
             "Local CSV file to load as a sheet, as title=<sheet title>;path=<file>",
             available_for={"batchUpdate", "create"}, recursive={"batchUpdate", "create"},
             exclude_from_batch_all=True, key_value=True),
        Flag("ranges", FlagKind.STRING_LIST, "Ranges to retrieve, in A1 notation",
             available_for={"get"}, recursive={"get"}),
        Flag("includeGridData", FlagKind.BOOL, "Return grid data; ignored when --fields is set",
             available_for={"get"}, recursive={"get"}),
        Flag("fields", FlagKind.STRING, "Fields to include in a partial response",
             available_for=_ALL, recursive=_ALL),
    ]
)

VERBS = [
    Verb("batchUpdate", sheets.batch_update_spreadsheet, keys=("spreadsheetId",),
         help="Apply updates to a spreadsheet, uploading CSV files into its sheets."),
    Verb("create", sheets.create_spreadsheet, keys=("title",), help="Create a spreadsheet."),
    Verb("get", sheets.get_spreadsheet, keys=("spreadsheetId",), help="Get a spreadsheet."),
]


def register(root: click.Group) -> click.Group:
    return add_resource(root, "spreadsheets", SPREADSHEET_FLAGS, VERBS, help="Manage spreadsheets (Sheets API).")
