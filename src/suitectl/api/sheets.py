"""Sheets v4 spreadsheets.

``--csvFileToUpload "title=Q1;path=./q1.csv"`` uploads a local CSV file as
a sheet: on create the cells are embedded in the new spreadsheet, on
batchUpdate the file is pasted into the sheet with that title (added first
when the spreadsheet has no such sheet).
"""

from __future__ import annotations

import csv
import random
from pathlib import Path
from typing import TYPE_CHECKING

from suitectl.api.client import ApiRequest, segment
from suitectl.api.models import (
    AddSheetRequest,
    BatchUpdateSpreadsheetRequest,
    CellData,
    ExtendedValue,
    GridCoordinate,
    GridData,
    PasteDataRequest,
    Request,
    RowData,
    Sheet,
    SheetProperties,
    Spreadsheet,
)
from suitectl.core.errors import ConfigError
from suitectl.execution.retry import RetryContext
from suitectl.framework.field_mask import FieldBinding, build_payload
from suitectl.framework.flags import Row

if TYPE_CHECKING:
    from suitectl.execution.context import InvocationContext

SPREADSHEET_BINDINGS = (FieldBinding.of("title", "properties.title"),)


def _read_text(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8-sig")
    except OSError as e:
        raise ConfigError(f"Cannot read CSV file {path}: {e.strerror or e}", cause=e) from e


def _uploads(row: Row) -> list[tuple[str, str]]:
    uploads = []
    for item in row["csvFileToUpload"].get_maps():
        path = item.get("path", "")
        if not path:
            raise ConfigError(f"csvFileToUpload entry without a path: {item}")
        uploads.append((item.get("title", ""), path))
    return uploads


def csv_to_sheet(title: str, path: str) -> Sheet:
    """A sheet titled ``title`` holding the cells of the CSV file at ``path``."""
    rows = [
        RowData(values=[CellData(user_entered_value=ExtendedValue(string_value=cell)) for cell in record])
        for record in csv.reader(_read_text(path).splitlines())
    ]
    return Sheet(properties=SheetProperties(title=title), data=[GridData(row_data=rows)])


def map_to_spreadsheet(row: Row) -> Spreadsheet:
    spreadsheet = build_payload(Spreadsheet, row, SPREADSHEET_BINDINGS)
    if row["csvFileToUpload"].is_set:
        sheets = [csv_to_sheet(title, path) for title, path in _uploads(row)]
        spreadsheet.sheets = sheets
        if not sheets:
            spreadsheet.force_send("sheets")
    return spreadsheet


def _spreadsheet_url(ctx: InvocationContext, row: Row) -> str:
    return f"{ctx.settings.sheets_url}/spreadsheets/{segment(row['spreadsheetId'].get_string())}"


def sheet_ids(row: Row, ctx: InvocationContext) -> dict[str, int]:
    """Map sheet titles to sheet IDs for the row's spreadsheet."""
    request = ApiRequest(
        "GET",
        _spreadsheet_url(ctx, row),
        params={"fields": "sheets(properties(title,sheetId))"},
    )
    data = RetryContext(ctx.retry_policy, cancel=ctx.cancel).run(ctx.client.execute, request) or {}
    ids = {}
    for sheet in data.get("sheets", []):
        properties = sheet.get("properties", {})
        ids[properties.get("title", "")] = properties.get("sheetId", 0)
    return ids


def map_to_batch_update_request(row: Row, ctx: InvocationContext) -> BatchUpdateSpreadsheetRequest:
    request = BatchUpdateSpreadsheetRequest()
    uploads = _uploads(row)
    if not uploads:
        return request

    existing = sheet_ids(row, ctx)
    requests: list[Request] = []
    for title, path in uploads:
        data = _read_text(path)
        sheet_id = existing.get(title)
        if sheet_id is None:
            sheet_id = random.randint(1, 2**31 - 1)
            existing[title] = sheet_id
            requests.append(
                Request(add_sheet=AddSheetRequest(properties=SheetProperties(title=title, sheet_id=sheet_id)))
            )
        requests.append(
            Request(
                paste_data=PasteDataRequest(
                    coordinate=GridCoordinate(sheet_id=sheet_id),
                    data=data,
                    delimiter=",",
                    type="PASTE_NORMAL",
                )
            )
        )
    request.requests = requests
    return request


def create_spreadsheet(row: Row, ctx: InvocationContext) -> ApiRequest:
    return ApiRequest(
        "POST",
        f"{ctx.settings.sheets_url}/spreadsheets",
        params={"fields": row["fields"].get_string() or None},
        body=map_to_spreadsheet(row),
    )


def get_spreadsheet(row: Row, ctx: InvocationContext) -> ApiRequest:
    return ApiRequest(
        "GET",
        _spreadsheet_url(ctx, row),
        params={
            "ranges": row["ranges"].get_list() or None,
            "includeGridData": row["includeGridData"].get_bool() or None,
            "fields": row["fields"].get_string() or None,
        },
    )


def batch_update_spreadsheet(row: Row, ctx: InvocationContext) -> ApiRequest:
    return ApiRequest(
        "POST",
        f"{_spreadsheet_url(ctx, row)}:batchUpdate",
        params={"fields": row["fields"].get_string() or None},
        body=map_to_batch_update_request(row, ctx),
    )
