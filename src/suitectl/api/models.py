"""
Request payload models.

Only the fields suitectl writes are declared.  Attribute names are
snake_case; the wire form is camelCase (``keep_forever`` -> ``keepForever``).
Every model inherits the force-send list from :class:`Payload`.
"""

from __future__ import annotations

from typing import Any

from suitectl.framework.field_mask import Payload

# ── Drive ────────────────────────────────────────────────────────────────


class Revision(Payload):
    keep_forever: bool | None = None
    publish_auto: bool | None = None
    published: bool | None = None
    published_outside_domain: bool | None = None


# ── Directory ────────────────────────────────────────────────────────────


class UserName(Payload):
    family_name: str | None = None
    given_name: str | None = None


class User(Payload):
    primary_email: str | None = None
    name: UserName | None = None
    password: str | None = None
    hash_function: str | None = None
    archived: bool | None = None
    change_password_at_next_login: bool | None = None
    include_in_global_address_list: bool | None = None
    ip_whitelisted: bool | None = None
    org_unit_path: str | None = None
    recovery_email: str | None = None
    recovery_phone: str | None = None
    suspended: bool | None = None
    addresses: list[dict[str, Any]] | None = None
    emails: list[dict[str, Any]] | None = None


class Alias(Payload):
    alias: str | None = None


# ── Gmail ────────────────────────────────────────────────────────────────


class ModifyThreadRequest(Payload):
    add_label_ids: list[str] | None = None
    remove_label_ids: list[str] | None = None


# ── Sheets ───────────────────────────────────────────────────────────────


class ExtendedValue(Payload):
    string_value: str | None = None


class CellData(Payload):
    user_entered_value: ExtendedValue | None = None


class RowData(Payload):
    values: list[CellData] | None = None


class GridData(Payload):
    row_data: list[RowData] | None = None


class SheetProperties(Payload):
    sheet_id: int | None = None
    title: str | None = None


class Sheet(Payload):
    properties: SheetProperties | None = None
    data: list[GridData] | None = None


class SpreadsheetProperties(Payload):
    title: str | None = None


class Spreadsheet(Payload):
    properties: SpreadsheetProperties | None = None
    sheets: list[Sheet] | None = None


class GridCoordinate(Payload):
    sheet_id: int | None = None
    row_index: int | None = None
    column_index: int | None = None


class AddSheetRequest(Payload):
    properties: SheetProperties | None = None


class PasteDataRequest(Payload):
    coordinate: GridCoordinate | None = None
    data: str | None = None
    delimiter: str | None = None
    type: str | None = None


class Request(Payload):
    add_sheet: AddSheetRequest | None = None
    paste_data: PasteDataRequest | None = None


class BatchUpdateSpreadsheetRequest(Payload):
    requests: list[Request] | None = None


__all__ = [
    "AddSheetRequest",
    "Alias",
    "BatchUpdateSpreadsheetRequest",
    "CellData",
    "ExtendedValue",
    "GridCoordinate",
    "GridData",
    "ModifyThreadRequest",
    "PasteDataRequest",
    "Request",
    "Revision",
    "RowData",
    "Sheet",
    "SheetProperties",
    "Spreadsheet",
    "SpreadsheetProperties",
    "User",
    "UserName",
]
