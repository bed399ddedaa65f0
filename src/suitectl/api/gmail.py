"""Gmail v1 threads."""

from __future__ import annotations

from typing import TYPE_CHECKING

from suitectl.api.client import ApiRequest, list_fields, segment
from suitectl.api.models import ModifyThreadRequest
from suitectl.framework.field_mask import FieldBinding, build_payload
from suitectl.framework.flags import Row

if TYPE_CHECKING:
    from suitectl.execution.context import InvocationContext

MODIFY_BINDINGS = (
    FieldBinding.of("addLabelIds", "add_label_ids"),
    FieldBinding.of("removeLabelIds", "remove_label_ids"),
)


def map_to_modify_thread_request(row: Row) -> ModifyThreadRequest:
    return build_payload(ModifyThreadRequest, row, MODIFY_BINDINGS)


def _threads_url(ctx: InvocationContext, row: Row) -> str:
    return f"{ctx.settings.gmail_url}/users/{segment(row['userId'].get_string())}/threads"


def _thread_url(ctx: InvocationContext, row: Row) -> str:
    return f"{_threads_url(ctx, row)}/{segment(row['id'].get_string())}"


def _fields(row: Row) -> dict[str, str | None]:
    return {"fields": row["fields"].get_string() or None}


def delete_thread(row: Row, ctx: InvocationContext) -> ApiRequest:
    return ApiRequest("DELETE", _thread_url(ctx, row), action=True)


def get_thread(row: Row, ctx: InvocationContext) -> ApiRequest:
    params = _fields(row)
    params["format"] = row["format"].get_string() or None
    params["metadataHeaders"] = row["metadataHeaders"].get_string() or None
    return ApiRequest("GET", _thread_url(ctx, row), params=params)


def list_threads(row: Row, ctx: InvocationContext) -> ApiRequest:
    return ApiRequest(
        "GET",
        _threads_url(ctx, row),
        params={
            "q": row["q"].get_string() or None,
            "labelIds": row["labelIds"].get_list() or None,
            "includeSpamTrash": row["includeSpamTrash"].get_bool() or None,
            "fields": list_fields(row["fields"].get_string()),
        },
        items_key="threads",
    )


def modify_thread(row: Row, ctx: InvocationContext) -> ApiRequest:
    return ApiRequest(
        "POST",
        f"{_thread_url(ctx, row)}/modify",
        params=_fields(row),
        body=map_to_modify_thread_request(row),
    )


def trash_thread(row: Row, ctx: InvocationContext) -> ApiRequest:
    return ApiRequest("POST", f"{_thread_url(ctx, row)}/trash", params=_fields(row))


def untrash_thread(row: Row, ctx: InvocationContext) -> ApiRequest:
    return ApiRequest("POST", f"{_thread_url(ctx, row)}/untrash", params=_fields(row))
