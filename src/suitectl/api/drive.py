"""Drive v3 revisions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from suitectl.api.client import ApiRequest, list_fields, segment
from suitectl.api.models import Revision
from suitectl.framework.field_mask import FieldBinding, build_payload
from suitectl.framework.flags import Row

if TYPE_CHECKING:
    from suitectl.execution.context import InvocationContext

REVISION_BINDINGS = (
    FieldBinding.of("keepForever", "keep_forever"),
    FieldBinding.of("publishAuto", "publish_auto"),
    FieldBinding.of("published"),
    FieldBinding.of("publishedOutsideDomain", "published_outside_domain"),
)


def _revisions_url(ctx: InvocationContext, row: Row) -> str:
    return f"{ctx.settings.drive_url}/files/{segment(row['fileId'].get_string())}/revisions"


def _revision_url(ctx: InvocationContext, row: Row) -> str:
    return f"{_revisions_url(ctx, row)}/{segment(row['revisionId'].get_string())}"


def map_to_revision(row: Row) -> Revision:
    return build_payload(Revision, row, REVISION_BINDINGS)


def delete_revision(row: Row, ctx: InvocationContext) -> ApiRequest:
    return ApiRequest("DELETE", _revision_url(ctx, row), action=True)


def get_revision(row: Row, ctx: InvocationContext) -> ApiRequest:
    return ApiRequest(
        "GET",
        _revision_url(ctx, row),
        params={
            "acknowledgeAbuse": row["acknowledgeAbuse"].get_bool() or None,
            "fields": row["fields"].get_string() or None,
        },
    )


def list_revisions(row: Row, ctx: InvocationContext) -> ApiRequest:
    return ApiRequest(
        "GET",
        _revisions_url(ctx, row),
        params={"fields": list_fields(row["fields"].get_string())},
        items_key="revisions",
    )


def update_revision(row: Row, ctx: InvocationContext) -> ApiRequest:
    return ApiRequest(
        "PATCH",
        _revision_url(ctx, row),
        params={"fields": row["fields"].get_string() or None},
        body=map_to_revision(row),
    )
