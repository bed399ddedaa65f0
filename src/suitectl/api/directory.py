"""Admin SDK Directory v1: users and user aliases."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from suitectl.api.client import ApiRequest, list_fields, segment
from suitectl.api.models import Alias, User
from suitectl.framework.field_mask import FieldBinding, build_payload
from suitectl.framework.flags import Row, Value, parse_bool

if TYPE_CHECKING:
    from suitectl.execution.context import InvocationContext

# Keys of key=value items that hold booleans on the wire.
_BOOL_KEYS = frozenset({"primary", "sourceIsStructured"})


def to_map_list(value: Value) -> list[dict[str, Any]]:
    """``["address=a@x;primary=true"]`` -> ``[{"address": "a@x", "primary": True}]``."""
    items = []
    for mapping in value.get_maps():
        if not mapping:
            continue
        items.append(
            {key: parse_bool(raw, key) if key in _BOOL_KEYS else raw for key, raw in mapping.items()}
        )
    return items


USER_BINDINGS = (
    FieldBinding.of("primaryEmail", "primary_email"),
    FieldBinding.of("familyName", "name.family_name"),
    FieldBinding.of("givenName", "name.given_name"),
    FieldBinding.of("password"),
    FieldBinding.of("hashFunction", "hash_function"),
    FieldBinding.of("archived"),
    FieldBinding.of("changePasswordAtNextLogin", "change_password_at_next_login"),
    FieldBinding.of("includeInGlobalAddressList", "include_in_global_address_list"),
    FieldBinding.of("ipWhitelisted", "ip_whitelisted"),
    FieldBinding.of("orgUnitPath", "org_unit_path"),
    FieldBinding.of("recoveryEmail", "recovery_email"),
    FieldBinding.of("recoveryPhone", "recovery_phone"),
    FieldBinding.of("suspended"),
    FieldBinding.of("addresses", convert=to_map_list),
    FieldBinding.of("emails", convert=to_map_list),
)

ALIAS_BINDINGS = (FieldBinding.of("alias"),)


def map_to_user(row: Row) -> User:
    return build_payload(User, row, USER_BINDINGS)


def map_to_alias(row: Row) -> Alias:
    return build_payload(Alias, row, ALIAS_BINDINGS)


# ── Users ────────────────────────────────────────────────────────────────


def _users_url(ctx: InvocationContext) -> str:
    return f"{ctx.settings.directory_url}/users"


def _user_url(ctx: InvocationContext, row: Row) -> str:
    return f"{_users_url(ctx)}/{segment(row['userKey'].get_string())}"


def _view_params(row: Row) -> dict[str, Any]:
    return {
        "customFieldMask": row["customFieldMask"].get_string() or None,
        "projection": row["projection"].get_string() or None,
        "viewType": row["viewType"].get_string() or None,
    }


def delete_user(row: Row, ctx: InvocationContext) -> ApiRequest:
    return ApiRequest("DELETE", _user_url(ctx, row), action=True)


def get_user(row: Row, ctx: InvocationContext) -> ApiRequest:
    params = _view_params(row)
    params["fields"] = row["fields"].get_string() or None
    return ApiRequest("GET", _user_url(ctx, row), params=params)


def insert_user(row: Row, ctx: InvocationContext) -> ApiRequest:
    return ApiRequest(
        "POST",
        _users_url(ctx),
        params={"fields": row["fields"].get_string() or None},
        body=map_to_user(row),
    )


def list_users(row: Row, ctx: InvocationContext) -> ApiRequest:
    domain = row["domain"].get_string()
    params = _view_params(row)
    params.update(
        {
            # domain and customer are alternatives; an explicit domain wins
            "customer": None if domain else row["customer"].get_string() or None,
            "domain": domain or None,
            "orderBy": row["orderBy"].get_string() or None,
            "query": row["query"].get_string() or None,
            "showDeleted": row["showDeleted"].get_bool() or None,
            "sortOrder": row["sortOrder"].get_string() or None,
            "fields": list_fields(row["fields"].get_string()),
        }
    )
    return ApiRequest("GET", _users_url(ctx), params=params, items_key="users")


def update_user(row: Row, ctx: InvocationContext) -> ApiRequest:
    return ApiRequest(
        "PUT",
        _user_url(ctx, row),
        params={"fields": row["fields"].get_string() or None},
        body=map_to_user(row),
    )


# ── Aliases ──────────────────────────────────────────────────────────────


def _aliases_url(ctx: InvocationContext, row: Row) -> str:
    return f"{_user_url(ctx, row)}/aliases"


def delete_alias(row: Row, ctx: InvocationContext) -> ApiRequest:
    return ApiRequest("DELETE", f"{_aliases_url(ctx, row)}/{segment(row['alias'].get_string())}", action=True)


def insert_alias(row: Row, ctx: InvocationContext) -> ApiRequest:
    return ApiRequest(
        "POST",
        _aliases_url(ctx, row),
        params={"fields": row["fields"].get_string() or None},
        body=map_to_alias(row),
    )


def list_aliases(row: Row, ctx: InvocationContext) -> ApiRequest:
    return ApiRequest(
        "GET",
        _aliases_url(ctx, row),
        params={"fields": list_fields(row["fields"].get_string())},
        items_key="aliases",
    )
