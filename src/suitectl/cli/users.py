"""
CLI: ``suitectl users`` — directory users (Admin SDK Directory API).

``--addresses`` and ``--emails`` take one ``key=value;key=value`` item per
occurrence::

    suitectl users update --userKey ada@example.com \\
        --emails "address=ada@example.org;type=work;primary=false"
"""

from __future__ import annotations

import click

from suitectl.api import directory
from suitectl.cli.commands import Verb, add_resource
from suitectl.framework.flags import Flag, FlagKind, FlagTable

_WRITE = {"insert", "update"}
_VIEW = {"get", "list"}


def _user_field(name: str, kind: FlagKind, description: str, *, required: bool = False) -> Flag:
    return Flag(
        name,
        kind,
        description,
        available_for=_WRITE,
        required_for={"insert"} if required else set(),
        recursive={"update"},
    )


USER_FLAGS = FlagTable(
    [
        Flag("userKey", FlagKind.STRING,
             "The user's primary email address, alias email address, or unique user ID",
             available_for={"delete", "get", "update"}, required_for={"delete", "get", "update"}),
        Flag("customFieldMask", FlagKind.STRING,
             "Comma-separated schema names to fetch with projection=custom",
             available_for=_VIEW, recursive={"get"}),
        Flag("projection", FlagKind.STRING, "Subset of fields to fetch [basic|custom|full]",
             available_for=_VIEW, recursive={"get"}),
        Flag("viewType", FlagKind.STRING, "Admin or domain-public view [admin_view|domain_public]",
             available_for=_VIEW, recursive={"get"}),
        Flag("fields", FlagKind.STRING, "Fields to include in a partial response",
             available_for={"get", "insert", "list", "update"}, recursive={"get", "insert", "list", "update"}),
        # user resource
        _user_field("primaryEmail", FlagKind.STRING, "The user's primary email address", required=True),
        _user_field("familyName", FlagKind.STRING, "The user's last name", required=True),
        _user_field("givenName", FlagKind.STRING, "The user's first name", required=True),
        _user_field("password", FlagKind.STRING, "Password for the user account", required=True),
        _user_field("hashFunction", FlagKind.STRING, "Hash format of the password [MD5|SHA-1|crypt]"),
        _user_field("archived", FlagKind.BOOL, "Whether the user is archived"),
        _user_field("changePasswordAtNextLogin", FlagKind.BOOL,
                    "Whether the user is forced to change the password at next login"),
        _user_field("includeInGlobalAddressList", FlagKind.BOOL,
                    "Whether the user's profile is visible in the global address list"),
        _user_field("ipWhitelisted", FlagKind.BOOL, "Whether the user's IP address is whitelisted"),
        _user_field("orgUnitPath", FlagKind.STRING, "Full path of the user's parent organization"),
        _user_field("recoveryEmail", FlagKind.STRING, "Recovery email of the user"),
        _user_field("recoveryPhone", FlagKind.STRING, "Recovery phone of the user, in E.164 format"),
        _user_field("suspended", FlagKind.BOOL, "Whether the user is suspended"),
        Flag("addresses", FlagKind.STRING_LIST,
             "Address as key=value pairs (type, streetAddress, locality, postalCode, country, primary ...)",
             available_for=_WRITE, recursive={"update"}, exclude_from_batch_all=True, key_value=True),
        Flag("emails", FlagKind.STRING_LIST, "Email as key=value pairs (address, type, customType, primary)",
             available_for=_WRITE, recursive={"update"}, exclude_from_batch_all=True, key_value=True),
        # list
        Flag("customer", FlagKind.STRING, "Unique ID of the customer's account; ignored when --domain is set",
             available_for={"list"}, defaults={"list": "my_customer"}),
        Flag("domain", FlagKind.STRING, "Only list users of this domain", available_for={"list"}),
        Flag("orderBy", FlagKind.STRING, "Property to sort by [email|familyName|givenName]",
             available_for={"list"}),
        Flag("query", FlagKind.STRING, "Query string for searching user fields", available_for={"list"}),
        Flag("showDeleted", FlagKind.BOOL, "Only list users deleted in the last 20 days",
             available_for={"list"}),
        Flag("sortOrder", FlagKind.STRING, "Sort order [ASCENDING|DESCENDING]", available_for={"list"}),
    ]
)

VERBS = [
    Verb("delete", directory.delete_user, keys=("userKey",), action=True, help="Delete a user."),
    Verb("get", directory.get_user, keys=("userKey",), help="Retrieve a user."),
    Verb("insert", directory.insert_user, keys=("primaryEmail",), help="Create a user."),
    Verb("list", directory.list_users, keys=("customer", "domain"),
         help="Retrieve a paginated list of users of a customer or domain."),
    Verb("update", directory.update_user, keys=("userKey",), help="Update a user."),
]


def register(root: click.Group) -> click.Group:
    return add_resource(root, "users", USER_FLAGS, VERBS, help="Manage users (Directory API).")
