"""
CLI: ``suitectl userAliases`` — aliases of directory users.
"""

from __future__ import annotations

import click

from suitectl.api import directory
from suitectl.cli.commands import Verb, add_resource
from suitectl.framework.flags import Flag, FlagKind, FlagTable

USER_ALIAS_FLAGS = FlagTable(
    [
        Flag("alias", FlagKind.STRING, "The alias email address",
             available_for={"delete", "insert"}, required_for={"delete", "insert"}),
        Flag("userKey", FlagKind.STRING,
             "The user's primary email address, alias email address, or unique user ID",
             available_for={"delete", "insert", "list"}, required_for={"delete", "insert", "list"}),
        Flag("fields", FlagKind.STRING, "Fields to include in a partial response",
             available_for={"insert", "list"}, recursive={"insert", "list"}),
    ]
)

VERBS = [
    Verb("delete", directory.delete_alias, keys=("userKey", "alias"), action=True,
         help="Remove an alias."),
    Verb("insert", directory.insert_alias, keys=("userKey", "alias"), help="Add an alias."),
    Verb("list", directory.list_aliases, keys=("userKey",), help="List all aliases for a user."),
]


def register(root: click.Group) -> click.Group:
    return add_resource(root, "userAliases", USER_ALIAS_FLAGS, VERBS,
                        help="Manage aliases of users (Directory API).")
