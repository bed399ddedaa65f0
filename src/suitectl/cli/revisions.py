"""
CLI: ``suitectl revisions`` — revisions of non-Google files (Drive API).
"""

from __future__ import annotations

import click

from suitectl.api import drive
from suitectl.cli.commands import Verb, add_resource
from suitectl.framework.flags import Flag, FlagKind, FlagTable

FIELDS_HELP = "Fields to include in a partial response"

REVISION_FLAGS = FlagTable(
    [
        Flag("fileId", FlagKind.STRING, "The ID of the file",
             available_for={"delete", "get", "list", "update"},
             required_for={"delete", "get", "list", "update"}),
        Flag("revisionId", FlagKind.STRING, "The ID of the revision",
             available_for={"delete", "get", "update"},
             required_for={"delete", "get", "update"}),
        Flag("acknowledgeAbuse", FlagKind.BOOL,
             "Acknowledge the risk of downloading known malware (only with alt=media)",
             available_for={"get"}),
        Flag("keepForever", FlagKind.BOOL,
             "Keep this revision forever, even if it is no longer the head revision",
             available_for={"update"}, recursive={"update"}),
        Flag("publishAuto", FlagKind.BOOL, "Republish subsequent revisions automatically",
             available_for={"update"}, recursive={"update"}),
        Flag("published", FlagKind.BOOL, "Whether this revision is published",
             available_for={"update"}, recursive={"update"}),
        Flag("publishedOutsideDomain", FlagKind.BOOL,
             "Whether this revision is published outside the domain",
             available_for={"update"}, recursive={"update"}),
        Flag("fields", FlagKind.STRING, FIELDS_HELP,
             available_for={"get", "list", "update"}, recursive={"get", "list", "update"}),
    ]
)

VERBS = [
    Verb("delete", drive.delete_revision, keys=("fileId", "revisionId"), action=True,
         help="Permanently delete a file version."),
    Verb("get", drive.get_revision, keys=("fileId", "revisionId"),
         help="Get a revision's metadata."),
    Verb("list", drive.list_revisions, keys=("fileId",),
         help="List a file's revisions."),
    Verb("update", drive.update_revision, keys=("fileId", "revisionId"),
         help="Update a revision with patch semantics."),
]


def register(root: click.Group) -> click.Group:
    return add_resource(root, "revisions", REVISION_FLAGS, VERBS,
                        help="Manage revisions of non-Google files (Drive API).")
