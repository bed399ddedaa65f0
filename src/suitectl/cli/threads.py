"""
CLI: ``suitectl threads`` — Gmail threads.
"""

from __future__ import annotations

import click

from suitectl.api import gmail
from suitectl.cli.commands import Verb, add_resource
from suitectl.framework.flags import Flag, FlagKind, FlagTable

_ALL = {"delete", "get", "list", "modify", "trash", "untrash"}
_BY_ID = _ALL - {"list"}

THREAD_FLAGS = FlagTable(
    [
        Flag("userId", FlagKind.STRING,
             "The user's email address; 'me' means the authenticated user",
             available_for=_ALL, defaults={verb: "me" for verb in _ALL}, recursive=_ALL),
        Flag("id", FlagKind.STRING, "ID of the thread", available_for=_BY_ID, required_for=_BY_ID),
        Flag("format", FlagKind.STRING, "Format to return the messages in [MINIMAL|FULL|RAW|METADATA]",
             available_for={"get"}, recursive={"get"}),
        Flag("metadataHeaders", FlagKind.STRING, "With format METADATA, only include these headers",
             available_for={"get"}, recursive={"get"}),
        Flag("q", FlagKind.STRING, "Only return threads matching this query (Gmail search syntax)",
             available_for={"list"}),
        Flag("labelIds", FlagKind.STRING_LIST, "Only return threads carrying all of these label IDs",
             available_for={"list"}),
        Flag("includeSpamTrash", FlagKind.BOOL, "Include threads from SPAM and TRASH",
             available_for={"list"}),
        Flag("addLabelIds", FlagKind.STRING_LIST, "Label IDs to add to the thread",
             available_for={"modify"}, recursive={"modify"}),
        Flag("removeLabelIds", FlagKind.STRING_LIST, "Label IDs to remove from the thread",
             available_for={"modify"}, recursive={"modify"}),
        Flag("fields", FlagKind.STRING, "Fields to include in a partial response",
             available_for=_ALL - {"delete"}, recursive=_ALL - {"delete"}),
    ]
)

VERBS = [
    Verb("delete", gmail.delete_thread, keys=("userId", "id"), action=True,
         help="Immediately and permanently delete a thread."),
    Verb("get", gmail.get_thread, keys=("userId", "id"), help="Get a thread."),
    Verb("list", gmail.list_threads, keys=("userId",), help="List the threads in a mailbox."),
    Verb("modify", gmail.modify_thread, keys=("userId", "id"),
         help="Modify the labels applied to a thread."),
    Verb("trash", gmail.trash_thread, keys=("userId", "id"), help="Move a thread to the trash."),
    Verb("untrash", gmail.untrash_thread, keys=("userId", "id"), help="Remove a thread from the trash."),
]


def register(root: click.Group) -> click.Group:
    return add_resource(root, "threads", THREAD_FLAGS, VERBS, help="Manage Gmail threads.")
