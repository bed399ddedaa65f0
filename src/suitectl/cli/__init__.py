"""
CLI layer for suitectl.

A Typer root application carries the global options and ``config``; each
resource (``revisions``, ``users``, ``userAliases``, ``threads``,
``spreadsheets``) is a click group generated from its flag table.  This
package handles only terminal transport; requests are built in
``suitectl.api`` and executed by ``suitectl.execution``.

Entry point::

    suitectl --help
"""

from suitectl.cli.app import app, build_cli, run

__all__ = ["app", "build_cli", "run"]
