"""Search index rebuild CLI.

Usage examples:
    flask reindex
    flask reindex --user-id=42
"""

from __future__ import annotations

import click
from flask.cli import with_appcontext

from webdiary.domains.diary.search.indexer import rebuild_index


@click.command("reindex")
@click.option("--user-id", type=int, help="Only rebuild this user's entries")
@with_appcontext
def reindex_command(user_id: int | None):
    """Re-derive the search index from stored entry content."""
    count = rebuild_index(owner_id=user_id)
    click.echo(f"Reindexed {count} entries")


def register_commands(app):
    """Register CLI commands with the app."""
    app.cli.add_command(reindex_command)
