"""Console script for timeline_db."""

from __future__ import annotations

import typer

app = typer.Typer(
    name="timeline_db",
    help="Timeline store reader CLI - query entities from a file-system timeline store",
    no_args_is_help=True,
)

# Import subcommand apps
from timeline_db.cli.query_commands import query_app

# Register subcommands
app.add_typer(query_app, name="query", help="Query entities")


if __name__ == "__main__":
    app()
