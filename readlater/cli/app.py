"""Main CLI application."""

import typer
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

from .articles import (
    add_command,
    archive_command,
    feed_command,
    mark_read_command,
    recent_command,
    search_command,
    show_command,
)
from .canonicalize import canonicalize_command
from .importer import import_command
from .init import init_command
from .migrate import migrate_command

app = typer.Typer(
    name="readlater",
    help="Read Later - save web articles and read them later",
    no_args_is_help=True,
)

# Register commands
app.command("init")(init_command)
app.command("add")(add_command)
app.command("show")(show_command)
app.command("recent")(recent_command)
app.command("feed")(feed_command)
app.command("archive")(archive_command)
app.command("mark-read")(mark_read_command)
app.command("search")(search_command)
app.command("canonicalize")(canonicalize_command)
app.command("import")(import_command)
app.command("migrate")(migrate_command)


if __name__ == "__main__":
    app()
