"""Init command implementation."""

import sqlite3
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from ..config import ConfigModel, save_config
from ..db import ArticleStore

console = Console()


def init_command(
    config_dir: Path = typer.Option(
        Path.home() / ".config" / "readlater",
        "--config-dir",
        "-c",
        help="Configuration directory",
    ),
    db: Path = typer.Option(
        Path.home() / ".local" / "share" / "readlater" / "readlater.db",
        "--db",
        help="Database file",
    ),
    extractor: str = typer.Option(
        "pandoc",
        "--extractor",
        "-e",
        help="Content extractor (pandoc, trafilatura, llm)",
    ),
) -> None:
    """Write a default configuration and create the database."""
    console.print(Panel.fit("Read Later - Initialization", style="bold blue"))

    config_dir.mkdir(parents=True, exist_ok=True)
    config_path = config_dir / "config.yaml"

    try:
        config = ConfigModel(
            database={"path": str(db)},
            extractor={"kind": extractor},
        )
    except ValueError as e:
        console.print(f"[red]❌ Invalid configuration: {e}[/red]")
        raise typer.Exit(1)

    save_config(config, config_path)
    console.print(f"✅ Created config: {config_path}")

    console.print("\n[bold]Initializing database schema...[/bold]")
    db.expanduser().parent.mkdir(parents=True, exist_ok=True)
    try:
        with ArticleStore(db.expanduser(), timeout=config.database.timeout) as store:
            count = store.count()
    except sqlite3.Error as e:
        console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"✅ Database ready: {db} ({count} articles)")

    next_steps = "Save an article: [bold]readlater add https://example.com/post[/bold]"
    if extractor == "llm":
        next_steps = "Set LLM API key: [bold]export OPENAI_API_KEY=your_key[/bold]\n" + next_steps

    console.print(
        Panel(
            f"[green]✅ Read Later initialized successfully![/green]\n\n"
            f"Configuration: {config_path}\n"
            f"Database: {db}\n\n"
            f"Next steps:\n{next_steps}",
            style="green",
        )
    )
