"""Shared helpers for building the store and service from configuration."""

import os
import sqlite3
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..config import Config, ConfigModel
from ..db import ArticleStore
from ..ingestion import build_extractor, build_fetcher
from ..models import ArticleSummary
from ..service import ArticleService

console = Console()

CONFIG_PATH_ENV = "READLATER_CONFIG"


def load_settings() -> Config:
    """Configuration manager, honouring READLATER_CONFIG."""
    path = os.environ.get(CONFIG_PATH_ENV)
    config = Config(Path(path).expanduser() if path else None)
    try:
        config.config
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    return config


def open_store(config: Config, db: Optional[Path] = None) -> ArticleStore:
    """Open the article store; failure here ends the command."""
    db_path = db.expanduser() if db else config.db_path
    try:
        return ArticleStore(db_path, timeout=config.config.database.timeout)
    except sqlite3.Error as e:
        console.print(f"[red]Failed to open database {db_path}: {e}[/red]")
        raise typer.Exit(1)


def build_service(store: ArticleStore, settings: ConfigModel, extractor_kind: Optional[str] = None) -> ArticleService:
    """Service wired to the configured fetcher and extractor."""
    try:
        extractor = build_extractor(settings, extractor_kind)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    return ArticleService(store, build_fetcher(settings.fetch), extractor, settings)


def print_summaries(title: str, summaries: List[ArticleSummary]) -> None:
    """Render article listings as a table."""
    if not summaries:
        console.print("[yellow]No articles found.[/yellow]")
        return

    table = Table(title=title)
    table.add_column("Title", style="cyan")
    table.add_column("URL", style="blue")
    table.add_column("Unread", style="yellow")
    table.add_column("Archived", style="magenta")
    table.add_column("Body", style="green")

    for s in summaries:
        table.add_row(
            s.title or "",
            s.url,
            "✓" if s.unread else "",
            "✓" if s.archived else "",
            "✓" if s.has_body else "✗",
        )

    console.print(table)
