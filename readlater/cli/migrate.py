"""Migrate command: re-extract stored articles with a new extractor."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..ingestion import build_extractor, build_fetcher
from ..maintenance import ContentMigrator
from .common import load_settings, open_store

console = Console()


def migrate_command(
    db: Optional[Path] = typer.Option(None, "--db", help="Database file (default from config)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be done without making changes"),
    limit: int = typer.Option(0, "--limit", help="Limit number of articles to process (0 = all)", min=0),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Seconds allowed per article", min=1),
    delay: Optional[float] = typer.Option(None, "--delay", help="Seconds to wait between articles", min=0),
    extractor: str = typer.Option(
        "trafilatura",
        "--extractor",
        "-e",
        help="Extractor to migrate to (pandoc, trafilatura, llm)",
    ),
) -> None:
    """Refetch stored articles and replace their contents."""
    config = load_settings()
    settings = config.config

    try:
        new_extractor = build_extractor(settings, extractor)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"Starting article migration with {new_extractor.name}")
    console.print(f"Dry run: {dry_run}")
    if limit:
        console.print(f"Limit: {limit} articles")

    with open_store(config, db) as store:
        migrator = ContentMigrator(
            store,
            build_fetcher(settings.fetch),
            new_extractor,
            item_timeout=timeout or settings.batch.item_timeout,
            delay=settings.batch.delay if delay is None else delay,
            dry_run=dry_run,
            limit=limit or None,
        )
        stats = migrator.run()

    table = Table(title="Migration Complete")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Total articles", str(stats.total))
    table.add_row("Processed", str(stats.processed))
    table.add_row("Updated", str(stats.updated))
    table.add_row("Skipped (unchanged)", str(stats.skipped))
    table.add_row("Failed", str(stats.failed))
    table.add_row("Duration", f"{stats.duration:.1f}s")
    console.print(table)

    if dry_run:
        console.print("\n[yellow]This was a dry run. No changes were made to the database.[/yellow]")
