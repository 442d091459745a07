"""Import command: save historical records from a CSV export."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..maintenance import ArticleImporter, parse_csv
from .common import build_service, load_settings, open_store

console = Console()


def import_command(
    csv_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV file to import"),
    db: Optional[Path] = typer.Option(None, "--db", help="Database file (default from config)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview import without making changes"),
    delay: Optional[float] = typer.Option(None, "--delay", help="Seconds to wait between records", min=0),
) -> None:
    """Fetch and save every URL in a CSV export, keeping its save time."""
    config = load_settings()
    settings = config.config
    if delay is None:
        delay = settings.batch.delay

    console.print("Import configuration:")
    console.print(f"  CSV file: {csv_file}")
    console.print(f"  Dry run: {dry_run}")

    try:
        records = parse_csv(csv_file)
    except (OSError, ValueError) as e:
        console.print(f"[red]Failed to parse CSV: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"Found {len(records)} records in CSV")

    if dry_run:
        ArticleImporter(None, dry_run=True).run(records)
        return

    with open_store(config, db) as store:
        importer = ArticleImporter(
            build_service(store, settings),
            delay=delay,
            item_timeout=settings.batch.item_timeout,
        )
        stats = importer.run(records)

    table = Table(title="Import Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="green", justify="right")
    table.add_row("Total records", str(stats.total))
    table.add_row("Successfully imported", str(stats.imported))
    table.add_row("Skipped (already exist)", str(stats.skipped))
    table.add_row("Failed", str(stats.failed))
    console.print(table)
