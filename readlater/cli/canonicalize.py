"""Canonicalize command: merge articles stored under duplicate URLs."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..maintenance import DeduplicationReconciler
from .common import load_settings, open_store

console = Console()


def canonicalize_command(
    db: Optional[Path] = typer.Option(None, "--db", help="Database file (default from config)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be done without making changes"),
) -> None:
    """Rewrite stored URLs to canonical form and remove duplicates."""
    config = load_settings()
    with open_store(config, db) as store:
        console.print(f"Starting URL canonicalization process (dry-run: {dry_run})")
        stats = DeduplicationReconciler(store, dry_run=dry_run).run()

    table = Table(title="Canonicalization Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="green", justify="right")
    table.add_row("Total articles processed", str(stats.total))
    table.add_row("URLs canonicalized", str(stats.canonicalized))
    table.add_row("Duplicate articles found", str(stats.duplicates_found))
    table.add_row("Duplicate articles removed", str(stats.duplicates_removed))
    table.add_row("Errors", str(stats.errors))
    console.print(table)

    if dry_run:
        console.print("\n[yellow]This was a dry run. Re-run without --dry-run to apply changes.[/yellow]")
    else:
        console.print("\n[green]Canonicalization completed successfully![/green]")
