"""Bulk import of historical saves from a CSV export."""

import csv
import sqlite3
import time
from pathlib import Path
from typing import List, Optional

import pendulum
from pydantic import BaseModel, Field
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

from ..errors import ReadLaterError
from ..service import ArticleService
from .models import ImportStats

console = Console()


class CsvRecord(BaseModel):
    """One row of a read-later export."""

    title: str = Field("", description="Title recorded at save time")
    url: str = Field(..., description="Saved URL")
    time_added: int = Field(..., description="Unix time the URL was saved")
    tags: str = Field("", description="Tags, as exported")
    status: str = Field("", description="Read status, as exported")


def parse_csv(path: Path) -> List[CsvRecord]:
    """
    Read records from a CSV file with a header row.

    Columns are ``title,url,time_added,tags,status``. Rows that are too
    short or carry a non-numeric timestamp are skipped.
    """
    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))

    if not rows:
        raise ValueError(f"CSV file is empty: {path}")

    records = []
    for line_no, row in enumerate(rows[1:], start=2):
        if len(row) < 5:
            console.print(f"[yellow]Skipping row {line_no}: insufficient columns ({len(row)})[/yellow]")
            continue
        try:
            time_added = int(row[2])
        except ValueError:
            console.print(f"[yellow]Skipping row {line_no}: invalid timestamp {row[2]!r}[/yellow]")
            continue
        records.append(
            CsvRecord(title=row[0], url=row[1], time_added=time_added, tags=row[3], status=row[4])
        )
    return records


class ArticleImporter:
    """Fetch and save each record, keeping its original save time."""

    def __init__(
        self,
        service: Optional[ArticleService],
        delay: float = 0.1,
        dry_run: bool = False,
        item_timeout: Optional[float] = None,
    ) -> None:
        self.service = service
        self.delay = delay
        self.dry_run = dry_run
        self.item_timeout = item_timeout

    def preview(self, records: List[CsvRecord], count: int = 5) -> None:
        """Show the first few records without touching the store."""
        console.print("\nDry run mode - showing first 5 records:")
        for i, record in enumerate(records[:count], start=1):
            added = pendulum.from_timestamp(record.time_added).to_datetime_string()
            console.print(f"  {i}. URL: {record.url}, Time: {added}, Title: {record.title}", markup=False)

    def run(self, records: List[CsvRecord]) -> ImportStats:
        stats = ImportStats(total=len(records))

        if self.dry_run:
            self.preview(records)
            return stats

        console.print(f"\nProcessing {stats.total} records...\n")
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Importing...", total=stats.total)
            for i, record in enumerate(records, start=1):
                progress.update(task, description=f"Importing {record.url}")
                self._import_record(record, stats)
                progress.advance(task, 1)

                if self.delay and i < stats.total:
                    time.sleep(self.delay)

        return stats

    def _import_record(self, record: CsvRecord, stats: ImportStats) -> None:
        try:
            _, is_new = self.service.fetch_or_get(
                record.url,
                title_hint=record.title or None,
                created_at=pendulum.from_timestamp(record.time_added),
                timeout=self.item_timeout,
            )
        except (ReadLaterError, sqlite3.Error) as e:
            console.print(f"  [red]✗ Failed {record.url}: {e}[/red]", highlight=False)
            stats.failed += 1
            return

        if is_new:
            console.print(f"  [green]✓ Imported {record.url}[/green]", highlight=False)
            stats.imported += 1
        else:
            console.print(f"  ✓ Already exists, skipping {record.url}", markup=False)
            stats.skipped += 1
