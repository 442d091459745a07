"""Re-extract stored articles with a different extractor."""

import sqlite3
import time
from typing import Optional

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

from ..db import ArticleStore
from ..errors import ReadLaterError
from ..ingestion import Extractor, FetchOrchestrator
from ..models import Article
from .models import MigrationStats

console = Console()


class ContentMigrator:
    """Refetch each stored article and replace its contents when they change."""

    def __init__(
        self,
        store: ArticleStore,
        fetcher: FetchOrchestrator,
        extractor: Extractor,
        item_timeout: float = 30.0,
        delay: float = 0.1,
        dry_run: bool = False,
        limit: Optional[int] = None,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.extractor = extractor
        self.item_timeout = item_timeout
        self.delay = delay
        self.dry_run = dry_run
        self.limit = limit

    def migrate_article(self, article: Article, stats: MigrationStats) -> None:
        """Migrate one article under the per-item deadline."""
        stats.processed += 1

        started = time.monotonic()
        result = self.fetcher.fetch(article.url, timeout=self.item_timeout)

        remaining = self.item_timeout - (time.monotonic() - started)
        if remaining <= 0:
            raise TimeoutError(f"Timed out after fetching {article.url}")
        extraction = self.extractor.extract(result.content, url=result.final_url, timeout=remaining)

        if extraction.text.strip() == (article.contents or "").strip():
            console.print(f"  SKIP: Content unchanged for {article.url}", markup=False)
            stats.skipped += 1
            return

        if self.dry_run:
            console.print(f"  DRY-RUN: Would update {article.url}", markup=False)
        else:
            self.store.update_contents(article.url, extraction.text)
            console.print(f"  [green]SUCCESS: Updated {article.url}[/green]")
        stats.updated += 1

    def run(self) -> MigrationStats:
        articles = [a for a in self.store.all_articles() if a.contents is not None]
        if self.limit and self.limit < len(articles):
            articles = articles[: self.limit]

        stats = MigrationStats(total=len(articles))
        console.print(f"Found {stats.total} articles to process")

        started = time.monotonic()
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Migrating...", total=stats.total)
            for i, article in enumerate(articles, start=1):
                progress.update(task, description=f"Migrating {article.url}")
                try:
                    self.migrate_article(article, stats)
                except (ReadLaterError, TimeoutError, sqlite3.Error) as e:
                    console.print(f"  [red]ERROR: {article.url}: {e}[/red]", highlight=False)
                    stats.failed += 1
                progress.advance(task, 1)

                if self.delay and i < len(articles):
                    time.sleep(self.delay)

        stats.duration = time.monotonic() - started
        return stats
