"""Offline repair of articles stored under non-canonical or duplicate URLs."""

import sqlite3
from datetime import datetime
from typing import Dict, List

from rich.console import Console

from ..db import ArticleStore
from ..errors import InvalidURL, ReadLaterError
from ..ingestion import canonicalize
from ..models import Article
from .models import ReconcileStats

console = Console()

ITEM_ERRORS = (ReadLaterError, sqlite3.Error)


def _survivor_key(article: Article):
    return (
        not article.archived,
        bool((article.contents or "").strip()),
        article.created or datetime.min,
    )


def select_survivor(group: List[Article]) -> int:
    """
    Index of the article to keep from a duplicate group.

    Prefers unarchived, then non-empty contents, then the newest; ties go
    to the earliest member.
    """
    best = 0
    for i in range(1, len(group)):
        if _survivor_key(group[i]) > _survivor_key(group[best]):
            best = i
    return best


class DeduplicationReconciler:
    """Group every stored article by canonical URL and merge each group into one."""

    def __init__(self, store: ArticleStore, dry_run: bool = False) -> None:
        self.store = store
        self.dry_run = dry_run

    def _rename(self, stats: ReconcileStats, old_url: str, new_url: str) -> bool:
        console.print(f"Canonicalizing: {old_url} -> {new_url}")
        if not self.dry_run:
            try:
                self.store.rename(old_url, new_url)
            except ITEM_ERRORS as e:
                console.print(f"[red]ERROR: Failed to update URL for {old_url}: {e}[/red]")
                stats.errors += 1
                return False
        stats.canonicalized += 1
        return True

    def _delete(self, stats: ReconcileStats, url: str) -> None:
        console.print(f"  -> Removing duplicate: {url}")
        if not self.dry_run:
            try:
                self.store.delete(url)
            except ITEM_ERRORS as e:
                console.print(f"[red]ERROR: Failed to delete duplicate article {url}: {e}[/red]")
                stats.errors += 1
                return
        stats.duplicates_removed += 1

    def group_articles(self, articles: List[Article], stats: ReconcileStats) -> Dict[str, List[Article]]:
        """Map canonical URL to its articles, in first-seen order."""
        groups: Dict[str, List[Article]] = {}
        for article in articles:
            try:
                canonical = canonicalize(article.url)
            except InvalidURL as e:
                console.print(f"[red]ERROR: Failed to canonicalize URL {article.url}: {e}[/red]")
                stats.errors += 1
                continue
            groups.setdefault(canonical, []).append(article)
        return groups

    def run(self) -> ReconcileStats:
        """Scan the whole store and repair it (or just count, in dry-run mode)."""
        stats = ReconcileStats()

        if not self.dry_run:
            indexed = self.store.rebuild_index()
            console.print(f"[dim]Rebuilt search index over {indexed} articles[/dim]")

        articles = self.store.all_articles()
        stats.total = len(articles)
        console.print(f"Found {stats.total} articles to process")

        for canonical, group in self.group_articles(articles, stats).items():
            if len(group) == 1:
                if group[0].url != canonical:
                    self._rename(stats, group[0].url, canonical)
                continue

            stats.duplicates_found += len(group) - 1
            console.print(f"\nFound {len(group)} duplicate articles for canonical URL: {canonical}")
            for i, article in enumerate(group, start=1):
                console.print(
                    f"  [{i}] {article.url} (created: {article.created}, archived: {article.archived})",
                    markup=False,
                )

            keep_index = select_survivor(group)
            survivor = group[keep_index]
            console.print(f"  -> Keeping article: {survivor.url}")

            # Duplicates go first so the canonical key is free for the survivor
            for i, article in enumerate(group):
                if i != keep_index:
                    self._delete(stats, article.url)

            if survivor.url != canonical:
                self._rename(stats, survivor.url, canonical)

        return stats
