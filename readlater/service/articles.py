"""Get-or-fetch orchestration for saving articles."""

import sqlite3
from datetime import datetime
from typing import List, Optional, Tuple

from rich.console import Console

from ..config import ConfigModel
from ..db import ArticleStore
from ..errors import InvalidURL, StoreConflict
from ..ingestion import Extraction, Extractor, FetchOrchestrator, canonicalize, derive_title
from ..models import Article, ArticleSummary, UsageRecord

console = Console()


class ArticleService:
    """
    Save articles by URL, reusing stored copies where possible.

    An article may already be stored under the URL the user asked for, the
    canonical form of that URL, the URL a fetch was redirected to, or the
    canonical form of the redirect target. All four are checked before any
    extraction work is done.

    The requested URL, the redirect target and its canonical form are the
    three keys needed to find earlier saves. Checking the canonical form of
    the requested URL as well, before fetching, is an extra shortcut: a
    request that differs from a stored URL only in its query string or
    fragment is answered without touching the network.
    """

    def __init__(
        self,
        store: ArticleStore,
        fetcher: FetchOrchestrator,
        extractor: Extractor,
        config: Optional[ConfigModel] = None,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.extractor = extractor
        self.config = config or ConfigModel()

    def _lookup(self, *urls: str) -> Optional[Article]:
        """First stored article found under any of ``urls``."""
        seen = set()
        for url in urls:
            if url in seen:
                continue
            seen.add(url)
            article = self.store.get_plain(url)
            if article is not None:
                return article
        return None

    def resolve(self, url: str, title_hint: Optional[str] = None) -> Article:
        """Return the stored article for ``url``, fetching and saving it if needed."""
        article, _ = self.fetch_or_get(url, title_hint)
        return article

    def fetch_or_get(
        self,
        url: str,
        title_hint: Optional[str] = None,
        created_at: Optional[datetime] = None,
        timeout: Optional[float] = None,
    ) -> Tuple[Article, bool]:
        """
        Get the stored article for ``url`` or fetch, extract and insert it.

        Args:
            url: URL as requested by the user
            title_hint: Title supplied by the caller, used when the page has none
            created_at: Creation time to record instead of now
            timeout: Seconds allowed for fetching and extracting

        Returns:
            Tuple of (article, is_new)

        Raises:
            InvalidURL: if ``url`` cannot be parsed
            FetchFailed: if the page cannot be retrieved
            ExtractFailed: if no text can be extracted
        """
        requested_canonical = canonicalize(url)

        existing = self._lookup(url, requested_canonical)
        if existing is not None:
            return existing, False

        console.print(f"[dim]Fetching article {url}[/dim]")
        result = self.fetcher.fetch(url, timeout=timeout)
        final_url = result.final_url

        if final_url != url:
            try:
                final_canonical = canonicalize(final_url)
            except InvalidURL:
                final_canonical = final_url
            existing = self._lookup(final_url, final_canonical)
            if existing is not None:
                return existing, False

        extract_timeout = timeout if timeout is not None else self.config.extractor.timeout
        extraction = self.extractor.extract(result.content, url=final_url, timeout=extract_timeout)
        self._record_usage(url, result.content, extraction)

        title = derive_title(extraction.text, result.content, final_url, title_hint)
        try:
            canonical = canonicalize(final_url)
        except InvalidURL as e:
            console.print(f"[yellow]Could not canonicalize {final_url}, storing as is: {e}[/yellow]")
            canonical = final_url

        article = Article(url=canonical, title=title, contents=extraction.text)
        try:
            if created_at is not None:
                self.store.insert_with_timestamp(article, created_at)
            else:
                self.store.insert(article)
        except StoreConflict:
            # Another request saved the same article first; answer with our copy
            console.print(f"[yellow]Article {canonical} was saved concurrently, using fetched copy[/yellow]")
            return article, False

        return self.store.get_plain(canonical) or article, True

    def _record_usage(self, url: str, html: bytes, extraction: Extraction) -> None:
        usage = UsageRecord(
            url=url,
            length_in=len(html),
            length_out=len(extraction.text),
            tokens_in=extraction.tokens_in,
            tokens_out=extraction.tokens_out,
        )
        try:
            self.store.record_usage(usage)
        except sqlite3.Error as e:
            console.print(f"[yellow]Error updating usage for {url}: {e}[/yellow]")

    def read(self, url: str, title_hint: Optional[str] = None) -> Article:
        """Resolve ``url`` and record the access as a read."""
        article = self.resolve(url, title_hint)
        touched = self.store.get_touch(article.url)
        return touched or article

    def recent(self, count: int = 5) -> List[ArticleSummary]:
        return self.store.list_recent(count)

    def archive_feed(self, count: int = 5) -> List[ArticleSummary]:
        return self.store.list_archive_feed(count)

    def search(self, query: str) -> List[ArticleSummary]:
        return self.store.search(query)

    def set_archived(self, url: str, archived: bool) -> None:
        self.store.set_archived(url, archived)

    def mark_read(self, url: str) -> None:
        self.store.mark_read(url)
