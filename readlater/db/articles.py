"""Article storage with a synchronized full-text index."""

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from rich.console import Console

from ..errors import NotFound, SearchQueryInvalid, StoreConflict
from ..models import Article, ArticleSummary, UsageRecord
from .connection import ConnectionPool, format_timestamp, now_timestamp, retry_on_locked
from .init import init_database, rebuild_index

console = Console()

ARTICLE_COLUMNS = "url, title, contents, unread, archived, created, lastAccess"
SUMMARY_COLUMNS = "a.url, a.title, (a.contents IS NOT NULL) AS has_body, a.unread, a.archived"

# Messages sqlite uses when it cannot parse an FTS5 MATCH expression
QUERY_ERROR_MARKERS = ("fts5", "syntax error", "no such column")


def prepare_query(query: str) -> Optional[str]:
    """
    Rewrite a user search into an FTS5 query.

    A final bare word is matched as a prefix (``one thr`` becomes
    ``one thr*``). A query ending in a quoted phrase is left alone.

    Returns:
        The rewritten query, or None for an empty search
    """
    query = query.strip()
    if not query:
        return None
    if query.count('"') % 2:
        raise SearchQueryInvalid(f"Unbalanced quotes in search: {query}")
    if query[-1].isalpha():
        query += "*"
    return query


def _row_to_article(row: sqlite3.Row) -> Article:
    return Article(
        url=row["url"],
        title=row["title"],
        contents=row["contents"],
        unread=bool(row["unread"]),
        archived=bool(row["archived"]),
        created=row["created"],
        last_access=row["lastAccess"],
    )


def _row_to_summary(row: sqlite3.Row) -> ArticleSummary:
    return ArticleSummary(
        url=row["url"],
        title=row["title"],
        has_body=bool(row["has_body"]),
        unread=bool(row["unread"]),
        archived=bool(row["archived"]),
    )


class ArticleStore:
    """
    Keyed collection of articles backed by sqlite.

    Every write that touches ``url``, ``title`` or ``contents`` updates the
    ``articles_fts`` index in the same transaction, so readers never see the
    table and the index disagree.
    """

    def __init__(self, db_path: Union[str, Path], timeout: float = 30.0) -> None:
        """Open (creating if needed) the database at ``db_path``."""
        self.db_path = str(db_path)
        self.pool = ConnectionPool(self.db_path, timeout)
        init_database(self.pool.connection())

    @property
    def conn(self) -> sqlite3.Connection:
        return self.pool.connection()

    def close(self) -> None:
        self.pool.close()

    def __enter__(self) -> "ArticleStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # Index maintenance, always called inside an open transaction

    def _index_insert(self, conn: sqlite3.Connection, url: str, title, contents) -> None:
        conn.execute(
            "INSERT INTO articles_fts (url, title, contents) VALUES (?, ?, ?)",
            (url, title, contents),
        )

    def _index_delete(self, conn: sqlite3.Connection, url: str) -> None:
        conn.execute("DELETE FROM articles_fts WHERE url = ?", (url,))

    # Reads

    def get_plain(self, url: str) -> Optional[Article]:
        """Return the stored article without touching it."""
        row = self.conn.execute(
            f"SELECT {ARTICLE_COLUMNS} FROM articles WHERE url = ?", (url,)
        ).fetchone()
        return _row_to_article(row) if row else None

    @retry_on_locked()
    def get_touch(self, url: str) -> Optional[Article]:
        """Return the stored article, marking it read and refreshing its last access."""
        conn = self.conn
        with conn:
            cur = conn.execute(
                "UPDATE articles SET unread = 0, lastAccess = ? WHERE url = ?",
                (now_timestamp(), url),
            )
            if cur.rowcount == 0:
                return None
            row = conn.execute(
                f"SELECT {ARTICLE_COLUMNS} FROM articles WHERE url = ?", (url,)
            ).fetchone()
        return _row_to_article(row)

    def list_recent(self, count: int) -> List[ArticleSummary]:
        """Unarchived articles, most recently accessed first."""
        rows = self.conn.execute(
            f"""
            SELECT {SUMMARY_COLUMNS} FROM articles a
            WHERE NOT a.archived
            ORDER BY a.lastAccess DESC
            LIMIT ?
            """,
            (count,),
        ).fetchall()
        return [_row_to_summary(r) for r in rows]

    def list_archive_feed(self, count: int) -> List[ArticleSummary]:
        """All articles, archived or not, newest first."""
        rows = self.conn.execute(
            f"""
            SELECT {SUMMARY_COLUMNS} FROM articles a
            ORDER BY a.created DESC
            LIMIT ?
            """,
            (count,),
        ).fetchall()
        return [_row_to_summary(r) for r in rows]

    def search(self, query: str) -> List[ArticleSummary]:
        """Full-text search over title and contents, best match first."""
        match = prepare_query(query)
        if match is None:
            return []
        try:
            rows = self.conn.execute(
                f"""
                SELECT {SUMMARY_COLUMNS} FROM articles_fts f
                JOIN articles a ON f.url = a.url
                WHERE articles_fts MATCH ?
                ORDER BY f.rank
                """,
                (match,),
            ).fetchall()
        except sqlite3.OperationalError as e:
            if any(marker in str(e) for marker in QUERY_ERROR_MARKERS):
                raise SearchQueryInvalid(f"Invalid search {query!r}: {e}") from e
            raise
        return [_row_to_summary(r) for r in rows]

    def all_articles(self) -> List[Article]:
        """Every article, oldest first."""
        rows = self.conn.execute(
            f"SELECT {ARTICLE_COLUMNS} FROM articles ORDER BY created ASC"
        ).fetchall()
        return [_row_to_article(r) for r in rows]

    def count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM articles").fetchone()[0]

    def indexed_urls(self) -> List[str]:
        """URLs present in the full-text index."""
        rows = self.conn.execute("SELECT url FROM articles_fts ORDER BY url").fetchall()
        return [r["url"] for r in rows]

    # Writes

    @retry_on_locked()
    def insert(self, article: Article) -> None:
        """
        Store a new article, stamped with the current time.

        Raises:
            StoreConflict: if an article with the same URL exists
        """
        now = now_timestamp()
        self._insert(article, now, now)

    @retry_on_locked()
    def insert_with_timestamp(self, article: Article, created_at: datetime) -> None:
        """Store a new article with a caller-supplied creation time."""
        created = format_timestamp(created_at)
        self._insert(article, created, created)

    def _insert(self, article: Article, created: str, last_access: str) -> None:
        conn = self.conn
        try:
            with conn:
                conn.execute(
                    f"INSERT INTO articles ({ARTICLE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (
                        article.url,
                        article.title,
                        article.contents,
                        article.unread,
                        article.archived,
                        created,
                        last_access,
                    ),
                )
                self._index_insert(conn, article.url, article.title, article.contents)
        except sqlite3.IntegrityError as e:
            raise StoreConflict(article.url) from e

    @retry_on_locked()
    def set_archived(self, url: str, archived: bool) -> None:
        """Archive or unarchive an article."""
        conn = self.conn
        with conn:
            cur = conn.execute("UPDATE articles SET archived = ? WHERE url = ?", (archived, url))
        if cur.rowcount == 0:
            raise NotFound(url)

    @retry_on_locked()
    def mark_read(self, url: str) -> None:
        """Mark an article read and refresh its last access time."""
        conn = self.conn
        with conn:
            cur = conn.execute(
                "UPDATE articles SET unread = 0, lastAccess = ? WHERE url = ?",
                (now_timestamp(), url),
            )
        if cur.rowcount == 0:
            raise NotFound(url)

    @retry_on_locked()
    def update_contents(self, url: str, contents: Optional[str]) -> None:
        """Replace an article's body, re-indexing it."""
        conn = self.conn
        with conn:
            cur = conn.execute("UPDATE articles SET contents = ? WHERE url = ?", (contents, url))
            if cur.rowcount == 0:
                raise NotFound(url)
            row = conn.execute("SELECT title FROM articles WHERE url = ?", (url,)).fetchone()
            self._index_delete(conn, url)
            self._index_insert(conn, url, row["title"], contents)

    @retry_on_locked()
    def rename(self, old_url: str, new_url: str) -> None:
        """
        Move an article to a new primary key.

        Raises:
            NotFound: if ``old_url`` is not stored
            StoreConflict: if ``new_url`` is already taken
        """
        conn = self.conn
        try:
            with conn:
                cur = conn.execute("UPDATE articles SET url = ? WHERE url = ?", (new_url, old_url))
                if cur.rowcount == 0:
                    raise NotFound(old_url)
                row = conn.execute(
                    "SELECT title, contents FROM articles WHERE url = ?", (new_url,)
                ).fetchone()
                self._index_delete(conn, old_url)
                self._index_insert(conn, new_url, row["title"], row["contents"])
        except sqlite3.IntegrityError as e:
            raise StoreConflict(new_url) from e

    @retry_on_locked()
    def delete(self, url: str) -> None:
        """Remove an article and its index entry."""
        conn = self.conn
        with conn:
            cur = conn.execute("DELETE FROM articles WHERE url = ?", (url,))
            if cur.rowcount == 0:
                raise NotFound(url)
            self._index_delete(conn, url)

    @retry_on_locked()
    def record_usage(self, usage: UsageRecord) -> None:
        """Append an extraction usage record."""
        timestamp = format_timestamp(usage.timestamp) if usage.timestamp else now_timestamp()
        conn = self.conn
        with conn:
            conn.execute(
                """
                INSERT INTO usage (timestamp, url, lengthIn, lengthOut, tokensIn, tokensOut)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    timestamp,
                    usage.url,
                    usage.length_in,
                    usage.length_out,
                    usage.tokens_in,
                    usage.tokens_out,
                ),
            )

    def usage_records(self) -> List[UsageRecord]:
        """Every usage record, oldest first."""
        rows = self.conn.execute(
            "SELECT timestamp, url, lengthIn, lengthOut, tokensIn, tokensOut "
            "FROM usage ORDER BY timestamp"
        ).fetchall()
        return [
            UsageRecord(
                url=r["url"],
                length_in=r["lengthIn"],
                length_out=r["lengthOut"],
                tokens_in=r["tokensIn"],
                tokens_out=r["tokensOut"],
                timestamp=r["timestamp"],
            )
            for r in rows
        ]

    def rebuild_index(self) -> int:
        """Repopulate the full-text index from the stored articles."""
        return rebuild_index(self.conn)
