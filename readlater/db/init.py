"""Database initialization and schema management."""

import sqlite3

from rich.console import Console

console = Console()

SCHEMA_VERSION = 2

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS metadata (
    id INTEGER PRIMARY KEY,
    schemaVersion INTEGER
);

CREATE TABLE IF NOT EXISTS articles (
    url TEXT PRIMARY KEY,
    title TEXT,
    contents TEXT,
    unread BOOLEAN NOT NULL DEFAULT 1,
    archived BOOLEAN NOT NULL DEFAULT 0,
    created TEXT NOT NULL,
    lastAccess TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS usage (
    timestamp TEXT NOT NULL,
    url TEXT,
    lengthIn INTEGER,
    lengthOut INTEGER,
    tokensIn INTEGER,
    tokensOut INTEGER
);

CREATE INDEX IF NOT EXISTS idx_articles_last_access ON articles(lastAccess);
CREATE INDEX IF NOT EXISTS idx_articles_created ON articles(created);
"""

FTS_SQL = """
CREATE VIRTUAL TABLE IF NOT EXISTS articles_fts USING fts5(
    url UNINDEXED,
    title,
    contents,
    prefix='1 2 3',
    tokenize='porter unicode61'
);
"""

# Columns added after the first schema version, with their definitions
LATER_COLUMNS = {
    "title": "TEXT",
    "unread": "BOOLEAN NOT NULL DEFAULT 1",
}


def _table_exists(conn: sqlite3.Connection, name: str) -> bool:
    cur = conn.execute(
        "SELECT name FROM sqlite_master WHERE type IN ('table', 'view') AND name = ?",
        (name,),
    )
    return cur.fetchone() is not None


def _run_migrations(conn: sqlite3.Connection) -> None:
    """Bring an older articles table up to the current column set."""
    columns = {row["name"] for row in conn.execute("PRAGMA table_info(articles)")}
    for column, definition in LATER_COLUMNS.items():
        if column not in columns:
            console.print(f"[dim]Adding column articles.{column}[/dim]")
            conn.execute(f"ALTER TABLE articles ADD COLUMN {column} {definition}")

    # The first schema kept its index in a trigger-maintained table named fts
    if _table_exists(conn, "fts"):
        for trigger in ("articles_ai", "articles_ad", "articles_au"):
            conn.execute(f"DROP TRIGGER IF EXISTS {trigger}")
        conn.execute("DROP TABLE fts")


def rebuild_index(conn: sqlite3.Connection) -> int:
    """
    Repopulate the full-text index from the articles table.

    Returns:
        Number of articles indexed
    """
    with conn:
        conn.execute("DELETE FROM articles_fts")
        cur = conn.execute(
            "INSERT INTO articles_fts (url, title, contents) "
            "SELECT url, title, contents FROM articles"
        )
    return cur.rowcount


def init_database(conn: sqlite3.Connection) -> None:
    """Create or upgrade the schema, bootstrapping the index when it is new."""
    index_existed = _table_exists(conn, "articles_fts")

    conn.executescript(SCHEMA_SQL)
    with conn:
        _run_migrations(conn)
        conn.execute(FTS_SQL)
        conn.execute(
            "INSERT OR REPLACE INTO metadata (id, schemaVersion) VALUES (1, ?)",
            (SCHEMA_VERSION,),
        )

    if not index_existed:
        count = rebuild_index(conn)
        if count:
            console.print(f"[dim]Indexed {count} existing articles[/dim]")
