"""Database connection management."""

import functools
import sqlite3
import threading
import time
from datetime import datetime
from typing import Callable, List, TypeVar

import pendulum
from rich.console import Console

console = Console()

T = TypeVar("T")

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"


def format_timestamp(value: datetime) -> str:
    """Render a datetime as a fixed-width UTC string that sorts chronologically."""
    return pendulum.instance(value).in_timezone("UTC").strftime(TIMESTAMP_FORMAT)


def now_timestamp() -> str:
    """Current time in storage format."""
    return pendulum.now("UTC").strftime(TIMESTAMP_FORMAT)


def retry_on_locked(max_retries: int = 5, base_delay: float = 0.1):
    """
    Retry a database operation while sqlite reports the database as locked.

    Args:
        max_retries: Maximum number of retries
        base_delay: Delay before the first retry, doubled on each attempt
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except sqlite3.OperationalError as e:
                    if "database is locked" not in str(e) or attempt == max_retries:
                        raise
                    delay = base_delay * (2 ** attempt)
                    console.print(
                        f"[yellow]Database locked, retrying in {delay:.2f}s "
                        f"(attempt {attempt + 1}/{max_retries})[/yellow]"
                    )
                    time.sleep(delay)
            raise AssertionError("unreachable")

        return wrapper

    return decorator


def open_connection(db_path: str, timeout: float = 30.0) -> sqlite3.Connection:
    """Open a sqlite connection in WAL mode with a busy timeout."""
    conn = sqlite3.connect(db_path, timeout=timeout, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(f"PRAGMA busy_timeout={int(timeout * 1000)}")
    return conn


class ConnectionPool:
    """One connection per thread to a single database file."""

    def __init__(self, db_path: str, timeout: float = 30.0) -> None:
        self.db_path = db_path
        self.timeout = timeout
        self._local = threading.local()
        self._lock = threading.Lock()
        self._connections: List[sqlite3.Connection] = []

    def connection(self) -> sqlite3.Connection:
        """Connection owned by the calling thread."""
        conn = getattr(self._local, "conn", None)
        if conn is None:
            conn = open_connection(self.db_path, self.timeout)
            self._local.conn = conn
            with self._lock:
                self._connections.append(conn)
        return conn

    def close(self) -> None:
        """Close every connection opened through the pool."""
        with self._lock:
            for conn in self._connections:
                conn.close()
            self._connections.clear()
        self._local = threading.local()
