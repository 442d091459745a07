"""Database management for the read-later store."""

from .articles import ArticleStore, prepare_query
from .connection import ConnectionPool, open_connection
from .init import init_database, rebuild_index

__all__ = [
    "ArticleStore",
    "prepare_query",
    "ConnectionPool",
    "open_connection",
    "init_database",
    "rebuild_index",
]
