"""Read-later article store: fetch, extract, store and search saved web articles."""

__version__ = "0.1.0"
