"""Batch maintenance tools: deduplication, CSV import and content migration."""

from .importer import ArticleImporter, CsvRecord, parse_csv
from .migrate import ContentMigrator
from .models import ImportStats, MigrationStats, ReconcileStats
from .reconcile import DeduplicationReconciler, select_survivor

__all__ = [
    "ArticleImporter",
    "CsvRecord",
    "parse_csv",
    "ContentMigrator",
    "DeduplicationReconciler",
    "select_survivor",
    "ImportStats",
    "MigrationStats",
    "ReconcileStats",
]
