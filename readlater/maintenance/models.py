"""Report models for the batch tools."""

from pydantic import BaseModel, Field


class ReconcileStats(BaseModel):
    """Counters reported by a deduplication run."""

    total: int = Field(0, description="Articles scanned")
    canonicalized: int = Field(0, description="URLs rewritten to canonical form")
    duplicates_found: int = Field(0, description="Articles sharing a canonical URL with a survivor")
    duplicates_removed: int = Field(0, description="Duplicates deleted")
    errors: int = Field(0, description="Per-item failures")


class ImportStats(BaseModel):
    """Counters reported by a CSV import."""

    total: int = Field(0, description="Records read from the CSV")
    imported: int = Field(0, description="Articles newly saved")
    skipped: int = Field(0, description="Records already stored")
    failed: int = Field(0, description="Records that could not be saved")


class MigrationStats(BaseModel):
    """Counters reported by a content migration."""

    total: int = Field(0, description="Articles selected for migration")
    processed: int = Field(0, description="Articles attempted")
    updated: int = Field(0, description="Articles whose contents changed")
    skipped: int = Field(0, description="Articles with unchanged contents")
    failed: int = Field(0, description="Articles that could not be migrated")
    duration: float = Field(0.0, description="Seconds taken")
