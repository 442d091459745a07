"""Usage accounting for content extraction."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import DBModel


class UsageRecord(DBModel):
    """Append-only record of one extraction's input and output sizes."""

    url: str = Field(..., description="URL the extraction was run for")
    length_in: int = Field(0, description="Bytes of HTML sent to the extractor")
    length_out: int = Field(0, description="Characters of text produced")
    tokens_in: int = Field(0, description="Input tokens billed, if any")
    tokens_out: int = Field(0, description="Output tokens billed, if any")
    timestamp: Optional[datetime] = Field(None, description="When the record was written")
