"""Data models for page retrieval and content extraction."""

from typing import Optional

from pydantic import BaseModel, Field


class FetchResult(BaseModel):
    """Raw page retrieved by a fetch strategy."""

    content: bytes = Field(..., description="Response body")
    final_url: str = Field(..., description="URL after following redirects")
    strategy: Optional[str] = Field(None, description="Strategy that succeeded")


class Extraction(BaseModel):
    """Text produced by a content extractor."""

    text: str = Field(..., description="Extracted markdown-like body")
    tokens_in: int = Field(0, description="Input tokens billed by the extractor")
    tokens_out: int = Field(0, description="Output tokens billed by the extractor")
