"""Article models for saved pages and their listing summaries."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import DBModel


class Article(DBModel):
    """A saved article, keyed by its canonical URL."""

    url: str = Field(..., description="Canonical URL (primary key)")
    title: Optional[str] = Field(None, description="Article title")
    contents: Optional[str] = Field(None, description="Extracted markdown body")
    unread: bool = Field(True, description="Whether the article has not been opened")
    archived: bool = Field(False, description="Whether the article is archived")
    created: Optional[datetime] = Field(None, description="When the article was saved")
    last_access: Optional[datetime] = Field(None, description="When the article was last opened")


class ArticleSummary(DBModel):
    """Listing entry returned by recent, feed and search queries."""

    url: str = Field(..., description="Canonical URL")
    title: Optional[str] = Field(None, description="Article title")
    has_body: bool = Field(False, description="Whether contents were stored")
    unread: bool = Field(True, description="Whether the article has not been opened")
    archived: bool = Field(False, description="Whether the article is archived")
