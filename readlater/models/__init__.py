"""Data models for the read-later store."""

from .article import Article, ArticleSummary
from .usage import UsageRecord

__all__ = ["Article", "ArticleSummary", "UsageRecord"]
