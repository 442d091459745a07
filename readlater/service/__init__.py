"""Article orchestration services."""

from .articles import ArticleService

__all__ = ["ArticleService"]
