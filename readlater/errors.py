"""Error kinds raised by the article store and its collaborators."""

from typing import List, Optional, Tuple


class ReadLaterError(Exception):
    """Base class for all errors surfaced to callers."""

    kind = "error"


class InvalidURL(ReadLaterError):
    """The input could not be parsed as an absolute URL."""

    kind = "invalid_url"


class FetchFailed(ReadLaterError):
    """Every retrieval strategy failed for a URL."""

    kind = "fetch_failed"

    def __init__(
        self,
        url: str,
        message: str,
        attempts: Optional[List[Tuple[str, str]]] = None,
    ) -> None:
        super().__init__(f"Failed to fetch {url}: {message}")
        self.url = url
        self.attempts = attempts or []


class ExtractFailed(ReadLaterError):
    """The content extractor could not produce text."""

    kind = "extract_failed"


class StoreConflict(ReadLaterError):
    """An article with the same URL is already stored."""

    kind = "store_conflict"

    def __init__(self, url: str) -> None:
        super().__init__(f"Article already exists: {url}")
        self.url = url


class NotFound(ReadLaterError):
    """The target article does not exist."""

    kind = "not_found"

    def __init__(self, url: str) -> None:
        super().__init__(f"Article not found: {url}")
        self.url = url


class SearchQueryInvalid(ReadLaterError):
    """The full-text query could not be parsed."""

    kind = "search_query_invalid"
