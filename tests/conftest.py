"""Shared fixtures and collaborator fakes."""

from typing import Callable, Dict, Iterable, List, Optional

import pytest

from readlater.db import ArticleStore
from readlater.errors import FetchFailed
from readlater.ingestion import Extraction, Extractor, FetchResult
from readlater.service import ArticleService

DEFAULT_HTML = b"<html><head><title>Page Title</title></head><body><p>Body</p></body></html>"


class FakeFetcher:
    """Serves canned pages, following a redirect table."""

    def __init__(
        self,
        redirects: Optional[Dict[str, str]] = None,
        fail: Iterable[str] = (),
        content: bytes = DEFAULT_HTML,
    ) -> None:
        self.redirects = redirects or {}
        self.fail = set(fail)
        self.content = content
        self.calls: List[str] = []

    def fetch(self, url: str, timeout: Optional[float] = None) -> FetchResult:
        self.calls.append(url)
        if url in self.fail:
            raise FetchFailed(url, "connection refused")
        return FetchResult(content=self.content, final_url=self.redirects.get(url, url))


class FakeExtractor(Extractor):
    """Returns fixed text, optionally per URL."""

    name = "fake"

    def __init__(
        self,
        text: str = "# Fetched Title\n\nBody text\n",
        texts: Optional[Dict[str, str]] = None,
        error: Optional[Exception] = None,
        on_extract: Optional[Callable[[], None]] = None,
    ) -> None:
        self.text = text
        self.texts = texts or {}
        self.error = error
        self.on_extract = on_extract
        self.calls: List[Optional[str]] = []

    def extract(self, html: bytes, url: Optional[str] = None, timeout: Optional[float] = None) -> Extraction:
        self.calls.append(url)
        if self.on_extract:
            self.on_extract()
        if self.error:
            raise self.error
        return Extraction(text=self.texts.get(url, self.text), tokens_in=10, tokens_out=5)


@pytest.fixture
def store(tmp_path):
    s = ArticleStore(tmp_path / "readlater.db")
    yield s
    s.close()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def service(store, fetcher, extractor):
    return ArticleService(store, fetcher, extractor)
