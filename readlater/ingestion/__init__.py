"""Page retrieval, URL canonicalization and content extraction."""

from .canonical import canonicalize, is_canonical
from .extractor import (
    Extractor,
    LLMExtractor,
    PandocExtractor,
    TrafilaturaExtractor,
    build_extractor,
)
from .fetcher import (
    CurlStrategy,
    FetchOrchestrator,
    FetchStrategy,
    HttpStrategy,
    build_fetcher,
)
from .models import Extraction, FetchResult
from .title import derive_title

__all__ = [
    "canonicalize",
    "is_canonical",
    "Extractor",
    "PandocExtractor",
    "TrafilaturaExtractor",
    "LLMExtractor",
    "build_extractor",
    "FetchStrategy",
    "HttpStrategy",
    "CurlStrategy",
    "FetchOrchestrator",
    "build_fetcher",
    "Extraction",
    "FetchResult",
    "derive_title",
]
