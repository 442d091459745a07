"""Title derivation for newly saved articles."""

import re
from typing import Optional
from urllib.parse import urlsplit

from trafilatura.metadata import extract_metadata

from .extractor import decode_html

HEADING_RE = re.compile(r"# (.*)\n")


def html_title(html: bytes) -> str:
    """Title found in the page metadata, or an empty string."""
    if not html:
        return ""
    metadata = extract_metadata(decode_html(html))
    if metadata and metadata.title:
        return metadata.title.strip()
    return ""


def derive_title(
    contents: Optional[str],
    html: bytes,
    url: str,
    title_hint: Optional[str] = None,
) -> str:
    """
    Pick a title for an article.

    Order: the leading ``# heading`` of the extracted text, the caller's
    hint, the page title, then the URL path.
    """
    if contents:
        match = HEADING_RE.match(contents)
        if match and match.group(1).strip():
            return match.group(1).strip()

    if title_hint:
        return title_hint

    title = html_title(html)
    if title:
        return title

    try:
        path = urlsplit(url).path
    except ValueError:
        return url
    return path or url
