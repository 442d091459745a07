"""URL canonicalization: the single definition of "the same article"."""

from urllib.parse import urlsplit, urlunsplit

from ..errors import InvalidURL


def canonicalize(raw: str) -> str:
    """
    Return the canonical form of a URL: query string and fragment removed.

    Raises:
        InvalidURL: if ``raw`` is not an absolute URL with a scheme and host.
    """
    if not raw or not raw.strip():
        raise InvalidURL("Empty URL")

    try:
        parts = urlsplit(raw.strip())
        # Accessing the port validates it
        parts.port
    except ValueError as e:
        raise InvalidURL(f"Invalid URL {raw!r}: {e}") from e

    if not parts.scheme or not parts.netloc:
        raise InvalidURL(f"Invalid URL {raw!r}: missing scheme or host")

    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def is_canonical(url: str) -> bool:
    """Whether ``url`` is already in canonical form."""
    try:
        return canonicalize(url) == url
    except InvalidURL:
        return False
