"""Page retrieval through an ordered chain of fallback strategies."""

import subprocess
import tempfile
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import httpx
from rich.console import Console

from ..errors import FetchFailed
from .models import FetchResult

console = Console()

SPOOF_USER_AGENT = (
    "Mozilla/5.0 (X11; CrOS x86_64 14541.0.0) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/136.0.0.0 Safari/537.36"
)

# Errors a strategy may raise that mean "try the next one"
STRATEGY_ERRORS = (
    httpx.HTTPError,
    httpx.InvalidURL,
    subprocess.SubprocessError,
    OSError,
)


class FetchStrategy(ABC):
    """One way of retrieving a page."""

    name = "strategy"

    @abstractmethod
    def fetch(self, url: str, timeout: float) -> FetchResult:
        """
        Retrieve ``url`` within ``timeout`` seconds.

        Returns:
            The response body and the final URL after redirects
        """


class HttpStrategy(FetchStrategy):
    """Plain HTTP GET, optionally under a browser-like client identity."""

    def __init__(
        self,
        name: str = "plain",
        user_agent: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.name = name
        self.user_agent = user_agent
        self.client = client

    def _headers(self) -> dict:
        headers = {"Accept": "text/html,application/xhtml+xml"}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        return headers

    def fetch(self, url: str, timeout: float) -> FetchResult:
        if self.client is not None:
            response = self.client.get(
                url, headers=self._headers(), timeout=timeout, follow_redirects=True
            )
        else:
            with httpx.Client(follow_redirects=True) as client:
                response = client.get(url, headers=self._headers(), timeout=timeout)

        if response.status_code > 299:
            console.print(
                f"[dim]{self.name}: {url} returned {response.status_code} "
                f"(server: {response.headers.get('server', 'unknown')})[/dim]"
            )
        response.raise_for_status()
        return FetchResult(content=response.content, final_url=str(response.url), strategy=self.name)


class CurlStrategy(FetchStrategy):
    """Retrieve through an external curl process."""

    name = "curl"

    def __init__(self, curl_path: str = "curl") -> None:
        self.curl_path = curl_path

    def fetch(self, url: str, timeout: float) -> FetchResult:
        with tempfile.TemporaryDirectory() as tmp:
            body_path = Path(tmp) / "body"
            result = subprocess.run(
                [
                    self.curl_path,
                    "--fail",
                    "--location",
                    "--silent",
                    "--show-error",
                    "--output",
                    str(body_path),
                    "--write-out",
                    "%{url_effective}",
                    url,
                ],
                capture_output=True,
                timeout=timeout,
                check=True,
            )
            content = body_path.read_bytes() if body_path.exists() else b""

        final_url = result.stdout.decode("utf-8", errors="replace").strip() or url
        return FetchResult(content=content, final_url=final_url, strategy=self.name)


class FetchOrchestrator:
    """Try each strategy in order and return the first success."""

    def __init__(self, strategies: Sequence[FetchStrategy], timeout: float = 30.0) -> None:
        if not strategies:
            raise ValueError("At least one fetch strategy is required")
        self.strategies = list(strategies)
        self.timeout = timeout

    def fetch(self, url: str, timeout: Optional[float] = None) -> FetchResult:
        """
        Fetch ``url``, falling back through the strategies in sequence.

        ``timeout`` bounds the whole call; each attempt gets whatever time is
        left before the deadline.

        Raises:
            FetchFailed: when every strategy fails or the deadline passes.
        """
        deadline = time.monotonic() + (timeout if timeout is not None else self.timeout)
        attempts: List[Tuple[str, str]] = []
        last_error: Optional[BaseException] = None

        for strategy in self.strategies:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                attempts.append((strategy.name, "deadline exceeded"))
                break
            try:
                return strategy.fetch(url, remaining)
            except STRATEGY_ERRORS as e:
                console.print(f"[dim]{strategy.name} fetch failed for {url}: {e}[/dim]")
                attempts.append((strategy.name, str(e) or type(e).__name__))
                last_error = e

        message = attempts[-1][1] if attempts else "no strategy attempted"
        raise FetchFailed(url, message, attempts) from last_error


def build_strategy(
    name: str,
    user_agent: Optional[str] = None,
    spoof_user_agent: str = SPOOF_USER_AGENT,
    curl_path: str = "curl",
) -> FetchStrategy:
    """Create a strategy from its configured name."""
    if name == "plain":
        return HttpStrategy("plain", user_agent=user_agent)
    if name == "spoof":
        return HttpStrategy("spoof", user_agent=spoof_user_agent)
    if name == "curl":
        return CurlStrategy(curl_path)
    raise ValueError(f"Unknown fetch strategy: {name}")


def build_fetcher(fetch_config) -> FetchOrchestrator:
    """Create the orchestrator described by a ``FetchConfig``."""
    strategies = [
        build_strategy(
            name,
            user_agent=fetch_config.user_agent,
            spoof_user_agent=fetch_config.spoof_user_agent,
            curl_path=fetch_config.curl_path,
        )
        for name in fetch_config.strategies
    ]
    return FetchOrchestrator(strategies, timeout=fetch_config.timeout)
