"""Content extractors: turn a fetched HTML page into markdown-like text."""

import subprocess
from abc import ABC, abstractmethod
from typing import Optional

import openai
import trafilatura
from openai import OpenAI

from ..errors import ExtractFailed
from .models import Extraction

DEFAULT_PROMPT = """Task:
Take the attached article in HTML format and extract the article headings and text, formatting the output as Markdown.
The output should be a single Markdown document with the article title as the first heading, followed by the headings and text of the article.
The output should not contain any HTML tags, and should be formatted as follows:
# Article Title
## Heading 1
### Subheading 1.1
## Heading 2
The output should not contain any additional text or explanations, only the Markdown formatted article."""


def decode_html(html: bytes) -> str:
    """Decode page bytes, replacing anything that is not UTF-8."""
    return html.decode("utf-8", errors="replace")


class Extractor(ABC):
    """Abstract base class for content extractors."""

    name = "extractor"

    @abstractmethod
    def extract(
        self,
        html: bytes,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Extraction:
        """
        Extract the readable body of a page.

        Args:
            html: Raw page bytes
            url: URL the page was fetched from, when known
            timeout: Seconds the extraction may take

        Returns:
            Extracted text plus any token usage

        Raises:
            ExtractFailed: if no text could be produced
        """


class PandocExtractor(Extractor):
    """Convert HTML to CommonMark with an external pandoc process."""

    name = "pandoc"

    def __init__(self, pandoc_path: str = "pandoc", timeout: float = 30.0) -> None:
        self.pandoc_path = pandoc_path
        self.timeout = timeout

    def extract(
        self,
        html: bytes,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Extraction:
        try:
            result = subprocess.run(
                [self.pandoc_path, "-f", "html", "-t", "commonmark", "--strip-comments"],
                input=html,
                capture_output=True,
                timeout=timeout if timeout is not None else self.timeout,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode("utf-8", errors="replace").strip() if e.stderr else ""
            raise ExtractFailed(f"pandoc failed: {stderr or e}") from e
        except (subprocess.TimeoutExpired, OSError) as e:
            raise ExtractFailed(f"pandoc failed: {e}") from e

        return Extraction(text=result.stdout.decode("utf-8", errors="replace"))


class TrafilaturaExtractor(Extractor):
    """Extract the main content with trafilatura, rendered as markdown."""

    name = "trafilatura"

    def extract(
        self,
        html: bytes,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Extraction:
        extracted = trafilatura.extract(
            decode_html(html),
            output_format="markdown",
            include_comments=False,
            include_tables=True,
            deduplicate=True,
            favor_precision=True,
            url=url,
        )
        if not extracted:
            raise ExtractFailed("Failed to extract article content")
        return Extraction(text=extracted)


class LLMExtractor(Extractor):
    """Ask an OpenAI chat model to rewrite the page as markdown."""

    name = "llm"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        prompt: str = DEFAULT_PROMPT,
        prefill: str = "# ",
        max_input_chars: int = 200_000,
        client: Optional[OpenAI] = None,
    ) -> None:
        self.client = client or OpenAI(api_key=api_key, base_url=base_url)
        self.model = model
        self.prompt = prompt
        self.prefill = prefill
        self.max_input_chars = max_input_chars

    def extract(
        self,
        html: bytes,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Extraction:
        document = decode_html(html)
        if len(document) > self.max_input_chars:
            document = document[: self.max_input_chars]

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.prompt},
                    {"role": "user", "content": document},
                ],
                temperature=0.0,
                timeout=timeout,
            )
        except openai.OpenAIError as e:
            raise ExtractFailed(f"Error communicating with llm: {e}") from e

        choice = response.choices[0]
        if choice.finish_reason != "stop":
            raise ExtractFailed(f"Unexpected llm stop reason: {choice.finish_reason}")

        text = (choice.message.content or "").strip()
        if self.prefill and not text.startswith(self.prefill):
            text = self.prefill + text

        tokens_in = response.usage.prompt_tokens if response.usage else 0
        tokens_out = response.usage.completion_tokens if response.usage else 0
        return Extraction(text=text, tokens_in=tokens_in, tokens_out=tokens_out)


def build_extractor(config, kind: Optional[str] = None) -> Extractor:
    """
    Create the extractor selected by configuration.

    Args:
        config: Loaded ``ConfigModel``
        kind: Override for ``config.extractor.kind``
    """
    kind = kind or config.extractor.kind
    if kind == "pandoc":
        return PandocExtractor(config.extractor.pandoc_path, timeout=config.extractor.timeout)
    if kind == "trafilatura":
        return TrafilaturaExtractor()
    if kind == "llm":
        api_key = config.llm.resolved_api_key()
        if not api_key:
            raise ValueError(f"No LLM API key found in environment variable {config.llm.api_key_env}")
        return LLMExtractor(
            api_key=api_key,
            model=config.llm.model,
            base_url=config.llm.base_url,
            prompt=config.llm.prompt or DEFAULT_PROMPT,
            prefill=config.llm.prefill,
        )
    raise ValueError(f"Unknown extractor: {kind}")
