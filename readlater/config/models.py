"""Configuration models."""

import os
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..ingestion.fetcher import SPOOF_USER_AGENT

FETCH_STRATEGIES = {"plain", "spoof", "curl"}
EXTRACTOR_KINDS = {"pandoc", "trafilatura", "llm"}


class DatabaseConfig(BaseModel):
    """SQLite database configuration."""

    path: str = Field("~/.local/share/readlater/readlater.db", description="Database file")
    timeout: float = Field(30.0, description="Seconds to wait for a locked database", gt=0)


class FetchConfig(BaseModel):
    """Page retrieval configuration."""

    timeout: float = Field(30.0, description="Seconds allowed for one fetch", gt=0)
    user_agent: Optional[str] = Field(None, description="User agent for plain requests")
    spoof_user_agent: str = Field(SPOOF_USER_AGENT, description="Browser user agent for spoofed requests")
    strategies: List[str] = Field(
        default_factory=lambda: ["spoof", "plain", "curl"],
        description="Retrieval strategies, tried in order",
    )
    curl_path: str = Field("curl", description="curl executable")

    @field_validator("strategies")
    @classmethod
    def validate_strategies(cls, v: List[str]) -> List[str]:
        """Validate strategy names."""
        if not v:
            raise ValueError("At least one fetch strategy is required")
        unknown = [s for s in v if s not in FETCH_STRATEGIES]
        if unknown:
            raise ValueError(f"Unknown fetch strategies: {', '.join(unknown)}")
        return v


class ExtractorConfig(BaseModel):
    """Content extractor selection."""

    kind: str = Field("pandoc", description="Extractor (pandoc, trafilatura, llm)")
    pandoc_path: str = Field("pandoc", description="pandoc executable")
    timeout: float = Field(30.0, description="Seconds allowed for one extraction", gt=0)

    @field_validator("kind")
    @classmethod
    def validate_kind(cls, v: str) -> str:
        """Validate extractor kind."""
        if v not in EXTRACTOR_KINDS:
            raise ValueError(f"Unknown extractor: {v}")
        return v


class LLMConfig(BaseModel):
    """LLM extractor configuration."""

    model: str = Field("gpt-4o-mini", description="Model name")
    api_key_env: Optional[str] = Field("OPENAI_API_KEY", description="Environment variable for API key")
    base_url: Optional[str] = Field(None, description="Base URL for API")
    prompt: Optional[str] = Field(None, description="Extraction prompt (default built in)")
    prefill: str = Field("# ", description="Expected start of every response")

    def resolved_api_key(self) -> Optional[str]:
        """API key read from the configured environment variable."""
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        return None


class BatchConfig(BaseModel):
    """Defaults for the import and migrate tools."""

    delay: float = Field(0.1, description="Seconds to sleep between items", ge=0)
    item_timeout: float = Field(30.0, description="Seconds allowed per item", gt=0)


class ConfigModel(BaseModel):
    """Main configuration model."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    extractor: ExtractorConfig = Field(default_factory=ExtractorConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
