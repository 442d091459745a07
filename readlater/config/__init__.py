"""Configuration management for the read-later store."""

from .loader import Config, load_config, save_config
from .models import (
    BatchConfig,
    ConfigModel,
    DatabaseConfig,
    ExtractorConfig,
    FetchConfig,
    LLMConfig,
)

__all__ = [
    "Config",
    "ConfigModel",
    "DatabaseConfig",
    "FetchConfig",
    "ExtractorConfig",
    "LLMConfig",
    "BatchConfig",
    "load_config",
    "save_config",
]
