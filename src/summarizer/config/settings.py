"""SummarizeConfig dataclass and global configuration state.

Loading logic lives in the ``_SummarizeConfigLoader`` mixin (``loader.py``)
which ``SummarizeConfig`` inherits from.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from summarizer.config.loader import _SummarizeConfigLoader
from summarizer.config.parsing import _dedupe_models
from summarizer.core.extraction.extractor import DEFAULT_USER_AGENT, JINA_READER_URL
from summarizer.core.llm.client import (
    DEFAULT_APP_REFERER,
    DEFAULT_APP_TITLE,
    OPENROUTER_API_URL,
    OPENROUTER_MODELS_URL,
)
from summarizer.core.llm.models import AUTO_FREE_MODEL, SummaryLength

DEFAULT_FREE_MODELS = [
    "meta-llama/llama-3.3-70b-instruct:free",
    "google/gemini-2.0-flash-exp:free",
    "mistralai/mistral-small-3.1-24b-instruct:free",
    "qwen/qwen3-32b:free",
]


@dataclass
class SummarizeConfig(_SummarizeConfigLoader):
    """Summarizer configuration with support for env vars and TOML overrides."""

    # OpenRouter
    api_key: Optional[str] = None
    default_model: str = AUTO_FREE_MODEL
    free_model_rank: List[str] = field(default_factory=lambda: list(DEFAULT_FREE_MODELS))
    max_tokens: int = 1024
    api_url: str = OPENROUTER_API_URL
    models_url: str = OPENROUTER_MODELS_URL
    app_referer: str = DEFAULT_APP_REFERER
    app_title: str = DEFAULT_APP_TITLE

    # Summary defaults
    default_length: SummaryLength = SummaryLength.MEDIUM
    custom_prompt: str = ""  # Empty uses the built-in template
    output_language: str = ""  # Empty asks for the source language

    # Extraction
    user_agent: str = DEFAULT_USER_AGENT
    jina_reader_url: str = JINA_READER_URL
    request_timeout: float = 30.0

    # Logging configuration
    log_level: str = "INFO"
    structured_logging: bool = False

    def __post_init__(self) -> None:
        self.free_model_rank = _dedupe_models(self.free_model_rank)

    def is_configured(self) -> bool:
        """True when an API key is present."""
        return bool(self.api_key)

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        level = getattr(logging, self.log_level, logging.INFO)

        if self.structured_logging:
            # JSON-style structured logging
            formatter = logging.Formatter(
                '{"timestamp":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}'
            )
        else:
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

        handler = logging.StreamHandler()
        handler.setFormatter(formatter)

        root_logger = logging.getLogger("summarizer")
        root_logger.setLevel(level)
        for existing in list(root_logger.handlers):
            root_logger.removeHandler(existing)
        root_logger.addHandler(handler)


# Global configuration instance
_config: Optional[SummarizeConfig] = None


def get_config() -> SummarizeConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = SummarizeConfig.from_env()
    return _config


def set_config(config: Optional[SummarizeConfig]) -> None:
    """Set the global configuration instance (None forces a reload)."""
    global _config
    _config = config
