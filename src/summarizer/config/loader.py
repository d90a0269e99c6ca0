"""SummarizeConfig loading logic.

Provides ``_SummarizeConfigLoader``, a mixin whose methods are inherited by
``SummarizeConfig`` (defined in ``settings.py``), keeping that module
focused on field definitions.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, List, Optional, cast

if TYPE_CHECKING:
    from summarizer.config.settings import SummarizeConfig

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from summarizer.config.parsing import _parse_bool, _parse_length, _parse_model_list

logger = logging.getLogger(__name__)

CONFIG_FILE_ENV_VAR = "SUMMARIZER_CONFIG_FILE"
PROJECT_CONFIG_NAME = "summarizer.toml"


class _SummarizeConfigLoader:
    """Mixin providing config-loading methods for ``SummarizeConfig``."""

    if TYPE_CHECKING:
        api_key: Optional[str]
        default_model: str
        default_length: Any
        custom_prompt: str
        output_language: str
        free_model_rank: List[str]
        api_url: str
        models_url: str
        jina_reader_url: str
        user_agent: str
        request_timeout: float
        max_tokens: int
        log_level: str
        structured_logging: bool

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "SummarizeConfig":
        """
        Create configuration from environment variables and optional TOML file.

        Priority (highest to lowest):
        1. Environment variables
        2. Project TOML config (./summarizer.toml)
        3. XDG config (~/.config/summarizer/config.toml)
        4. Default values
        """
        config = cls()

        toml_path = config_file or os.environ.get(CONFIG_FILE_ENV_VAR)
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
            xdg_config = Path(xdg_config_home) / "summarizer" / "config.toml"
            if xdg_config.exists():
                config._load_toml(xdg_config)
                logger.debug(f"Loaded XDG config from {xdg_config}")

            project_config = Path(PROJECT_CONFIG_NAME)
            if project_config.exists():
                config._load_toml(project_config)
                logger.debug(f"Loaded project config from {project_config}")

        config._load_env()
        return cast("SummarizeConfig", config)

    def _load_toml(self, path: Path) -> None:
        """Load configuration from TOML file."""
        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.error(f"Error loading config file {path}: {e}")
            return

        if "openrouter" in data:
            router = data["openrouter"]
            if "api_key" in router:
                self.api_key = router["api_key"] or None
            if "default_model" in router:
                self.default_model = router["default_model"]
            if "free_model_rank" in router:
                self.free_model_rank = _parse_model_list(router["free_model_rank"])
            if "max_tokens" in router:
                self.max_tokens = int(router["max_tokens"])
            if "api_url" in router:
                self.api_url = router["api_url"]
            if "models_url" in router:
                self.models_url = router["models_url"]

        if "summary" in data:
            summary = data["summary"]
            if "length" in summary:
                self.default_length = _parse_length(summary["length"])
            if "language" in summary:
                self.output_language = summary["language"]
            if "prompt" in summary:
                self.custom_prompt = summary["prompt"]

        if "extraction" in data:
            extraction = data["extraction"]
            if "user_agent" in extraction:
                self.user_agent = extraction["user_agent"]
            if "jina_reader_url" in extraction:
                self.jina_reader_url = extraction["jina_reader_url"]
            if "timeout" in extraction:
                self.request_timeout = float(extraction["timeout"])

        if "logging" in data:
            log = data["logging"]
            if "level" in log:
                self.log_level = log["level"].upper()
            if "structured" in log:
                self.structured_logging = _parse_bool(log["structured"])

    def _load_env(self) -> None:
        """Load configuration from environment variables."""
        if api_key := os.environ.get("OPENROUTER_API_KEY"):
            self.api_key = api_key
        if model := os.environ.get("SUMMARIZER_DEFAULT_MODEL"):
            self.default_model = model
        if length := os.environ.get("SUMMARIZER_DEFAULT_LENGTH"):
            self.default_length = _parse_length(length)
        if language := os.environ.get("SUMMARIZER_LANGUAGE"):
            self.output_language = language
        if free_models := os.environ.get("SUMMARIZER_FREE_MODELS"):
            self.free_model_rank = _parse_model_list(free_models)
        if prompt := os.environ.get("SUMMARIZER_PROMPT"):
            self.custom_prompt = prompt
        if timeout := os.environ.get("SUMMARIZER_TIMEOUT"):
            try:
                self.request_timeout = float(timeout)
            except ValueError:
                logger.warning(f"Ignoring invalid SUMMARIZER_TIMEOUT: {timeout!r}")
        if level := os.environ.get("SUMMARIZER_LOG_LEVEL"):
            self.log_level = level.upper()
        if structured := os.environ.get("SUMMARIZER_STRUCTURED_LOGGING"):
            self.structured_logging = _parse_bool(structured)
