"""Configuration package for summarizer.

Sub-modules:
    parsing  – Boolean, length and model-list parsing helpers
    loader   – SummarizeConfig loading mixin (_SummarizeConfigLoader)
    settings – SummarizeConfig dataclass, get_config/set_config globals
"""

from summarizer.config.parsing import (  # noqa: F401
    _dedupe_models,
    _parse_bool,
    _parse_length,
    _parse_model_list,
)
from summarizer.config.settings import (  # noqa: F401
    DEFAULT_FREE_MODELS,
    SummarizeConfig,
    get_config,
    set_config,
)
