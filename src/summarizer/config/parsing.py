"""Parsing and normalization helpers for configuration values."""

import logging
from typing import Any, Iterable, List

from summarizer.core.llm.models import SummaryLength

logger = logging.getLogger(__name__)


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def _parse_length(value: Any) -> SummaryLength:
    """Parse a summary length, falling back to medium on unknown labels."""
    try:
        return SummaryLength.parse(value)
    except ValueError:
        logger.warning(
            "Invalid summary length '%s'. Falling back to 'medium'. Valid options: %s",
            value,
            ", ".join(level.value for level in SummaryLength),
        )
        return SummaryLength.MEDIUM


def _dedupe_models(models: Iterable[Any]) -> List[str]:
    """Strip and deduplicate model ids, keeping the first occurrence."""
    seen: set[str] = set()
    result: List[str] = []
    for model in models:
        model_id = str(model).strip()
        if model_id and model_id not in seen:
            seen.add(model_id)
            result.append(model_id)
    return result


def _parse_model_list(value: Any) -> List[str]:
    """Parse a model ranking from a comma-separated string or a list."""
    if isinstance(value, str):
        return _dedupe_models(value.split(","))
    return _dedupe_models(value or [])
