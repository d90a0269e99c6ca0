"""Error-to-code mapping registry.

Provides a stable, machine-readable code for every error type the core
raises, so outer layers (CLI, host integrations) can classify failures
without importing each class.

Usage:
    from summarizer.core.errors.base import error_to_code

    try:
        await service.summarize_url(url)
    except Exception as e:
        code = error_to_code(e)
        if code is None:
            raise
"""

from __future__ import annotations

from typing import Dict, Optional, Type

from summarizer.core.errors.extraction import ExtractionError, InvalidUrlError
from summarizer.core.errors.http import FetchError, NetworkError
from summarizer.core.errors.llm import (
    AllModelsRateLimitedError,
    CompletionError,
    FatalCompletionError,
    NoRankedModelsError,
    NotConfiguredError,
    RateLimitedError,
)

ERROR_CODES: Dict[Type[Exception], str] = {
    # --- Extraction errors ---
    InvalidUrlError: "INVALID_URL",
    ExtractionError: "EXTRACTION_ERROR",
    # --- Transport errors ---
    NetworkError: "NETWORK_ERROR",
    FetchError: "FETCH_ERROR",
    # --- Completion errors ---
    RateLimitedError: "RATE_LIMITED",
    FatalCompletionError: "COMPLETION_ERROR",
    NoRankedModelsError: "NO_RANKED_MODELS",
    AllModelsRateLimitedError: "ALL_MODELS_RATE_LIMITED",
    NotConfiguredError: "NOT_CONFIGURED",
    CompletionError: "COMPLETION_ERROR",
}


def error_to_code(exc: Exception) -> Optional[str]:
    """Return the code registered for ``exc``, or None if unknown.

    The exact type is looked up first; otherwise the nearest registered
    base class in the exception's MRO wins.
    """
    code = ERROR_CODES.get(type(exc))
    if code is not None:
        return code
    for klass in type(exc).__mro__[1:]:
        if klass in ERROR_CODES:
            return ERROR_CODES[klass]
    return None
