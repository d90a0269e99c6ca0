"""Unified error hierarchy for summarizer.

All custom exception classes are defined in domain-specific modules within
this package. This __init__.py re-exports everything for convenient access.

Usage:
    from summarizer.core.errors.llm import RateLimitedError
    from summarizer.core.errors import FetchError, error_to_code
"""

# --- Base / Registry ---
from summarizer.core.errors.base import ERROR_CODES, error_to_code

# --- Extraction errors ---
from summarizer.core.errors.extraction import ExtractionError, InvalidUrlError

# --- Transport errors ---
from summarizer.core.errors.http import FetchError, NetworkError

# --- Completion errors ---
from summarizer.core.errors.llm import (
    AllModelsRateLimitedError,
    CompletionError,
    FatalCompletionError,
    NoRankedModelsError,
    NotConfiguredError,
    RateLimitedError,
)

__all__ = [
    # Base / Registry
    "ERROR_CODES",
    "error_to_code",
    # Extraction errors
    "ExtractionError",
    "InvalidUrlError",
    # Transport errors
    "NetworkError",
    "FetchError",
    # Completion errors
    "CompletionError",
    "RateLimitedError",
    "FatalCompletionError",
    "NoRankedModelsError",
    "AllModelsRateLimitedError",
    "NotConfiguredError",
]
