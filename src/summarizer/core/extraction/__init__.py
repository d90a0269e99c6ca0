"""Content acquisition: URL classification, fetching and HTML-to-text.

Key Components:
    - classify / UrlKind: pure URL strategy selection
    - ContentExtractor: network orchestration per strategy
    - ExtractedContent: normalized extraction result
"""

from .classifier import (
    UrlKind,
    classify,
    find_linked_url,
    is_shortener,
    rewrite_github_blob,
    validate_url,
)
from .extractor import ContentExtractor
from .html_text import clean_markdown, count_words, html_to_markdown
from .models import ExtractedContent

__all__ = [
    "ContentExtractor",
    "ExtractedContent",
    "UrlKind",
    "classify",
    "clean_markdown",
    "count_words",
    "find_linked_url",
    "html_to_markdown",
    "is_shortener",
    "rewrite_github_blob",
    "validate_url",
]
