"""Content extraction error classes."""

from typing import Optional


class ExtractionError(Exception):
    """Base exception for content extraction errors."""

    pass


class InvalidUrlError(ExtractionError):
    """Raised when a URL cannot be parsed or is not an http(s) URL.

    Attributes:
        url: The offending URL
        reason: Why the URL was rejected
    """

    def __init__(self, url: str, reason: Optional[str] = None):
        self.url = url
        self.reason = reason or "Malformed URL"
        super().__init__(f"Invalid URL: {url!r} ({self.reason})")
