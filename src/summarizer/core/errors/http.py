"""HTTP transport error classes.

Shared by content acquisition and the completion client: both surface
transport failures and non-2xx responses with the same two types.
"""

from typing import Optional


class NetworkError(Exception):
    """Raised when a request fails without producing an HTTP response.

    Attributes:
        url: The URL that was being requested
        message: Human-readable error description
        original_error: The underlying transport exception if available
    """

    def __init__(
        self,
        url: str,
        message: str,
        original_error: Optional[Exception] = None,
    ):
        self.url = url
        self.message = message
        self.original_error = original_error
        super().__init__(f"Network error for {url}: {message}")


class FetchError(Exception):
    """Raised when a content fetch returns a non-2xx HTTP status.

    Attributes:
        url: The URL that was fetched
        status_code: HTTP status code of the response
        reason: Reason phrase or short response excerpt
    """

    def __init__(self, url: str, status_code: int, reason: str = ""):
        self.url = url
        self.status_code = status_code
        self.reason = reason
        message = f"Failed to fetch URL: {status_code}"
        if reason:
            message += f" {reason}"
        super().__init__(message)
