"""Completion error classes.

Rate limiting is a distinct type because it is the only failure the
fallback client retries on; everything else is fatal for the call.
"""

from typing import Optional, Sequence


class CompletionError(Exception):
    """Base exception for completion failures.

    Attributes:
        message: Human-readable error description
        model: Model identifier the request targeted
        status_code: HTTP (or in-band) status code if applicable
    """

    def __init__(
        self,
        message: str,
        *,
        model: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.model = model
        self.status_code = status_code


class RateLimitedError(CompletionError):
    """The gateway answered 429 for a model."""

    def __init__(self, model: str, message: Optional[str] = None):
        super().__init__(
            message or f"Rate limit exceeded (429) for model {model}",
            model=model,
            status_code=429,
        )


class FatalCompletionError(CompletionError):
    """Non-retryable completion failure, including in-band error payloads."""

    pass


class NoRankedModelsError(CompletionError):
    """Fallback mode was requested with an empty model ranking."""

    def __init__(self, message: str = "No free models ranked. Add models to free_model_rank."):
        super().__init__(message)


class AllModelsRateLimitedError(CompletionError):
    """Every ranked model was rate limited.

    Attributes:
        last_error_message: Message of the last rate-limit failure
        attempted_models: Models tried, in order
    """

    def __init__(self, last_error_message: str, attempted_models: Sequence[str] = ()):
        self.last_error_message = last_error_message
        self.attempted_models = list(attempted_models)
        super().__init__(
            f"All ranked free models are rate limited. Last error: {last_error_message}",
            status_code=429,
        )


class NotConfiguredError(CompletionError):
    """No API key is configured."""

    def __init__(self, message: str = "Summarizer is not configured. Please add an OpenRouter API key."):
        super().__init__(message)
