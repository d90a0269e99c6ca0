"""Ranked free-model fallback.

Tries each model of a ranking in order, moving on only when the current
model is rate limited. Any other failure ends the whole call: a model
that is down or rejects the request is not retried under another name.

Attempts are strictly sequential so that at most one request is in
flight and already-streamed chunks always belong to a single model.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from summarizer.core.errors.http import NetworkError
from summarizer.core.errors.llm import (
    AllModelsRateLimitedError,
    CompletionError,
    NoRankedModelsError,
    RateLimitedError,
)
from summarizer.core.streaming.signal import AbortSignal

from .client import CompletionClient
from .models import CompletionResult, StreamCallback

logger = logging.getLogger(__name__)

RATE_LIMIT_MARKERS = ("429", "rate limit", "too many requests")


def is_rate_limit_error(exc: BaseException) -> bool:
    """Return True if ``exc`` signals a rate limit.

    Recognises RateLimitedError, any error carrying status code 429, and
    messages mentioning 429, "rate limit" or "too many requests".
    """
    if isinstance(exc, RateLimitedError):
        return True
    if getattr(exc, "status_code", None) == 429:
        return True
    message = str(getattr(exc, "message", None) or exc).lower()
    return any(marker in message for marker in RATE_LIMIT_MARKERS)


class FallbackCompletionClient:
    """Completion over a ranked list of models with rate-limit fallback."""

    def __init__(self, client: CompletionClient):
        self._client = client

    async def complete_with_fallback(
        self,
        prompt: str,
        ranked_models: Sequence[str],
        *,
        on_stream: Optional[StreamCallback] = None,
        abort_signal: Optional[AbortSignal] = None,
    ) -> CompletionResult:
        """Complete ``prompt`` with the first ranked model that is not rate limited.

        Args:
            prompt: User prompt.
            ranked_models: Model ids, best first.
            on_stream: Optional chunk callback; enables streaming.
            abort_signal: Optional cancellation signal, checked before each attempt.

        Returns:
            The first successful (or cancelled) CompletionResult.

        Raises:
            NoRankedModelsError: If ``ranked_models`` is empty; nothing is sent.
            AllModelsRateLimitedError: If every model was rate limited.
            CompletionError, NetworkError: The first non-rate-limit failure.
        """
        models = list(ranked_models)
        if not models:
            raise NoRankedModelsError()

        attempted: list[str] = []
        last_error: Optional[Exception] = None

        for index, model in enumerate(models):
            if abort_signal is not None and abort_signal.aborted:
                return CompletionResult(content="", model=model, cancelled=True)

            attempted.append(model)
            logger.info(f"Trying model {model} ({index + 1}/{len(models)})")
            try:
                result = await self._client.complete(
                    model,
                    prompt,
                    on_stream=on_stream,
                    abort_signal=abort_signal,
                )
            except (CompletionError, NetworkError) as e:
                if not is_rate_limit_error(e):
                    raise
                last_error = e
                logger.warning(
                    f"Model {model} rate limited ({index + 1}/{len(models)}), trying next model"
                )
                continue

            if index > 0:
                logger.info(f"Completed with fallback model {model} after {index} rate-limited attempts")
            return result

        last_message = getattr(last_error, "message", None) or str(last_error)
        raise AllModelsRateLimitedError(last_message, attempted)
