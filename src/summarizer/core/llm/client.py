"""OpenRouter completion client.

This module implements CompletionClient, which performs one chat
completion against the OpenRouter gateway, either as a single JSON
request or as a token stream.

OpenRouter API documentation: https://openrouter.ai/docs/api-reference/chat-completion

Error Handling:
    - 429: RateLimitedError (the only failure the fallback client retries)
    - Other non-2xx: FatalCompletionError
    - ``error`` field in a 2xx body or stream frame: FatalCompletionError
      (``status_code`` carries the in-band code when present)
    - Transport failures: NetworkError
    - Malformed stream frames: skipped

Cancellation:
    An AbortSignal is polled between stream frames. When it fires the
    read loop stops and the call returns the text accumulated so far
    with ``cancelled=True``; nothing is raised.

Example usage:
    client = CompletionClient(api_key="sk-or-...")
    result = await client.complete(
        "meta-llama/llama-3.3-70b-instruct:free",
        prompt,
        on_stream=lambda chunk: print(chunk, end=""),
    )
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import httpx

from summarizer.core.errors.http import NetworkError
from summarizer.core.errors.llm import FatalCompletionError, RateLimitedError
from summarizer.core.streaming.signal import AbortSignal

from .models import CompletionResult, OpenRouterModel, StreamCallback
from .sse import parse_sse_line

logger = logging.getLogger(__name__)

OPENROUTER_API_URL = "https://openrouter.ai/api/v1/chat/completions"
OPENROUTER_MODELS_URL = "https://openrouter.ai/api/v1/models"
DEFAULT_TIMEOUT = 60.0
DEFAULT_MAX_TOKENS = 1024
DEFAULT_APP_REFERER = "https://github.com/summarizer/summarizer"
DEFAULT_APP_TITLE = "Summarizer"


def _error_message(response: httpx.Response) -> str:
    """Extract a human-readable error message from an error response."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:500] or f"HTTP {response.status_code}"
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            return str(error.get("message") or error)
        if isinstance(error, str):
            return error
        if "message" in data:
            return str(data["message"])
    return response.text[:500] or f"HTTP {response.status_code}"


def _in_band_error(error: Any, model: str) -> FatalCompletionError:
    """Build the error for an ``error`` payload inside a successful response."""
    status_code: Optional[int] = None
    if isinstance(error, dict):
        message = str(error.get("message") or error)
        code = error.get("code")
        if isinstance(code, int):
            status_code = code
        elif isinstance(code, str) and code.isdigit():
            status_code = int(code)
    else:
        message = str(error)
    return FatalCompletionError(message, model=model, status_code=status_code)


class CompletionClient:
    """Single-model chat completion against OpenRouter.

    Attributes:
        api_url: Chat completions endpoint
        models_url: Model catalog endpoint
        max_tokens: ``max_tokens`` sent with every request
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        api_url: str = OPENROUTER_API_URL,
        models_url: str = OPENROUTER_MODELS_URL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: float = DEFAULT_TIMEOUT,
        app_referer: str = DEFAULT_APP_REFERER,
        app_title: str = DEFAULT_APP_TITLE,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the completion client.

        Args:
            api_key: OpenRouter API key. If not provided, reads from
                OPENROUTER_API_KEY env var.
            api_url: Chat completions endpoint.
            models_url: Model catalog endpoint.
            max_tokens: Completion token cap per request.
            timeout: Request timeout in seconds for internally created clients.
            app_referer: Sent as HTTP-Referer for gateway attribution.
            app_title: Sent as X-Title for gateway attribution.
            client: Optional shared httpx client.

        Raises:
            ValueError: If no API key is provided or found in environment
        """
        self._api_key = api_key or os.environ.get("OPENROUTER_API_KEY")
        if not self._api_key:
            raise ValueError(
                "OpenRouter API key required. Provide via api_key parameter or "
                "OPENROUTER_API_KEY environment variable."
            )
        self.api_url = api_url
        self.models_url = models_url
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._app_referer = app_referer
        self._app_title = app_title
        self._client = client

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self._app_referer,
            "X-Title": self._app_title,
        }

    def _payload(self, model: str, prompt: str, stream: bool) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.max_tokens,
        }
        if stream:
            payload["stream"] = True
        return payload

    @asynccontextmanager
    async def _http(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    async def complete(
        self,
        model: str,
        prompt: str,
        *,
        on_stream: Optional[StreamCallback] = None,
        abort_signal: Optional[AbortSignal] = None,
    ) -> CompletionResult:
        """Run one completion.

        Streams when ``on_stream`` is given; each non-empty text delta is
        passed to it synchronously, in arrival order.

        Args:
            model: Model identifier.
            prompt: User prompt.
            on_stream: Optional chunk callback; enables streaming.
            abort_signal: Optional cancellation signal.

        Returns:
            CompletionResult with the accumulated content.

        Raises:
            RateLimitedError: On HTTP 429.
            FatalCompletionError: On any other API failure.
            NetworkError: On transport failures.
        """
        if abort_signal is not None and abort_signal.aborted:
            return CompletionResult(content="", model=model, cancelled=True)

        if on_stream is not None:
            return await self._stream_completion(model, prompt, on_stream, abort_signal)
        return await self._completion(model, prompt)

    def _raise_for_status(self, response: httpx.Response, model: str, body: str) -> None:
        if response.status_code == 429:
            raise RateLimitedError(model)
        if not response.is_success:
            raise FatalCompletionError(
                f"OpenRouter API error: {response.status_code} - {body}",
                model=model,
                status_code=response.status_code,
            )

    async def _completion(self, model: str, prompt: str) -> CompletionResult:
        try:
            async with self._http() as client:
                response = await client.post(
                    self.api_url,
                    headers=self._headers(),
                    json=self._payload(model, prompt, stream=False),
                )
        except httpx.TransportError as e:
            raise NetworkError(self.api_url, str(e) or type(e).__name__, original_error=e) from e

        if not response.is_success:
            self._raise_for_status(response, model, _error_message(response))

        try:
            data = response.json()
        except ValueError as e:
            raise FatalCompletionError(f"Invalid JSON response from OpenRouter: {e}", model=model) from e

        if not isinstance(data, dict):
            raise FatalCompletionError("Unexpected response from OpenRouter", model=model)
        if data.get("error"):
            raise _in_band_error(data["error"], model)

        content = ""
        choices = data.get("choices") or []
        first = choices[0] if isinstance(choices, list) and choices else None
        if isinstance(first, dict):
            message = first.get("message")
            if isinstance(message, dict):
                content = message.get("content") or ""

        return CompletionResult(
            content=content,
            model=data.get("model") or model,
            usage=data.get("usage"),
        )

    async def _stream_completion(
        self,
        model: str,
        prompt: str,
        on_stream: StreamCallback,
        abort_signal: Optional[AbortSignal],
    ) -> CompletionResult:
        parts: list[str] = []
        reported_model = model
        cancelled = False

        try:
            async with self._http() as client:
                async with client.stream(
                    "POST",
                    self.api_url,
                    headers=self._headers(),
                    json=self._payload(model, prompt, stream=True),
                ) as response:
                    if not response.is_success:
                        await response.aread()
                        self._raise_for_status(response, model, _error_message(response))

                    async for line in response.aiter_lines():
                        if abort_signal is not None and abort_signal.aborted:
                            cancelled = True
                            break
                        frame = parse_sse_line(line)
                        if frame is None:
                            continue
                        if frame.done:
                            break
                        if frame.error is not None:
                            raise _in_band_error(frame.error, model)
                        if frame.model:
                            reported_model = frame.model
                        if frame.delta:
                            parts.append(frame.delta)
                            on_stream(frame.delta)
        except httpx.TransportError as e:
            raise NetworkError(self.api_url, str(e) or type(e).__name__, original_error=e) from e

        if cancelled:
            logger.info("Stream from %s cancelled after %d chunks", model, len(parts))

        return CompletionResult(content="".join(parts), model=reported_model, cancelled=cancelled)

    async def fetch_models(self) -> list[OpenRouterModel]:
        """Fetch the gateway's model catalog.

        Raises:
            FatalCompletionError: On non-2xx responses.
            NetworkError: On transport failures.
        """
        try:
            async with self._http() as client:
                response = await client.get(self.models_url, headers={"Authorization": f"Bearer {self._api_key}"})
        except httpx.TransportError as e:
            raise NetworkError(self.models_url, str(e) or type(e).__name__, original_error=e) from e

        if not response.is_success:
            raise FatalCompletionError(
                f"Failed to fetch models: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise FatalCompletionError(f"Invalid JSON response from OpenRouter: {e}") from e
        if not isinstance(data, dict) or not isinstance(data.get("data") or [], list):
            raise FatalCompletionError("Unexpected response from OpenRouter")
        return [
            OpenRouterModel.from_api(entry)
            for entry in data.get("data") or []
            if isinstance(entry, dict) and entry.get("id")
        ]
