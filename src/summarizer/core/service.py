"""Summarization action layer.

SummarizeService wires extraction, prompt building and completion
together and is the surface other code calls: resolve per-call options
against configuration, pick the single-model or free-model-fallback
path, and hand back a CompletionResult.

Example usage:
    service = SummarizeService(SummarizeConfig.from_env())
    summary = await service.summarize_url("https://example.com/post")
    print(summary.result.content)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from summarizer.config.settings import SummarizeConfig
from summarizer.core.errors.llm import NotConfiguredError
from summarizer.core.extraction.classifier import validate_url
from summarizer.core.extraction.extractor import ContentExtractor
from summarizer.core.extraction.models import ExtractedContent
from summarizer.core.llm.client import CompletionClient
from summarizer.core.llm.fallback import FallbackCompletionClient
from summarizer.core.llm.models import (
    AUTO_FREE_MODEL,
    CompletionResult,
    SummarizeOptions,
    SummaryLength,
)
from summarizer.core.llm.prompts import build_prompt
from summarizer.core.streaming.signal import AbortSignal
from summarizer.core.streaming.sink import StreamingInsertSink

logger = logging.getLogger(__name__)


@dataclass
class UrlSummary:
    """Summary of a URL together with what was extracted from it."""

    extracted: ExtractedContent
    result: CompletionResult


class SummarizeService:
    """Summarize text or URLs using the configured OpenRouter models.

    Collaborators are built lazily from configuration unless injected.
    """

    def __init__(
        self,
        config: SummarizeConfig,
        *,
        extractor: Optional[ContentExtractor] = None,
        client: Optional[CompletionClient] = None,
        fallback: Optional[FallbackCompletionClient] = None,
    ):
        self.config = config
        self._extractor = extractor
        self._client = client
        self._fallback = fallback

    def is_configured(self) -> bool:
        return self.config.is_configured()

    @property
    def extractor(self) -> ContentExtractor:
        if self._extractor is None:
            self._extractor = ContentExtractor(
                user_agent=self.config.user_agent,
                jina_reader_url=self.config.jina_reader_url,
                timeout=self.config.request_timeout,
            )
        return self._extractor

    @property
    def client(self) -> CompletionClient:
        """Completion client for the configured key.

        Raises:
            NotConfiguredError: If no API key is configured.
        """
        if self._client is None:
            if not self.config.is_configured():
                raise NotConfiguredError()
            self._client = CompletionClient(
                self.config.api_key,
                api_url=self.config.api_url,
                models_url=self.config.models_url,
                max_tokens=self.config.max_tokens,
                app_referer=self.config.app_referer,
                app_title=self.config.app_title,
            )
        return self._client

    @property
    def fallback(self) -> FallbackCompletionClient:
        if self._fallback is None:
            self._fallback = FallbackCompletionClient(self.client)
        return self._fallback

    def build_prompt(self, content: str, options: Optional[SummarizeOptions] = None) -> str:
        """Build the prompt for ``content`` with options resolved against config.

        Template precedence: ``options.prompt`` > configured custom prompt >
        built-in template.
        """
        options = options or SummarizeOptions()
        length = options.length or self.config.default_length
        language = options.language if options.language is not None else self.config.output_language
        template = options.prompt or self.config.custom_prompt or None
        return build_prompt(content, SummaryLength.parse(length), language, template)

    async def summarize(self, content: str, options: Optional[SummarizeOptions] = None) -> CompletionResult:
        """Summarize ``content``.

        An abort signal fired before or during the call yields a result with
        ``cancelled=True``; cancellation is never raised.

        Raises:
            NotConfiguredError: If no API key is configured.
            CompletionError, NetworkError: If the completion fails.
        """
        if not self.is_configured():
            raise NotConfiguredError()

        options = options or SummarizeOptions()
        model = options.model or self.config.default_model
        prompt = self.build_prompt(content, options)

        if options.abort_signal is not None and options.abort_signal.aborted:
            return CompletionResult(content="", model=model, cancelled=True)

        if model == AUTO_FREE_MODEL:
            logger.debug(f"Summarizing with free model ranking ({len(self.config.free_model_rank)} models)")
            return await self.fallback.complete_with_fallback(
                prompt,
                self.config.free_model_rank,
                on_stream=options.on_stream,
                abort_signal=options.abort_signal,
            )

        logger.debug(f"Summarizing with {model}")
        return await self.client.complete(
            model,
            prompt,
            on_stream=options.on_stream,
            abort_signal=options.abort_signal,
        )

    async def extract(self, url: str, follow_links: bool = True) -> ExtractedContent:
        """Validate ``url`` and extract its content.

        Raises:
            InvalidUrlError: If the URL is not an absolute http(s) URL.
            NetworkError, FetchError: If fetching fails.
        """
        return await self.extractor.extract_from_url(validate_url(url), follow_links=follow_links)

    async def summarize_url(
        self,
        url: str,
        options: Optional[SummarizeOptions] = None,
        follow_links: bool = True,
    ) -> UrlSummary:
        """Extract ``url`` and summarize its content.

        Raises:
            NotConfiguredError: If no API key is configured.
            InvalidUrlError: If the URL is not an absolute http(s) URL.
        """
        if not self.is_configured():
            raise NotConfiguredError()

        extracted = await self.extract(url, follow_links=follow_links)
        logger.info(f"Extracted {extracted.word_count} words from {extracted.url}")
        result = await self.summarize(extracted.content, options)
        return UrlSummary(extracted=extracted, result=result)

    async def summarize_into(
        self,
        sink: StreamingInsertSink,
        content: str,
        options: Optional[SummarizeOptions] = None,
    ) -> CompletionResult:
        """Stream a summary of ``content`` into ``sink``.

        The sink's abort signal becomes the call's abort signal when the
        options carry none, so a cancel from the host stops the stream.
        When both carry a signal, aborting the sink's also aborts the
        call's. Listeners are removed however the call ends.
        """
        options = options or SummarizeOptions()
        abort_signal = options.abort_signal or sink.abort_signal or AbortSignal()
        if sink.abort_signal is None:
            sink.abort_signal = abort_signal
        relay_from = sink.abort_signal if sink.abort_signal is not abort_signal else None
        forward = options.on_stream

        def on_stream(chunk: str) -> None:
            sink.write(chunk)
            if forward is not None:
                forward(chunk)

        if relay_from is not None:
            relay_from.add_listener(abort_signal.abort)
        try:
            with sink:
                result = await self.summarize(
                    content,
                    replace(options, on_stream=on_stream, abort_signal=abort_signal),
                )
                if result.cancelled:
                    sink.cancel()
        finally:
            if relay_from is not None:
                relay_from.remove_listener(abort_signal.abort)
        return result
