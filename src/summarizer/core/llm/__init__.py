"""Completion layer: prompt building, the OpenRouter client and free-model fallback."""

from summarizer.core.llm.client import CompletionClient
from summarizer.core.llm.fallback import FallbackCompletionClient, is_rate_limit_error
from summarizer.core.llm.models import (
    AUTO_FREE_MODEL,
    CompletionResult,
    ModelPricing,
    OpenRouterModel,
    StreamCallback,
    SummarizeOptions,
    SummaryLength,
)
from summarizer.core.llm.prompts import DEFAULT_PROMPT_TEMPLATE, build_prompt, language_instruction
from summarizer.core.llm.sse import StreamFrame, parse_sse_line

__all__ = [
    "AUTO_FREE_MODEL",
    "CompletionClient",
    "CompletionResult",
    "DEFAULT_PROMPT_TEMPLATE",
    "FallbackCompletionClient",
    "ModelPricing",
    "OpenRouterModel",
    "StreamCallback",
    "StreamFrame",
    "SummarizeOptions",
    "SummaryLength",
    "build_prompt",
    "is_rate_limit_error",
    "language_instruction",
    "parse_sse_line",
]
