"""Data models for the completion client.

Key Components:
    - SummaryLength: advisory target lengths used inside prompts
    - CompletionResult: accumulated output of one completion call
    - SummarizeOptions: per-call overrides for the action layer
    - OpenRouterModel / ModelPricing: catalog entries from the gateway
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from summarizer.core.streaming.signal import AbortSignal

AUTO_FREE_MODEL = "auto-free"

StreamCallback = Callable[[str], None]


class SummaryLength(str, Enum):
    """Summary length label.

    Each label maps to an approximate word count that is placed in the
    prompt. The count is advisory; model output is not truncated.

    Levels:
        BRIEF: ~50 words
        SHORT: ~100 words
        MEDIUM: ~250 words
        LONG: ~500 words
    """

    BRIEF = "brief"
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"

    @property
    def word_count(self) -> int:
        """Target word count for this length."""
        return {
            SummaryLength.BRIEF: 50,
            SummaryLength.SHORT: 100,
            SummaryLength.MEDIUM: 250,
            SummaryLength.LONG: 500,
        }[self]

    @classmethod
    def parse(cls, value: "str | SummaryLength") -> "SummaryLength":
        """Parse a label case-insensitively.

        Raises:
            ValueError: If the label is unknown.
        """
        if isinstance(value, SummaryLength):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(level.value for level in cls)
            raise ValueError(f"Invalid summary length: {value!r}. Must be one of: {valid}") from None


@dataclass
class CompletionResult:
    """Result of a completion call.

    Attributes:
        content: Full accumulated text; partial when cancelled
        model: Model that produced the text (server-echoed when available)
        cancelled: True if the call stopped because of an abort signal
        usage: Token usage reported by the gateway, if any
    """

    content: str
    model: str
    cancelled: bool = False
    usage: Optional[dict[str, Any]] = None


@dataclass
class SummarizeOptions:
    """Per-call options for summarization.

    Unset fields fall back to configuration. A ``model`` equal to
    ``"auto-free"`` selects the ranked free-model fallback chain.

    Attributes:
        length: Target summary length
        language: Output language; empty string asks for the source language
        model: Model identifier or "auto-free"
        prompt: Prompt template overriding the configured one
        on_stream: Called synchronously with each streamed text chunk
        abort_signal: Cooperative cancellation signal
    """

    length: Optional[SummaryLength] = None
    language: Optional[str] = None
    model: Optional[str] = None
    prompt: Optional[str] = None
    on_stream: Optional[StreamCallback] = None
    abort_signal: Optional["AbortSignal"] = None


@dataclass
class ModelPricing:
    """Per-token pricing in USD."""

    prompt: float = 0.0
    completion: float = 0.0


@dataclass
class OpenRouterModel:
    """A model entry from the gateway's catalog."""

    id: str
    name: str
    context_length: int = 4096
    description: Optional[str] = None
    pricing: ModelPricing = field(default_factory=ModelPricing)

    @property
    def is_free(self) -> bool:
        return self.id.endswith(":free") or (self.pricing.prompt == 0 and self.pricing.completion == 0)

    def format_pricing(self) -> str:
        """Return "Free" or the price per million prompt/completion tokens."""
        if self.is_free:
            return "Free"
        prompt_cost = self.pricing.prompt * 1_000_000
        completion_cost = self.pricing.completion * 1_000_000
        return f"${prompt_cost:.2f}/${completion_cost:.2f} per 1M tokens"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "OpenRouterModel":
        """Build a model from one entry of the catalog response."""
        pricing = data.get("pricing") or {}
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or data["id"]),
            context_length=int(data.get("context_length") or 4096),
            description=data.get("description"),
            pricing=ModelPricing(
                prompt=_to_float(pricing.get("prompt")),
                completion=_to_float(pricing.get("completion")),
            ),
        )


def _to_float(value: Any) -> float:
    # The catalog encodes prices as strings
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0
