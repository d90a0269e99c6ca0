"""Cancellation signal and streaming insertion into an editor host."""

from summarizer.core.streaming.signal import AbortSignal
from summarizer.core.streaming.sink import (
    EditorHost,
    Position,
    SinkState,
    StreamingInsertSink,
    TextBufferHost,
    indent_prefix,
)

__all__ = [
    "AbortSignal",
    "EditorHost",
    "Position",
    "SinkState",
    "StreamingInsertSink",
    "TextBufferHost",
    "indent_prefix",
]
