"""Indentation-aware incremental insertion of streamed text.

The sink writes chunks into an editor as they arrive, below the line the
cursor is on, indented to match that line. The editor itself is reached
only through the EditorHost capability interface, so any host (a real
editor, or the in-memory TextBufferHost) can receive a stream.

Lifecycle:
    IDLE -> STREAMING -> COMPLETED | CANCELLED | FAILED

Leaving STREAMING always removes the cancel listeners, whichever way the
stream ends. Cancelling keeps whatever was already inserted.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterable, Callable, Optional, Protocol

from .signal import AbortSignal

logger = logging.getLogger(__name__)

CancelListener = Callable[[], None]

_LIST_ITEM = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s")
_LEADING_WHITESPACE = re.compile(r"^[ \t]*")


@dataclass(frozen=True)
class Position:
    """Zero-based line and character offset in the host document."""

    line: int
    ch: int


class EditorHost(Protocol):
    """Capabilities the sink needs from an editor."""

    def get_cursor(self) -> Position: ...

    def get_line(self, line: int) -> str: ...

    def replace_range(self, text: str, pos: Position) -> None: ...

    def register_cancel_listener(self, listener: CancelListener) -> None: ...

    def unregister_cancel_listener(self, listener: CancelListener) -> None: ...


class TextBufferHost:
    """In-memory EditorHost over a list of lines.

    Example:
        host = TextBufferHost("# Notes\\n- https://example.com", cursor_line=1)
        with StreamingInsertSink(host) as sink:
            sink.write("Summary text")
        print(host.text)
    """

    def __init__(self, text: str = "", cursor_line: Optional[int] = None):
        self.lines: list[str] = text.split("\n")
        if cursor_line is None:
            cursor_line = len(self.lines) - 1
        if not 0 <= cursor_line < len(self.lines):
            raise ValueError(f"Cursor line {cursor_line} is outside the buffer (0-{len(self.lines) - 1})")
        self.cursor = Position(cursor_line, len(self.lines[cursor_line]))
        self.cancel_listeners: list[CancelListener] = []

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def get_cursor(self) -> Position:
        return self.cursor

    def get_line(self, line: int) -> str:
        return self.lines[line]

    def replace_range(self, text: str, pos: Position) -> None:
        current = self.lines[pos.line]
        new_lines = (current[: pos.ch] + text + current[pos.ch :]).split("\n")
        self.lines[pos.line : pos.line + 1] = new_lines

    def register_cancel_listener(self, listener: CancelListener) -> None:
        self.cancel_listeners.append(listener)

    def unregister_cancel_listener(self, listener: CancelListener) -> None:
        if listener in self.cancel_listeners:
            self.cancel_listeners.remove(listener)

    def press_cancel(self) -> None:
        """Simulate the user's cancel key."""
        for listener in list(self.cancel_listeners):
            listener()


class SinkState(str, Enum):
    """Lifecycle state of a StreamingInsertSink."""

    IDLE = "idle"
    STREAMING = "streaming"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (SinkState.COMPLETED, SinkState.CANCELLED, SinkState.FAILED)


def indent_prefix(line: str, indent_unit: str = "\t") -> str:
    """Indent for text inserted below ``line``.

    The line's own leading whitespace, plus one ``indent_unit`` when the
    line is a list item so the inserted text nests under it.
    """
    prefix = _LEADING_WHITESPACE.match(line).group(0)
    if _LIST_ITEM.match(line):
        prefix += indent_unit
    return prefix


class StreamingInsertSink:
    """Writes a chunk stream into an EditorHost below the cursor line.

    The insertion point is always the end of the text this sink has
    already inserted, computed from the anchor and an accumulator rather
    than by asking the host, so chunks land in arrival order even if the
    host's view moves.

    Attributes:
        host: Target editor
        abort_signal: Shared signal fired when the user cancels
        indent_unit: One extra indent level for list items
        separator: Written between the cursor line and the first chunk
    """

    def __init__(
        self,
        host: EditorHost,
        abort_signal: Optional[AbortSignal] = None,
        *,
        indent_unit: str = "\t",
        separator: str = "\n",
    ):
        self.host = host
        self.abort_signal = abort_signal
        self.indent_unit = indent_unit
        self.separator = separator
        self._state = SinkState.IDLE
        self._anchor: Optional[Position] = None
        self._prefix = ""
        self._inserted = ""
        self._chunks: list[str] = []
        self._listening = False

    @property
    def state(self) -> SinkState:
        return self._state

    @property
    def text(self) -> str:
        """Chunks accepted so far, as received."""
        return "".join(self._chunks)

    @property
    def inserted_text(self) -> str:
        """Text written into the host, including separator and indentation."""
        return self._inserted

    @property
    def indent(self) -> str:
        return self._prefix

    def start(self) -> None:
        """Enter STREAMING: fix the anchor and indent, register listeners.

        Raises:
            RuntimeError: If the sink was already started.
        """
        if self._state is not SinkState.IDLE:
            raise RuntimeError(f"Sink cannot start from state {self._state.value}")

        cursor = self.host.get_cursor()
        line = self.host.get_line(cursor.line)
        self._anchor = Position(cursor.line, len(line))
        self._prefix = indent_prefix(line, self.indent_unit)
        self._state = SinkState.STREAMING

        self.host.register_cancel_listener(self._on_host_cancel)
        self._listening = True
        if self.abort_signal is not None:
            # Fires immediately when the signal is already aborted
            self.abort_signal.add_listener(self._on_abort)

    def write(self, chunk: str) -> None:
        """Insert one chunk. Ignored unless the sink is STREAMING.

        The separator goes in ahead of the first chunk, so a stream that
        ends before producing text leaves the host untouched.
        """
        if self._state is not SinkState.STREAMING or not chunk:
            return
        if not self._chunks and self.separator:
            self._insert(self.separator.replace("\n", "\n" + self._prefix))
        self._chunks.append(chunk)
        self._insert(chunk.replace("\n", "\n" + self._prefix))

    def complete(self) -> None:
        self._finish(SinkState.COMPLETED)

    def cancel(self) -> None:
        if self._finish(SinkState.CANCELLED):
            logger.info("Streaming insert cancelled after %d chunks", len(self._chunks))

    def fail(self) -> None:
        self._finish(SinkState.FAILED)

    def close(self) -> None:
        """Remove listeners. Safe to call in any state."""
        if not self._listening:
            return
        self._listening = False
        self.host.unregister_cancel_listener(self._on_host_cancel)
        if self.abort_signal is not None:
            self.abort_signal.remove_listener(self._on_abort)

    async def consume(self, chunks: AsyncIterable[str]) -> SinkState:
        """Drain ``chunks`` into the host and return the terminal state."""
        with self:
            async for chunk in chunks:
                if self._state is not SinkState.STREAMING:
                    break
                self.write(chunk)
        return self._state

    def __enter__(self) -> "StreamingInsertSink":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if exc_type is not None:
                self.fail()
            else:
                self.complete()
        finally:
            self.close()
        return False

    def _finish(self, state: SinkState) -> bool:
        if self._state is not SinkState.STREAMING:
            return False
        self._state = state
        self.close()
        return True

    def _insert(self, text: str) -> None:
        self.host.replace_range(text, self._end_position())
        self._inserted += text

    def _end_position(self) -> Position:
        assert self._anchor is not None
        if "\n" not in self._inserted:
            return Position(self._anchor.line, self._anchor.ch + len(self._inserted))
        return Position(
            self._anchor.line + self._inserted.count("\n"),
            len(self._inserted.rsplit("\n", 1)[1]),
        )

    def _on_host_cancel(self) -> None:
        if self.abort_signal is not None:
            self.abort_signal.abort("Cancelled by user")
        self.cancel()

    def _on_abort(self, reason: Optional[str]) -> None:
        self.cancel()
