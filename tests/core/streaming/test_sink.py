"""Tests for StreamingInsertSink and the in-memory editor host."""

import pytest

from summarizer.core.streaming.signal import AbortSignal
from summarizer.core.streaming.sink import (
    Position,
    SinkState,
    StreamingInsertSink,
    TextBufferHost,
    indent_prefix,
)


async def agen(*chunks):
    for chunk in chunks:
        yield chunk


class TestIndentPrefix:
    @pytest.mark.parametrize(
        "line,expected",
        [
            ("Plain paragraph", ""),
            ("    Indented text", "    "),
            ("- bullet", "\t"),
            ("* bullet", "\t"),
            ("+ bullet", "\t"),
            ("1. numbered", "\t"),
            ("  - nested bullet", "  \t"),
            ("-not a bullet", ""),
        ],
    )
    def test_prefix(self, line, expected):
        assert indent_prefix(line) == expected

    def test_custom_unit(self):
        assert indent_prefix("- item", "  ") == "  "


class TestAbortSignal:
    def test_abort_notifies_listeners_once(self):
        signal = AbortSignal()
        reasons = []
        signal.add_listener(reasons.append)

        signal.abort("first")
        signal.abort("second")

        assert signal.aborted
        assert signal.reason == "first"
        assert reasons == ["first"]

    def test_listener_added_after_abort_fires_immediately(self):
        signal = AbortSignal()
        signal.abort("done")
        reasons = []
        signal.add_listener(reasons.append)
        assert reasons == ["done"]

    def test_removed_listener_not_called(self):
        signal = AbortSignal()
        reasons = []
        signal.add_listener(reasons.append)
        signal.remove_listener(reasons.append)
        signal.abort()
        assert reasons == []


class TestStreamingInsertSink:
    """Tests for StreamingInsertSink."""

    def test_inserts_below_cursor_line(self):
        host = TextBufferHost("First\nSecond\nThird", cursor_line=0)

        with StreamingInsertSink(host) as sink:
            sink.write("Summary")

        assert host.lines == ["First", "Summary", "Second", "Third"]
        assert sink.state is SinkState.COMPLETED

    def test_reindents_embedded_newlines_under_list_item(self):
        host = TextBufferHost("Intro\n- https://example.com", cursor_line=1)

        with StreamingInsertSink(host) as sink:
            sink.write("Line one\nLine")
            sink.write(" two\nLine three")

        assert host.lines == [
            "Intro",
            "- https://example.com",
            "\tLine one",
            "\tLine two",
            "\tLine three",
        ]
        assert sink.text == "Line one\nLine two\nLine three"
        assert sink.indent == "\t"

    def test_keeps_existing_indentation(self):
        host = TextBufferHost("    quoted block")

        with StreamingInsertSink(host) as sink:
            sink.write("a\nb")

        assert host.lines == ["    quoted block", "    a", "    b"]

    def test_insertion_point_ignores_cursor_movement(self):
        host = TextBufferHost("Top\nBottom", cursor_line=0)
        sink = StreamingInsertSink(host)
        sink.start()

        sink.write("a")
        host.cursor = Position(1, 0)
        sink.write("b")
        sink.complete()

        assert host.lines == ["Top", "ab", "Bottom"]

    def test_host_cancel_aborts_signal_and_keeps_partial_text(self):
        host = TextBufferHost("Note")
        signal = AbortSignal()

        with StreamingInsertSink(host, signal) as sink:
            sink.write("partial")
            host.press_cancel()
            sink.write(" ignored")

        assert signal.aborted
        assert sink.state is SinkState.CANCELLED
        assert host.lines == ["Note", "partial"]
        assert host.cancel_listeners == []

    def test_external_abort_cancels_sink(self):
        host = TextBufferHost("Note")
        signal = AbortSignal()
        sink = StreamingInsertSink(host, signal)
        sink.start()

        signal.abort("Interrupted")
        sink.write("late")

        assert sink.state is SinkState.CANCELLED
        assert host.text == "Note"
        assert host.cancel_listeners == []

    def test_already_aborted_signal_inserts_nothing(self):
        host = TextBufferHost("Note")
        signal = AbortSignal()
        signal.abort()

        with StreamingInsertSink(host, signal) as sink:
            sink.write("never")

        assert sink.state is SinkState.CANCELLED
        assert host.text == "Note"
        assert host.cancel_listeners == []

    def test_exception_marks_failed_and_cleans_up(self):
        host = TextBufferHost("Note")
        signal = AbortSignal()

        with pytest.raises(RuntimeError, match="upstream"):
            with StreamingInsertSink(host, signal) as sink:
                sink.write("half")
                raise RuntimeError("upstream failure")

        assert sink.state is SinkState.FAILED
        assert host.cancel_listeners == []
        assert host.lines == ["Note", "half"]
        signal.abort()
        assert sink.state is SinkState.FAILED

    def test_failure_before_first_chunk_leaves_host_untouched(self):
        host = TextBufferHost("- item")

        with pytest.raises(RuntimeError):
            with StreamingInsertSink(host):
                raise RuntimeError("no model available")

        assert host.text == "- item"

    def test_cannot_start_twice(self):
        sink = StreamingInsertSink(TextBufferHost("x"))
        sink.start()
        with pytest.raises(RuntimeError):
            sink.start()

    def test_writes_ignored_before_start(self):
        host = TextBufferHost("x")
        sink = StreamingInsertSink(host)
        sink.write("early")
        assert host.text == "x"
        assert sink.state is SinkState.IDLE

    @pytest.mark.asyncio
    async def test_consume(self):
        host = TextBufferHost("# Title")
        sink = StreamingInsertSink(host)

        state = await sink.consume(agen("Hello", " ", "world"))

        assert state is SinkState.COMPLETED
        assert host.lines == ["# Title", "Hello world"]

    @pytest.mark.asyncio
    async def test_consume_stops_after_cancel(self):
        host = TextBufferHost("Note")
        signal = AbortSignal()
        sink = StreamingInsertSink(host, signal)

        async def chunks():
            yield "one"
            signal.abort()
            yield "two"

        state = await sink.consume(chunks())

        assert state is SinkState.CANCELLED
        assert host.lines == ["Note", "one"]


class TestTextBufferHost:
    def test_cursor_defaults_to_last_line(self):
        host = TextBufferHost("a\nbb")
        assert host.get_cursor() == Position(1, 2)

    def test_rejects_out_of_range_cursor(self):
        with pytest.raises(ValueError):
            TextBufferHost("a", cursor_line=3)

    def test_replace_range_inserts_multiline_text(self):
        host = TextBufferHost("abcd")
        host.replace_range("X\nY", Position(0, 2))
        assert host.lines == ["abX", "Ycd"]
