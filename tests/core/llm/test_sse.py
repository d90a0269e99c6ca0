"""Tests for stream frame decoding."""

import json

from summarizer.core.llm.sse import parse_sse_line


def data(payload) -> str:
    return f"data: {json.dumps(payload)}"


class TestParseSseLine:
    def test_delta(self):
        frame = parse_sse_line(data({"model": "m1", "choices": [{"delta": {"content": "Hi"}}]}))
        assert frame is not None
        assert frame.delta == "Hi"
        assert frame.model == "m1"
        assert not frame.done

    def test_done(self):
        frame = parse_sse_line("data: [DONE]")
        assert frame is not None and frame.done

    def test_ignores_comments_and_blank_lines(self):
        assert parse_sse_line(": OPENROUTER PROCESSING") is None
        assert parse_sse_line("") is None
        assert parse_sse_line("event: message") is None

    def test_malformed_json_is_skipped(self):
        assert parse_sse_line("data: {not json") is None
        assert parse_sse_line('data: ["a list"]') is None

    def test_role_only_delta_is_empty(self):
        frame = parse_sse_line(data({"choices": [{"delta": {"role": "assistant"}}]}))
        assert frame is not None
        assert frame.delta == ""

    def test_error_frame(self):
        frame = parse_sse_line(data({"error": {"message": "upstream failed", "code": 502}}))
        assert frame is not None
        assert frame.error == {"message": "upstream failed", "code": 502}

    def test_no_space_after_prefix(self):
        frame = parse_sse_line('data:{"choices":[{"delta":{"content":"x"}}]}')
        assert frame is not None and frame.delta == "x"

    def test_non_object_delta_is_empty(self):
        frame = parse_sse_line(data({"choices": [{"delta": "x"}]}))
        assert frame is not None
        assert frame.delta == ""
