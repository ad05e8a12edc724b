"""Tests for memory_loop_client.services.sse_parser and event decoding."""

import logging

from helpers import sse
from memory_loop_client.services.sse_parser import SseStreamParser, parse_frame, stream_events
from memory_loop_client.types import (
    EventType,
    ResponseEnd,
    SessionReady,
    Snapshot,
    ToolInput,
    ToolStart,
    parse_event,
)


# ---------------------------------------------------------------------------
# 1. Frame decoding
# ---------------------------------------------------------------------------

def test_parse_frame_data_lines():
    events = parse_frame('event: message\ndata: {"type": "response_start"}')
    assert events == [{"type": "response_start"}]


def test_parse_frame_skips_malformed(caplog):
    with caplog.at_level(logging.DEBUG, logger="memory_loop_client.services.sse_parser"):
        events = parse_frame('data: {not json}\ndata: [1, 2]\ndata: {"type": "response_end"}')

    assert events == [{"type": "response_end"}]
    assert "Malformed JSON in SSE event" in caplog.text


# ---------------------------------------------------------------------------
# 2. Incremental feeding
# ---------------------------------------------------------------------------

def test_split_frame_held_until_complete():
    parser = SseStreamParser()
    text = sse('{"type": "response_chunk", "content": "hello"}')

    assert parser.feed(text[:15]) == []
    assert parser.buffered == text[:15]
    assert parser.feed(text[15:]) == [{"type": "response_chunk", "content": "hello"}]
    assert parser.buffered == ""


def test_multiple_frames_in_one_read():
    parser = SseStreamParser()
    events = parser.feed(sse('{"type": "response_start"}', '{"type": "response_end"}'))
    assert [e["type"] for e in events] == ["response_start", "response_end"]


def test_crlf_line_endings():
    parser = SseStreamParser()
    events = parser.feed('data: {"type": "response_start"}\r\n\r\n')
    assert events == [{"type": "response_start"}]


def test_flush_returns_unterminated_frame():
    parser = SseStreamParser()
    assert parser.feed('data: {"type": "response_end"}') == []
    assert parser.flush() == [{"type": "response_end"}]
    assert parser.flush() == []


def test_oversized_unterminated_frame_discarded(caplog):
    parser = SseStreamParser(max_frame_size=32)
    with caplog.at_level(logging.WARNING):
        parser.feed("data: " + "x" * 64)

    assert parser.buffered == ""
    assert "exceeds" in caplog.text
    assert parser.feed(sse('{"type": "response_start"}')) == [{"type": "response_start"}]


def test_stream_events_over_chunks():
    text = sse('{"type": "response_start"}', '{"type": "response_chunk", "content": "a"}')
    chunks = [text[i:i + 7] for i in range(0, len(text), 7)]

    events = list(stream_events(chunks))
    assert [e["type"] for e in events] == ["response_start", "response_chunk"]


# ---------------------------------------------------------------------------
# 3. Event decoding
# ---------------------------------------------------------------------------

def test_parse_session_ready():
    event = parse_event({
        "type": "session_ready",
        "sessionId": "abc",
        "createdAt": "2026-02-13T12:00:00Z",
        "messages": [{"role": "user", "content": "q"}],
    })
    assert isinstance(event, SessionReady)
    assert event.session_id == "abc"
    assert event.messages == [{"role": "user", "content": "q"}]


def test_session_ready_without_messages():
    event = parse_event({"type": "session_ready", "sessionId": "abc"})
    assert event.messages is None


def test_parse_tool_events():
    start = parse_event({"type": "tool_start", "toolUseId": "t1", "toolName": "Read"})
    inp = parse_event({"type": "tool_input", "toolUseId": "t1", "input": {"file_path": "a"}})

    assert start == ToolStart(tool_use_id="t1", tool_name="Read")
    assert inp == ToolInput(tool_use_id="t1", input={"file_path": "a"})
    assert start.type == EventType.TOOL_START


def test_tool_event_without_id_dropped():
    assert parse_event({"type": "tool_end", "output": "x"}) is None
    assert parse_event({"type": "tool_start", "toolUseId": ""}) is None


def test_parse_response_end_and_snapshot():
    end = parse_event({"type": "response_end", "contextUsage": 55, "durationMs": 1200})
    snap = parse_event({"type": "snapshot", "content": "so far", "isProcessing": True, "contextUsage": True})

    assert end == ResponseEnd(context_usage=55, duration_ms=1200)
    assert isinstance(snap, Snapshot)
    assert snap.is_processing is True
    assert snap.context_usage is None


def test_unknown_event_type():
    assert parse_event({"type": "pong"}) is None
    assert parse_event({}) is None
    assert parse_event("response_start") is None
