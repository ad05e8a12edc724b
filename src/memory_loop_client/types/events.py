"""Inbound streaming events and their decoding from wire records."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    SESSION_READY = "session_ready"
    SNAPSHOT = "snapshot"
    RESPONSE_START = "response_start"
    RESPONSE_CHUNK = "response_chunk"
    RESPONSE_END = "response_end"
    TOOL_START = "tool_start"
    TOOL_INPUT = "tool_input"
    TOOL_END = "tool_end"
    ERROR = "error"


@dataclass
class SessionReady:
    session_id: str = ""
    created_at: Optional[str] = None
    # Only a non-empty list replaces the local transcript
    messages: Optional[list] = None
    type: EventType = field(default=EventType.SESSION_READY, init=False)


@dataclass
class Snapshot:
    session_id: str = ""
    content: str = ""
    is_processing: bool = False
    context_usage: Optional[int] = None
    type: EventType = field(default=EventType.SNAPSHOT, init=False)


@dataclass
class ResponseStart:
    type: EventType = field(default=EventType.RESPONSE_START, init=False)


@dataclass
class ResponseChunk:
    content: str = ""
    type: EventType = field(default=EventType.RESPONSE_CHUNK, init=False)


@dataclass
class ResponseEnd:
    context_usage: Optional[int] = None
    duration_ms: Optional[int] = None
    type: EventType = field(default=EventType.RESPONSE_END, init=False)


@dataclass
class ToolStart:
    tool_use_id: str
    tool_name: str
    type: EventType = field(default=EventType.TOOL_START, init=False)


@dataclass
class ToolInput:
    tool_use_id: str
    input: Any = None
    type: EventType = field(default=EventType.TOOL_INPUT, init=False)


@dataclass
class ToolEnd:
    tool_use_id: str
    output: Any = None
    type: EventType = field(default=EventType.TOOL_END, init=False)


@dataclass
class ErrorEvent:
    code: str = ""
    message: str = ""
    type: EventType = field(default=EventType.ERROR, init=False)


StreamEvent = Union[
    SessionReady,
    Snapshot,
    ResponseStart,
    ResponseChunk,
    ResponseEnd,
    ToolStart,
    ToolInput,
    ToolEnd,
    ErrorEvent,
]


def parse_event(raw: dict) -> StreamEvent | None:
    """Decode a wire record (camelCase keys) into a typed event.

    Returns None for records with an unknown type or missing required fields.
    """
    if not isinstance(raw, dict):
        return None

    try:
        event_type = EventType(raw.get("type", ""))
    except ValueError:
        logger.debug("Ignoring event with unknown type: %r", raw.get("type"))
        return None

    if event_type == EventType.SESSION_READY:
        messages = raw.get("messages")
        return SessionReady(
            session_id=_str(raw.get("sessionId")),
            created_at=raw.get("createdAt") if isinstance(raw.get("createdAt"), str) else None,
            messages=messages if isinstance(messages, list) else None,
        )

    if event_type == EventType.SNAPSHOT:
        return Snapshot(
            session_id=_str(raw.get("sessionId")),
            content=_str(raw.get("content")),
            is_processing=bool(raw.get("isProcessing", False)),
            context_usage=_int_or_none(raw.get("contextUsage")),
        )

    if event_type == EventType.RESPONSE_START:
        return ResponseStart()

    if event_type == EventType.RESPONSE_CHUNK:
        return ResponseChunk(content=_str(raw.get("content")))

    if event_type == EventType.RESPONSE_END:
        return ResponseEnd(
            context_usage=_int_or_none(raw.get("contextUsage")),
            duration_ms=_int_or_none(raw.get("durationMs")),
        )

    if event_type == EventType.ERROR:
        return ErrorEvent(code=_str(raw.get("code")), message=_str(raw.get("message")))

    # Tool events are useless without an id to reconcile against
    tool_use_id = raw.get("toolUseId")
    if not isinstance(tool_use_id, str) or not tool_use_id:
        logger.warning("Dropping %s event without toolUseId", event_type.value)
        return None

    if event_type == EventType.TOOL_START:
        return ToolStart(tool_use_id=tool_use_id, tool_name=_str(raw.get("toolName")))
    if event_type == EventType.TOOL_INPUT:
        return ToolInput(tool_use_id=tool_use_id, input=raw.get("input"))
    return ToolEnd(tool_use_id=tool_use_id, output=raw.get("output"))


def _str(value) -> str:
    return value if isinstance(value, str) else ""


def _int_or_none(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    return None
