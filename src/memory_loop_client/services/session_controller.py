"""Streaming session controller: folds the event stream into one transcript.

The backend delivers response and tool lifecycle events in order per
connection but with no ordering between event kinds. A tool_end can be
processed before its tool_start, and text can arrive before the
response_start that should have opened its turn. Every handler here is
written so that any such interleaving converges on the same transcript:

* events that belong to "the current turn" open that turn themselves when
  no open assistant message exists yet;
* facts about a tool that does not exist yet are parked in the
  PendingUpdateLedger and folded in when the tool_start finally arrives;
* a transcript resumed from a dead connection has its running tools closed
  out so nothing waits forever on an event that will never come.

All handlers run synchronously and to completion; no locking is needed.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from memory_loop_client.services.message_parser import parse_timestamp
from memory_loop_client.services.pending_ledger import PendingUpdateLedger
from memory_loop_client.services.tool_resolver import apply_input, apply_output, find_owner
from memory_loop_client.services.transcript_store import TranscriptStore
from memory_loop_client.types.events import (
    ErrorEvent,
    EventType,
    ResponseChunk,
    ResponseEnd,
    ResponseStart,
    SessionReady,
    Snapshot,
    StreamEvent,
    ToolEnd,
    ToolInput,
    ToolStart,
    parse_event,
)
from memory_loop_client.types.messages import (
    Message,
    Role,
    ToolInvocation,
    ToolStatus,
)

logger = logging.getLogger(__name__)

PARAGRAPH_BREAK = "\n\n"


class TurnState(str, Enum):
    NO_ACTIVE_TURN = "no_active_turn"
    STREAMING = "streaming"
    CLOSED = "closed"


class StreamingSessionController:
    """Single entry point for every inbound event of one chat session."""

    def __init__(self):
        self._store = TranscriptStore()
        self._ledger = PendingUpdateLedger()
        self._needs_separator = False
        self._session_id = ""
        self._session_started_at: Optional[datetime] = None
        self._last_error: Optional[ErrorEvent] = None

        self._handlers: dict[EventType, Callable] = {
            EventType.SESSION_READY: self._on_session_ready,
            EventType.SNAPSHOT: self._on_snapshot,
            EventType.RESPONSE_START: self._on_response_start,
            EventType.RESPONSE_CHUNK: self._on_response_chunk,
            EventType.RESPONSE_END: self._on_response_end,
            EventType.TOOL_START: self._on_tool_start,
            EventType.TOOL_INPUT: self._on_tool_input,
            EventType.TOOL_END: self._on_tool_end,
            EventType.ERROR: self._on_error,
        }

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def transcript(self) -> TranscriptStore:
        return self._store

    @property
    def messages(self) -> tuple[Message, ...]:
        return self._store.messages

    @property
    def ledger(self) -> PendingUpdateLedger:
        return self._ledger

    @property
    def needs_separator(self) -> bool:
        return self._needs_separator

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def session_started_at(self) -> Optional[datetime]:
        return self._session_started_at

    @property
    def last_error(self) -> Optional[ErrorEvent]:
        return self._last_error

    @property
    def turn_state(self) -> TurnState:
        last = self._store.last()
        if last is None or not last.is_assistant:
            return TurnState.NO_ACTIVE_TURN
        return TurnState.STREAMING if last.is_streaming else TurnState.CLOSED

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def apply(self, event: StreamEvent) -> bool:
        """Apply one event. Returns False if the event kind is not handled here."""
        handler = self._handlers.get(getattr(event, "type", None))
        if handler is None:
            logger.debug("No handler for event %r", event)
            return False
        handler(event)
        return True

    def apply_raw(self, raw: dict) -> bool:
        """Decode a wire record and apply it. Undecodable records are ignored."""
        event = parse_event(raw)
        if event is None:
            return False
        return self.apply(event)

    # ------------------------------------------------------------------
    # Local actions
    # ------------------------------------------------------------------

    def submit_user_message(self, text: str) -> Message:
        """Record a prompt the user just sent."""
        msg = Message(role=Role.USER, content=text)
        self._store.append(msg)
        return msg

    def reset(self):
        """Drop everything tied to the current session (new session / switch)."""
        self._store.clear()
        self._ledger.clear()
        self._needs_separator = False
        self._session_id = ""
        self._session_started_at = None
        self._last_error = None

    new_session = reset

    # ------------------------------------------------------------------
    # Turn helpers
    # ------------------------------------------------------------------

    def _open_turn(self, content: str = "") -> Message:
        """Append a fresh streaming assistant message."""
        msg = Message(role=Role.ASSISTANT, content=content, is_streaming=True)
        self._store.append(msg)
        # A break requested by the previous turn must not lead the new one
        self._needs_separator = False
        return msg

    def _close_open_turn(self) -> Optional[Message]:
        msg = self._store.open_assistant()
        if msg is not None:
            msg.is_streaming = False
        return msg

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_session_ready(self, event: SessionReady):
        if event.session_id:
            self._session_id = event.session_id
        if event.created_at:
            self._session_started_at = parse_timestamp(event.created_at)

        if event.messages:
            # The ledger belongs to the connection that produced it; it must
            # go in the same step as the transcript it was waiting on.
            self._store.replace_all(event.messages)
            self._ledger.clear()
            self._needs_separator = False
            logger.info(
                "Resumed session %s with %d message(s)",
                self._session_id or "(new)", len(self._store),
            )

    def _on_snapshot(self, event: Snapshot):
        if event.session_id:
            self._session_id = event.session_id

        if event.content:
            target = self._store.open_assistant()
            if target is None:
                target = self._open_turn(event.content)
            else:
                target.content = event.content
            target.is_streaming = event.is_processing

        if event.context_usage is not None:
            self._store.mutate_last_if(
                lambda m: m.is_assistant,
                lambda m: setattr(m, "context_usage", _clamp_usage(event.context_usage)),
            )

    def _on_response_start(self, event: ResponseStart):
        if self._store.open_assistant() is not None:
            return
        self._open_turn()

    def _on_response_chunk(self, event: ResponseChunk):
        text = event.content
        target = self._store.open_assistant()
        if target is None:
            logger.debug("response_chunk with no open turn, creating assistant message")
            self._open_turn(text)
            return

        if not text:
            return
        if self._needs_separator:
            text = PARAGRAPH_BREAK + text
            self._needs_separator = False
        target.content += text

    def _on_response_end(self, event: ResponseEnd):
        target = self._close_open_turn()
        if target is None:
            last = self._store.last()
            if last is None or not last.is_assistant:
                logger.warning("response_end ignored: last message is not an assistant message")
                return
            target = last

        if event.context_usage is not None:
            target.context_usage = _clamp_usage(event.context_usage)
        if event.duration_ms is not None and event.duration_ms >= 0:
            target.duration_ms = event.duration_ms

    def _on_tool_start(self, event: ToolStart):
        existing = find_owner(self._store, event.tool_use_id)
        if existing is not None:
            logger.debug("Duplicate tool_start for %s ignored", event.tool_use_id)
            return

        tool = ToolInvocation(tool_use_id=event.tool_use_id, tool_name=event.tool_name)
        pending = self._ledger.consume(event.tool_use_id)
        if pending is not None:
            tool.input = pending.input
            tool.output = pending.output
            if pending.status is not None:
                tool.status = pending.status

        target = self._store.open_assistant()
        if target is None:
            logger.debug(
                "tool_start with no open turn, creating assistant message for tool %s",
                event.tool_use_id,
            )
            target = self._open_turn()
        target.tool_invocations.append(tool)

        if tool.status == ToolStatus.COMPLETE:
            self._needs_separator = True

    def _on_tool_input(self, event: ToolInput):
        apply_input(self._store, self._ledger, event.tool_use_id, event.input)

    def _on_tool_end(self, event: ToolEnd):
        owner = apply_output(self._store, self._ledger, event.tool_use_id, event.output)
        if owner is not None and owner is self._store.open_assistant():
            self._needs_separator = True

    def _on_error(self, event: ErrorEvent):
        logger.warning("Server error %s: %s", event.code or "UNKNOWN", event.message)
        self._last_error = event
        self._close_open_turn()


def _clamp_usage(value: int) -> int:
    return max(0, min(100, value))
