"""Qt bridge between the event dispatch loop and the session controller."""

import logging

from PySide6.QtCore import QObject, Signal, Slot, Property

from memory_loop_client.services.session_controller import StreamingSessionController, TurnState
from memory_loop_client.services.sse_parser import MAX_FRAME_SIZE, SseStreamParser
from memory_loop_client.types import ErrorEvent, EventType, Message, parse_event
from memory_loop_client.types.events import StreamEvent

logger = logging.getLogger(__name__)


class ChatSession(QObject):
    """Feeds inbound events to a StreamingSessionController and notifies views.

    Events are applied one at a time on the thread that owns this object.
    After each event, observers receive transcript_changed; turn and
    session transitions get their own signals.
    """

    transcript_changed = Signal()
    turn_opened = Signal()
    turn_closed = Signal()
    session_changed = Signal(str)  # session_id
    error_received = Signal(str, str)  # code, message
    streaming_changed = Signal()

    def __init__(self, parent=None, max_frame_size: int = MAX_FRAME_SIZE):
        super().__init__(parent)
        self._controller = StreamingSessionController()
        self._max_frame_size = max_frame_size
        self._parser = SseStreamParser(max_frame_size)

    @property
    def controller(self) -> StreamingSessionController:
        return self._controller

    def messages(self) -> tuple[Message, ...]:
        return self._controller.messages

    def _get_session_id(self) -> str:
        return self._controller.session_id

    sessionId = Property(str, _get_session_id, notify=session_changed)

    def _get_is_streaming(self) -> bool:
        return self._controller.turn_state == TurnState.STREAMING

    isStreaming = Property(bool, _get_is_streaming, notify=streaming_changed)

    @Slot(dict)
    def handle_event(self, raw: dict):
        """Apply one decoded wire record."""
        event = parse_event(raw)
        if event is not None:
            self.apply(event)

    @Slot(str)
    def feed_stream(self, text: str):
        """Apply every event completed by this piece of SSE stream text."""
        for raw in self._parser.feed(text):
            self.handle_event(raw)

    @Slot()
    def end_stream(self):
        """The stream connection closed; apply any trailing buffered frame."""
        for raw in self._parser.flush():
            self.handle_event(raw)

    def apply(self, event: StreamEvent):
        was_streaming = self._get_is_streaming()
        previous_session = self._controller.session_id

        try:
            handled = self._controller.apply(event)
        except Exception:
            logger.exception("Failed to apply %s event", getattr(event, "type", "?"))
            return
        if not handled:
            return

        self._emit_transitions(was_streaming, previous_session)
        if event.type == EventType.ERROR:
            self._forward_error(event)
        self.transcript_changed.emit()

    @Slot(str)
    def submit_user_message(self, text: str):
        self._controller.submit_user_message(text)
        self.transcript_changed.emit()

    @Slot()
    def new_session(self):
        was_streaming = self._get_is_streaming()
        previous_session = self._controller.session_id
        self._controller.new_session()
        self._parser = SseStreamParser(self._max_frame_size)
        self._emit_transitions(was_streaming, previous_session)
        self.transcript_changed.emit()

    def _emit_transitions(self, was_streaming: bool, previous_session: str):
        is_streaming = self._get_is_streaming()
        if is_streaming != was_streaming:
            self.streaming_changed.emit()
            if is_streaming:
                self.turn_opened.emit()
            else:
                self.turn_closed.emit()
        if self._controller.session_id != previous_session:
            self.session_changed.emit(self._controller.session_id)

    def _forward_error(self, event: ErrorEvent):
        self.error_received.emit(event.code, event.message)
