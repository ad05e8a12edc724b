"""Ordered, append-only store of conversation messages."""

import logging
from typing import Callable, Iterable, Iterator, Optional

from memory_loop_client.services.message_parser import parse_protocol_message, parse_timestamp
from memory_loop_client.types.messages import (
    INTERRUPTED_TOOL_OUTPUT,
    Message,
    ToolStatus,
)

logger = logging.getLogger(__name__)


class TranscriptStore:
    """The single source of truth for what the conversation view renders.

    Messages are only ever appended, or replaced wholesale on resume. The
    last message and any message's tool invocations may be mutated in place.
    """

    def __init__(self):
        self._messages: list[Message] = []

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self._messages)

    @property
    def messages(self) -> tuple[Message, ...]:
        """Read-only snapshot of the current transcript."""
        return tuple(self._messages)

    def reversed_messages(self) -> Iterator[Message]:
        return reversed(self._messages)

    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def open_assistant(self) -> Optional[Message]:
        """The last message, if it is an assistant message still streaming."""
        last = self.last()
        if last is not None and last.is_open:
            return last
        return None

    def append(self, message: Message):
        self._messages.append(message)

    def mutate_last_if(
        self,
        predicate: Callable[[Message], bool],
        fn: Callable[[Message], None],
    ) -> bool:
        """Apply fn to the last message if predicate holds. Returns whether it ran."""
        last = self.last()
        if last is None or not predicate(last):
            return False
        fn(last)
        return True

    def replace_all(self, messages: Iterable):
        """Replace the transcript with a resumed one.

        Timestamps are normalized to datetimes and any tool still marked
        running is closed out with INTERRUPTED_TOOL_OUTPUT, since the
        connection that would have completed it is gone.
        """
        restored: list[Message] = []
        interrupted = 0
        for raw in messages:
            msg = parse_protocol_message(raw)
            if msg is None:
                continue
            msg.is_streaming = False
            msg.timestamp = parse_timestamp(msg.timestamp)
            for tool in msg.tool_invocations:
                if tool.status == ToolStatus.RUNNING:
                    tool.status = ToolStatus.COMPLETE
                    tool.output = INTERRUPTED_TOOL_OUTPUT
                    interrupted += 1
            restored.append(msg)

        if interrupted:
            logger.info("Closed %d interrupted tool(s) in resumed transcript", interrupted)
        logger.debug("Setting %d messages from server", len(restored))
        self._messages = restored

    def clear(self):
        self._messages = []
