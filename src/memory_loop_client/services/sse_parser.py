"""Incremental parser for the server-sent-event stream of chat events."""

import logging
from typing import Iterable, Iterator

import orjson

logger = logging.getLogger(__name__)

# Max size for a single SSE frame (1MB)
MAX_FRAME_SIZE = 1024 * 1024

DATA_PREFIX = "data: "
FRAME_SEPARATOR = "\n\n"


def parse_frame(frame: str) -> list[dict]:
    """Decode the `data: {json}` lines of one SSE frame.

    Malformed JSON and non-object payloads are logged and skipped.
    """
    events: list[dict] = []
    for line in frame.split("\n"):
        line = line.rstrip("\r")
        if not line.startswith(DATA_PREFIX):
            continue
        try:
            raw = orjson.loads(line[len(DATA_PREFIX):])
        except orjson.JSONDecodeError as e:
            logger.debug("Malformed JSON in SSE event %r: %s", line[:200], e)
            continue
        if isinstance(raw, dict):
            events.append(raw)
    return events


class SseStreamParser:
    """Buffers raw stream text and yields event records as frames complete.

    Text is fed as it arrives; a frame split across two reads is held back
    until its terminating blank line shows up.
    """

    def __init__(self, max_frame_size: int = MAX_FRAME_SIZE):
        self._buffer = ""
        self._max_frame_size = max_frame_size

    @property
    def buffered(self) -> str:
        return self._buffer

    def feed(self, text: str) -> list[dict]:
        """Add text to the buffer and return every record from completed frames."""
        self._buffer += text.replace("\r\n", "\n")
        parts = self._buffer.split(FRAME_SEPARATOR)
        self._buffer = parts.pop()

        if len(self._buffer) > self._max_frame_size:
            logger.warning(
                "SSE frame exceeds %d bytes without terminator, discarding",
                self._max_frame_size,
            )
            self._buffer = ""

        events: list[dict] = []
        for part in parts:
            if not part.strip():
                continue
            if len(part) > self._max_frame_size:
                logger.warning("SSE frame exceeds %d bytes, skipping", self._max_frame_size)
                continue
            events.extend(parse_frame(part))
        return events

    def flush(self) -> list[dict]:
        """Return records from whatever remains once the stream has ended."""
        remaining, self._buffer = self._buffer, ""
        if not remaining.strip():
            return []
        return parse_frame(remaining)


def stream_events(chunks: Iterable[str], max_frame_size: int = MAX_FRAME_SIZE) -> Iterator[dict]:
    """Parse a complete sequence of stream reads into event records."""
    parser = SseStreamParser(max_frame_size)
    for chunk in chunks:
        yield from parser.feed(chunk)
    yield from parser.flush()
