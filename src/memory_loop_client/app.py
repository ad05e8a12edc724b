"""Backend wiring and the stream replay entry point."""

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import orjson
from PySide6.QtCore import QCoreApplication

from memory_loop_client.models.task_model import TaskModel
from memory_loop_client.models.transcript_model import TranscriptModel
from memory_loop_client.services.chat_session import ChatSession
from memory_loop_client.services.config_manager import ConfigManager
from memory_loop_client.services.message_parser import message_to_dict
from memory_loop_client.services.toggle_tracker import OptimisticToggleTracker

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096


@dataclass
class Backend:
    config: ConfigManager
    chat: ChatSession
    transcript_model: TranscriptModel
    task_model: TaskModel
    toggles: OptimisticToggleTracker


def build_backend(parent=None) -> Backend:
    """Create the backend objects and wire their signals together."""
    config = ConfigManager(parent)
    chat = ChatSession(parent, max_frame_size=config.max_frame_size())
    transcript_model = TranscriptModel(parent)
    task_model = TaskModel(parent)
    toggles = OptimisticToggleTracker(task_model, parent)

    # Wire signals: session -> models
    chat.transcript_changed.connect(
        lambda: transcript_model.update_messages(chat.messages())
    )

    def on_settings_changed(key: str):
        if key == "tasks/hideCompleted":
            task_model.set_hide_completed(config.get_bool(key))

    task_model.set_hide_completed(config.get_bool("tasks/hideCompleted"))
    config.settings_changed.connect(on_settings_changed)

    return Backend(
        config=config,
        chat=chat,
        transcript_model=transcript_model,
        task_model=task_model,
        toggles=toggles,
    )


def configure_logging(debug: bool):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def replay(backend: Backend, stream) -> list[dict]:
    """Feed a recorded SSE stream through the chat session, in read-sized pieces."""
    while True:
        chunk = stream.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        backend.chat.feed_stream(chunk)
    backend.chat.end_stream()
    return [message_to_dict(m) for m in backend.chat.messages()]


def run(argv: list[str] | None = None) -> int:
    """Replay an SSE capture and print the reconciled transcript as JSON."""
    QCoreApplication.setOrganizationName("memory-loop")
    QCoreApplication.setApplicationName("Memory Loop Client")

    parser = argparse.ArgumentParser(
        prog="memory-loop-replay",
        description="Replay a recorded chat event stream and print the resulting transcript.",
    )
    parser.add_argument("capture", nargs="?", help="SSE capture file (default: stdin)")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    args = parser.parse_args(argv)

    backend = build_backend()
    configure_logging(args.debug or backend.config.debug_logging())

    if args.capture:
        path = Path(args.capture)
        if not path.exists():
            logger.error("Capture file not found: %s", path)
            return 1
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            messages = replay(backend, f)
    else:
        messages = replay(backend, sys.stdin)

    sys.stdout.write(orjson.dumps(messages, option=orjson.OPT_INDENT_2).decode())
    sys.stdout.write("\n")

    error = backend.chat.controller.last_error
    if error is not None:
        logger.warning("Stream ended with error %s: %s", error.code, error.message)
    return 0
