"""Services for the Memory Loop chat client."""

from memory_loop_client.services.transcript_store import TranscriptStore
from memory_loop_client.services.pending_ledger import PendingUpdateLedger
from memory_loop_client.services.tool_resolver import (
    apply_input,
    apply_output,
    find_invocation,
    find_owner,
)
from memory_loop_client.services.session_controller import StreamingSessionController, TurnState
from memory_loop_client.services.toggle_tracker import OptimisticToggleTracker
from memory_loop_client.services.sse_parser import SseStreamParser
from memory_loop_client.services.chat_session import ChatSession
from memory_loop_client.services.config_manager import ConfigManager

__all__ = [
    "TranscriptStore",
    "PendingUpdateLedger",
    "apply_input",
    "apply_output",
    "find_invocation",
    "find_owner",
    "StreamingSessionController",
    "TurnState",
    "OptimisticToggleTracker",
    "SseStreamParser",
    "ChatSession",
    "ConfigManager",
]
