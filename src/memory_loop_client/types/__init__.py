"""Type definitions for the Memory Loop chat client."""

from memory_loop_client.types.messages import (
    INTERRUPTED_TOOL_OUTPUT,
    UNSET,
    Message,
    PendingToolUpdate,
    Role,
    ToolInvocation,
    ToolStatus,
    generate_message_id,
)
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
from memory_loop_client.types.tasks import (
    TASK_STATE_CYCLE,
    TaskCategory,
    TaskItem,
    TaskState,
    task_key,
)

__all__ = [
    "INTERRUPTED_TOOL_OUTPUT",
    "UNSET",
    "Message",
    "PendingToolUpdate",
    "Role",
    "ToolInvocation",
    "ToolStatus",
    "generate_message_id",
    "ErrorEvent",
    "EventType",
    "ResponseChunk",
    "ResponseEnd",
    "ResponseStart",
    "SessionReady",
    "Snapshot",
    "StreamEvent",
    "ToolEnd",
    "ToolInput",
    "ToolStart",
    "parse_event",
    "TASK_STATE_CYCLE",
    "TaskCategory",
    "TaskItem",
    "TaskState",
    "task_key",
]
