"""Conversation-level types: messages and the tool invocations they own."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

# Output written into a tool that a dead connection left running.
INTERRUPTED_TOOL_OUTPUT = "[Connection closed before tool completed]"


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ToolStatus(str, Enum):
    RUNNING = "running"
    COMPLETE = "complete"


class _Unset:
    """Marker for a field that was never supplied (distinct from None)."""

    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


UNSET: Any = _Unset()


def generate_message_id() -> str:
    return f"msg-{uuid.uuid4().hex}"


@dataclass
class ToolInvocation:
    tool_use_id: str
    tool_name: str
    status: ToolStatus = ToolStatus.RUNNING
    input: Any = UNSET
    output: Any = UNSET

    @property
    def has_input(self) -> bool:
        return self.input is not UNSET

    @property
    def has_output(self) -> bool:
        return self.output is not UNSET

    @property
    def is_complete(self) -> bool:
        return self.status == ToolStatus.COMPLETE


@dataclass
class PendingToolUpdate:
    """Lifecycle facts for a tool whose tool_start has not been seen yet."""
    tool_use_id: str
    input: Any = UNSET
    output: Any = UNSET
    status: Optional[ToolStatus] = None


@dataclass
class Message:
    role: Role
    content: str = ""
    id: str = field(default_factory=generate_message_id)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    is_streaming: bool = False
    tool_invocations: list[ToolInvocation] = field(default_factory=list)
    context_usage: Optional[int] = None
    duration_ms: Optional[int] = None

    @property
    def is_assistant(self) -> bool:
        return self.role == Role.ASSISTANT

    @property
    def is_open(self) -> bool:
        """An assistant message still receiving stream output."""
        return self.role == Role.ASSISTANT and self.is_streaming

    def find_tool(self, tool_use_id: str) -> Optional[ToolInvocation]:
        for tool in self.tool_invocations:
            if tool.tool_use_id == tool_use_id:
                return tool
        return None
