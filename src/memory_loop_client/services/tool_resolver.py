"""Locate the message that owns a tool invocation and apply lifecycle updates."""

import logging
from typing import Any, Iterable, Optional, Sequence

from memory_loop_client.services.pending_ledger import PendingUpdateLedger
from memory_loop_client.services.transcript_store import TranscriptStore
from memory_loop_client.types.messages import Message, ToolInvocation, ToolStatus

logger = logging.getLogger(__name__)


def find_owner(
    messages: TranscriptStore | Sequence[Message],
    tool_use_id: str,
) -> Optional[Message]:
    """Return the assistant message holding tool_use_id, scanning newest first.

    Tools are almost always referenced by the latest exchange, so the
    reverse scan usually stops at the first message it looks at.
    """
    if isinstance(messages, TranscriptStore):
        candidates = messages.reversed_messages()
    else:
        candidates = reversed(messages)

    for msg in candidates:
        if msg.is_assistant and msg.find_tool(tool_use_id) is not None:
            return msg
    return None


def find_invocation(
    messages: TranscriptStore | Sequence[Message],
    tool_use_id: str,
) -> Optional[ToolInvocation]:
    owner = find_owner(messages, tool_use_id)
    return owner.find_tool(tool_use_id) if owner is not None else None


def apply_input(
    store: TranscriptStore,
    ledger: PendingUpdateLedger,
    tool_use_id: str,
    value: Any,
) -> Optional[Message]:
    """Attach input to the tool, or defer it if the tool does not exist yet.

    Returns the owning message, or None when the update was deferred.
    """
    owner = find_owner(store, tool_use_id)
    if owner is None:
        logger.debug("tool_input for unknown tool %s, queueing update", tool_use_id)
        ledger.upsert(tool_use_id, input=value)
        return None

    owner.find_tool(tool_use_id).input = value
    return owner


def apply_output(
    store: TranscriptStore,
    ledger: PendingUpdateLedger,
    tool_use_id: str,
    value: Any,
    status: ToolStatus = ToolStatus.COMPLETE,
) -> Optional[Message]:
    """Attach output (and status) to the tool, or defer it.

    Returns the owning message, or None when the update was deferred.
    """
    owner = find_owner(store, tool_use_id)
    if owner is None:
        logger.debug("tool_end for unknown tool %s, queueing update", tool_use_id)
        ledger.upsert(tool_use_id, output=value, status=status)
        return None

    tool = owner.find_tool(tool_use_id)
    tool.output = value
    tool.status = status
    return owner


def unresolved_invocations(messages: Iterable[Message]) -> list[ToolInvocation]:
    """Tools still running anywhere in the transcript."""
    return [
        tool
        for msg in messages
        if msg.is_assistant
        for tool in msg.tool_invocations
        if tool.status == ToolStatus.RUNNING
    ]


def group_by_tool_name(messages: Iterable[Message]) -> dict[str, list[ToolInvocation]]:
    """Group tool invocations by tool name for summary display."""
    groups: dict[str, list[ToolInvocation]] = {}
    for msg in messages:
        for tool in msg.tool_invocations:
            groups.setdefault(tool.tool_name, []).append(tool)
    return groups
