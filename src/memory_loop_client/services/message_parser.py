"""Conversion between protocol message records and Message objects."""

import dataclasses
import logging
from datetime import datetime, timezone
from typing import Any

from memory_loop_client.types.messages import (
    UNSET,
    Message,
    Role,
    ToolInvocation,
    ToolStatus,
    generate_message_id,
)

logger = logging.getLogger(__name__)


def parse_protocol_message(raw: Any) -> Message | None:
    """Parse a resumed-transcript record (camelCase keys) into a Message.

    Message instances are copied so normalization never touches the
    caller's objects. Records that are not dicts or carry an unknown
    role are rejected.
    Resumed messages are never streaming.
    """
    if isinstance(raw, Message):
        return dataclasses.replace(
            raw,
            tool_invocations=[dataclasses.replace(t) for t in raw.tool_invocations],
        )
    if not isinstance(raw, dict):
        return None

    try:
        role = Role(raw.get("role", ""))
    except ValueError:
        logger.warning("Skipping resumed message with invalid role: %r", raw.get("role"))
        return None

    content = raw.get("content", "")
    if not isinstance(content, str):
        content = str(content) if content is not None else ""

    tools = []
    raw_tools = raw.get("toolInvocations")
    if role == Role.ASSISTANT and isinstance(raw_tools, list):
        for block in raw_tools:
            tool = _parse_tool(block)
            if tool is not None:
                tools.append(tool)

    msg_id = raw.get("id")
    return Message(
        id=msg_id if isinstance(msg_id, str) and msg_id else generate_message_id(),
        role=role,
        content=content,
        timestamp=parse_timestamp(raw.get("timestamp")),
        is_streaming=False,
        tool_invocations=tools,
        context_usage=_int_or_none(raw.get("contextUsage")),
        duration_ms=_int_or_none(raw.get("durationMs")),
    )


def _parse_tool(block: Any) -> ToolInvocation | None:
    if not isinstance(block, dict):
        return None
    tool_use_id = block.get("toolUseId")
    if not isinstance(tool_use_id, str) or not tool_use_id:
        return None

    try:
        status = ToolStatus(block.get("status", ToolStatus.RUNNING.value))
    except ValueError:
        status = ToolStatus.RUNNING

    return ToolInvocation(
        tool_use_id=tool_use_id,
        tool_name=block.get("toolName", "") or "",
        status=status,
        input=block["input"] if "input" in block else UNSET,
        output=block["output"] if "output" in block else UNSET,
    )


def message_to_dict(msg: Message) -> dict:
    """Serialize a Message back to its protocol (camelCase) shape."""
    data: dict[str, Any] = {
        "id": msg.id,
        "role": msg.role.value,
        "content": msg.content,
        "timestamp": msg.timestamp.isoformat(),
        "isStreaming": msg.is_streaming,
    }
    if msg.tool_invocations:
        tools = []
        for tool in msg.tool_invocations:
            tool_dict: dict[str, Any] = {
                "toolUseId": tool.tool_use_id,
                "toolName": tool.tool_name,
                "status": tool.status.value,
            }
            if tool.has_input:
                tool_dict["input"] = tool.input
            if tool.has_output:
                tool_dict["output"] = tool.output
            tools.append(tool_dict)
        data["toolInvocations"] = tools
    if msg.context_usage is not None:
        data["contextUsage"] = msg.context_usage
    if msg.duration_ms is not None:
        data["durationMs"] = msg.duration_ms
    return data


def parse_timestamp(ts_value) -> datetime:
    """Parse a timestamp from ISO 8601, epoch seconds or epoch milliseconds."""
    if isinstance(ts_value, datetime):
        return ts_value if ts_value.tzinfo else ts_value.replace(tzinfo=timezone.utc)
    if isinstance(ts_value, (int, float)) and not isinstance(ts_value, bool):
        try:
            return datetime.fromtimestamp(
                ts_value / 1000 if ts_value > 1e12 else ts_value, tz=timezone.utc
            )
        except (OverflowError, OSError, ValueError):
            pass
    if isinstance(ts_value, str) and ts_value:
        try:
            # ISO 8601 format: "2026-02-13T12:00:00.000Z"
            parsed = datetime.fromisoformat(ts_value.replace("Z", "+00:00"))
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
        except ValueError:
            pass
        try:
            return datetime.fromtimestamp(float(ts_value), tz=timezone.utc)
        except (ValueError, OSError, OverflowError):
            pass
    return datetime.now(timezone.utc)


def _int_or_none(value) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)
