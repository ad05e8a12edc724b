"""QAbstractListModel for conversation messages displayed in the chat view."""

import json

from PySide6.QtCore import QAbstractListModel, QModelIndex, Qt

from memory_loop_client.types import Message, ToolInvocation


# Input fields that name what a tool acted on, in priority order
_SUMMARY_KEYS = ("command", "file_path", "query", "pattern")


class TranscriptModel(QAbstractListModel):
    """Exposes the reconciled transcript to QML."""

    MessageIdRole = Qt.UserRole + 1
    RoleRole = Qt.UserRole + 2
    ContentRole = Qt.UserRole + 3
    IsStreamingRole = Qt.UserRole + 4
    ToolCountRole = Qt.UserRole + 5
    ToolInvocationsRole = Qt.UserRole + 6
    ContextUsageRole = Qt.UserRole + 7
    DurationRole = Qt.UserRole + 8
    TimestampRole = Qt.UserRole + 9

    def __init__(self, parent=None):
        super().__init__(parent)
        self._messages: list[Message] = []
        self._signatures: list[tuple] = []

    def roleNames(self):
        return {
            self.MessageIdRole: b"messageId",
            self.RoleRole: b"role",
            self.ContentRole: b"content",
            self.IsStreamingRole: b"isStreaming",
            self.ToolCountRole: b"toolCount",
            self.ToolInvocationsRole: b"toolInvocations",
            self.ContextUsageRole: b"contextUsage",
            self.DurationRole: b"durationMs",
            self.TimestampRole: b"timestamp",
        }

    def rowCount(self, parent=QModelIndex()):
        return len(self._messages)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid() or index.row() >= len(self._messages):
            return None

        msg = self._messages[index.row()]

        if role == self.MessageIdRole:
            return msg.id
        elif role == self.RoleRole:
            return msg.role.value
        elif role in (self.ContentRole, Qt.DisplayRole):
            return msg.content
        elif role == self.IsStreamingRole:
            return msg.is_streaming
        elif role == self.ToolCountRole:
            return len(msg.tool_invocations)
        elif role == self.ToolInvocationsRole:
            return self._format_tool_invocations(msg.tool_invocations)
        elif role == self.ContextUsageRole:
            return msg.context_usage if msg.context_usage is not None else -1
        elif role == self.DurationRole:
            return msg.duration_ms if msg.duration_ms is not None else 0
        elif role == self.TimestampRole:
            return msg.timestamp.isoformat() if msg.timestamp else ""
        return None

    def set_messages(self, messages):
        """Replace the entire message list."""
        self.beginResetModel()
        self._messages = list(messages)
        self._signatures = [_signature(m) for m in self._messages]
        self.endResetModel()

    def update_messages(self, messages):
        """Apply a new transcript snapshot with minimal model signals.

        Appended messages are inserted; existing rows whose visible state
        changed emit dataChanged. Anything else (a different prefix, fewer
        rows) falls back to a full reset.
        """
        messages = list(messages)
        old_count = len(self._messages)

        if old_count == 0 or not messages or len(messages) < old_count:
            self.set_messages(messages)
            return

        for old, new in zip(self._messages, messages):
            if old.id != new.id:
                self.set_messages(messages)
                return

        changed_rows = []
        for row in range(old_count):
            sig = _signature(messages[row])
            if sig != self._signatures[row]:
                changed_rows.append(row)
            self._messages[row] = messages[row]
            self._signatures[row] = sig

        if changed_rows:
            self.dataChanged.emit(
                self.index(changed_rows[0], 0),
                self.index(changed_rows[-1], 0),
                [],
            )

        if len(messages) > old_count:
            self.beginInsertRows(QModelIndex(), old_count, len(messages) - 1)
            self._messages.extend(messages[old_count:])
            self._signatures.extend(_signature(m) for m in messages[old_count:])
            self.endInsertRows()

    @staticmethod
    def _format_tool_invocations(tools: list[ToolInvocation]) -> list[dict]:
        """Convert ToolInvocation dataclasses to plain dicts for QML."""
        result = []
        for tool in tools:
            inp = tool.input if tool.has_input else None
            out = tool.output if tool.has_output else None
            result.append({
                "toolUseId": tool.tool_use_id,
                "toolName": tool.tool_name,
                "status": tool.status.value,
                "inputSummary": _summarize_input(inp),
                "outputSummary": _summarize_output(out),
                "inputData": _format_json(inp) if inp is not None else "",
                "outputData": _get_output_text(out),
                "filePath": str(inp.get("file_path", "")) if isinstance(inp, dict) else "",
            })
        return result


def _signature(msg: Message) -> tuple:
    """The parts of a message a view redraws on change."""
    return (
        msg.content,
        msg.is_streaming,
        tuple(
            (t.tool_use_id, t.status, t.has_input, t.has_output)
            for t in msg.tool_invocations
        ),
        msg.context_usage,
        msg.duration_ms,
    )


def _summarize_input(inp) -> str:
    """One-line summary of a tool input, preferring the field a reader looks for."""
    if not inp:
        return ""
    if not isinstance(inp, dict):
        return str(inp)[:100]
    for key in _SUMMARY_KEYS:
        if key in inp:
            value = str(inp[key])
            return value if key == "file_path" else value[:100]
    key, value = next(iter(inp.items()))
    return f"{key}: {str(value)[:80]}"


def _summarize_output(output) -> str:
    """First non-empty line of the tool output, truncated."""
    for line in _get_output_text(output).split("\n"):
        line = line.strip()
        if line:
            return line[:120]
    return ""


def _format_json(data) -> str:
    try:
        return json.dumps(data, indent=2, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(data)


def _get_output_text(output) -> str:
    """Extract plain text from a tool output."""
    if output is None:
        return ""
    if isinstance(output, str):
        return output
    if isinstance(output, list):
        texts = []
        for block in output:
            if isinstance(block, dict) and block.get("type") == "text":
                texts.append(block.get("text", ""))
        if texts:
            return "\n".join(texts)
    return _format_json(output)
