"""Side buffer for tool lifecycle facts that arrive before their tool_start."""

import logging
from typing import Any, Optional

from memory_loop_client.types.messages import UNSET, PendingToolUpdate, ToolStatus

logger = logging.getLogger(__name__)


class PendingUpdateLedger:
    """Holds deferred tool updates keyed by tool_use_id until the tool exists."""

    def __init__(self):
        self._entries: dict[str, PendingToolUpdate] = {}

    def __contains__(self, tool_use_id: str) -> bool:
        return tool_use_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def upsert(
        self,
        tool_use_id: str,
        *,
        input: Any = UNSET,
        output: Any = UNSET,
        status: Optional[ToolStatus] = None,
    ) -> PendingToolUpdate:
        """Merge the supplied fields into the entry for tool_use_id."""
        entry = self._entries.get(tool_use_id)
        if entry is None:
            entry = PendingToolUpdate(tool_use_id=tool_use_id)
            self._entries[tool_use_id] = entry
        if input is not UNSET:
            entry.input = input
        if output is not UNSET:
            entry.output = output
        if status is not None:
            entry.status = status
        return entry

    def get(self, tool_use_id: str) -> Optional[PendingToolUpdate]:
        return self._entries.get(tool_use_id)

    def consume(self, tool_use_id: str) -> Optional[PendingToolUpdate]:
        """Remove and return the entry for tool_use_id, if any."""
        return self._entries.pop(tool_use_id, None)

    def ids(self) -> list[str]:
        return list(self._entries)

    def clear(self):
        if self._entries:
            logger.debug("Discarding %d pending tool update(s)", len(self._entries))
        self._entries.clear()
