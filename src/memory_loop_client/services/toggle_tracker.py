"""Optimistic task state toggling with explicit rollback."""

import logging
from typing import Optional, Protocol

from PySide6.QtCore import QObject, Signal, Slot

from memory_loop_client.types.tasks import TASK_STATE_CYCLE, TaskState, task_key

logger = logging.getLogger(__name__)

_STATE_LABELS = {
    TaskState.INCOMPLETE.value: "incomplete",
    TaskState.COMPLETE.value: "complete",
    TaskState.PARTIAL.value: "partial",
    TaskState.NEEDS_INFO.value: "needs info",
    TaskState.BOOKMARKED.value: "bookmarked",
    TaskState.URGENT.value: "urgent",
}

_STATE_INDICATORS = {
    TaskState.INCOMPLETE.value: "☐",
    TaskState.COMPLETE.value: "☑",
    TaskState.PARTIAL.value: "◐",
    TaskState.NEEDS_INFO.value: "?",
    TaskState.BOOKMARKED.value: "\U0001f4cd",
    TaskState.URGENT.value: "\U0001f525",
}


class TaskStorage(Protocol):
    def update_task(self, file_path: str, line_number: int, state: str) -> bool: ...


def next_state(current_state: str) -> str:
    """Advance one step along TASK_STATE_CYCLE. Unknown codes go to complete."""
    try:
        idx = TASK_STATE_CYCLE.index(current_state)
    except ValueError:
        return TaskState.COMPLETE.value
    return TASK_STATE_CYCLE[(idx + 1) % len(TASK_STATE_CYCLE)]


def state_label(state: str) -> str:
    return _STATE_LABELS.get(state, "unknown")


def state_indicator(state: str) -> str:
    return _STATE_INDICATORS.get(state, _STATE_INDICATORS[TaskState.INCOMPLETE.value])


class OptimisticToggleTracker(QObject):
    """Applies task state changes locally before the server confirms them.

    The pre-change state is recorded once per in-flight task so that a
    later rollback restores what the user originally saw, even after
    several toggles of the same task. The tracker never decides to roll
    back itself; whoever observes the failed write calls rollback().
    """

    persist_requested = Signal(str, int, str)  # file_path, line_number, new_state
    rolled_back = Signal(str, int, str)  # file_path, line_number, restored_state

    def __init__(self, storage: TaskStorage, parent=None):
        super().__init__(parent)
        self._storage = storage
        self._originals: dict[str, str] = {}

    @Slot(str, int, str, result=str)
    def toggle(self, file_path: str, line_number: int, current_state: str) -> str:
        """Advance the task to its next state and request persistence."""
        new_state = next_state(current_state)
        self._apply(file_path, line_number, current_state, new_state)
        return new_state

    @Slot(str, int, str, str)
    def select_state(self, file_path: str, line_number: int, current_state: str, new_state: str):
        """Set an explicit state (context menu selection) and request persistence."""
        if new_state not in TASK_STATE_CYCLE:
            raise ValueError(f"Invalid task state: {new_state!r}")
        self._apply(file_path, line_number, current_state, new_state)

    @Slot(str, int)
    def rollback(self, file_path: str, line_number: int) -> Optional[str]:
        """Restore the state recorded before the first in-flight change."""
        key = task_key(file_path, line_number)
        original = self._originals.pop(key, None)
        if original is None:
            logger.debug("Nothing to roll back for %s", key)
            return None
        self._storage.update_task(file_path, line_number, original)
        self.rolled_back.emit(file_path, line_number, original)
        return original

    def confirm(self, file_path: str, line_number: int, state: Optional[str] = None):
        """The authoritative write succeeded; forget the rollback value."""
        self._originals.pop(task_key(file_path, line_number), None)
        if state is not None:
            self._storage.update_task(file_path, line_number, state)

    def is_pending(self, file_path: str, line_number: int) -> bool:
        return task_key(file_path, line_number) in self._originals

    def original_state(self, file_path: str, line_number: int) -> Optional[str]:
        return self._originals.get(task_key(file_path, line_number))

    def pending_keys(self) -> list[str]:
        return list(self._originals)

    def clear(self):
        self._originals.clear()

    def _apply(self, file_path: str, line_number: int, current_state: str, new_state: str):
        key = task_key(file_path, line_number)
        self._originals.setdefault(key, current_state)

        if not self._storage.update_task(file_path, line_number, new_state):
            logger.warning("Task %s not present in local task list", key)
        self.persist_requested.emit(file_path, line_number, new_state)
