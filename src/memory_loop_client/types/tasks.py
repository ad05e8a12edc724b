"""Checklist task types for the task toggle view."""

from dataclasses import dataclass
from enum import Enum


class TaskState(str, Enum):
    INCOMPLETE = " "
    COMPLETE = "x"
    PARTIAL = "/"
    NEEDS_INFO = "?"
    BOOKMARKED = "b"
    URGENT = "f"


class TaskCategory(str, Enum):
    INBOX = "inbox"
    PROJECTS = "projects"
    AREAS = "areas"


# Order a single toggle advances through; wraps after the last entry.
TASK_STATE_CYCLE: tuple[str, ...] = tuple(s.value for s in TaskState)


@dataclass
class TaskItem:
    file_path: str
    line_number: int
    state: str = TaskState.INCOMPLETE.value
    file_mtime: float = 0.0
    text: str = ""
    category: TaskCategory = TaskCategory.INBOX

    @property
    def key(self) -> str:
        return task_key(self.file_path, self.line_number)

    @property
    def is_complete(self) -> bool:
        return self.state == TaskState.COMPLETE.value


def task_key(file_path: str, line_number: int) -> str:
    return f"{file_path}:{line_number}"
