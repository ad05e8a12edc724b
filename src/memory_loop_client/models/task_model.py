"""QAbstractListModel for the checklist task view."""

from PySide6.QtCore import QAbstractListModel, QModelIndex, Qt, Signal, Slot

from memory_loop_client.services.toggle_tracker import state_indicator, state_label
from memory_loop_client.types import TaskItem, TaskState


class TaskModel(QAbstractListModel):
    """Exposes TaskItems to QML; the local store the toggle tracker writes to.

    Tasks are ordered by file (most recently modified first), then by line.
    """

    FilePathRole = Qt.UserRole + 1
    LineNumberRole = Qt.UserRole + 2
    StateRole = Qt.UserRole + 3
    TextRole = Qt.UserRole + 4
    CategoryRole = Qt.UserRole + 5
    IndicatorRole = Qt.UserRole + 6
    StateLabelRole = Qt.UserRole + 7

    counts_changed = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._all: list[TaskItem] = []
        self._tasks: list[TaskItem] = []
        self._hide_completed = False

    def roleNames(self):
        return {
            self.FilePathRole: b"filePath",
            self.LineNumberRole: b"lineNumber",
            self.StateRole: b"state",
            self.TextRole: b"text",
            self.CategoryRole: b"category",
            self.IndicatorRole: b"indicator",
            self.StateLabelRole: b"stateLabel",
        }

    def rowCount(self, parent=QModelIndex()):
        return len(self._tasks)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid() or index.row() >= len(self._tasks):
            return None

        task = self._tasks[index.row()]

        if role == self.FilePathRole:
            return task.file_path
        elif role == self.LineNumberRole:
            return task.line_number
        elif role == self.StateRole:
            return task.state
        elif role in (self.TextRole, Qt.DisplayRole):
            return task.text
        elif role == self.CategoryRole:
            return task.category.value
        elif role == self.IndicatorRole:
            return state_indicator(task.state)
        elif role == self.StateLabelRole:
            return state_label(task.state)
        return None

    def set_tasks(self, tasks: list[TaskItem]):
        """Replace the entire task list."""
        self._all = sorted(tasks, key=lambda t: (-t.file_mtime, t.file_path, t.line_number))
        self._refilter()

    @Slot(bool)
    def set_hide_completed(self, value: bool):
        if self._hide_completed != value:
            self._hide_completed = value
            self._refilter()

    def update_task(self, file_path: str, line_number: int, state: str) -> bool:
        """Set one task's state in place. Returns False if the task is unknown."""
        task = self.find_task(file_path, line_number)
        if task is None:
            return False
        task.state = state

        if self._hide_completed:
            # Visibility may have flipped
            self._refilter()
        else:
            row = self._tasks.index(task)
            idx = self.index(row, 0)
            self.dataChanged.emit(idx, idx, [self.StateRole, self.IndicatorRole, self.StateLabelRole])
        self.counts_changed.emit()
        return True

    def find_task(self, file_path: str, line_number: int) -> TaskItem | None:
        for task in self._all:
            if task.file_path == file_path and task.line_number == line_number:
                return task
        return None

    @Slot(result=int)
    def completed_count(self) -> int:
        return sum(1 for t in self._all if t.state == TaskState.COMPLETE.value)

    @Slot(result=int)
    def total_count(self) -> int:
        return len(self._all)

    def _refilter(self):
        self.beginResetModel()
        if self._hide_completed:
            self._tasks = [t for t in self._all if not t.is_complete]
        else:
            self._tasks = list(self._all)
        self.endResetModel()
        self.counts_changed.emit()
