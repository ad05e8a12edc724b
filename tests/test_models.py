"""Tests for the QAbstractListModel subclasses."""

from helpers import apply_all, simple_turn, tool_lifecycle
from memory_loop_client.models.task_model import TaskModel
from memory_loop_client.models.transcript_model import TranscriptModel
from memory_loop_client.services.session_controller import StreamingSessionController
from memory_loop_client.types import (
    Message,
    ResponseChunk,
    ResponseStart,
    Role,
    TaskCategory,
    TaskItem,
    ToolStart,
)


def _task(path, line, state=" ", mtime=0.0, text="task"):
    return TaskItem(file_path=path, line_number=line, state=state, file_mtime=mtime, text=text)


# ---------------------------------------------------------------------------
# 1. TranscriptModel data roles
# ---------------------------------------------------------------------------

class TestTranscriptModel:
    def test_role_names(self, qapp):
        model = TranscriptModel()
        names = model.roleNames()
        assert names[TranscriptModel.ContentRole] == b"content"
        assert names[TranscriptModel.ToolInvocationsRole] == b"toolInvocations"

    def test_data_roles(self, qapp):
        controller = StreamingSessionController()
        controller.submit_user_message("read it")
        apply_all(controller, [ResponseStart(), ResponseChunk(content="Reading.")])
        apply_all(controller, tool_lifecycle("t1", "Read", {"file_path": "notes.md"}, "line one\nline two"))

        model = TranscriptModel()
        model.set_messages(controller.messages)

        assert model.rowCount() == 2
        user_idx, reply_idx = model.index(0, 0), model.index(1, 0)
        assert model.data(user_idx, TranscriptModel.RoleRole) == "user"
        assert model.data(reply_idx, TranscriptModel.ContentRole) == "Reading."
        assert model.data(reply_idx, TranscriptModel.IsStreamingRole) is True
        assert model.data(reply_idx, TranscriptModel.ToolCountRole) == 1
        assert model.data(reply_idx, TranscriptModel.ContextUsageRole) == -1

        tools = model.data(reply_idx, TranscriptModel.ToolInvocationsRole)
        assert tools[0]["toolUseId"] == "t1"
        assert tools[0]["status"] == "complete"
        assert tools[0]["inputSummary"] == "notes.md"
        assert tools[0]["outputSummary"] == "line one"
        assert tools[0]["filePath"] == "notes.md"

    def test_running_tool_has_empty_output(self, qapp):
        controller = StreamingSessionController()
        controller.apply(ToolStart(tool_use_id="t1", tool_name="Bash"))
        msg = controller.messages[0]

        model = TranscriptModel()
        model.set_messages([msg])
        tool = model.data(model.index(0, 0), TranscriptModel.ToolInvocationsRole)[0]
        assert tool["outputData"] == ""
        assert tool["inputData"] == ""

    def test_invalid_index(self, qapp):
        model = TranscriptModel()
        assert model.data(model.index(5, 0), TranscriptModel.ContentRole) is None


# ---------------------------------------------------------------------------
# 2. TranscriptModel incremental update
# ---------------------------------------------------------------------------

class TestUpdateMessages:
    def test_streaming_chunk_emits_data_changed(self, qapp):
        controller = StreamingSessionController()
        apply_all(controller, [ResponseStart(), ResponseChunk(content="a")])
        model = TranscriptModel()
        model.update_messages(controller.messages)

        changed, resets = [], []
        model.dataChanged.connect(lambda tl, br, roles: changed.append(tl.row()))
        model.modelReset.connect(lambda: resets.append(1))

        controller.apply(ResponseChunk(content="b"))
        model.update_messages(controller.messages)

        assert changed == [0]
        assert resets == []
        assert model.data(model.index(0, 0), TranscriptModel.ContentRole) == "ab"

    def test_appends_via_insert_rows(self, qapp):
        controller = StreamingSessionController()
        apply_all(controller, simple_turn("first"))
        model = TranscriptModel()
        model.update_messages(controller.messages)

        inserted = []
        model.rowsInserted.connect(lambda parent, first, last: inserted.append((first, last)))

        controller.submit_user_message("again")
        apply_all(controller, simple_turn("second"))
        model.update_messages(controller.messages)

        assert model.rowCount() == 3
        assert inserted == [(1, 2)]

    def test_unchanged_rows_emit_nothing(self, qapp):
        controller = StreamingSessionController()
        apply_all(controller, simple_turn("done"))
        model = TranscriptModel()
        model.update_messages(controller.messages)

        changed = []
        model.dataChanged.connect(lambda tl, br, roles: changed.append(tl.row()))
        model.update_messages(controller.messages)

        assert changed == []

    def test_resume_falls_back_to_reset(self, qapp):
        model = TranscriptModel()
        model.update_messages([Message(role=Role.USER, content="a"), Message(role=Role.USER, content="b")])

        resets = []
        model.modelReset.connect(lambda: resets.append(1))
        model.update_messages([Message(role=Role.USER, content="x")])

        assert resets == [1]
        assert model.rowCount() == 1


# ---------------------------------------------------------------------------
# 3. TaskModel
# ---------------------------------------------------------------------------

class TestTaskModel:
    def test_ordering(self, qapp):
        model = TaskModel()
        model.set_tasks([
            _task("old.md", 2, mtime=1.0),
            _task("new.md", 9, mtime=5.0),
            _task("old.md", 1, mtime=1.0),
        ])

        rows = [
            (model.data(model.index(r, 0), TaskModel.FilePathRole),
             model.data(model.index(r, 0), TaskModel.LineNumberRole))
            for r in range(model.rowCount())
        ]
        assert rows == [("new.md", 9), ("old.md", 1), ("old.md", 2)]

    def test_update_task_emits_data_changed(self, qapp):
        model = TaskModel()
        model.set_tasks([_task("file.md", 3)])

        changed = []
        model.dataChanged.connect(lambda tl, br, roles: changed.append(tl.row()))

        assert model.update_task("file.md", 3, "x") is True
        assert changed == [0]
        idx = model.index(0, 0)
        assert model.data(idx, TaskModel.StateRole) == "x"
        assert model.data(idx, TaskModel.StateLabelRole) == "complete"
        assert model.completed_count() == 1

    def test_update_unknown_task(self, qapp):
        model = TaskModel()
        assert model.update_task("missing.md", 1, "x") is False

    def test_hide_completed(self, qapp):
        model = TaskModel()
        model.set_tasks([_task("a.md", 1), _task("a.md", 2, state="x")])
        model.set_hide_completed(True)
        assert model.rowCount() == 1
        assert model.total_count() == 2

        model.update_task("a.md", 1, "x")
        assert model.rowCount() == 0

        model.update_task("a.md", 2, " ")
        assert model.rowCount() == 1

    def test_category_role(self, qapp):
        model = TaskModel()
        item = _task("projects/x.md", 1)
        item.category = TaskCategory.PROJECTS
        model.set_tasks([item])
        assert model.data(model.index(0, 0), TaskModel.CategoryRole) == "projects"
