"""Qt models for the Memory Loop chat client."""

from memory_loop_client.models.transcript_model import TranscriptModel
from memory_loop_client.models.task_model import TaskModel

__all__ = ["TranscriptModel", "TaskModel"]
