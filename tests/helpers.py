"""Shared test helpers."""

from memory_loop_client.types import (
    ResponseChunk,
    ResponseEnd,
    ResponseStart,
    ToolEnd,
    ToolInput,
    ToolStart,
)


def sse(*records: str) -> str:
    """Build SSE stream text from raw JSON record strings."""
    return "".join(f"data: {r}\n\n" for r in records)


def apply_all(controller, events):
    for event in events:
        controller.apply(event)
    return controller


def tool_lifecycle(tool_use_id: str, name: str = "Read", inp=None, output="ok"):
    """The three lifecycle events of one tool, in protocol order."""
    return [
        ToolStart(tool_use_id=tool_use_id, tool_name=name),
        ToolInput(tool_use_id=tool_use_id, input=inp if inp is not None else {"file_path": "a.md"}),
        ToolEnd(tool_use_id=tool_use_id, output=output),
    ]


def simple_turn(*chunks: str):
    """response_start, the given chunks, response_end."""
    return [ResponseStart(), *(ResponseChunk(content=c) for c in chunks), ResponseEnd()]
