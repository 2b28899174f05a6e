"""Plain-text project outlines resolved into a dated timeline."""

from outline_timeline.models import (
    Conflict,
    ConflictKind,
    ParsedProject,
    ParsedTask,
    ParseResult,
    Project,
    Task,
    TaskStatus,
    TaskSnapshot,
    UndoableAction,
    UndoHistory,
)
from outline_timeline.parsers import parse_content, parse_file, patch_line, serialize_task
from outline_timeline.scheduler import (
    DragResult,
    ScheduleResult,
    calculate,
    get_parent_tasks_to_update,
    recalculate_from_drag,
)

__version__ = "0.1.0"

__all__ = [
    "Conflict",
    "ConflictKind",
    "DragResult",
    "ParsedProject",
    "ParsedTask",
    "ParseResult",
    "Project",
    "ScheduleResult",
    "Task",
    "TaskSnapshot",
    "TaskStatus",
    "UndoableAction",
    "UndoHistory",
    "calculate",
    "get_parent_tasks_to_update",
    "parse_content",
    "parse_file",
    "patch_line",
    "recalculate_from_drag",
    "serialize_task",
]
