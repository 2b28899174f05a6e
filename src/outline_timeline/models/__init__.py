from .task import (
    Conflict,
    ConflictKind,
    ParsedProject,
    ParsedTask,
    ParseResult,
    Project,
    Task,
    TaskStatus,
)
from .history import TaskSnapshot, UndoableAction, UndoHistory

__all__ = [
    "Conflict",
    "ConflictKind",
    "ParsedProject",
    "ParsedTask",
    "ParseResult",
    "Project",
    "Task",
    "TaskStatus",
    "TaskSnapshot",
    "UndoableAction",
    "UndoHistory",
]
