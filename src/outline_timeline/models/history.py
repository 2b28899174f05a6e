"""
Undo/redo log for interactive schedule edits.

The log is an immutable value owned by the caller (the editing session).
Every operation returns a new UndoHistory instead of mutating in place, so
the log can be stored, compared and passed around as plain data.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Literal, Optional, Tuple

ActionKind = Literal["task_move", "task_resize", "task_edit"]

MAX_HISTORY = 50


@dataclass(frozen=True)
class TaskSnapshot:
    start: date
    duration: int


@dataclass(frozen=True)
class UndoableAction:
    kind: ActionKind
    task_id: str
    line_number: int
    before: TaskSnapshot
    after: TaskSnapshot


@dataclass(frozen=True)
class UndoHistory:
    undo_stack: Tuple[UndoableAction, ...] = ()
    redo_stack: Tuple[UndoableAction, ...] = ()
    max_size: int = MAX_HISTORY

    @property
    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    def push(self, action: UndoableAction) -> UndoHistory:
        """Record a new action. Drops the oldest entry past max_size and clears redo."""
        stack = (self.undo_stack + (action,))[-self.max_size:]
        return replace(self, undo_stack=stack, redo_stack=())

    def undo(self) -> Tuple[UndoHistory, Optional[UndoableAction]]:
        if not self.undo_stack:
            return self, None
        action = self.undo_stack[-1]
        return (
            replace(self, undo_stack=self.undo_stack[:-1], redo_stack=self.redo_stack + (action,)),
            action,
        )

    def redo(self) -> Tuple[UndoHistory, Optional[UndoableAction]]:
        if not self.redo_stack:
            return self, None
        action = self.redo_stack[-1]
        return (
            replace(self, undo_stack=self.undo_stack + (action,), redo_stack=self.redo_stack[:-1]),
            action,
        )

    def clear(self) -> UndoHistory:
        return replace(self, undo_stack=(), redo_stack=())
