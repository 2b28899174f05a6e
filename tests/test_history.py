"""Tests for models/history.py."""

import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from outline_timeline.models.history import (
    MAX_HISTORY,
    TaskSnapshot,
    UndoableAction,
    UndoHistory,
)


def _action(n: int) -> UndoableAction:
    return UndoableAction(
        kind="task_move",
        task_id=f"project-0-task-{n}",
        line_number=n + 1,
        before=TaskSnapshot(start=date(2025, 1, 1), duration=n),
        after=TaskSnapshot(start=date(2025, 1, 2), duration=n),
    )


class TestUndoHistory:
    def test_empty(self):
        history = UndoHistory()
        assert not history.can_undo
        assert not history.can_redo
        assert history.undo() == (history, None)
        assert history.redo() == (history, None)

    def test_push_is_immutable(self):
        history = UndoHistory()
        pushed = history.push(_action(1))
        assert not history.can_undo
        assert pushed.can_undo

    def test_undo_then_redo(self):
        history = UndoHistory().push(_action(1)).push(_action(2))

        history, action = history.undo()
        assert action == _action(2)
        assert history.can_undo
        assert history.can_redo

        history, action = history.redo()
        assert action == _action(2)
        assert not history.can_redo
        assert history.undo_stack == (_action(1), _action(2))

    def test_push_clears_redo(self):
        history, _ = UndoHistory().push(_action(1)).undo()
        assert history.can_redo
        assert not history.push(_action(2)).can_redo

    def test_capped_at_max_size(self):
        history = UndoHistory()
        for n in range(MAX_HISTORY + 5):
            history = history.push(_action(n))
        assert len(history.undo_stack) == MAX_HISTORY
        assert history.undo_stack[0] == _action(5)

    def test_clear(self):
        history, _ = UndoHistory().push(_action(1)).push(_action(2)).undo()
        cleared = history.clear()
        assert not cleared.can_undo
        assert not cleared.can_redo
