"""
Thread-safe editing session for a single outline file.

Design:
    Outline text   — the file content last read or written (source of truth)
    ParseResult    — parse of that text
    ScheduleResult — committed resolved forest + conflicts
    UndoHistory    — immutable undo/redo log, replaced on every edit

All mutations acquire _lock (threading.RLock). Edits are written through to
disk one line at a time and the schedule is then rebuilt from the new text.
The watcher calls enqueue_refresh(); a worker thread drains the queue so the
watcher never blocks on a re-parse.
"""

import logging
import queue
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from outline_timeline.models.history import TaskSnapshot, UndoableAction, UndoHistory
from outline_timeline.models.task import ParseResult, Project, Task
from outline_timeline.parsers.outline_editor import default_outline
from outline_timeline.parsers.outline_parser import parse_content, patch_line
from outline_timeline.scheduler.calculator import (
    DragResult,
    ScheduleResult,
    calculate,
    get_parent_tasks_to_update,
    recalculate_from_drag,
)

log = logging.getLogger(__name__)

_REFRESH = "refresh"


class TimelineCache:
    """
    Committed timeline state for one outline file.

    Initialize with initialize(), then optionally start the background
    worker with start_worker(). Readers get the committed schedule; drags
    can be previewed without touching it and are only written on commit.
    """

    def __init__(self, today: Optional[Callable[[], date]] = None) -> None:
        self._lock = threading.RLock()
        self._today = today or date.today
        self._file_path: Optional[Path] = None
        self._content: str = ""
        self._mtime: float = 0.0
        self._parse_result: Optional[ParseResult] = None
        self._schedule: ScheduleResult = ScheduleResult()
        self._history = UndoHistory()
        self._update_queue: "queue.Queue[Optional[str]]" = queue.Queue()
        self._worker_thread: Optional[threading.Thread] = None
        self._last_load: Optional[datetime] = None

    # ------------------------------------------------------------------
    # Initialisation
    # ------------------------------------------------------------------

    def initialize(self, file_path: Path, create_if_missing: bool = True) -> None:
        """
        Load the outline. Blocks until the first schedule is computed.

        When the file does not exist and create_if_missing is set, a starter
        outline is written first.
        """
        self._file_path = file_path
        if not file_path.exists():
            if not create_if_missing:
                raise FileNotFoundError(file_path)
            log.info("Creating outline file: %s", file_path)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(default_outline(self._today()), encoding="utf-8")
        self.reload()

    def start_worker(self) -> None:
        """Start the background queue-drain worker thread (daemon)."""
        self._worker_thread = threading.Thread(
            target=self._worker_loop, daemon=True, name="timeline-cache-worker"
        )
        self._worker_thread.start()

    def stop_worker(self) -> None:
        """Signal the worker thread to stop and wait for it."""
        self._update_queue.put(None)  # sentinel
        if self._worker_thread:
            self._worker_thread.join(timeout=5)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _compute(self, content: str) -> Tuple[ParseResult, ScheduleResult]:
        parse_result = parse_content(content, self._today())
        return parse_result, calculate(parse_result)

    def reload(self) -> None:
        """Re-read the outline from disk and rebuild the committed schedule."""
        assert self._file_path is not None
        with self._lock:
            content = self._file_path.read_text(encoding="utf-8")
            mtime = self._file_path.stat().st_mtime
            parse_result, schedule = self._compute(content)
            self._content = content
            self._mtime = mtime
            self._parse_result = parse_result
            self._schedule = schedule
            self._last_load = datetime.now()
        log.info(
            "Loaded %s: %d projects, %d tasks, %d conflicts",
            self._file_path,
            len(schedule.projects),
            sum(len(p.flat_tasks) for p in schedule.projects),
            len(schedule.conflicts),
        )

    def _write(self, content: str) -> None:
        """Write content and rebuild. Caller must hold _lock."""
        assert self._file_path is not None
        self._file_path.write_text(content, encoding="utf-8")
        self.reload()

    # ------------------------------------------------------------------
    # Background worker
    # ------------------------------------------------------------------

    def _worker_loop(self) -> None:
        """Drain the update queue, reloading when the file changed on disk."""
        while True:
            item = self._update_queue.get()
            if item is None:  # sentinel → stop
                break
            try:
                self.refresh()
            except Exception:
                log.exception("Worker failed to refresh %s", self._file_path)

    def enqueue_refresh(self) -> None:
        """Schedule a reload from a watcher callback (non-blocking)."""
        self._update_queue.put(_REFRESH)

    def refresh(self) -> bool:
        """Reload if the file is newer than what is cached. Returns True if reloaded."""
        if not self.is_file_stale():
            return False
        self.reload()
        return True

    def is_file_stale(self) -> bool:
        """Return True if the file has been modified since the last load or write."""
        if self._file_path is None:
            return False
        try:
            mtime = self._file_path.stat().st_mtime
        except OSError:
            return False
        with self._lock:
            return mtime > self._mtime

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def file_path(self) -> Optional[Path]:
        return self._file_path

    @property
    def content(self) -> str:
        with self._lock:
            return self._content

    @property
    def schedule(self) -> ScheduleResult:
        with self._lock:
            return self._schedule

    @property
    def global_start_date(self) -> Optional[date]:
        with self._lock:
            return self._parse_result.global_start_date if self._parse_result else None

    @property
    def history(self) -> UndoHistory:
        with self._lock:
            return self._history

    def get_task(self, task_id: str) -> Optional[Tuple[Task, Project]]:
        """Return (Task, owning Project) or None."""
        with self._lock:
            for project in self._schedule.projects:
                task = project.find_task(task_id)
                if task:
                    return task, project
            return None

    def get_project(self, project_id: str) -> Optional[Project]:
        with self._lock:
            for project in self._schedule.projects:
                if project.id == project_id:
                    return project
            return None

    def _find_by_line(self, line_number: int) -> Optional[Task]:
        for project in self._schedule.projects:
            for task in project.flat_tasks:
                if task.line_number == line_number:
                    return task
        return None

    # ------------------------------------------------------------------
    # Drag (preview + commit)
    # ------------------------------------------------------------------

    def preview_drag(
        self, task_id: str, new_start: date, new_duration: Optional[int] = None
    ) -> DragResult:
        """Speculative drag on a copy of the committed forest. Nothing is written."""
        with self._lock:
            return recalculate_from_drag(self._schedule.projects, task_id, new_start, new_duration)

    def _apply_drag(
        self, task_id: str, new_start: date, new_duration: Optional[int]
    ) -> Optional[Tuple[Task, Task]]:
        """
        Write a drag to disk. Caller must hold _lock.

        The dragged line gets its new ``@start`` and duration; every ancestor
        line gets its reconciled duration. Returns (before, after) tasks.
        """
        entry = self.get_task(task_id)
        if entry is None:
            return None
        before, _ = entry

        result = recalculate_from_drag(self._schedule.projects, task_id, new_start, new_duration)
        updated = result.updated_task
        if updated is None:
            return None

        content = patch_line(
            self._content, updated.line_number, start=updated.start, duration=updated.duration
        )
        project = next(p for p in result.projects if p.id == updated.project_id)
        for parent in get_parent_tasks_to_update(project.flat_tasks, updated):
            content = patch_line(content, parent.line_number, duration=parent.duration)

        self._write(content)
        return before, updated

    def commit_drag(
        self, task_id: str, new_start: date, new_duration: Optional[int] = None
    ) -> Optional[Task]:
        """
        Commit a drag: write it through, rebuild, and record it for undo.

        Returns the task as resolved after the rebuild, or None if task_id
        is unknown.
        """
        with self._lock:
            applied = self._apply_drag(task_id, new_start, new_duration)
            if applied is None:
                return None
            before, after = applied

            kind = "task_move" if before.duration == after.duration else "task_resize"
            self._history = self._history.push(
                UndoableAction(
                    kind=kind,
                    task_id=task_id,
                    line_number=before.line_number,
                    before=TaskSnapshot(start=before.start, duration=before.duration),
                    after=TaskSnapshot(start=after.start, duration=after.duration),
                )
            )
            log.info("Committed %s of %s to %s", kind, task_id, after.start)
            return self._find_by_line(before.line_number)

    # ------------------------------------------------------------------
    # Field edits
    # ------------------------------------------------------------------

    def update_task(self, task_id: str, **changes) -> Optional[Task]:
        """
        Patch task fields on its outline line and write back to disk.

        Supported changes are those of patch_line. Start/duration edits are
        recorded in the undo log.

        Returns the updated Task or None if not found.
        """
        with self._lock:
            entry = self.get_task(task_id)
            if not entry:
                return None
            task, _ = entry
            before = TaskSnapshot(start=task.start, duration=task.duration)

            self._write(patch_line(self._content, task.line_number, **changes))

            updated = self._find_by_line(task.line_number)
            if updated and ("start" in changes or "duration" in changes):
                self._history = self._history.push(
                    UndoableAction(
                        kind="task_edit",
                        task_id=task_id,
                        line_number=task.line_number,
                        before=before,
                        after=TaskSnapshot(start=updated.start, duration=updated.duration),
                    )
                )
            return updated

    def apply_edit(self, edit: Callable[..., str], *args) -> bool:
        """
        Apply a structural text edit (see parsers.outline_editor) and write it.

        Line numbers shift under structural edits, so the undo log is
        cleared. Returns False when the edit left the text unchanged.
        """
        with self._lock:
            content = edit(self._content, *args)
            if content == self._content:
                return False
            self._write(content)
            self._history = self._history.clear()
            log.info("Applied %s%r", getattr(edit, "__name__", "edit"), args)
            return True

    # ------------------------------------------------------------------
    # Undo / redo
    # ------------------------------------------------------------------

    def _restore(self, action: UndoableAction, snapshot: TaskSnapshot) -> bool:
        task = self._find_by_line(action.line_number)
        if task is None:
            log.warning("Cannot restore %s: line %d is no longer a task", action.task_id, action.line_number)
            return False
        return self._apply_drag(task.id, snapshot.start, snapshot.duration) is not None

    def undo(self) -> Optional[UndoableAction]:
        """Revert the most recent edit. Returns the undone action, or None."""
        with self._lock:
            history, action = self._history.undo()
            if action is None:
                return None
            self._history = history
            self._restore(action, action.before)
            return action

    def redo(self) -> Optional[UndoableAction]:
        """Re-apply the most recently undone edit. Returns it, or None."""
        with self._lock:
            history, action = self._history.redo()
            if action is None:
                return None
            self._history = history
            self._restore(action, action.after)
            return action

    # ------------------------------------------------------------------
    # Status / diagnostics
    # ------------------------------------------------------------------

    def status(self) -> dict:
        with self._lock:
            return {
                "file_path": str(self._file_path) if self._file_path else None,
                "projects": len(self._schedule.projects),
                "tasks": sum(len(p.flat_tasks) for p in self._schedule.projects),
                "conflicts": len(self._schedule.conflicts),
                "global_start_date": (
                    self._parse_result.global_start_date.isoformat() if self._parse_result else None
                ),
                "global_end_date": (
                    self._schedule.global_end_date.isoformat()
                    if self._schedule.global_end_date
                    else None
                ),
                "last_load": self._last_load.isoformat() if self._last_load else None,
                "can_undo": self._history.can_undo,
                "can_redo": self._history.can_redo,
            }

    def projects(self) -> List[Project]:
        with self._lock:
            return list(self._schedule.projects)
