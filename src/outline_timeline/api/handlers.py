"""Timeline handler functions shared by MCP tools and REST API."""

import logging
from datetime import date
from typing import List, Optional

from outline_timeline.models.history import UndoableAction
from outline_timeline.models.task import Conflict, Project, Task
from outline_timeline.parsers.outline_editor import (
    delete_line,
    delete_project,
    indent_task,
    insert_line,
    move_line,
    move_project,
    outdent_task,
)
from outline_timeline.parsers.outline_parser import parse_content
from outline_timeline.scheduler.calculator import ScheduleResult, calculate
from outline_timeline.utils.dates import parse_iso_date

log = logging.getLogger(__name__)

# Structural edit name -> (function, needs target line, needs text)
OUTLINE_EDITS = {
    "indent": (indent_task, False, False),
    "outdent": (outdent_task, False, False),
    "insert": (insert_line, False, True),
    "delete": (delete_line, False, False),
    "move": (move_line, True, False),
    "delete_project": (delete_project, False, False),
    "move_project": (move_project, True, False),
}


def _require_date(value: str, field_name: str = "start") -> date:
    parsed = parse_iso_date(value)
    if parsed is None:
        raise ValueError(f"Invalid {field_name} date {value!r}, expected YYYY-MM-DD")
    return parsed


def _task_to_dict(task: Task, project: Project, include_children: bool = True) -> dict:
    """Serialize a Task to a JSON-serializable dict."""
    d = {
        "id": task.id,
        "project_id": task.project_id,
        "position": task.position,
        "level": task.level,
        "title": task.title,
        "duration": task.duration,
        "start": task.start.isoformat(),
        "end": task.end.isoformat(),
        "dependencies": list(task.dependencies),
        "is_milestone": task.is_milestone,
        "is_done": task.is_done,
        "status": task.status.value,
        "color": task.color,
        "explicit_start": task.explicit_start.isoformat() if task.explicit_start else None,
        "manually_positioned": task.manually_positioned,
        "linked_note": task.linked_note,
        "line_number": task.line_number,
    }
    if include_children and task.has_children:
        d["children"] = [_task_to_dict(c, project) for c in project.children_of(task)]
    return d


def _project_to_dict(project: Project) -> dict:
    return {
        "id": project.id,
        "name": project.name,
        "icon": project.icon,
        "linked_note": project.linked_note,
        "start": project.start.isoformat(),
        "end": project.end.isoformat(),
        "line_number": project.line_number,
        "tasks": [_task_to_dict(t, project) for t in project.tasks],
    }


def _conflict_to_dict(conflict: Conflict) -> dict:
    return {
        "task_id": conflict.task_id,
        "kind": conflict.kind.value,
        "message": conflict.message,
        "related_task_ids": list(conflict.related_task_ids),
    }


def _action_to_dict(action: UndoableAction) -> dict:
    return {
        "kind": action.kind,
        "task_id": action.task_id,
        "line_number": action.line_number,
        "before": {"start": action.before.start.isoformat(), "duration": action.before.duration},
        "after": {"start": action.after.start.isoformat(), "duration": action.after.duration},
    }


def _schedule_to_dict(global_start: Optional[date], schedule: ScheduleResult) -> dict:
    return {
        "global_start_date": global_start.isoformat() if global_start else None,
        "global_end_date": (
            schedule.global_end_date.isoformat() if schedule.global_end_date else None
        ),
        "projects": [_project_to_dict(p) for p in schedule.projects],
        "conflicts": [_conflict_to_dict(c) for c in schedule.conflicts],
    }


# ---------------------------------------------------------------------------
# Handler functions (return dicts, shared by MCP tools and REST API)
# ---------------------------------------------------------------------------


def handle_timeline(cache) -> dict:
    return _schedule_to_dict(cache.global_start_date, cache.schedule)


def handle_conflicts(cache) -> List[dict]:
    return [_conflict_to_dict(c) for c in cache.schedule.conflicts]


def handle_task_get(cache, *, task_id: str) -> dict:
    entry = cache.get_task(task_id)
    if not entry:
        return {"error": f"Task '{task_id}' not found"}
    task, project = entry
    result = _task_to_dict(task, project)
    result["project_name"] = project.name
    return result


def handle_drag_preview(
    cache, *, task_id: str, start: str, duration: Optional[int] = None
) -> dict:
    """Speculative drag. The committed timeline and the file are untouched."""
    result = cache.preview_drag(task_id, _require_date(start), duration)
    if result.updated_task is None:
        return {"error": f"Task '{task_id}' not found"}
    project = next(p for p in result.projects if p.id == result.updated_task.project_id)
    return {
        "task": _task_to_dict(result.updated_task, project, include_children=False),
        "projects": [_project_to_dict(p) for p in result.projects],
    }


def handle_drag_commit(
    cache, *, task_id: str, start: str, duration: Optional[int] = None
) -> dict:
    task = cache.commit_drag(task_id, _require_date(start), duration)
    if task is None:
        return {"error": f"Task '{task_id}' not found"}
    return handle_task_get(cache, task_id=task.id)


def handle_task_update(
    cache,
    *,
    task_id: str,
    title: Optional[str] = None,
    duration: Optional[int] = None,
    start: Optional[str] = None,
    dependencies: Optional[List[int]] = None,
    is_milestone: Optional[bool] = None,
    status: Optional[str] = None,
    color: Optional[str] = None,
    linked_note: Optional[str] = None,
) -> dict:
    """
    Patch a task line. Only fields that are passed change; an empty string
    clears start, color and linked_note.
    """
    changes = {}
    if title is not None:
        changes["title"] = title
    if duration is not None:
        changes["duration"] = duration
    if start is not None:
        changes["start"] = _require_date(start) if start else None
    if dependencies is not None:
        changes["dependencies"] = dependencies
    if is_milestone is not None:
        changes["is_milestone"] = is_milestone
    if status is not None:
        changes["status"] = status
    if color is not None:
        changes["color"] = color
    if linked_note is not None:
        changes["linked_note"] = linked_note

    task = cache.update_task(task_id, **changes)
    if not task:
        return {"error": f"Task '{task_id}' not found"}
    return handle_task_get(cache, task_id=task.id)


def handle_undo(cache) -> dict:
    action = cache.undo()
    return {
        "action": _action_to_dict(action) if action else None,
        "can_undo": cache.history.can_undo,
        "can_redo": cache.history.can_redo,
    }


def handle_redo(cache) -> dict:
    action = cache.redo()
    return {
        "action": _action_to_dict(action) if action else None,
        "can_undo": cache.history.can_undo,
        "can_redo": cache.history.can_redo,
    }


def handle_outline_edit(
    cache,
    *,
    operation: str,
    line_number: int,
    target_line_number: Optional[int] = None,
    text: Optional[str] = None,
) -> dict:
    """Apply a structural edit (indent, move, delete, ...) to the outline."""
    if operation not in OUTLINE_EDITS:
        raise ValueError(
            f"Unknown operation {operation!r}, expected one of {', '.join(sorted(OUTLINE_EDITS))}"
        )
    edit, needs_target, needs_text = OUTLINE_EDITS[operation]
    args: list = [line_number]
    if needs_target:
        if target_line_number is None:
            raise ValueError(f"Operation {operation!r} requires target_line_number")
        args.append(target_line_number)
    if needs_text:
        if text is None:
            raise ValueError(f"Operation {operation!r} requires text")
        args.append(text)

    changed = cache.apply_edit(edit, *args)
    return {"operation": operation, "changed": changed}


def handle_parse(*, text: str, today: Optional[str] = None) -> dict:
    """Parse and schedule posted outline text without touching the session."""
    parse_result = parse_content(text, _require_date(today, "today") if today else None)
    return _schedule_to_dict(parse_result.global_start_date, calculate(parse_result))


def handle_cache_status(cache) -> dict:
    return cache.status()
