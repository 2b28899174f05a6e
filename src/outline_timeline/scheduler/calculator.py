"""
Schedule calculator.

Turns a ParseResult into resolved projects with concrete dates.

Main API:
    calculate(parse_result)  → ScheduleResult
    recalculate_from_drag(projects, task_id, new_start, new_duration=None)  → DragResult
    get_parent_tasks_to_update(flat_tasks, changed_task)  → List[Task]

Resolution order for a task without an explicit start date:

1. Start at the global start date.
2. Move past the end of every ``@after`` dependency.
3. Under a parent: follow the previous sibling (children run one after
   another), or, for the first child, start no earlier than the parent.

Each task is resolved once, depth first. A reference back to a task that is
still being resolved (a cycle) is ignored, so every task always gets a date.
Parents are then stretched to cover exactly their children, and any task
that still starts before one of its dependencies ends is reported as a
conflict. Nothing here raises; bad references are simply inert.
"""

import copy
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

from outline_timeline.models.task import (
    Conflict,
    ConflictKind,
    ParsedProject,
    ParseResult,
    Project,
    Task,
)
from outline_timeline.utils.dates import add_days, days_between, max_date, min_date
from outline_timeline.utils.ids import generate_project_id, generate_task_id

log = logging.getLogger(__name__)

_IN_PROGRESS = "in_progress"
_RESOLVED = "resolved"


@dataclass
class ScheduleResult:
    projects: List[Project] = field(default_factory=list)
    conflicts: List[Conflict] = field(default_factory=list)
    global_end_date: Optional[date] = None


@dataclass
class DragResult:
    projects: List[Project] = field(default_factory=list)
    updated_task: Optional[Task] = None


# ---------------------------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------------------------

def build_hierarchy(tasks: List[Task]) -> None:
    """
    Link tasks into a forest using their levels.

    A task's parent is the nearest preceding task with a strictly lower
    level. Links are stored as indices into ``tasks`` and rebuilt from
    scratch on every call.
    """
    for task in tasks:
        task.parent_index = None
        task.child_indices = []

    stack: List[int] = []
    for index, task in enumerate(tasks):
        while stack and tasks[stack[-1]].level >= task.level:
            stack.pop()
        if stack:
            task.parent_index = stack[-1]
            tasks[stack[-1]].child_indices.append(index)
        stack.append(index)


def _previous_sibling(tasks: List[Task], index: int) -> Optional[int]:
    """Nearest earlier task with the same parent and level, if any."""
    task = tasks[index]
    if task.parent_index is None:
        return None
    for i in range(index - 1, -1, -1):
        candidate = tasks[i]
        if candidate.parent_index == task.parent_index and candidate.level == task.level:
            return i
        if candidate.level < task.level:
            break
    return None


def _dependency_indices(tasks: List[Task], task: Task) -> List[int]:
    """0-based indices of the task's in-range ``@after`` references."""
    indices = []
    for position in task.dependencies:
        if 1 <= position <= len(tasks):
            indices.append(position - 1)
        else:
            log.debug("Task %s: dependency %d is out of range", task.id, position)
    return indices


# ---------------------------------------------------------------------------
# Date resolution
# ---------------------------------------------------------------------------

def _is_pinned(task: Task) -> bool:
    return task.manually_positioned and task.explicit_start is not None


def _prerequisites(tasks: List[Task], index: int) -> List[int]:
    """Tasks that must be resolved before ``index``, in lookup order."""
    task = tasks[index]
    if _is_pinned(task):
        return []
    required = _dependency_indices(tasks, task)
    if task.parent_index is not None:
        required.append(task.parent_index)
        sibling = _previous_sibling(tasks, index)
        if sibling is not None:
            required.append(sibling)
    return required


def _place(tasks: List[Task], index: int, global_start: date, state: Dict[int, str]) -> None:
    """Compute start/end for one task whose prerequisites have been visited."""
    task = tasks[index]

    if _is_pinned(task):
        task.start = task.explicit_start
        task.end = add_days(task.start, task.duration)
        return

    def settled(i: int) -> bool:
        if state.get(i) == _RESOLVED:
            return True
        log.debug("Task %s: ignoring cyclic reference to %s", task.id, tasks[i].id)
        return False

    start = global_start
    for dep in _dependency_indices(tasks, task):
        if settled(dep) and tasks[dep].end > start:
            start = tasks[dep].end

    if task.parent_index is not None:
        sibling = _previous_sibling(tasks, index)
        if sibling is not None:
            if settled(sibling) and tasks[sibling].end > start:
                start = tasks[sibling].end
        elif settled(task.parent_index) and tasks[task.parent_index].start > start:
            start = tasks[task.parent_index].start

    task.start = start
    task.end = add_days(start, task.duration)


def resolve_dates(tasks: List[Task], global_start: date) -> None:
    """
    Resolve every task's start/end in place.

    Depth-first with an explicit stack, so long dependency chains cannot
    exhaust the interpreter's recursion limit. A prerequisite that is still
    on the stack when it is referenced again is treated as absent.
    """
    state: Dict[int, str] = {}

    for root in range(len(tasks)):
        if root in state:
            continue
        state[root] = _IN_PROGRESS
        stack: List[Tuple[int, List[int]]] = [(root, _prerequisites(tasks, root))]

        while stack:
            index, pending = stack[-1]
            descended = False
            while pending:
                nxt = pending.pop(0)
                if nxt not in state:
                    state[nxt] = _IN_PROGRESS
                    stack.append((nxt, _prerequisites(tasks, nxt)))
                    descended = True
                    break
            if descended:
                continue
            stack.pop()
            _place(tasks, index, global_start, state)
            state[index] = _RESOLVED


def reconcile_parents(tasks: List[Task]) -> None:
    """
    Stretch every parent to cover exactly its direct children.

    Children always follow their parent in source order, so walking the list
    backwards settles each subtree before its parent is visited. The parent's
    duration becomes the day span, never less than 1.
    """
    for task in reversed(tasks):
        if not task.child_indices:
            continue
        children = [tasks[i] for i in task.child_indices]
        task.start = min(c.start for c in children)
        task.end = max(c.end for c in children)
        task.duration = max(1, days_between(task.start, task.end))


def update_project_bounds(project: Project, fallback: date) -> None:
    project.start = min_date((t.start for t in project.flat_tasks), fallback)
    project.end = max_date((t.end for t in project.flat_tasks), fallback)


# ---------------------------------------------------------------------------
# Full recompute
# ---------------------------------------------------------------------------

def _calculate_project(parsed: ParsedProject, project_id: str, global_start: date) -> Project:
    flat_tasks = [
        Task.from_parsed(p, project_id, i, generate_task_id(project_id, i), global_start)
        for i, p in enumerate(parsed.tasks)
    ]
    build_hierarchy(flat_tasks)
    resolve_dates(flat_tasks, global_start)
    reconcile_parents(flat_tasks)

    project = Project(
        id=project_id,
        name=parsed.name,
        icon=parsed.icon,
        linked_note=parsed.linked_note,
        flat_tasks=flat_tasks,
        start=global_start,
        end=global_start,
        line_number=parsed.line_number,
    )
    update_project_bounds(project, global_start)
    return project


def detect_conflicts(project: Project) -> List[Conflict]:
    """Report every task that starts before one of its dependencies ends."""
    conflicts: List[Conflict] = []
    for task in project.flat_tasks:
        for position in task.dependencies:
            dep = project.task_at(position)
            if dep is None or task.start >= dep.end:
                continue
            conflicts.append(
                Conflict(
                    task_id=task.id,
                    kind=ConflictKind.DEPENDENCY_VIOLATION,
                    message=f'"{task.title}" starts before "{dep.title}" ends',
                    related_task_ids=[dep.id],
                )
            )
    return conflicts


def calculate(parse_result: ParseResult) -> ScheduleResult:
    """
    Resolve all projects of a ParseResult.

    Projects are independent of each other. The global end date is the
    latest project end, never earlier than the global start date.
    """
    global_start = parse_result.global_start_date
    result = ScheduleResult(global_end_date=global_start)

    for index, parsed in enumerate(parse_result.projects):
        project = _calculate_project(parsed, generate_project_id(index), global_start)
        result.conflicts.extend(detect_conflicts(project))
        result.projects.append(project)
        if project.end > result.global_end_date:
            result.global_end_date = project.end

    log.debug(
        "Calculated %d projects, %d conflicts",
        len(result.projects),
        len(result.conflicts),
    )
    return result


# ---------------------------------------------------------------------------
# Incremental recompute (drag)
# ---------------------------------------------------------------------------

def _propagate_dependency_changes(project: Project, changed: Task) -> None:
    """
    Push dependents of ``changed`` forward so none starts before it ends,
    transitively. A task is never shifted again along a path that already
    passed through it, which keeps cyclic references finite.
    """
    stack = [(changed, frozenset({changed.index_in_project}))]
    while stack:
        source, path = stack.pop()
        for task in project.flat_tasks:
            if source.position not in task.dependencies or task.index_in_project in path:
                continue
            if task.start < source.end:
                task.start = source.end
                task.end = add_days(task.start, task.duration)
                stack.append((task, path | {task.index_in_project}))


def recalculate_from_drag(
    projects: List[Project],
    task_id: str,
    new_start: date,
    new_duration: Optional[int] = None,
) -> DragResult:
    """
    Move one task and re-settle its project, on an independent copy.

    The dragged task becomes manually positioned at new_start (and takes
    new_duration when given); its dependents are shifted forward, then
    parent spans and project bounds are recomputed. The input projects are
    never modified. ``updated_task`` is None when task_id is unknown.
    """
    projects_copy = copy.deepcopy(projects)

    for project in projects_copy:
        task = project.find_task(task_id)
        if task is None:
            continue

        task.start = new_start
        task.explicit_start = new_start
        task.manually_positioned = True
        if new_duration is not None:
            task.duration = max(0, int(new_duration))
        task.end = add_days(task.start, task.duration)

        build_hierarchy(project.flat_tasks)
        _propagate_dependency_changes(project, task)
        reconcile_parents(project.flat_tasks)
        update_project_bounds(project, project.start)
        return DragResult(projects=projects_copy, updated_task=task)

    log.debug("Drag target %s not found", task_id)
    return DragResult(projects=projects_copy, updated_task=None)


def get_parent_tasks_to_update(flat_tasks: List[Task], changed_task: Task) -> List[Task]:
    """
    Ancestors of changed_task, nearest first, up to the project root.

    Used when writing back reconciled parent durations after an edit.
    """
    ancestors: List[Task] = []
    index = changed_task.parent_index
    while index is not None and 0 <= index < len(flat_tasks):
        parent = flat_tasks[index]
        ancestors.append(parent)
        index = parent.parent_index
    return ancestors
