"""
Core timeline data models.

Two vocabularies live here:

- Parsed records (ParsedTask, ParsedProject, ParseResult) mirror the outline
  text one-to-one and are produced fresh by every parse.
- Resolved records (Task, Project) carry computed dates. A Project owns its
  tasks as a flat, source-ordered list; hierarchy is expressed with indices
  into that list (``parent_index`` / ``child_indices``), never with object
  back-references, so a resolved forest can be deep-copied safely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterator, List, Optional

from outline_timeline.utils.dates import add_days
from outline_timeline.utils.icons import DEFAULT_ICON


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    CANCELLED = "cancelled"


class ConflictKind(str, Enum):
    DEPENDENCY_VIOLATION = "dependency_violation"


@dataclass
class ParsedTask:
    """
    A single task line from the outline.

    ``dependencies`` holds 1-based positions in the owning project's task
    list, in the order the ``@after`` tokens appeared.
    """

    level: int
    title: str
    duration: int
    dependencies: List[int] = field(default_factory=list)
    is_milestone: bool = False
    is_done: bool = False
    status: TaskStatus = TaskStatus.PENDING
    color: Optional[str] = None
    explicit_start: Optional[date] = None
    linked_note: Optional[str] = None
    line_number: int = 0


@dataclass
class ParsedProject:
    """A ``## `` header and the task lines that follow it."""

    name: str
    icon: str = DEFAULT_ICON
    linked_note: Optional[str] = None
    tasks: List[ParsedTask] = field(default_factory=list)
    line_number: int = 0


@dataclass
class ParseResult:
    global_start_date: date
    projects: List[ParsedProject] = field(default_factory=list)


@dataclass
class Task:
    """
    A task with resolved calendar position.

    ``end`` is exclusive: ``end == start + duration`` days. ``line_number``
    is kept so edits can be written back to the exact outline line.
    """

    id: str
    project_id: str
    index_in_project: int
    level: int
    title: str
    duration: int
    start: date
    end: date
    dependencies: List[int] = field(default_factory=list)
    is_milestone: bool = False
    is_done: bool = False
    status: TaskStatus = TaskStatus.PENDING
    color: Optional[str] = None
    explicit_start: Optional[date] = None
    manually_positioned: bool = False
    linked_note: Optional[str] = None
    line_number: int = 0
    parent_index: Optional[int] = None
    child_indices: List[int] = field(default_factory=list)

    @classmethod
    def from_parsed(
        cls, parsed: ParsedTask, project_id: str, index: int, task_id: str, start: date
    ) -> Task:
        return cls(
            id=task_id,
            project_id=project_id,
            index_in_project=index,
            level=parsed.level,
            title=parsed.title,
            duration=parsed.duration,
            start=start,
            end=add_days(start, parsed.duration),
            dependencies=list(parsed.dependencies),
            is_milestone=parsed.is_milestone,
            is_done=parsed.is_done,
            status=parsed.status,
            color=parsed.color,
            explicit_start=parsed.explicit_start,
            manually_positioned=parsed.explicit_start is not None,
            linked_note=parsed.linked_note,
            line_number=parsed.line_number,
        )

    @property
    def has_children(self) -> bool:
        return bool(self.child_indices)

    @property
    def position(self) -> int:
        """1-based position, the number other tasks use in ``@after:N``."""
        return self.index_in_project + 1

    def to_parsed(self) -> ParsedTask:
        """Project this task back onto the outline vocabulary."""
        return ParsedTask(
            level=self.level,
            title=self.title,
            duration=self.duration,
            dependencies=list(self.dependencies),
            is_milestone=self.is_milestone,
            is_done=self.is_done,
            status=self.status,
            color=self.color,
            explicit_start=self.explicit_start,
            linked_note=self.linked_note,
            line_number=self.line_number,
        )


@dataclass
class Project:
    """
    A resolved project.

    ``flat_tasks`` is the owning arena, fixed at source order. The root
    forest and parent/child navigation are derived from the indices stored
    on each task.
    """

    id: str
    name: str
    start: date
    end: date
    icon: str = DEFAULT_ICON
    linked_note: Optional[str] = None
    flat_tasks: List[Task] = field(default_factory=list)
    line_number: int = 0

    @property
    def tasks(self) -> List[Task]:
        """Root-level tasks in source order."""
        return [t for t in self.flat_tasks if t.parent_index is None]

    def children_of(self, task: Task) -> List[Task]:
        return [self.flat_tasks[i] for i in task.child_indices]

    def parent_of(self, task: Task) -> Optional[Task]:
        if task.parent_index is None:
            return None
        return self.flat_tasks[task.parent_index]

    def task_at(self, position: int) -> Optional[Task]:
        """Task at a 1-based ``@after`` position, or None when out of range."""
        if 1 <= position <= len(self.flat_tasks):
            return self.flat_tasks[position - 1]
        return None

    def find_task(self, task_id: str) -> Optional[Task]:
        for task in self.flat_tasks:
            if task.id == task_id:
                return task
        return None

    def walk(self) -> Iterator[Task]:
        """Depth-first pre-order over the forest (equals source order)."""
        def _walk(task: Task) -> Iterator[Task]:
            yield task
            for child in self.children_of(task):
                yield from _walk(child)

        for root in self.tasks:
            yield from _walk(root)


@dataclass
class Conflict:
    """A task that starts before one of its dependencies ends."""

    task_id: str
    kind: ConflictKind
    message: str
    related_task_ids: List[str] = field(default_factory=list)
