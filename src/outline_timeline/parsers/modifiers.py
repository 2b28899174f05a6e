"""
Task modifier tokens.

The outline writes modifiers as ``@key``, ``@key:value`` or
``@key:"quoted value"``. They are converted here, at the boundary, into a
closed set of typed variants; unknown keys and unusable values are dropped
so nothing stringly-typed reaches the model.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Union

from outline_timeline.models.task import ParsedTask, TaskStatus
from outline_timeline.utils.dates import parse_iso_date

log = logging.getLogger(__name__)

MODIFIER_PATTERN = re.compile(r'@(\w+)(?::(?:"([^"]+)"|([^\s@]+)))?')


@dataclass(frozen=True)
class AfterModifier:
    position: int


@dataclass(frozen=True)
class MilestoneModifier:
    pass


@dataclass(frozen=True)
class StatusModifier:
    status: TaskStatus


@dataclass(frozen=True)
class ColorModifier:
    color: str


@dataclass(frozen=True)
class StartModifier:
    start: date


@dataclass(frozen=True)
class NoteModifier:
    note: str


Modifier = Union[
    AfterModifier,
    MilestoneModifier,
    StatusModifier,
    ColorModifier,
    StartModifier,
    NoteModifier,
]

_STATUS_KEYS = {
    "done": TaskStatus.DONE,
    "progress": TaskStatus.IN_PROGRESS,
    "cancelled": TaskStatus.CANCELLED,
}


def normalize_color(value: str) -> str:
    """Return a color with exactly one leading ``#``."""
    return "#" + value.lstrip("#")


def _to_modifier(key: str, value: Optional[str]) -> Optional[Modifier]:
    if key == "after":
        if value:
            try:
                return AfterModifier(int(value))
            except ValueError:
                pass
        return None
    if key == "milestone":
        return MilestoneModifier()
    if key in _STATUS_KEYS:
        return StatusModifier(_STATUS_KEYS[key])
    if key == "color":
        return ColorModifier(normalize_color(value)) if value else None
    if key == "start":
        parsed = parse_iso_date(value)
        return StartModifier(parsed) if parsed else None
    if key == "note":
        return NoteModifier(value) if value else None
    return None


def parse_modifiers(text: str) -> List[Modifier]:
    """
    Scan text left to right and return recognised modifiers in order.

    >>> parse_modifiers('@after:1 @milestone @bogus @note:"Design doc"')
    [AfterModifier(position=1), MilestoneModifier(), NoteModifier(note='Design doc')]
    """
    modifiers: List[Modifier] = []
    for m in MODIFIER_PATTERN.finditer(text):
        key = m.group(1)
        value = m.group(2) or m.group(3)
        modifier = _to_modifier(key, value)
        if modifier is None:
            log.debug("Skipping modifier @%s:%s", key, value)
            continue
        modifiers.append(modifier)
    return modifiers


def apply_modifiers(task: ParsedTask, modifiers: List[Modifier]) -> ParsedTask:
    """Fold modifiers onto task (in place) and return it. Later tokens win."""
    for modifier in modifiers:
        if isinstance(modifier, AfterModifier):
            task.dependencies.append(modifier.position)
        elif isinstance(modifier, MilestoneModifier):
            task.is_milestone = True
        elif isinstance(modifier, StatusModifier):
            task.status = modifier.status
            if modifier.status is TaskStatus.DONE:
                task.is_done = True
        elif isinstance(modifier, ColorModifier):
            task.color = modifier.color
        elif isinstance(modifier, StartModifier):
            task.explicit_start = modifier.start
        elif isinstance(modifier, NoteModifier):
            task.linked_note = modifier.note
        else:
            raise TypeError(f"Unhandled modifier: {modifier!r}")
    return task
