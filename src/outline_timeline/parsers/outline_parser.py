"""
Parser for plain-text project outlines.

Main API:
    parse_content(content, today=None)  → ParseResult
    parse_file(path, today=None)        → ParseResult
    serialize_task(task)                → str
    patch_line(content, line_number, **changes)  → str

Grammar (line oriented; anything else is ignored):

    @start: 2025-01-01                  global start date (first valid one wins)
    ## 🚀 Project name @note:"Road map" project header (icon and note optional)
    > Task title (5) @after:1 @done     task; marker count = nesting level

Parsing never raises. Lines that do not match are inert and malformed
values fall back to their defaults.
"""

import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

from outline_timeline.models.task import ParsedProject, ParsedTask, ParseResult, TaskStatus
from outline_timeline.parsers.modifiers import apply_modifiers, normalize_color, parse_modifiers
from outline_timeline.utils.dates import parse_iso_date
from outline_timeline.utils.formatting import render_task_line
from outline_timeline.utils.icons import split_icon

log = logging.getLogger(__name__)

START_DATE_PATTERN = re.compile(r"^@start:\s*(\S+)", re.MULTILINE)
PROJECT_HEADER_PATTERN = re.compile(r"^##\s+(.+)$")
PROJECT_NOTE_PATTERN = re.compile(r'@note:(?:"([^"]+)"|(\S+))')

# Title runs up to the last "(N)" that is followed only by modifier tokens.
TASK_LINE_PATTERN = re.compile(r"^(>+)\s+(.+?)\s*\((\d+)\)((?:\s*@.*)?)\s*$")
# Free text after the duration: title runs to the last "(N)" on the line.
TASK_LINE_FALLBACK_PATTERN = re.compile(r"^(>+)\s+(.+)\s*\((\d+)\)(.*)$")


# ---------------------------------------------------------------------------
# Line-level parsers
# ---------------------------------------------------------------------------

def parse_global_start_date(content: str, today: Optional[date] = None) -> date:
    """Return the first valid ``@start:`` date, else today."""
    for m in START_DATE_PATTERN.finditer(content):
        parsed = parse_iso_date(m.group(1))
        if parsed:
            return parsed
        log.debug("Ignoring malformed global start date %r", m.group(1))
    return today or date.today()


def parse_task_line(line: str, line_number: int = 0) -> Optional[ParsedTask]:
    """Return a ParsedTask, or None if the line is not a task."""
    line = line.rstrip("\r")
    m = TASK_LINE_PATTERN.match(line) or TASK_LINE_FALLBACK_PATTERN.match(line)
    if not m:
        return None
    task = ParsedTask(
        level=len(m.group(1)),
        title=m.group(2).strip(),
        duration=int(m.group(3)),
        line_number=line_number,
    )
    return apply_modifiers(task, parse_modifiers(m.group(4)))


def parse_project_header(line: str, line_number: int = 0) -> Optional[ParsedProject]:
    """Return an empty ParsedProject for a ``## `` header, or None."""
    m = PROJECT_HEADER_PATTERN.match(line.rstrip("\r"))
    if not m:
        return None

    header = m.group(1).strip()
    linked_note = None
    note = PROJECT_NOTE_PATTERN.search(header)
    if note:
        linked_note = note.group(1) or note.group(2)
        header = PROJECT_NOTE_PATTERN.sub("", header, count=1).strip()

    icon, name = split_icon(header)
    return ParsedProject(name=name, icon=icon, linked_note=linked_note, line_number=line_number)


# ---------------------------------------------------------------------------
# Main parse API
# ---------------------------------------------------------------------------

def parse_content(content: str, today: Optional[date] = None) -> ParseResult:
    """
    Parse outline text into a ParseResult.

    Args:
        content: Full outline text
        today: Fallback start date when no ``@start:`` line is present
               (defaults to the current date)

    Returns:
        ParseResult with projects in source order; line numbers are 1-based
    """
    projects: List[ParsedProject] = []
    current: Optional[ParsedProject] = None

    for line_number, line in enumerate(content.split("\n"), start=1):
        project = parse_project_header(line, line_number)
        if project:
            if current:
                projects.append(current)
            current = project
            continue

        task = parse_task_line(line, line_number)
        if task is None:
            continue
        if current is None:
            log.debug("Ignoring task outside any project on line %d", line_number)
            continue
        current.tasks.append(task)

    if current:
        projects.append(current)

    return ParseResult(
        global_start_date=parse_global_start_date(content, today),
        projects=projects,
    )


def parse_file(file_path: Path, today: Optional[date] = None) -> ParseResult:
    """Parse an outline file."""
    return parse_content(file_path.read_text(encoding="utf-8"), today)


def serialize_task(task) -> str:
    """Render a ParsedTask (or resolved Task) as a canonical outline line."""
    return render_task_line(task)


# ---------------------------------------------------------------------------
# Line patching
# ---------------------------------------------------------------------------

def _apply_change(task: ParsedTask, key: str, value) -> None:
    if key == "title":
        task.title = str(value).strip()
    elif key in ("duration", "dependencies"):
        try:
            if key == "duration":
                task.duration = max(0, int(value))
            else:
                task.dependencies = [int(dep) for dep in value]
        except (TypeError, ValueError):
            log.debug("Ignoring malformed %s %r", key, value)
    elif key == "start":
        if isinstance(value, str):
            value = parse_iso_date(value)
        elif isinstance(value, datetime):
            value = value.date()
        task.explicit_start = value
    elif key == "is_milestone":
        task.is_milestone = bool(value)
    elif key == "status":
        try:
            task.status = TaskStatus(value)
        except ValueError:
            log.debug("Ignoring unknown status %r", value)
            return
        task.is_done = task.status is TaskStatus.DONE
    elif key == "color":
        task.color = normalize_color(value) if value else None
    elif key == "linked_note":
        task.linked_note = value or None
    else:
        log.debug("Ignoring unknown task field %r", key)


def patch_line(content: str, line_number: int, **changes) -> str:
    """
    Rewrite a single task line with updated fields.

    The line is re-parsed, the changes are applied, and it is serialized
    back in canonical form. Every other line is left byte-for-byte intact.

    Supported changes: title, duration, dependencies, start (date, ISO
    string or None to clear), is_milestone, status, color, linked_note
    (None or "" clears the last three).

    Returns the content unchanged when line_number is out of range or does
    not hold a task.
    """
    lines = content.split("\n")
    index = line_number - 1
    if index < 0 or index >= len(lines):
        return content

    task = parse_task_line(lines[index], line_number)
    if task is None:
        return content

    for key, value in changes.items():
        _apply_change(task, key, value)

    ending = "\r" if lines[index].endswith("\r") else ""
    lines[index] = serialize_task(task) + ending
    return "\n".join(lines)
