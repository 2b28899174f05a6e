"""
Structural edits on outline text.

Every function takes the full outline text and returns new text; nothing
here touches the filesystem. Line numbers are 1-based, matching the
``line_number`` recorded by the parser. Requests that fall outside the
document return the content unchanged.
"""

import re
from datetime import date
from typing import List, Optional, Tuple

from outline_timeline.parsers.outline_parser import PROJECT_HEADER_PATTERN
from outline_timeline.utils.dates import format_iso
from outline_timeline.utils.formatting import TASK_MARKER, render_project_header

_TASK_PREFIX = re.compile(r"^(>+)")


def _split(content: str) -> List[str]:
    return content.split("\n")


def _join(lines: List[str]) -> str:
    return "\n".join(lines)


def _valid(lines: List[str], line_number: int) -> bool:
    return 1 <= line_number <= len(lines)


def indent_task(content: str, line_number: int) -> str:
    """Add one nesting marker to a task line."""
    lines = _split(content)
    if not _valid(lines, line_number):
        return content
    if _TASK_PREFIX.match(lines[line_number - 1]):
        lines[line_number - 1] = TASK_MARKER + lines[line_number - 1]
    return _join(lines)


def outdent_task(content: str, line_number: int) -> str:
    """Remove one nesting marker; level-1 tasks are left alone."""
    lines = _split(content)
    if not _valid(lines, line_number):
        return content
    m = _TASK_PREFIX.match(lines[line_number - 1])
    if m and len(m.group(1)) > 1:
        lines[line_number - 1] = lines[line_number - 1][1:]
    return _join(lines)


def insert_line(content: str, after_line_number: int, new_line: str) -> str:
    """Insert new_line after the given line (0 inserts at the top)."""
    lines = _split(content)
    if after_line_number < 0 or after_line_number > len(lines):
        return content
    lines.insert(after_line_number, new_line)
    return _join(lines)


def delete_line(content: str, line_number: int) -> str:
    lines = _split(content)
    if not _valid(lines, line_number):
        return content
    del lines[line_number - 1]
    return _join(lines)


def move_line(content: str, from_line_number: int, target_line_number: int) -> str:
    """
    Move one line so it lands before target_line_number (as numbered
    before the move). Targets past the end are clamped.
    """
    lines = _split(content)
    if not _valid(lines, from_line_number):
        return content

    line = lines.pop(from_line_number - 1)
    target = target_line_number - 1
    if from_line_number - 1 < target:
        target -= 1
    target = max(0, min(target, len(lines)))
    lines.insert(target, line)
    return _join(lines)


def project_block_range(content: str, line_number: int) -> Optional[Tuple[int, int]]:
    """
    Return the (first, last) 1-based lines of the project whose header is on
    line_number. The block runs up to the line before the next project
    header, or to the end of the document.
    """
    lines = _split(content)
    if not _valid(lines, line_number) or not PROJECT_HEADER_PATTERN.match(lines[line_number - 1]):
        return None

    last = len(lines)
    for index in range(line_number, len(lines)):
        if PROJECT_HEADER_PATTERN.match(lines[index]):
            last = index
            break
    return line_number, last


def delete_project(content: str, line_number: int) -> str:
    """Delete a project header and all lines belonging to it."""
    block = project_block_range(content, line_number)
    if block is None:
        return content
    lines = _split(content)
    first, last = block
    del lines[first - 1:last]
    return _join(lines)


def move_project(content: str, line_number: int, target_line_number: int) -> str:
    """Move a whole project block so it starts before target_line_number."""
    block = project_block_range(content, line_number)
    if block is None:
        return content

    lines = _split(content)
    first, last = block
    if first <= target_line_number <= last:
        return content

    moved = lines[first - 1:last]
    del lines[first - 1:last]
    target = target_line_number - 1
    if target > first - 1:
        target -= len(moved)
    target = max(0, min(target, len(lines)))
    lines[target:target] = moved
    return _join(lines)


def update_project_header(
    content: str,
    line_number: int,
    name: str,
    icon: Optional[str] = None,
    linked_note: Optional[str] = None,
) -> str:
    """Rewrite a project header line; non-header lines are left alone."""
    lines = _split(content)
    if not _valid(lines, line_number) or not PROJECT_HEADER_PATTERN.match(lines[line_number - 1]):
        return content
    lines[line_number - 1] = render_project_header(name, icon, linked_note)
    return _join(lines)


def default_outline(today: date) -> str:
    """Starter outline written when a new outline file is created."""
    return (
        "# My Projects\n"
        f"@start: {format_iso(today)}\n"
        "\n"
        "## Sample Project\n"
        "> Planning phase (5)\n"
        "> Development (10) @after:1\n"
        ">> Backend setup (4)\n"
        ">> Frontend setup (4)\n"
        ">> Integration (2) @after:3 @after:4\n"
        "> Testing (5) @after:2\n"
        "> Deployment (2) @after:6 @milestone\n"
    )
