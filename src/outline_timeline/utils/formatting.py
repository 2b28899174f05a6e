"""
Canonical outline formatting.

This module is the single source of truth for how a task line and a project
header are rendered back to text. Tokens always come out in the same order:

    @after:N ...  @start:YYYY-MM-DD  @milestone  @done|@progress|@cancelled  @color:hex  @note:value
"""

from typing import List, Optional

from outline_timeline.utils.dates import format_iso
from outline_timeline.utils.icons import DEFAULT_ICON

TASK_MARKER = ">"
PROJECT_MARKER = "##"

_STATUS_TOKENS = {
    "in_progress": "@progress",
    "cancelled": "@cancelled",
}


def render_value(value: str) -> str:
    """Quote a modifier value when it would not survive unquoted."""
    if any(ch.isspace() for ch in value) or "@" in value:
        return f'"{value}"'
    return value


def render_modifiers(task) -> List[str]:
    """
    Render the modifier tokens of a task in canonical order.

    Args:
        task: A ParsedTask or resolved Task (same field names)

    Returns:
        List of tokens such as ["@after:1", "@milestone"]
    """
    tokens = [f"@after:{dep}" for dep in task.dependencies]

    if task.explicit_start:
        tokens.append(f"@start:{format_iso(task.explicit_start)}")

    if task.is_milestone:
        tokens.append("@milestone")

    status = getattr(task.status, "value", task.status)
    if status == "done" or task.is_done:
        tokens.append("@done")
    elif status in _STATUS_TOKENS:
        tokens.append(_STATUS_TOKENS[status])

    if task.color:
        tokens.append(f"@color:{task.color.lstrip('#')}")

    if task.linked_note:
        tokens.append(f"@note:{render_value(task.linked_note)}")

    return tokens


def render_task_line(task) -> str:
    head = f"{TASK_MARKER * task.level} {task.title} ({task.duration})"
    return " ".join([head] + render_modifiers(task))


def render_project_header(
    name: str, icon: Optional[str] = None, linked_note: Optional[str] = None
) -> str:
    """Render a ``## <icon> <name> [@note:...]`` header line."""
    header = f"{PROJECT_MARKER} {icon or DEFAULT_ICON} {name}"
    if linked_note:
        header += f" @note:{render_value(linked_note)}"
    return header
