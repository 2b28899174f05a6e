"""
Timeline MCP tools.

Core logic lives in the handle_* functions of api.handlers (return dicts).
The wrappers registered here serialize to JSON strings.
"""

import json
import logging
from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from outline_timeline.api.handlers import (
    handle_cache_status,
    handle_conflicts,
    handle_drag_commit,
    handle_drag_preview,
    handle_outline_edit,
    handle_parse,
    handle_redo,
    handle_task_get,
    handle_task_update,
    handle_timeline,
    handle_undo,
)

log = logging.getLogger(__name__)


def register_timeline_tools(mcp: FastMCP, cache) -> None:
    """Register all timeline MCP tools onto the FastMCP instance."""

    @mcp.tool()
    def timeline_get() -> str:
        """
        Get the resolved timeline.

        Returns:
            JSON with global start/end dates, projects (tasks nested under
            their parents, each with start, exclusive end and duration in
            days) and dependency conflicts
        """
        return json.dumps(handle_timeline(cache), indent=2)

    @mcp.tool()
    def timeline_conflicts() -> str:
        """
        List tasks that start before one of their @after dependencies ends.

        Returns:
            JSON array of conflicts
        """
        return json.dumps(handle_conflicts(cache), indent=2)

    @mcp.tool()
    def task_get(task_id: str) -> str:
        """
        Get a single task by ID with its children.

        Args:
            task_id: Task ID such as "project-0-task-2"

        Returns:
            JSON task object, or error message
        """
        return json.dumps(handle_task_get(cache, task_id=task_id), indent=2)

    @mcp.tool()
    def task_drag_preview(task_id: str, start: str, duration: Optional[int] = None) -> str:
        """
        Preview moving (and optionally resizing) a task without saving.

        Dependents are pushed later and parent spans are recomputed on a
        copy; the outline file is not changed.

        Args:
            task_id: Task to move
            start: New start date (YYYY-MM-DD)
            duration: New duration in days (omit to keep)

        Returns:
            JSON with the moved task and all recomputed projects
        """
        try:
            return json.dumps(
                handle_drag_preview(cache, task_id=task_id, start=start, duration=duration),
                indent=2,
            )
        except Exception as e:
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def task_drag(task_id: str, start: str, duration: Optional[int] = None) -> str:
        """
        Move (and optionally resize) a task and save it to the outline.

        Writes @start:<date> and the duration on the task's line and the
        recomputed durations of its parent tasks. The change can be undone.

        Args:
            task_id: Task to move
            start: New start date (YYYY-MM-DD)
            duration: New duration in days (omit to keep)

        Returns:
            Updated task JSON or error message
        """
        try:
            return json.dumps(
                handle_drag_commit(cache, task_id=task_id, start=start, duration=duration),
                indent=2,
            )
        except Exception as e:
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def task_update(
        task_id: str,
        title: Optional[str] = None,
        duration: Optional[int] = None,
        start: Optional[str] = None,
        dependencies: Optional[List[int]] = None,
        is_milestone: Optional[bool] = None,
        status: Optional[str] = None,
        color: Optional[str] = None,
        linked_note: Optional[str] = None,
    ) -> str:
        """
        Update fields of a task line.

        Only fields you pass will be changed. Pass an empty string to clear
        start, color or linked_note.

        Args:
            task_id: The task ID to update
            title: New title
            duration: New duration in days
            start: Explicit start date (YYYY-MM-DD), "" to let it be scheduled
            dependencies: 1-based positions of tasks in the same project
            is_milestone: Mark or unmark as milestone
            status: "pending", "in_progress", "done" or "cancelled"
            color: Color name or hex value
            linked_note: Name of a linked note

        Returns:
            Updated task JSON or error message
        """
        try:
            return json.dumps(
                handle_task_update(
                    cache,
                    task_id=task_id,
                    title=title,
                    duration=duration,
                    start=start,
                    dependencies=dependencies,
                    is_milestone=is_milestone,
                    status=status,
                    color=color,
                    linked_note=linked_note,
                ),
                indent=2,
            )
        except Exception as e:
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def timeline_undo() -> str:
        """Undo the most recent move, resize or date edit."""
        try:
            return json.dumps(handle_undo(cache), indent=2)
        except Exception as e:
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def timeline_redo() -> str:
        """Redo the most recently undone edit."""
        try:
            return json.dumps(handle_redo(cache), indent=2)
        except Exception as e:
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def outline_edit(
        operation: str,
        line_number: int,
        target_line_number: Optional[int] = None,
        text: Optional[str] = None,
    ) -> str:
        """
        Apply a structural edit to the outline file.

        Clears the undo history, since line numbers shift.

        Args:
            operation: "indent", "outdent", "insert", "delete", "move",
                       "delete_project" or "move_project"
            line_number: 1-based line the edit applies to (for "insert",
                         the line to insert after; 0 inserts at the top)
            target_line_number: Destination line for "move"/"move_project"
            text: Line to insert for "insert"

        Returns:
            JSON with "changed": true when the file was modified
        """
        try:
            return json.dumps(
                handle_outline_edit(
                    cache,
                    operation=operation,
                    line_number=line_number,
                    target_line_number=target_line_number,
                    text=text,
                ),
                indent=2,
            )
        except Exception as e:
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def outline_parse(text: str, today: Optional[str] = None) -> str:
        """
        Parse and schedule outline text without touching the open outline.

        Args:
            text: Outline text
            today: Start date to assume when the text has no @start line

        Returns:
            JSON timeline, same shape as timeline_get
        """
        try:
            return json.dumps(handle_parse(text=text, today=today), indent=2)
        except Exception as e:
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def cache_status() -> str:
        """
        Show session statistics.

        Returns:
            JSON with file path, project/task/conflict counts, last load time
            and undo/redo availability
        """
        return json.dumps(handle_cache_status(cache), indent=2)
