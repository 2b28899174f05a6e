"""
Stable identifiers for resolved projects and tasks.

Ids are positional, so the same outline always yields the same ids.
"""


def generate_project_id(index: int) -> str:
    """Id for the project at 0-based position ``index`` in the outline."""
    return f"project-{index}"


def generate_task_id(project_id: str, index: int) -> str:
    """
    Id for the task at 0-based position ``index`` in its project's flat list.

    Args:
        project_id: Owning project id, e.g. "project-0"
        index: Position in source order

    Returns:
        String such as "project-0-task-3"
    """
    return f"{project_id}-task-{index}"
