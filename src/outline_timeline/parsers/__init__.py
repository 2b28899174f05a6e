from .outline_parser import (
    parse_content,
    parse_file,
    parse_task_line,
    parse_project_header,
    patch_line,
    serialize_task,
)
from .modifiers import parse_modifiers
from .outline_editor import (
    default_outline,
    delete_line,
    delete_project,
    indent_task,
    insert_line,
    move_line,
    move_project,
    outdent_task,
    project_block_range,
    update_project_header,
)

__all__ = [
    "parse_content",
    "parse_file",
    "parse_task_line",
    "parse_project_header",
    "patch_line",
    "serialize_task",
    "parse_modifiers",
    "default_outline",
    "delete_line",
    "delete_project",
    "indent_task",
    "insert_line",
    "move_line",
    "move_project",
    "outdent_task",
    "project_block_range",
    "update_project_header",
]
