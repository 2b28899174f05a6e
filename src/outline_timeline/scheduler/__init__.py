from .calculator import (
    DragResult,
    ScheduleResult,
    calculate,
    detect_conflicts,
    get_parent_tasks_to_update,
    recalculate_from_drag,
)

__all__ = [
    "DragResult",
    "ScheduleResult",
    "calculate",
    "detect_conflicts",
    "get_parent_tasks_to_update",
    "recalculate_from_drag",
]
