"""
Interactive harness for testing outline-timeline without MCP integration.

Usage:
    python harness.py <OUTLINE_FILE>

Drops you into an interactive REPL where you can call cache methods directly.
Also runs a quick smoke test on startup to verify parsing/scheduling works.
"""

import json
import sys
from pathlib import Path

# Add src/ to path so imports work
sys.path.insert(0, str(Path(__file__).parent / "src"))

from outline_timeline.cache.timeline_cache import TimelineCache
from outline_timeline.utils.dates import parse_iso_date


def _print_task(project, task) -> None:
    indent = "  " * (task.level - 1)
    flags = []
    if task.is_milestone:
        flags.append("milestone")
    if task.manually_positioned:
        flags.append("pinned")
    if task.dependencies:
        flags.append("after=" + ",".join(str(d) for d in task.dependencies))
    print(
        f"    {indent}[{task.id}] {task.title} ({task.duration}d) "
        f"{task.start} -> {task.end}  {' '.join(flags)}"
    )


def smoke_test(cache: TimelineCache) -> None:
    """Quick automated checks after initialization."""
    st = cache.status()
    print("\n=== Smoke Test ===")
    print(f"  Outline:      {st['file_path']}")
    print(f"  Projects:     {st['projects']}")
    print(f"  Tasks:        {st['tasks']}")
    print(f"  Conflicts:    {st['conflicts']}")
    print(f"  Start -> end: {st['global_start_date']} -> {st['global_end_date']}")

    for project in cache.projects():
        print(f"\n  {project.icon} {project.name}  {project.start} -> {project.end}")
        for task in project.walk():
            _print_task(project, task)

    for conflict in cache.schedule.conflicts:
        print(f"\n  CONFLICT [{conflict.task_id}] {conflict.message}")

    print("\n=== Smoke Test Complete ===\n")


def repl(cache: TimelineCache) -> None:
    """Simple REPL for interactive exploration."""
    print("Interactive mode. Type 'help' for commands, 'quit' to exit.\n")

    commands = {
        "help":     "Show this help",
        "status":   "Show cache status",
        "show":     "Print the resolved timeline",
        "task":     "Get task by ID. Usage: task <id>",
        "preview":  "Preview a drag. Usage: preview <id> <YYYY-MM-DD> [duration]",
        "drag":     "Commit a drag. Usage: drag <id> <YYYY-MM-DD> [duration]",
        "undo":     "Undo the last edit",
        "redo":     "Redo the last undone edit",
        "reload":   "Re-read the outline from disk",
        "quit":     "Exit",
    }

    while True:
        try:
            line = input("outline-timeline> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not line:
            continue

        parts = line.split()
        cmd = parts[0].lower()

        if cmd == "quit" or cmd == "exit":
            break

        elif cmd == "help":
            for k, v in commands.items():
                print(f"  {k:12s} {v}")

        elif cmd == "status":
            print(json.dumps(cache.status(), indent=2, default=str))

        elif cmd == "show":
            smoke_test(cache)

        elif cmd == "task":
            if len(parts) < 2:
                print("Usage: task <id>")
                continue
            entry = cache.get_task(parts[1])
            if entry:
                t, project = entry
                print(f"  ID:        {t.id}")
                print(f"  Title:     {t.title}")
                print(f"  Project:   {project.name}")
                print(f"  Level:     {t.level}")
                print(f"  Dates:     {t.start} -> {t.end} ({t.duration}d)")
                print(f"  Status:    {t.status.value}")
                print(f"  After:     {t.dependencies}")
                print(f"  Milestone: {t.is_milestone}")
                print(f"  Pinned:    {t.manually_positioned}")
                print(f"  Line:      {t.line_number}")
                for c in project.children_of(t):
                    print(f"             [{c.id}] {c.title}")
            else:
                print(f"  Task '{parts[1]}' not found")

        elif cmd in ("preview", "drag"):
            if len(parts) < 3:
                print(f"Usage: {cmd} <id> <YYYY-MM-DD> [duration]")
                continue
            start = parse_iso_date(parts[2])
            if start is None:
                print(f"  Invalid date: {parts[2]}")
                continue
            duration = int(parts[3]) if len(parts) > 3 else None
            if cmd == "preview":
                result = cache.preview_drag(parts[1], start, duration)
                if result.updated_task is None:
                    print(f"  Task '{parts[1]}' not found")
                    continue
                for project in result.projects:
                    if project.id == result.updated_task.project_id:
                        for task in project.walk():
                            _print_task(project, task)
            else:
                task = cache.commit_drag(parts[1], start, duration)
                if task is None:
                    print(f"  Task '{parts[1]}' not found")
                else:
                    print(f"  Moved [{task.id}] to {task.start} -> {task.end}")

        elif cmd == "undo":
            action = cache.undo()
            print(f"  Undid {action.kind} of {action.task_id}" if action else "  Nothing to undo")

        elif cmd == "redo":
            action = cache.redo()
            print(f"  Redid {action.kind} of {action.task_id}" if action else "  Nothing to redo")

        elif cmd == "reload":
            cache.reload()
            print("  Reloaded")

        else:
            print(f"Unknown command: {cmd}. Type 'help' for available commands.")


def main():
    if len(sys.argv) < 2:
        print("Usage: python harness.py <OUTLINE_FILE>")
        sys.exit(1)

    outline_file = Path(sys.argv[1]).resolve()

    print(f"Initializing cache from: {outline_file}")

    cache = TimelineCache()
    cache.initialize(outline_file)

    smoke_test(cache)
    repl(cache)

    print("Done.")


if __name__ == "__main__":
    main()
