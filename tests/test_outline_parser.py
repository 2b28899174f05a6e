"""
Tests for parsers/outline_parser.py.

Covers:
- parse_global_start_date: first valid date wins, fallback to today
- parse_project_header: icons, linked notes
- parse_task_line: levels, titles, durations, modifiers
- parse_content: project grouping, line numbers, stray lines
- serialize_task: canonical token order, round trip
- patch_line: single-line rewrites
"""

import sys
from datetime import date
from pathlib import Path

# Add src to path so imports work without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from outline_timeline.models.task import ParsedTask, TaskStatus
from outline_timeline.parsers.outline_parser import (
    parse_content,
    parse_file,
    parse_global_start_date,
    parse_project_header,
    parse_task_line,
    patch_line,
    serialize_task,
)
from outline_timeline.utils.icons import DEFAULT_ICON


SAMPLE = (
    "# My Projects\n"
    "@start: 2025-01-01\n"
    "\n"
    "## 🚀 Project Name\n"
    "> Task one (5)\n"
    "> Task two (3) @after:1\n"
    ">> Subtask (2)\n"
    "> Final review (1) @after:2 @milestone\n"
)


# ---------------------------------------------------------------------------
# Global start date
# ---------------------------------------------------------------------------

class TestGlobalStartDate:
    def test_reads_start_line(self):
        assert parse_global_start_date("@start: 2025-03-01\n") == date(2025, 3, 1)

    def test_no_space_after_colon(self):
        assert parse_global_start_date("@start:2025-03-01") == date(2025, 3, 1)

    def test_first_occurrence_wins(self):
        text = "@start: 2025-03-01\n@start: 2024-01-01\n"
        assert parse_global_start_date(text) == date(2025, 3, 1)

    def test_malformed_date_falls_through_to_next(self):
        text = "@start: 2025-13-45\n@start: 2025-02-01\n"
        assert parse_global_start_date(text) == date(2025, 2, 1)

    def test_missing_uses_today(self):
        assert parse_global_start_date("## P\n", today=date(2030, 5, 6)) == date(2030, 5, 6)

    def test_missing_without_today_uses_current_date(self):
        assert parse_global_start_date("") == date.today()

    def test_must_start_the_line(self):
        text = "note @start: 2025-03-01\n"
        assert parse_global_start_date(text, today=date(2030, 1, 1)) == date(2030, 1, 1)


# ---------------------------------------------------------------------------
# Project headers
# ---------------------------------------------------------------------------

class TestProjectHeader:
    def test_plain_header_gets_default_icon(self):
        project = parse_project_header("## Website")
        assert project.name == "Website"
        assert project.icon == DEFAULT_ICON
        assert project.linked_note is None

    def test_emoji_icon_is_stripped_from_name(self):
        project = parse_project_header("## 🚀 Launch")
        assert project.icon == "🚀"
        assert project.name == "Launch"

    def test_emoji_with_variation_selector(self):
        project = parse_project_header("## \u2b50\ufe0f Stars")
        assert project.icon == "\u2b50\ufe0f"
        assert project.name == "Stars"

    def test_zwj_sequence_is_one_icon(self):
        project = parse_project_header("## \U0001F469\u200d\U0001F4BB Coding")
        assert project.icon == "\U0001F469\u200d\U0001F4BB"
        assert project.name == "Coding"

    @pytest.mark.parametrize("icon", ["©", "™", "‼", "\U0001F1EF\U0001F1F5"])
    def test_pictographic_text_symbols_are_icons(self, icon):
        project = parse_project_header(f"## {icon} Legal")
        assert project.icon == icon
        assert project.name == "Legal"

    @pytest.mark.parametrize("header", ["■ Box", "ⓐ Circled", "→ Arrow"])
    def test_plain_symbols_are_not_icons(self, header):
        project = parse_project_header(f"## {header}")
        assert project.icon == DEFAULT_ICON
        assert project.name == header

    def test_emoji_only_header_keeps_text_as_name(self):
        project = parse_project_header("## 🚀")
        assert project.icon == DEFAULT_ICON
        assert project.name == "🚀"

    def test_linked_note_unquoted(self):
        project = parse_project_header("## Website @note:Roadmap")
        assert project.name == "Website"
        assert project.linked_note == "Roadmap"

    def test_linked_note_quoted(self):
        project = parse_project_header('## 📦 Ship @note:"Release plan"')
        assert project.icon == "📦"
        assert project.linked_note == "Release plan"
        assert project.name == "Ship"

    def test_single_hash_is_not_a_project(self):
        assert parse_project_header("# My Projects") is None

    def test_records_line_number(self):
        assert parse_project_header("## P", line_number=7).line_number == 7


# ---------------------------------------------------------------------------
# Task lines
# ---------------------------------------------------------------------------

class TestTaskLine:
    def test_basic_task(self):
        task = parse_task_line("> Write docs (5)")
        assert task.level == 1
        assert task.title == "Write docs"
        assert task.duration == 5
        assert task.dependencies == []
        assert task.status is TaskStatus.PENDING
        assert not task.is_milestone
        assert not task.is_done

    def test_level_is_marker_count(self):
        assert parse_task_line(">>> Deep (1)").level == 3

    def test_title_runs_to_last_parenthesised_integer(self):
        task = parse_task_line("> Fix (bug) in step (2) (3)")
        assert task.title == "Fix (bug) in step (2)"
        assert task.duration == 3

    def test_title_may_contain_at_sign(self):
        task = parse_task_line("> Email bob@example.com (1)")
        assert task.title == "Email bob@example.com"
        assert task.duration == 1

    def test_zero_duration(self):
        assert parse_task_line("> Kickoff (0)").duration == 0

    def test_dependencies_keep_order_and_repeat(self):
        task = parse_task_line("> T (2) @after:3 @after:1 @after:3")
        assert task.dependencies == [3, 1, 3]

    def test_modifiers_are_order_independent(self):
        a = parse_task_line("> T (2) @milestone @after:1 @done")
        b = parse_task_line("> T (2) @done @after:1 @milestone")
        assert a == b

    def test_done_sets_flag_and_status(self):
        task = parse_task_line("> T (2) @done")
        assert task.is_done
        assert task.status is TaskStatus.DONE

    def test_progress_and_cancelled(self):
        assert parse_task_line("> T (2) @progress").status is TaskStatus.IN_PROGRESS
        assert parse_task_line("> T (2) @cancelled").status is TaskStatus.CANCELLED
        assert not parse_task_line("> T (2) @cancelled").is_done

    def test_color_is_normalised(self):
        assert parse_task_line("> T (1) @color:ff0000").color == "#ff0000"
        assert parse_task_line("> T (1) @color:#00ff00").color == "#00ff00"

    def test_explicit_start(self):
        assert parse_task_line("> T (1) @start:2025-02-03").explicit_start == date(2025, 2, 3)

    def test_malformed_start_is_dropped(self):
        assert parse_task_line("> T (1) @start:someday").explicit_start is None

    def test_linked_note_quoted_and_bare(self):
        assert parse_task_line('> T (1) @note:"Design doc"').linked_note == "Design doc"
        assert parse_task_line("> T (1) @note:Design").linked_note == "Design"

    def test_unknown_modifier_ignored(self):
        task = parse_task_line("> T (1) @owner:alice @after:2")
        assert task.dependencies == [2]

    def test_not_a_task(self):
        assert parse_task_line("Just text (3)") is None
        assert parse_task_line("> No duration") is None
        assert parse_task_line(">Missing space (2)") is None

    def test_free_text_after_duration_keeps_task(self):
        task = parse_task_line("> Task (5) then more words")
        assert task.title == "Task"
        assert task.duration == 5

    def test_modifiers_after_free_text(self):
        task = parse_task_line("> Review (3) needs sign-off @after:1 @milestone")
        assert task.title == "Review"
        assert task.dependencies == [1]
        assert task.is_milestone

    def test_carriage_return_is_ignored(self):
        task = parse_task_line("> T (4) @milestone\r")
        assert task.duration == 4
        assert task.is_milestone


# ---------------------------------------------------------------------------
# Whole documents
# ---------------------------------------------------------------------------

class TestParseContent:
    def test_sample_outline(self):
        result = parse_content(SAMPLE)
        assert result.global_start_date == date(2025, 1, 1)
        assert len(result.projects) == 1

        project = result.projects[0]
        assert project.name == "Project Name"
        assert project.icon == "🚀"
        assert project.line_number == 4
        assert [t.title for t in project.tasks] == [
            "Task one", "Task two", "Subtask", "Final review",
        ]
        assert [t.level for t in project.tasks] == [1, 1, 2, 1]
        assert [t.line_number for t in project.tasks] == [5, 6, 7, 8]
        assert project.tasks[3].dependencies == [2]
        assert project.tasks[3].is_milestone

    def test_multiple_projects_in_order(self):
        text = "## A\n> a1 (1)\n## B\n> b1 (2)\n> b2 (3)\n"
        result = parse_content(text, today=date(2025, 1, 1))
        assert [p.name for p in result.projects] == ["A", "B"]
        assert [len(p.tasks) for p in result.projects] == [1, 2]

    def test_tasks_before_any_project_are_ignored(self):
        text = "> orphan (1)\n## A\n> a1 (1)\n"
        result = parse_content(text, today=date(2025, 1, 1))
        assert [t.title for t in result.projects[0].tasks] == ["a1"]

    def test_free_text_line_keeps_dependency_positions(self):
        result = parse_content("## P\n> A (2)\n> B (3) needs review\n> C (1) @after:2\n")
        tasks = result.projects[0].tasks
        assert [t.title for t in tasks] == ["A", "B", "C"]
        assert tasks[2].dependencies == [2]

    def test_empty_project(self):
        result = parse_content("## Empty\n", today=date(2025, 1, 1))
        assert result.projects[0].tasks == []

    def test_empty_text(self):
        result = parse_content("", today=date(2025, 1, 1))
        assert result.projects == []
        assert result.global_start_date == date(2025, 1, 1)

    def test_crlf_line_endings(self):
        result = parse_content(SAMPLE.replace("\n", "\r\n"))
        assert result.global_start_date == date(2025, 1, 1)
        assert result.projects[0].name == "Project Name"
        assert len(result.projects[0].tasks) == 4

    def test_every_parse_is_fresh(self):
        first = parse_content(SAMPLE)
        first.projects[0].tasks[0].title = "changed"
        assert parse_content(SAMPLE).projects[0].tasks[0].title == "Task one"

    def test_parse_file(self, tmp_path):
        path = tmp_path / "outline.md"
        path.write_text(SAMPLE, encoding="utf-8")
        assert len(parse_file(path).projects[0].tasks) == 4


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

class TestSerializeTask:
    def test_plain_task(self):
        task = ParsedTask(level=1, title="Plan", duration=5)
        assert serialize_task(task) == "> Plan (5)"

    def test_canonical_token_order(self):
        task = ParsedTask(
            level=2,
            title="Sub",
            duration=3,
            dependencies=[2, 1],
            is_milestone=True,
            is_done=True,
            status=TaskStatus.DONE,
            color="#00ff00",
            explicit_start=date(2025, 1, 5),
            linked_note="My Note",
        )
        assert serialize_task(task) == (
            '>> Sub (3) @after:2 @after:1 @start:2025-01-05 @milestone @done '
            '@color:00ff00 @note:"My Note"'
        )

    def test_round_trip_preserves_fields(self):
        original = parse_task_line(
            '>> Build (bundle) (4) @note:"Spec v2" @color:abcdef @progress '
            "@after:3 @milestone @after:1 @start:2025-06-30"
        )
        again = parse_task_line(serialize_task(original))
        assert again == original


# ---------------------------------------------------------------------------
# Line patching
# ---------------------------------------------------------------------------

class TestPatchLine:
    CONTENT = "## P\n> A (5)\n> B (2) @after:1\n"

    def test_only_target_line_changes(self):
        patched = patch_line(self.CONTENT, 3, duration=4)
        assert patched == "## P\n> A (5)\n> B (4) @after:1\n"

    def test_set_and_clear_start(self):
        patched = patch_line(self.CONTENT, 3, start=date(2025, 2, 1))
        assert patched.splitlines()[2] == "> B (2) @after:1 @start:2025-02-01"
        cleared = patch_line(patched, 3, start=None)
        assert cleared == self.CONTENT

    def test_start_from_iso_string(self):
        patched = patch_line(self.CONTENT, 2, start="2025-03-04")
        assert patched.splitlines()[1] == "> A (5) @start:2025-03-04"

    def test_status_done(self):
        patched = patch_line(self.CONTENT, 2, status="done")
        assert patched.splitlines()[1] == "> A (5) @done"

    def test_unknown_status_ignored(self):
        assert patch_line(self.CONTENT, 2, status="someday") == self.CONTENT

    def test_title_milestone_color_note(self):
        patched = patch_line(
            self.CONTENT, 2, title="Alpha", is_milestone=True, color="red", linked_note="Doc"
        )
        assert patched.splitlines()[1] == "> Alpha (5) @milestone @color:red @note:Doc"

    def test_dependencies(self):
        patched = patch_line(self.CONTENT, 3, dependencies=[1, 2])
        assert patched.splitlines()[2] == "> B (2) @after:1 @after:2"

    def test_unknown_field_ignored(self):
        assert patch_line(self.CONTENT, 2, owner="alice") == self.CONTENT

    @pytest.mark.parametrize("line_number", [0, 1, 4, 99])
    def test_non_task_or_out_of_range_is_noop(self, line_number):
        assert patch_line(self.CONTENT, line_number, duration=9) == self.CONTENT

    def test_preserves_crlf(self):
        content = "## P\r\n> A (5)\r\n"
        assert patch_line(content, 2, duration=7) == "## P\r\n> A (7)\r\n"
