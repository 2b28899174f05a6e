"""
Tests for the REST API routes.

Uses FastAPI TestClient against a real TimelineCache with a temp outline.
"""

import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from fastapi.testclient import TestClient

from outline_timeline.api.app import create_app
from outline_timeline.cache.timeline_cache import TimelineCache


OUTLINE = (
    "@start: 2025-01-01\n"
    "\n"
    "## 🚀 Launch @note:Plan\n"
    "> Design (3)\n"
    "> Build (5) @after:1\n"
    ">> Backend (2)\n"
    ">> Frontend (3)\n"
    "> Release (1) @after:2 @milestone\n"
)


@pytest.fixture
def outline_file(tmp_path):
    path = tmp_path / "outline.md"
    path.write_text(OUTLINE, encoding="utf-8")
    return path


@pytest.fixture
def cache(outline_file):
    c = TimelineCache(today=lambda: date(2030, 1, 1))
    c.initialize(outline_file)
    return c


@pytest.fixture
def client(cache):
    return TestClient(create_app(cache))


class TestTimeline:
    def test_get_timeline(self, client):
        resp = client.get("/api/timeline")
        assert resp.status_code == 200
        data = resp.json()
        assert data["global_start_date"] == "2025-01-01"
        assert data["global_end_date"] == "2025-01-10"
        assert data["conflicts"] == []

        project = data["projects"][0]
        assert project["name"] == "Launch"
        assert project["icon"] == "🚀"
        assert project["linked_note"] == "Plan"
        assert [t["title"] for t in project["tasks"]] == ["Design", "Build", "Release"]

        build = project["tasks"][1]
        assert [c["title"] for c in build["children"]] == ["Backend", "Frontend"]
        assert build["start"] == "2025-01-04"
        assert build["end"] == "2025-01-09"

    def test_conflicts(self, client):
        assert client.get("/api/conflicts").json() == []

        client.patch("/api/tasks/project-0-task-4", json={"start": "2025-01-02"})
        conflicts = client.get("/api/conflicts").json()
        assert len(conflicts) == 1
        assert conflicts[0]["task_id"] == "project-0-task-4"
        assert conflicts[0]["related_task_ids"] == ["project-0-task-1"]
        assert conflicts[0]["kind"] == "dependency_violation"

    def test_status(self, client):
        resp = client.get("/api/cache/status")
        assert resp.status_code == 200
        assert resp.json()["tasks"] == 5


class TestTasks:
    def test_get_task(self, client):
        resp = client.get("/api/tasks/project-0-task-4")
        assert resp.status_code == 200
        data = resp.json()
        assert data["title"] == "Release"
        assert data["is_milestone"] is True
        assert data["dependencies"] == [2]
        assert data["project_name"] == "Launch"

    def test_get_missing_task(self, client):
        assert client.get("/api/tasks/nope").status_code == 404

    def test_update_task(self, client, outline_file):
        resp = client.patch(
            "/api/tasks/project-0-task-0", json={"title": "Discovery", "color": "ff8800"}
        )
        assert resp.status_code == 200
        assert resp.json()["title"] == "Discovery"
        assert resp.json()["color"] == "#ff8800"
        assert "> Discovery (3) @color:ff8800" in outline_file.read_text(encoding="utf-8")

    def test_update_missing_task(self, client):
        resp = client.patch("/api/tasks/nope", json={"title": "x"})
        assert resp.status_code == 404

    def test_update_bad_date(self, client):
        resp = client.patch("/api/tasks/project-0-task-0", json={"start": "tomorrow"})
        assert resp.status_code == 400


class TestDrag:
    def test_preview_leaves_file_alone(self, client, outline_file):
        resp = client.post(
            "/api/tasks/project-0-task-0/drag/preview", json={"start": "2025-01-03"}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["task"]["start"] == "2025-01-03"
        assert data["task"]["manually_positioned"] is True
        assert outline_file.read_text(encoding="utf-8") == OUTLINE

    def test_commit_and_undo(self, client, outline_file):
        resp = client.post("/api/tasks/project-0-task-0/drag", json={"start": "2025-01-03"})
        assert resp.status_code == 200
        assert resp.json()["start"] == "2025-01-03"
        assert "> Design (3) @start:2025-01-03" in outline_file.read_text(encoding="utf-8")

        undo = client.post("/api/undo").json()
        assert undo["action"]["kind"] == "task_move"
        assert undo["action"]["before"]["start"] == "2025-01-01"
        assert undo["can_redo"] is True

        redo = client.post("/api/redo").json()
        assert redo["action"]["after"]["start"] == "2025-01-03"

    def test_nothing_to_undo(self, client):
        assert client.post("/api/undo").json()["action"] is None

    def test_drag_missing_task(self, client):
        resp = client.post("/api/tasks/nope/drag", json={"start": "2025-01-03"})
        assert resp.status_code == 404

    def test_drag_bad_date(self, client):
        resp = client.post("/api/tasks/project-0-task-0/drag", json={"start": "01/03/2025"})
        assert resp.status_code == 400


class TestOutline:
    def test_edit(self, client):
        resp = client.post("/api/outline/edit", json={"operation": "delete", "line_number": 8})
        assert resp.status_code == 200
        assert resp.json()["changed"] is True
        assert client.get("/api/cache/status").json()["tasks"] == 4

    def test_edit_insert(self, client):
        resp = client.post(
            "/api/outline/edit",
            json={"operation": "insert", "line_number": 8, "text": "> Party (1) @after:5"},
        )
        assert resp.json()["changed"] is True
        party = client.get("/api/tasks/project-0-task-5").json()
        assert party["start"] == "2025-01-10"

    def test_unknown_edit(self, client):
        resp = client.post("/api/outline/edit", json={"operation": "explode", "line_number": 1})
        assert resp.status_code == 400

    def test_move_requires_target(self, client):
        resp = client.post("/api/outline/edit", json={"operation": "move", "line_number": 4})
        assert resp.status_code == 400

    def test_parse_is_stateless(self, client):
        resp = client.post(
            "/api/parse", json={"text": "## X\n> a (2)\n> b (1) @after:1\n", "today": "2025-05-01"}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["global_start_date"] == "2025-05-01"
        assert data["projects"][0]["tasks"][1]["start"] == "2025-05-03"
        assert client.get("/api/cache/status").json()["tasks"] == 5
