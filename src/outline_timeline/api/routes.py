"""REST API routes for the timeline."""

from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

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


# ---------------------------------------------------------------------------
# Request body models
# ---------------------------------------------------------------------------


class DragBody(BaseModel):
    start: str
    duration: Optional[int] = None


class TaskUpdateBody(BaseModel):
    title: Optional[str] = None
    duration: Optional[int] = None
    start: Optional[str] = None
    dependencies: Optional[List[int]] = None
    is_milestone: Optional[bool] = None
    status: Optional[str] = None
    color: Optional[str] = None
    linked_note: Optional[str] = None


class OutlineEditBody(BaseModel):
    operation: str
    line_number: int
    target_line_number: Optional[int] = None
    text: Optional[str] = None


class ParseBody(BaseModel):
    text: str
    today: Optional[str] = None


# ---------------------------------------------------------------------------
# Route registration
# ---------------------------------------------------------------------------


def register_routes(app_router: APIRouter, cache) -> None:
    """Attach all REST routes that use the shared cache."""

    @app_router.get("/timeline")
    def get_timeline():
        return handle_timeline(cache)

    @app_router.get("/conflicts")
    def get_conflicts():
        return handle_conflicts(cache)

    @app_router.get("/tasks/{task_id}")
    def get_task(task_id: str):
        result = handle_task_get(cache, task_id=task_id)
        if "error" in result:
            raise HTTPException(status_code=404, detail=result["error"])
        return result

    @app_router.patch("/tasks/{task_id}")
    def update_task(task_id: str, body: TaskUpdateBody):
        try:
            result = handle_task_update(cache, task_id=task_id, **body.model_dump())
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))
        if "error" in result:
            raise HTTPException(status_code=404, detail=result["error"])
        return result

    @app_router.post("/tasks/{task_id}/drag/preview")
    def preview_drag(task_id: str, body: DragBody):
        try:
            result = handle_drag_preview(
                cache, task_id=task_id, start=body.start, duration=body.duration
            )
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))
        if "error" in result:
            raise HTTPException(status_code=404, detail=result["error"])
        return result

    @app_router.post("/tasks/{task_id}/drag")
    def commit_drag(task_id: str, body: DragBody):
        try:
            result = handle_drag_commit(
                cache, task_id=task_id, start=body.start, duration=body.duration
            )
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))
        if "error" in result:
            raise HTTPException(status_code=404, detail=result["error"])
        return result

    @app_router.post("/undo")
    def undo():
        return handle_undo(cache)

    @app_router.post("/redo")
    def redo():
        return handle_redo(cache)

    @app_router.post("/outline/edit")
    def edit_outline(body: OutlineEditBody):
        try:
            return handle_outline_edit(cache, **body.model_dump())
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app_router.post("/parse")
    def parse_text(body: ParseBody):
        try:
            return handle_parse(text=body.text, today=body.today)
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app_router.get("/cache/status")
    def get_cache_status():
        return handle_cache_status(cache)
