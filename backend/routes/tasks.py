from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder

from backend.auth import require_user_id
from backend.schemas import TaskCreate, TaskPatch
from backend import repositories
from backend.repositories import TASK_PRIORITIES, TASK_STATUSES

logger = logging.getLogger(__name__)

router = APIRouter()


def _validate_task_fields(patch: dict) -> dict:
    clean = dict(patch or {})
    if "title" in clean:
        title = str(clean.get("title") or "").strip()
        if not title:
            raise HTTPException(status_code=400, detail="Title is required")
        clean["title"] = title
    if "status" in clean and clean["status"] not in TASK_STATUSES:
        raise HTTPException(status_code=400, detail="Status must be pending, in_progress, completed, or cancelled")
    if "priority" in clean and clean["priority"] not in TASK_PRIORITIES:
        raise HTTPException(status_code=400, detail="Priority must be low, medium, high, or urgent")
    return clean


@router.get("/api/tasks")
async def list_tasks(
    status: str | None = Query(None),
    limit: int = Query(50, ge=1, le=500),
    user_id: str = Depends(require_user_id),
):
    try:
        items = await repositories.list_tasks(user_id, status=status, limit=limit)
    except Exception as exc:
        logger.exception("Failed to list tasks: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"tasks": jsonable_encoder(items)}


@router.post("/api/tasks", status_code=201)
async def create_task(payload: TaskCreate, user_id: str = Depends(require_user_id)):
    if not str(payload.title or "").strip():
        raise HTTPException(status_code=400, detail="Title is required")
    clean = _validate_task_fields(payload.model_dump(exclude_unset=True))
    try:
        record = await repositories.create_task(user_id, clean)
    except Exception as exc:
        logger.exception("Failed to create task: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"task": jsonable_encoder(record)}


@router.get("/api/tasks/{task_id}")
async def get_task(task_id: str, user_id: str = Depends(require_user_id)):
    record = await repositories.get_task(user_id, task_id)
    if not record:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"task": jsonable_encoder(record)}


@router.put("/api/tasks/{task_id}")
async def update_task(task_id: str, payload: TaskPatch, user_id: str = Depends(require_user_id)):
    patch = _validate_task_fields(payload.model_dump(exclude_unset=True))
    try:
        record = await repositories.update_task(user_id, task_id, patch)
    except Exception as exc:
        logger.exception("Failed to update task: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    if not record:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"task": jsonable_encoder(record)}


@router.delete("/api/tasks/{task_id}")
async def delete_task(task_id: str, user_id: str = Depends(require_user_id)):
    deleted = await repositories.delete_task(user_id, task_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"message": "Task deleted successfully"}
