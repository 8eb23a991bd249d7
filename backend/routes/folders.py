from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder

from backend.auth import require_user_id
from backend.schemas import FolderCreate, FolderPatch, FolderReorder
from backend import repositories

logger = logging.getLogger(__name__)

router = APIRouter()

FOLDER_COLORS = [
    "blue",
    "green",
    "purple",
    "red",
    "yellow",
    "pink",
    "indigo",
    "gray",
    "orange",
    "teal",
    "cyan",
    "lime",
]
FOLDER_UPDATE_COLORS = FOLDER_COLORS + ["default"]


@router.get("/api/folders")
async def list_folders(user_id: str = Depends(require_user_id)):
    try:
        folders = await repositories.list_folders(user_id)
    except Exception as exc:
        logger.exception("Failed to list folders: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"folders": jsonable_encoder(folders)}


@router.post("/api/folders", status_code=201)
async def create_folder(payload: FolderCreate, user_id: str = Depends(require_user_id)):
    name = str(payload.name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Folder name is required")
    color = payload.color if payload.color in FOLDER_COLORS else "blue"
    try:
        folder = await repositories.create_folder(
            user_id,
            {"name": name, "color": color, "icon": payload.icon, "emoji": payload.emoji},
        )
    except Exception as exc:
        logger.exception("Failed to create folder: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    return jsonable_encoder(folder)


@router.put("/api/folders")
async def reorder_folders(payload: FolderReorder, user_id: str = Depends(require_user_id)):
    if not payload.folders:
        raise HTTPException(status_code=400, detail="Folders array is required")
    try:
        await repositories.reorder_folders(user_id, [item.model_dump() for item in payload.folders])
    except Exception as exc:
        logger.exception("Failed to reorder folders: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"success": True, "message": "Folder order updated successfully"}


@router.get("/api/folders/stats")
async def get_folder_stats(user_id: str = Depends(require_user_id)):
    stats = await repositories.folder_stats(user_id)
    return {"stats": jsonable_encoder(stats)}


@router.put("/api/folders/{folder_id}")
async def update_folder(folder_id: str, payload: FolderPatch, user_id: str = Depends(require_user_id)):
    patch = payload.model_dump(exclude_unset=True)
    if "name" in patch:
        name = str(patch.get("name") or "").strip()
        if not name:
            raise HTTPException(status_code=400, detail="Folder name cannot be empty")
        patch["name"] = name
    if "color" in patch and patch["color"] not in FOLDER_UPDATE_COLORS:
        logger.warning("Invalid folder color %r, falling back to default", patch["color"])
        patch["color"] = "default"
    try:
        folder = await repositories.update_folder(user_id, folder_id, patch)
    except Exception as exc:
        logger.exception("Failed to update folder: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    if not folder:
        raise HTTPException(status_code=404, detail="Folder not found")
    return jsonable_encoder(folder)


@router.delete("/api/folders/{folder_id}")
async def delete_folder(folder_id: str, user_id: str = Depends(require_user_id)):
    folder = await repositories.get_folder(user_id, folder_id)
    if not folder:
        raise HTTPException(status_code=404, detail="Folder not found")
    if folder.get("is_default"):
        raise HTTPException(status_code=400, detail="Cannot delete default folders")
    await repositories.delete_folder(user_id, folder_id)
    return {"success": True}
