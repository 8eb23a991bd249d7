from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from backend.auth import require_user_id
from backend.schemas import NoteCreate
from backend import repositories

logger = logging.getLogger(__name__)

router = APIRouter()


def note_to_wire(note: dict) -> dict:
    """Shape a joined note row the way the notes workspace reads it."""
    folder_name = note.get("folder_name")
    return {
        "id": note.get("id"),
        "title": note.get("title"),
        "content": note.get("content"),
        "tags": note.get("tags") or [],
        "category": folder_name or "unassigned",
        "folderId": note.get("folder_id"),
        "folderName": folder_name,
        "folderColor": note.get("folder_color"),
        "folderEmoji": note.get("folder_emoji"),
        "color": note.get("color"),
        "isPinned": bool(note.get("is_pinned")),
        "isStarred": bool(note.get("is_starred")),
        "isArchived": bool(note.get("is_archived")),
        "created_at": note.get("created_at"),
        "updated_at": note.get("updated_at"),
        "wordCount": note.get("word_count") or 0,
        "characterCount": note.get("character_count") or 0,
    }


async def _resolve_folder(user_id: str, patch: dict) -> dict:
    clean = dict(patch)
    category = clean.pop("category", None)
    if "title" in clean and clean["title"] is None:
        clean["title"] = ""
    folder_id = clean.get("folder_id")
    if folder_id:
        folder = await repositories.get_folder(user_id, folder_id)
        if not folder:
            raise HTTPException(status_code=400, detail="Folder not found")
    elif category and category != "unassigned":
        folder = await repositories.find_folder_by_name(user_id, category)
        clean["folder_id"] = folder.get("id") if folder else None
    elif category == "unassigned":
        clean["folder_id"] = None
    return clean


@router.get("/api/notes")
async def list_notes(user_id: str = Depends(require_user_id)):
    try:
        notes = await repositories.list_notes(user_id)
    except Exception as exc:
        logger.exception("Failed to list notes: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"notes": [note_to_wire(note) for note in notes]}


@router.post("/api/notes", status_code=201)
async def create_note(payload: NoteCreate, user_id: str = Depends(require_user_id)):
    clean = await _resolve_folder(user_id, payload.model_dump(exclude_unset=True))
    try:
        note = await repositories.create_note(user_id, clean)
    except Exception as exc:
        logger.exception("Failed to create note: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    return note_to_wire(note)


@router.get("/api/notes/{note_id}")
async def get_note(note_id: str, user_id: str = Depends(require_user_id)):
    note = await repositories.get_note(user_id, note_id)
    if not note:
        raise HTTPException(status_code=404, detail="Note not found")
    return note_to_wire(note)


@router.put("/api/notes/{note_id}")
async def update_note(note_id: str, payload: NoteCreate, user_id: str = Depends(require_user_id)):
    clean = await _resolve_folder(user_id, payload.model_dump(exclude_unset=True))
    try:
        note = await repositories.update_note(user_id, note_id, clean)
    except Exception as exc:
        logger.exception("Failed to update note: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    if not note:
        raise HTTPException(status_code=404, detail="Note not found")
    return note_to_wire(note)


@router.delete("/api/notes/{note_id}")
async def delete_note(note_id: str, user_id: str = Depends(require_user_id)):
    deleted = await repositories.delete_note(user_id, note_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Note not found")
    return {"success": True}
