from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import IntegrityError

from backend.auth import require_user_id
from backend.errors import is_unique_violation
from backend.schemas import MoodCreate, MoodPatch
from backend.settings import get_settings
from backend.timezones import InvalidTimezoneError, date_window, today_in
from backend import repositories

logger = logging.getLogger(__name__)

router = APIRouter()

MOOD_LABELS = {
    1: "Terrible",
    2: "Very Bad",
    3: "Bad",
    4: "Not Great",
    5: "Okay",
    6: "Good",
    7: "Great",
    8: "Excellent",
    9: "Amazing",
    10: "Perfect",
}


def _check_score(score) -> None:
    if score is None or not 1 <= int(score) <= 10:
        raise HTTPException(status_code=400, detail="Mood score must be between 1 and 10")


@router.get("/api/mood")
async def list_mood_entries(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    days: int | None = Query(None),
    timezone: str | None = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    user_id: str = Depends(require_user_id),
):
    window = None
    start_iso = start_date.isoformat() if start_date else None
    end_iso = end_date.isoformat() if end_date else None
    if not (start_date and end_date) and days is not None:
        try:
            window = date_window(days, timezone or get_settings().default_timezone)
        except InvalidTimezoneError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        except ValueError:
            raise HTTPException(status_code=400, detail="Days must be at least 1")
        start_iso, end_iso = window.start_date.isoformat(), window.end_date.isoformat()
    try:
        entries = await repositories.list_mood_entries(user_id, start_iso, end_iso, limit=limit)
    except Exception as exc:
        logger.exception("Failed to list mood entries: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    payload = {"entries": jsonable_encoder(entries)}
    if window is not None:
        payload["window"] = window.as_dict()
    return payload


@router.post("/api/mood", status_code=201)
async def save_mood_entry(
    payload: MoodCreate,
    response: Response,
    timezone: str | None = Query(None),
    user_id: str = Depends(require_user_id),
):
    _check_score(payload.mood_score)
    clean = payload.model_dump(exclude_unset=True)
    if not clean.get("date"):
        try:
            clean["date"] = today_in(timezone or get_settings().default_timezone)
        except InvalidTimezoneError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
    if not clean.get("mood_label"):
        clean["mood_label"] = MOOD_LABELS.get(int(payload.mood_score))
    try:
        entry, created = await repositories.upsert_mood_entry(user_id, clean)
    except Exception as exc:
        logger.exception("Failed to save mood entry: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    if not created:
        response.status_code = 200
    return {"entry": jsonable_encoder(entry)}


@router.get("/api/mood/{entry_id}")
async def get_mood_entry(entry_id: str, user_id: str = Depends(require_user_id)):
    entry = await repositories.get_mood_entry(user_id, entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Mood entry not found")
    return {"entry": jsonable_encoder(entry)}


@router.put("/api/mood/{entry_id}")
async def update_mood_entry(entry_id: str, payload: MoodPatch, user_id: str = Depends(require_user_id)):
    patch = payload.model_dump(exclude_unset=True)
    if "date" in patch and patch["date"] is None:
        raise HTTPException(status_code=400, detail="Date is required")
    if "mood_score" in patch:
        _check_score(patch["mood_score"])
    existing = await repositories.get_mood_entry(user_id, entry_id)
    if not existing:
        raise HTTPException(status_code=404, detail="Mood entry not found")
    try:
        entry = await repositories.update_mood_entry(user_id, entry_id, patch)
    except IntegrityError as exc:
        if is_unique_violation(exc):
            raise HTTPException(status_code=400, detail="A mood entry already exists for that date")
        logger.exception("Failed to update mood entry: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    if not entry:
        raise HTTPException(status_code=404, detail="Mood entry not found")
    return {"entry": jsonable_encoder(entry)}


@router.delete("/api/mood/{entry_id}")
async def delete_mood_entry(entry_id: str, user_id: str = Depends(require_user_id)):
    deleted = await repositories.delete_mood_entry(user_id, entry_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Mood entry not found")
    return {"message": "Mood entry deleted successfully"}
