from __future__ import annotations

import logging
import re
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder

from backend.auth import require_user_id
from backend.schemas import CalendarCreate, EventCreate
from backend import repositories
from backend.repositories import to_utc_iso

logger = logging.getLogger(__name__)

HEX_COLOR = re.compile(r"#(?:[0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})")

router = APIRouter()


async def _validate_event(user_id: str, payload: EventCreate) -> dict:
    title = str(payload.title or "").strip()
    if not title or payload.start_time is None or payload.end_time is None or not payload.calendar_id:
        raise HTTPException(status_code=400, detail="Title, start time, end time, and calendar are required")
    if to_utc_iso(payload.end_time) < to_utc_iso(payload.start_time):
        raise HTTPException(status_code=400, detail="End time must be after start time")
    calendar = await repositories.get_calendar(user_id, payload.calendar_id)
    if not calendar:
        raise HTTPException(status_code=400, detail="Calendar not found")
    clean = payload.model_dump()
    clean["title"] = title
    return clean


def _split_ids(raw: str | None) -> list[str]:
    return [item.strip() for item in str(raw or "").split(",") if item.strip()]


@router.get("/api/calendars")
async def list_calendars(user_id: str = Depends(require_user_id)):
    try:
        calendars = await repositories.ensure_default_calendar(user_id)
    except Exception as exc:
        logger.exception("Failed to list calendars: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"calendars": jsonable_encoder(calendars)}


@router.post("/api/calendars", status_code=201)
async def create_calendar(payload: CalendarCreate, user_id: str = Depends(require_user_id)):
    name = str(payload.name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Calendar name is required")
    if payload.color is not None and not HEX_COLOR.fullmatch(payload.color):
        raise HTTPException(status_code=400, detail="Calendar color must be a hex color like #3B82F6")
    try:
        calendar = await repositories.create_calendar(
            user_id,
            {
                "name": name,
                "color": payload.color,
                "description": payload.description,
                "is_visible": payload.is_visible,
            },
        )
    except Exception as exc:
        logger.exception("Failed to create calendar: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"calendar": jsonable_encoder(calendar)}


@router.get("/api/calendar/events")
async def list_events(
    start: datetime | None = Query(None),
    end: datetime | None = Query(None),
    calendar_id: str | None = Query(None),
    user_id: str = Depends(require_user_id),
):
    try:
        events = await repositories.list_events(
            user_id,
            start=to_utc_iso(start),
            end=to_utc_iso(end),
            calendar_ids=_split_ids(calendar_id),
        )
    except Exception as exc:
        logger.exception("Failed to list events: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"events": jsonable_encoder(events)}


@router.post("/api/calendar/events", status_code=201)
async def create_event(payload: EventCreate, user_id: str = Depends(require_user_id)):
    clean = await _validate_event(user_id, payload)
    try:
        event = await repositories.create_event(user_id, clean)
    except Exception as exc:
        logger.exception("Failed to create event: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"event": jsonable_encoder(event)}


@router.get("/api/calendar/events/{event_id}")
async def get_event(event_id: str, user_id: str = Depends(require_user_id)):
    event = await repositories.get_event(user_id, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return {"event": jsonable_encoder(event)}


@router.put("/api/calendar/events/{event_id}")
async def update_event(event_id: str, payload: EventCreate, user_id: str = Depends(require_user_id)):
    clean = await _validate_event(user_id, payload)
    try:
        event = await repositories.update_event(user_id, event_id, clean)
    except Exception as exc:
        logger.exception("Failed to update event: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return {"event": jsonable_encoder(event)}


@router.delete("/api/calendar/events/{event_id}")
async def delete_event(event_id: str, user_id: str = Depends(require_user_id)):
    deleted = await repositories.delete_event(user_id, event_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Event not found")
    return {"message": "Event deleted successfully"}
