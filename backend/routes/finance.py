from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder

from backend.auth import require_user_id
from backend.schemas import FinanceCreate, FinancePatch
from backend.settings import get_settings
from backend.timezones import InvalidTimezoneError, date_window, today_in
from backend import repositories
from backend.repositories import FINANCE_TYPES

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_type(entry_type) -> None:
    if entry_type not in FINANCE_TYPES:
        raise HTTPException(status_code=400, detail="Type must be income, expense, or transfer")


@router.get("/api/finance")
async def list_finance_entries(
    type: str | None = Query(None),
    category: str | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    days: int = Query(30),
    timezone: str | None = Query(None),
    limit: int = Query(50, ge=1, le=1000),
    user_id: str = Depends(require_user_id),
):
    window = None
    if start_date and end_date:
        start_iso, end_iso = start_date.isoformat(), end_date.isoformat()
    else:
        try:
            window = date_window(days, timezone or get_settings().default_timezone)
        except InvalidTimezoneError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        except ValueError:
            raise HTTPException(status_code=400, detail="Days must be at least 1")
        start_iso, end_iso = window.start_date.isoformat(), window.end_date.isoformat()
    try:
        entries = await repositories.list_finance_entries(
            user_id,
            entry_type=type,
            category=category,
            start_date=start_iso,
            end_date=end_iso,
            limit=limit,
        )
    except Exception as exc:
        logger.exception("Failed to list finance entries: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    payload = {"entries": jsonable_encoder(entries)}
    if window is not None:
        payload["window"] = window.as_dict()
    return payload


@router.post("/api/finance", status_code=201)
async def create_finance_entry(
    payload: FinanceCreate,
    timezone: str | None = Query(None),
    user_id: str = Depends(require_user_id),
):
    if not payload.type or payload.amount is None:
        raise HTTPException(status_code=400, detail="Type and amount are required")
    _check_type(payload.type)
    clean = payload.model_dump(exclude_unset=True)
    if not clean.get("date"):
        try:
            clean["date"] = today_in(timezone or get_settings().default_timezone)
        except InvalidTimezoneError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
    try:
        entry = await repositories.create_finance_entry(user_id, clean)
    except Exception as exc:
        logger.exception("Failed to create finance entry: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"entry": jsonable_encoder(entry)}


@router.get("/api/finance/{entry_id}")
async def get_finance_entry(entry_id: str, user_id: str = Depends(require_user_id)):
    entry = await repositories.get_finance_entry(user_id, entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Finance entry not found")
    return {"entry": jsonable_encoder(entry)}


@router.put("/api/finance/{entry_id}")
async def update_finance_entry(entry_id: str, payload: FinancePatch, user_id: str = Depends(require_user_id)):
    patch = payload.model_dump(exclude_unset=True)
    if "type" in patch:
        _check_type(patch["type"])
    if "amount" in patch and patch["amount"] is None:
        raise HTTPException(status_code=400, detail="Type and amount are required")
    for key in ("date", "currency"):
        if key in patch and patch[key] is None:
            raise HTTPException(status_code=400, detail=f"{key.capitalize()} is required")
    try:
        entry = await repositories.update_finance_entry(user_id, entry_id, patch)
    except Exception as exc:
        logger.exception("Failed to update finance entry: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    if not entry:
        raise HTTPException(status_code=404, detail="Finance entry not found")
    return {"entry": jsonable_encoder(entry)}


@router.delete("/api/finance/{entry_id}")
async def delete_finance_entry(entry_id: str, user_id: str = Depends(require_user_id)):
    deleted = await repositories.delete_finance_entry(user_id, entry_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Finance entry not found")
    return {"message": "Finance entry deleted successfully"}
