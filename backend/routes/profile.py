from __future__ import annotations

import logging
import re
from datetime import date
from urllib.parse import urlparse

from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from backend.auth import require_user
from backend.schemas import ProfileUpdate
from backend.services.auth_service import AuthUser
from backend.timezones import is_valid_timezone
from backend import repositories

logger = logging.getLogger(__name__)

router = APIRouter()

PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{0,15}$")
MINIMUM_AGE_YEARS = 13


def _years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # Feb 29 on a non-leap target year
        return day.replace(year=day.year - years, day=28)


def _is_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def validate_profile_patch(patch: dict, today: date | None = None) -> list[str]:
    errors: list[str] = []
    if patch.get("full_name") is not None and len(patch["full_name"].strip()) > 100:
        errors.append("Full name must be a string and less than 100 characters")
    if patch.get("bio") is not None and len(patch["bio"]) > 500:
        errors.append("Bio must be a string and less than 500 characters")
    if patch.get("location") is not None and len(patch["location"]) > 100:
        errors.append("Location must be a string and less than 100 characters")
    website = patch.get("website")
    if website and not _is_url(website):
        errors.append("Website must be a valid URL")
    phone = patch.get("phone")
    if phone and not PHONE_PATTERN.match(phone):
        errors.append("Phone must be a valid phone number")
    date_of_birth = patch.get("date_of_birth")
    if date_of_birth:
        try:
            born = date.fromisoformat(str(date_of_birth)[:10])
        except ValueError:
            errors.append("Date of birth must be a valid date")
        else:
            if born > _years_before(today or date.today(), MINIMUM_AGE_YEARS):
                errors.append(f"You must be at least {MINIMUM_AGE_YEARS} years old")
    zone = patch.get("timezone")
    if zone and not is_valid_timezone(zone):
        errors.append("Timezone must be a valid IANA timezone")
    return errors


def _clean_profile_patch(patch: dict) -> dict:
    clean = dict(patch)
    for key in ("full_name", "bio", "location"):
        if key in clean:
            clean[key] = (clean[key] or "").strip() or None
    for key in ("avatar_url", "website", "phone", "date_of_birth", "timezone"):
        if key in clean:
            clean[key] = clean[key] or None
    if clean.get("date_of_birth"):
        clean["date_of_birth"] = str(clean["date_of_birth"])[:10]
    for key in ("preferences", "social_links", "notification_settings"):
        if key in clean:
            clean[key] = clean[key] or {}
    return clean


async def _load_or_create_profile(user: AuthUser) -> dict:
    profile = await repositories.get_profile(user.id)
    if profile:
        return profile
    logger.info("Creating profile for user %s", user.id)
    return await repositories.create_profile(user.id, user.email, user.metadata)


@router.get("/api/profile")
async def get_profile(user: AuthUser = Depends(require_user)):
    try:
        profile = await _load_or_create_profile(user)
    except Exception as exc:
        logger.exception("Failed to load profile: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"profile": jsonable_encoder(profile)}


@router.put("/api/profile")
async def update_profile(payload: ProfileUpdate, user: AuthUser = Depends(require_user)):
    patch = payload.model_dump(exclude_unset=True)
    errors = validate_profile_patch(patch)
    if errors:
        return JSONResponse(status_code=400, content={"detail": "Validation failed", "details": errors})
    try:
        await _load_or_create_profile(user)
        profile = await repositories.update_profile(user.id, _clean_profile_patch(patch))
    except Exception as exc:
        logger.exception("Failed to update profile: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"profile": jsonable_encoder(profile), "message": "Profile updated successfully"}


@router.delete("/api/profile")
async def delete_profile(user: AuthUser = Depends(require_user)):
    try:
        await repositories.delete_account_data(user.id)
    except Exception as exc:
        logger.exception("Failed to delete account: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"message": "Account deleted successfully"}
