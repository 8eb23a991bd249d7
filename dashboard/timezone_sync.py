from __future__ import annotations

import logging
import os
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import streamlit as st

from dashboard.data import repositories

logger = logging.getLogger(__name__)

TIMEZONE_KEY = "profile.timezone"


def detect_timezone() -> str:
    configured = os.getenv("TZ")
    if configured:
        try:
            ZoneInfo(configured)
            return configured
        except (ZoneInfoNotFoundError, ValueError):
            pass
    local = datetime.now().astimezone().tzinfo
    name = getattr(local, "key", None)
    return name or "UTC"


def resolve_profile_timezone(profile: dict | None, detected: str) -> tuple[str, bool]:
    """Timezone to use and whether the profile needs it written back."""
    profile_tz = (profile or {}).get("timezone")
    if profile_tz:
        return profile_tz, False
    return detected, True


def sync_timezone() -> str:
    if TIMEZONE_KEY in st.session_state:
        return st.session_state[TIMEZONE_KEY]
    detected = detect_timezone()
    try:
        profile = repositories.get_profile()
        timezone, needs_write = resolve_profile_timezone(profile, detected)
        if needs_write:
            repositories.update_profile({"timezone": timezone})
    except Exception:
        logger.exception("Failed to sync timezone with profile")
        timezone = detected
    st.session_state[TIMEZONE_KEY] = timezone
    return timezone


def update_timezone(timezone: str) -> None:
    st.session_state[TIMEZONE_KEY] = timezone
    try:
        repositories.update_profile({"timezone": timezone})
    except Exception:
        logger.exception("Failed to update profile timezone")


def active_zone() -> ZoneInfo:
    try:
        return ZoneInfo(st.session_state.get(TIMEZONE_KEY) or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo("UTC")
