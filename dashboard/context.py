from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


@dataclass
class DashboardContext:
    user_id: str
    email: str | None
    display_name: str
    timezone: str
    profile: Dict[str, Any] = field(default_factory=dict)

    @property
    def zone(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            return ZoneInfo("UTC")

    def today(self) -> date:
        return datetime.now(self.zone).date()
