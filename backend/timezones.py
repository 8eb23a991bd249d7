from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class InvalidTimezoneError(ValueError):
    pass


@dataclass(frozen=True)
class DateWindow:
    start_date: date
    end_date: date
    start_utc: datetime
    end_utc: datetime
    timezone: str

    def as_dict(self) -> dict:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "start_utc": self.start_utc.isoformat(),
            "end_utc": self.end_utc.isoformat(),
            "timezone": self.timezone,
        }


def resolve_zone(name: str | None) -> ZoneInfo:
    value = str(name or "").strip()
    if not value:
        raise InvalidTimezoneError("Timezone is required")
    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidTimezoneError(f"Unknown timezone: {value}") from exc


def is_valid_timezone(name: str | None) -> bool:
    try:
        resolve_zone(name)
    except InvalidTimezoneError:
        return False
    return True


def today_in(zone_name: str, now: datetime | None = None) -> date:
    zone = resolve_zone(zone_name)
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    return current.astimezone(zone).date()


def local_midnight_utc(day: date, zone_name: str) -> datetime:
    """UTC instant of 00:00 on ``day`` in ``zone_name``, using that date's own offset."""
    zone = resolve_zone(zone_name)
    return datetime.combine(day, time.min, tzinfo=zone).astimezone(timezone.utc)


def date_window(days: int, zone_name: str, now: datetime | None = None) -> DateWindow:
    """The ``days`` calendar dates ending today in ``zone_name``, with half-open UTC bounds."""
    if days < 1:
        raise ValueError("days must be at least 1")
    end_date = today_in(zone_name, now=now)
    start_date = end_date - timedelta(days=days - 1)
    return DateWindow(
        start_date=start_date,
        end_date=end_date,
        start_utc=local_midnight_utc(start_date, zone_name),
        end_utc=local_midnight_utc(end_date + timedelta(days=1), zone_name),
        timezone=zone_name,
    )
