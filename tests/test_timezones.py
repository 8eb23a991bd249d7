from datetime import date, datetime, timezone

import pytest

from backend.timezones import (
    InvalidTimezoneError,
    date_window,
    is_valid_timezone,
    local_midnight_utc,
    today_in,
)


def test_utc_window_covers_requested_days():
    window = date_window(7, "UTC", now=datetime(2024, 3, 10, 12, tzinfo=timezone.utc))
    assert window.start_date == date(2024, 3, 4)
    assert window.end_date == date(2024, 3, 10)
    assert window.start_utc == datetime(2024, 3, 4, tzinfo=timezone.utc)
    assert window.end_utc == datetime(2024, 3, 11, tzinfo=timezone.utc)


def test_single_day_window_is_today():
    window = date_window(1, "UTC", now=datetime(2024, 3, 10, 23, 59, tzinfo=timezone.utc))
    assert window.start_date == window.end_date == date(2024, 3, 10)


def test_window_uses_each_dates_own_offset_across_dst():
    # 2024-03-10 is the spring-forward date in New York
    window = date_window(2, "America/New_York", now=datetime(2024, 3, 10, 12, tzinfo=timezone.utc))
    assert window.start_date == date(2024, 3, 9)
    assert window.start_utc == datetime(2024, 3, 9, 5, tzinfo=timezone.utc)
    assert window.end_utc == datetime(2024, 3, 11, 4, tzinfo=timezone.utc)
    assert window.as_dict()["timezone"] == "America/New_York"


def test_today_depends_on_zone():
    assert today_in("America/Los_Angeles", now=datetime(2024, 1, 1, 2, tzinfo=timezone.utc)) == date(2023, 12, 31)
    assert today_in("Asia/Tokyo", now=datetime(2024, 1, 1, 20, tzinfo=timezone.utc)) == date(2024, 1, 2)
    assert today_in("UTC", now=datetime(2024, 1, 1, 20)) == date(2024, 1, 1)


def test_local_midnight_for_positive_offset():
    assert local_midnight_utc(date(2024, 6, 1), "Asia/Kolkata") == datetime(2024, 5, 31, 18, 30, tzinfo=timezone.utc)


def test_invalid_inputs():
    with pytest.raises(InvalidTimezoneError):
        date_window(7, "Mars/Olympus_Mons")
    with pytest.raises(InvalidTimezoneError):
        today_in("")
    with pytest.raises(ValueError):
        date_window(0, "UTC")
    assert is_valid_timezone("Europe/Paris")
    assert not is_valid_timezone("Nowhere/Special")
    assert not is_valid_timezone(None)
