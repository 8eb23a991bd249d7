from __future__ import annotations

from datetime import date, datetime

from dashboard.data import api_client


def _iso(value):
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def _clean(payload: dict) -> dict:
    return {key: _iso(value) for key, value in payload.items()}


# Tasks

def list_tasks(status: str | None = None, limit: int = 50) -> list[dict]:
    params = {"limit": limit}
    if status:
        params["status"] = status
    return api_client.request("GET", "/api/tasks", params=params)["tasks"]


def create_task(payload: dict) -> dict:
    return api_client.request("POST", "/api/tasks", json=_clean(payload))["task"]


def update_task(task_id: str, patch: dict) -> dict:
    return api_client.request("PUT", f"/api/tasks/{task_id}", json=_clean(patch))["task"]


def delete_task(task_id: str) -> None:
    api_client.request("DELETE", f"/api/tasks/{task_id}")


# Mood

def list_mood_entries(days: int | None = None, timezone: str | None = None, limit: int = 100) -> list[dict]:
    params = {"limit": limit}
    if days:
        params["days"] = days
    if timezone:
        params["timezone"] = timezone
    return api_client.request("GET", "/api/mood", params=params)["entries"]


def save_mood_entry(payload: dict, timezone: str | None = None) -> dict:
    params = {"timezone": timezone} if timezone else None
    return api_client.request("POST", "/api/mood", params=params, json=_clean(payload))["entry"]


def update_mood_entry(entry_id: str, patch: dict) -> dict:
    return api_client.request("PUT", f"/api/mood/{entry_id}", json=_clean(patch))["entry"]


def delete_mood_entry(entry_id: str) -> None:
    api_client.request("DELETE", f"/api/mood/{entry_id}")


# Finance

def list_finance_entries(
    days: int = 30,
    timezone: str | None = None,
    entry_type: str | None = None,
    category: str | None = None,
    limit: int = 50,
) -> list[dict]:
    params = {"days": days, "limit": limit}
    if timezone:
        params["timezone"] = timezone
    if entry_type:
        params["type"] = entry_type
    if category:
        params["category"] = category
    return api_client.request("GET", "/api/finance", params=params)["entries"]


def create_finance_entry(payload: dict, timezone: str | None = None) -> dict:
    params = {"timezone": timezone} if timezone else None
    return api_client.request("POST", "/api/finance", params=params, json=_clean(payload))["entry"]


def update_finance_entry(entry_id: str, patch: dict) -> dict:
    return api_client.request("PUT", f"/api/finance/{entry_id}", json=_clean(patch))["entry"]


def delete_finance_entry(entry_id: str) -> None:
    api_client.request("DELETE", f"/api/finance/{entry_id}")


# Folders and notes

def list_folders() -> list[dict]:
    return api_client.request("GET", "/api/folders")["folders"]


def create_folder(payload: dict) -> dict:
    return api_client.request("POST", "/api/folders", json=payload)


def update_folder(folder_id: str, patch: dict) -> dict:
    return api_client.request("PUT", f"/api/folders/{folder_id}", json=patch)


def reorder_folders(order: list[dict]) -> None:
    api_client.request("PUT", "/api/folders", json={"folders": order})


def delete_folder(folder_id: str) -> None:
    api_client.request("DELETE", f"/api/folders/{folder_id}")


def folder_stats() -> list[dict]:
    return api_client.request("GET", "/api/folders/stats")["stats"]


def list_notes() -> list[dict]:
    return api_client.request("GET", "/api/notes")["notes"]


def create_note(payload: dict) -> dict:
    return api_client.request("POST", "/api/notes", json=payload)


def update_note(note_id: str, patch: dict) -> dict:
    return api_client.request("PUT", f"/api/notes/{note_id}", json=patch)


def delete_note(note_id: str) -> None:
    api_client.request("DELETE", f"/api/notes/{note_id}")


# Calendar

def list_calendars() -> list[dict]:
    return api_client.request("GET", "/api/calendars")["calendars"]


def create_calendar(payload: dict) -> dict:
    return api_client.request("POST", "/api/calendars", json=payload)["calendar"]


def list_events(start: datetime, end: datetime, calendar_ids: list[str] | None = None) -> list[dict]:
    params = {"start": start.isoformat(), "end": end.isoformat()}
    if calendar_ids:
        params["calendar_id"] = ",".join(calendar_ids)
    return api_client.request("GET", "/api/calendar/events", params=params)["events"]


def create_event(payload: dict) -> dict:
    return api_client.request("POST", "/api/calendar/events", json=_clean(payload))["event"]


def update_event(event_id: str, payload: dict) -> dict:
    return api_client.request("PUT", f"/api/calendar/events/{event_id}", json=_clean(payload))["event"]


def delete_event(event_id: str) -> None:
    api_client.request("DELETE", f"/api/calendar/events/{event_id}")


# Profile

def get_profile() -> dict:
    return api_client.request("GET", "/api/profile")["profile"]


def update_profile(patch: dict) -> dict:
    return api_client.request("PUT", "/api/profile", json=_clean(patch))["profile"]


def delete_account() -> None:
    api_client.request("DELETE", "/api/profile")


# Widgets

def list_widget_types() -> dict[str, list[dict]]:
    return api_client.request("GET", "/api/widget-types", authenticated=False)["widgetTypes"]


def list_widgets() -> list[dict]:
    return api_client.request("GET", "/api/widgets")["widgets"]


def create_widget(payload: dict) -> dict:
    return api_client.request("POST", "/api/widgets", json=payload)["widget"]


def update_widget(widget_id: str, patch: dict) -> dict:
    return api_client.request("PUT", f"/api/widgets/{widget_id}", json=patch)["widget"]


def delete_widget(widget_id: str) -> None:
    api_client.request("DELETE", f"/api/widgets/{widget_id}")


# Weather

def get_weather(settings: dict) -> dict:
    params = {
        "location": settings.get("location"),
        "unit": settings.get("unit", "celsius"),
        "showForecast": str(bool(settings.get("showForecast", True))).lower(),
        "showHourly": str(bool(settings.get("showHourly", False))).lower(),
        "autoRefresh": str(bool(settings.get("autoRefresh", True))).lower(),
        "refreshInterval": int(settings.get("refreshInterval", 10)),
    }
    return api_client.request("GET", "/api/weather", params=params, authenticated=False, timeout=15)
