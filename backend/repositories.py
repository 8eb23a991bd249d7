from __future__ import annotations

import json
from datetime import date, datetime, timezone
from uuid import uuid4

from sqlalchemy import text as sql_text, bindparam

from backend.db import get_sessionmaker
from backend.db_init import (
    TASKS_TABLE,
    MOOD_TABLE,
    FINANCE_TABLE,
    FOLDERS_TABLE,
    NOTES_TABLE,
    CALENDARS_TABLE,
    EVENTS_TABLE,
    PROFILES_TABLE,
    WIDGET_TYPES_TABLE,
    USER_WIDGETS_TABLE,
)

TASK_STATUSES = {"pending", "in_progress", "completed", "cancelled"}
TASK_PRIORITIES = {"low", "medium", "high", "urgent"}
FINANCE_TYPES = {"income", "expense", "transfer"}
NOTE_COLORS = {"default", "blue", "green", "yellow", "pink", "purple"}
DEFAULT_CALENDAR = {
    "name": "My Calendar",
    "color": "#007AFF",
    "description": "Default calendar",
}

TASK_COLUMNS = "id, user_id, title, description, status, priority, due_date, category, tags_json, created_at, updated_at"
MOOD_COLUMNS = "id, user_id, date, mood_score, mood_emoji, mood_label, notes, created_at, updated_at"
FINANCE_COLUMNS = (
    "id, user_id, type, amount, currency, category, description, account, date, tags_json, created_at, updated_at"
)
FOLDER_COLUMNS = "id, user_id, name, color, icon, emoji, is_default, sort_order, created_at, updated_at"
CALENDAR_COLUMNS = "id, user_id, name, color, description, is_default, is_visible, created_at, updated_at"
PROFILE_COLUMNS = (
    "id, email, full_name, avatar_url, bio, location, website, phone, date_of_birth, timezone, "
    "preferences_json, social_links_json, notification_settings_json, created_at, updated_at"
)

USER_SCOPED_TABLES = [
    TASKS_TABLE,
    MOOD_TABLE,
    FINANCE_TABLE,
    NOTES_TABLE,
    FOLDERS_TABLE,
    EVENTS_TABLE,
    CALENDARS_TABLE,
    USER_WIDGETS_TABLE,
]


def _new_id() -> str:
    return uuid4().hex


def _now_iso() -> str:
    return datetime.utcnow().isoformat()


def _date_iso(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()[:10]
    value_str = str(value).strip()
    return value_str[:10] if value_str else None


def to_utc_iso(value) -> str | None:
    """Canonical text form for stored instants so string comparison orders correctly."""
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="seconds")


def _dump_json(value) -> str | None:
    if value is None:
        return None
    return json.dumps(value)


def _load_json(raw, default):
    if raw is None or raw == "":
        return default
    if isinstance(raw, (dict, list)):
        return raw
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return default


def _normalize_row(row, json_fields: dict | None = None, bool_fields: tuple = ()) -> dict:
    if not row:
        return {}
    payload = dict(row)
    for column, (key, default) in (json_fields or {}).items():
        if column in payload:
            payload[key] = _load_json(payload.pop(column), default)
    for key in bool_fields:
        if key in payload and payload[key] is not None:
            payload[key] = bool(payload[key])
    for key, value in list(payload.items()):
        if isinstance(value, (date, datetime)):
            payload[key] = value.isoformat()
    return payload


def _normalize_task_row(row) -> dict:
    return _normalize_row(row, {"tags_json": ("tags", [])})


def _normalize_finance_row(row) -> dict:
    payload = _normalize_row(row, {"tags_json": ("tags", [])})
    if payload.get("amount") is not None:
        payload["amount"] = float(payload["amount"])
    return payload


def _normalize_folder_row(row) -> dict:
    return _normalize_row(row, bool_fields=("is_default",))


def _normalize_calendar_row(row) -> dict:
    return _normalize_row(row, bool_fields=("is_default", "is_visible"))


def _normalize_profile_row(row) -> dict:
    return _normalize_row(
        row,
        {
            "preferences_json": ("preferences", {}),
            "social_links_json": ("social_links", {}),
            "notification_settings_json": ("notification_settings", {}),
        },
    )


def _build_updates(patch: dict, allowed: set, converters: dict | None = None) -> tuple[list[str], dict]:
    updates = []
    params = {}
    for key, value in patch.items():
        if key not in allowed:
            continue
        converter = (converters or {}).get(key)
        column = key
        if converter is not None:
            column, value = converter(value)
        updates.append(f"{column} = :{column}")
        params[column] = value
    return updates, params


def _flag_column(column: str):
    return lambda value: (column, int(bool(value)))


def _json_column(column: str, default):
    return lambda value: (column, _dump_json(value if value is not None else default))


def count_words(content: str | None) -> int:
    if not content:
        return 0
    return len([word for word in content.strip().split() if word])


async def _fetch_one(statement: str, params: dict):
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        return (await session.execute(sql_text(statement), params)).mappings().fetchone()


async def _fetch_all(statement, params: dict) -> list:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        if isinstance(statement, str):
            statement = sql_text(statement)
        return list((await session.execute(statement, params)).mappings().all())


async def _execute(statement: str, params: dict) -> int:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(sql_text(statement), params)
        rowcount = result.rowcount or 0
        await session.commit()
    return rowcount


# Tasks

async def list_tasks(user_id: str, status: str | None = None, limit: int = 50) -> list[dict]:
    clauses = ["user_id = :user_id"]
    params: dict = {"user_id": user_id, "limit": limit}
    if status:
        clauses.append("status = :status")
        params["status"] = status
    rows = await _fetch_all(
        f"""
        SELECT {TASK_COLUMNS}
        FROM {TASKS_TABLE}
        WHERE {' AND '.join(clauses)}
        ORDER BY created_at DESC
        LIMIT :limit
        """,
        params,
    )
    return [_normalize_task_row(row) for row in rows]


async def create_task(user_id: str, payload: dict) -> dict:
    now = _now_iso()
    record = {
        "id": _new_id(),
        "user_id": user_id,
        "title": str(payload.get("title") or "").strip(),
        "description": payload.get("description"),
        "status": payload.get("status") or "pending",
        "priority": payload.get("priority") or "medium",
        "due_date": _date_iso(payload.get("due_date")),
        "category": payload.get("category"),
        "tags_json": _dump_json(payload.get("tags") or []),
        "created_at": now,
        "updated_at": now,
    }
    await _execute(
        f"""
        INSERT INTO {TASKS_TABLE}
        (id, user_id, title, description, status, priority, due_date, category, tags_json, created_at, updated_at)
        VALUES
        (:id, :user_id, :title, :description, :status, :priority, :due_date, :category, :tags_json,
         :created_at, :updated_at)
        """,
        record,
    )
    return _normalize_task_row(record)


async def get_task(user_id: str, task_id: str) -> dict:
    row = await _fetch_one(
        f"SELECT {TASK_COLUMNS} FROM {TASKS_TABLE} WHERE id = :id AND user_id = :user_id",
        {"id": task_id, "user_id": user_id},
    )
    return _normalize_task_row(row)


async def update_task(user_id: str, task_id: str, patch: dict) -> dict:
    updates, params = _build_updates(
        patch,
        {"title", "description", "status", "priority", "due_date", "category", "tags"},
        {
            "due_date": lambda value: ("due_date", _date_iso(value)),
            "tags": _json_column("tags_json", []),
        },
    )
    if not updates:
        return await get_task(user_id, task_id)
    updates.append("updated_at = :updated_at")
    params.update({"id": task_id, "user_id": user_id, "updated_at": _now_iso()})
    changed = await _execute(
        f"UPDATE {TASKS_TABLE} SET {', '.join(updates)} WHERE id = :id AND user_id = :user_id",
        params,
    )
    if not changed:
        return {}
    return await get_task(user_id, task_id)


async def delete_task(user_id: str, task_id: str) -> bool:
    deleted = await _execute(
        f"DELETE FROM {TASKS_TABLE} WHERE id = :id AND user_id = :user_id",
        {"id": task_id, "user_id": user_id},
    )
    return deleted > 0


# Mood

async def list_mood_entries(
    user_id: str,
    start_date: str | None = None,
    end_date: str | None = None,
    limit: int = 100,
) -> list[dict]:
    clauses = ["user_id = :user_id"]
    params: dict = {"user_id": user_id, "limit": limit}
    if start_date:
        clauses.append("date >= :start_date")
        params["start_date"] = start_date
    if end_date:
        clauses.append("date <= :end_date")
        params["end_date"] = end_date
    rows = await _fetch_all(
        f"""
        SELECT {MOOD_COLUMNS}
        FROM {MOOD_TABLE}
        WHERE {' AND '.join(clauses)}
        ORDER BY date DESC
        LIMIT :limit
        """,
        params,
    )
    return [_normalize_row(row) for row in rows]


async def get_mood_entry(user_id: str, entry_id: str) -> dict:
    row = await _fetch_one(
        f"SELECT {MOOD_COLUMNS} FROM {MOOD_TABLE} WHERE id = :id AND user_id = :user_id",
        {"id": entry_id, "user_id": user_id},
    )
    return _normalize_row(row)


async def get_mood_entry_by_date(user_id: str, day_iso: str) -> dict:
    row = await _fetch_one(
        f"SELECT {MOOD_COLUMNS} FROM {MOOD_TABLE} WHERE user_id = :user_id AND date = :date",
        {"user_id": user_id, "date": day_iso},
    )
    return _normalize_row(row)


async def upsert_mood_entry(user_id: str, payload: dict) -> tuple[dict, bool]:
    """Write the single entry for ``payload['date']``; returns ``(entry, created)``."""
    day_iso = _date_iso(payload.get("date"))
    existing = await get_mood_entry_by_date(user_id, day_iso)
    now = _now_iso()
    record = {
        "id": _new_id(),
        "user_id": user_id,
        "date": day_iso,
        "mood_score": int(payload["mood_score"]),
        "mood_emoji": payload.get("mood_emoji"),
        "mood_label": payload.get("mood_label"),
        "notes": payload.get("notes"),
        "created_at": now,
        "updated_at": now,
    }
    await _execute(
        f"""
        INSERT INTO {MOOD_TABLE}
        (id, user_id, date, mood_score, mood_emoji, mood_label, notes, created_at, updated_at)
        VALUES
        (:id, :user_id, :date, :mood_score, :mood_emoji, :mood_label, :notes, :created_at, :updated_at)
        ON CONFLICT (user_id, date) DO UPDATE SET
            mood_score = EXCLUDED.mood_score,
            mood_emoji = EXCLUDED.mood_emoji,
            mood_label = EXCLUDED.mood_label,
            notes = EXCLUDED.notes,
            updated_at = EXCLUDED.updated_at
        """,
        record,
    )
    return await get_mood_entry_by_date(user_id, day_iso), not existing


async def update_mood_entry(user_id: str, entry_id: str, patch: dict) -> dict:
    updates, params = _build_updates(
        patch,
        {"mood_score", "mood_emoji", "mood_label", "notes", "date"},
        {"date": lambda value: ("date", _date_iso(value))},
    )
    if not updates:
        return await get_mood_entry(user_id, entry_id)
    updates.append("updated_at = :updated_at")
    params.update({"id": entry_id, "user_id": user_id, "updated_at": _now_iso()})
    changed = await _execute(
        f"UPDATE {MOOD_TABLE} SET {', '.join(updates)} WHERE id = :id AND user_id = :user_id",
        params,
    )
    if not changed:
        return {}
    return await get_mood_entry(user_id, entry_id)


async def delete_mood_entry(user_id: str, entry_id: str) -> bool:
    deleted = await _execute(
        f"DELETE FROM {MOOD_TABLE} WHERE id = :id AND user_id = :user_id",
        {"id": entry_id, "user_id": user_id},
    )
    return deleted > 0


# Finance

async def list_finance_entries(
    user_id: str,
    entry_type: str | None = None,
    category: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    limit: int = 50,
) -> list[dict]:
    clauses = ["user_id = :user_id"]
    params: dict = {"user_id": user_id, "limit": limit}
    if entry_type:
        clauses.append("type = :type")
        params["type"] = entry_type
    if category:
        clauses.append("category = :category")
        params["category"] = category
    if start_date:
        clauses.append("date >= :start_date")
        params["start_date"] = start_date
    if end_date:
        clauses.append("date <= :end_date")
        params["end_date"] = end_date
    rows = await _fetch_all(
        f"""
        SELECT {FINANCE_COLUMNS}
        FROM {FINANCE_TABLE}
        WHERE {' AND '.join(clauses)}
        ORDER BY date DESC, created_at DESC
        LIMIT :limit
        """,
        params,
    )
    return [_normalize_finance_row(row) for row in rows]


async def create_finance_entry(user_id: str, payload: dict) -> dict:
    now = _now_iso()
    record = {
        "id": _new_id(),
        "user_id": user_id,
        "type": payload["type"],
        "amount": float(payload["amount"]),
        "currency": payload.get("currency") or "USD",
        "category": payload.get("category"),
        "description": payload.get("description"),
        "account": payload.get("account"),
        "date": _date_iso(payload.get("date")),
        "tags_json": _dump_json(payload.get("tags") or []),
        "created_at": now,
        "updated_at": now,
    }
    await _execute(
        f"""
        INSERT INTO {FINANCE_TABLE}
        (id, user_id, type, amount, currency, category, description, account, date, tags_json,
         created_at, updated_at)
        VALUES
        (:id, :user_id, :type, :amount, :currency, :category, :description, :account, :date, :tags_json,
         :created_at, :updated_at)
        """,
        record,
    )
    return _normalize_finance_row(record)


async def get_finance_entry(user_id: str, entry_id: str) -> dict:
    row = await _fetch_one(
        f"SELECT {FINANCE_COLUMNS} FROM {FINANCE_TABLE} WHERE id = :id AND user_id = :user_id",
        {"id": entry_id, "user_id": user_id},
    )
    return _normalize_finance_row(row)


async def update_finance_entry(user_id: str, entry_id: str, patch: dict) -> dict:
    updates, params = _build_updates(
        patch,
        {"type", "amount", "currency", "category", "description", "account", "date", "tags"},
        {
            "date": lambda value: ("date", _date_iso(value)),
            "tags": _json_column("tags_json", []),
            "amount": lambda value: ("amount", float(value)),
        },
    )
    if not updates:
        return await get_finance_entry(user_id, entry_id)
    updates.append("updated_at = :updated_at")
    params.update({"id": entry_id, "user_id": user_id, "updated_at": _now_iso()})
    changed = await _execute(
        f"UPDATE {FINANCE_TABLE} SET {', '.join(updates)} WHERE id = :id AND user_id = :user_id",
        params,
    )
    if not changed:
        return {}
    return await get_finance_entry(user_id, entry_id)


async def delete_finance_entry(user_id: str, entry_id: str) -> bool:
    deleted = await _execute(
        f"DELETE FROM {FINANCE_TABLE} WHERE id = :id AND user_id = :user_id",
        {"id": entry_id, "user_id": user_id},
    )
    return deleted > 0


# Folders

async def list_folders(user_id: str) -> list[dict]:
    rows = await _fetch_all(
        f"""
        SELECT {FOLDER_COLUMNS}
        FROM {FOLDERS_TABLE}
        WHERE user_id = :user_id
        ORDER BY sort_order ASC, created_at ASC
        """,
        {"user_id": user_id},
    )
    return [_normalize_folder_row(row) for row in rows]


async def get_folder(user_id: str, folder_id: str) -> dict:
    row = await _fetch_one(
        f"SELECT {FOLDER_COLUMNS} FROM {FOLDERS_TABLE} WHERE id = :id AND user_id = :user_id",
        {"id": folder_id, "user_id": user_id},
    )
    return _normalize_folder_row(row)


async def find_folder_by_name(user_id: str, name: str) -> dict:
    row = await _fetch_one(
        f"""
        SELECT {FOLDER_COLUMNS} FROM {FOLDERS_TABLE}
        WHERE user_id = :user_id AND name = :name
        ORDER BY sort_order ASC
        LIMIT 1
        """,
        {"user_id": user_id, "name": name},
    )
    return _normalize_folder_row(row)


async def create_folder(user_id: str, payload: dict) -> dict:
    top = await _fetch_one(
        f"SELECT MAX(sort_order) AS max_order FROM {FOLDERS_TABLE} WHERE user_id = :user_id",
        {"user_id": user_id},
    )
    max_order = top["max_order"] if top else None
    now = _now_iso()
    record = {
        "id": _new_id(),
        "user_id": user_id,
        "name": str(payload.get("name") or "").strip(),
        "color": payload.get("color") or "blue",
        "icon": payload.get("icon") or "📁",
        "emoji": payload.get("emoji") or "📁",
        "is_default": int(bool(payload.get("is_default"))),
        "sort_order": (max_order or 0) + 1 if max_order is not None else 0,
        "created_at": now,
        "updated_at": now,
    }
    await _execute(
        f"""
        INSERT INTO {FOLDERS_TABLE}
        (id, user_id, name, color, icon, emoji, is_default, sort_order, created_at, updated_at)
        VALUES
        (:id, :user_id, :name, :color, :icon, :emoji, :is_default, :sort_order, :created_at, :updated_at)
        """,
        record,
    )
    return _normalize_folder_row(record)


async def update_folder(user_id: str, folder_id: str, patch: dict) -> dict:
    updates, params = _build_updates(patch, {"name", "color", "icon", "emoji"})
    if not updates:
        return await get_folder(user_id, folder_id)
    updates.append("updated_at = :updated_at")
    params.update({"id": folder_id, "user_id": user_id, "updated_at": _now_iso()})
    changed = await _execute(
        f"UPDATE {FOLDERS_TABLE} SET {', '.join(updates)} WHERE id = :id AND user_id = :user_id",
        params,
    )
    if not changed:
        return {}
    return await get_folder(user_id, folder_id)


async def reorder_folders(user_id: str, order: list[dict]) -> int:
    session_factory = get_sessionmaker()
    updated = 0
    async with session_factory() as session:
        for item in order:
            result = await session.execute(
                sql_text(
                    f"""
                    UPDATE {FOLDERS_TABLE}
                    SET sort_order = :sort_order, updated_at = :updated_at
                    WHERE id = :id AND user_id = :user_id
                    """
                ),
                {
                    "id": item["id"],
                    "sort_order": int(item["sort_order"]),
                    "user_id": user_id,
                    "updated_at": _now_iso(),
                },
            )
            updated += result.rowcount or 0
        await session.commit()
    return updated


async def delete_folder(user_id: str, folder_id: str) -> bool:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"UPDATE {NOTES_TABLE} SET folder_id = NULL WHERE user_id = :user_id AND folder_id = :folder_id"
            ),
            {"user_id": user_id, "folder_id": folder_id},
        )
        result = await session.execute(
            sql_text(f"DELETE FROM {FOLDERS_TABLE} WHERE id = :id AND user_id = :user_id"),
            {"id": folder_id, "user_id": user_id},
        )
        deleted = result.rowcount or 0
        await session.commit()
    return deleted > 0


async def folder_stats(user_id: str) -> list[dict]:
    rows = await _fetch_all(
        f"""
        SELECT f.id AS folder_id, f.name AS folder_name, f.color AS folder_color, f.emoji AS folder_emoji,
               COUNT(n.id) AS note_count
        FROM {FOLDERS_TABLE} f
        LEFT JOIN {NOTES_TABLE} n ON n.folder_id = f.id AND n.user_id = f.user_id
        WHERE f.user_id = :user_id
        GROUP BY f.id, f.name, f.color, f.emoji, f.sort_order
        ORDER BY f.sort_order ASC
        """,
        {"user_id": user_id},
    )
    stats = [{**dict(row), "note_count": int(row["note_count"] or 0)} for row in rows]
    unassigned = await _fetch_one(
        f"SELECT COUNT(*) AS note_count FROM {NOTES_TABLE} WHERE user_id = :user_id AND folder_id IS NULL",
        {"user_id": user_id},
    )
    stats.append(
        {
            "folder_id": None,
            "folder_name": "unassigned",
            "folder_color": None,
            "folder_emoji": None,
            "note_count": int(unassigned["note_count"] or 0) if unassigned else 0,
        }
    )
    return stats


# Notes

NOTE_SELECT = f"""
    SELECT n.id, n.user_id, n.folder_id, n.title, n.content, n.tags_json, n.color,
           n.is_pinned, n.is_starred, n.is_archived, n.word_count, n.character_count,
           n.created_at, n.updated_at,
           f.name AS folder_name, f.color AS folder_color, f.emoji AS folder_emoji
    FROM {NOTES_TABLE} n
    LEFT JOIN {FOLDERS_TABLE} f ON f.id = n.folder_id AND f.user_id = n.user_id
"""


def _normalize_note_row(row) -> dict:
    return _normalize_row(
        row,
        {"tags_json": ("tags", [])},
        bool_fields=("is_pinned", "is_starred", "is_archived"),
    )


async def list_notes(user_id: str) -> list[dict]:
    rows = await _fetch_all(
        NOTE_SELECT + " WHERE n.user_id = :user_id ORDER BY n.is_pinned DESC, n.updated_at DESC",
        {"user_id": user_id},
    )
    return [_normalize_note_row(row) for row in rows]


async def get_note(user_id: str, note_id: str) -> dict:
    row = await _fetch_one(
        NOTE_SELECT + " WHERE n.id = :id AND n.user_id = :user_id",
        {"id": note_id, "user_id": user_id},
    )
    return _normalize_note_row(row)


async def create_note(user_id: str, payload: dict) -> dict:
    content = payload.get("content") or ""
    color = payload.get("color")
    now = _now_iso()
    record = {
        "id": _new_id(),
        "user_id": user_id,
        "folder_id": payload.get("folder_id"),
        "title": payload.get("title") or "",
        "content": content,
        "tags_json": _dump_json(payload.get("tags") or []),
        "color": color if color in NOTE_COLORS else "default",
        "is_pinned": int(bool(payload.get("is_pinned"))),
        "is_starred": int(bool(payload.get("is_starred"))),
        "is_archived": int(bool(payload.get("is_archived"))),
        "word_count": count_words(content),
        "character_count": len(content),
        "created_at": now,
        "updated_at": now,
    }
    await _execute(
        f"""
        INSERT INTO {NOTES_TABLE}
        (id, user_id, folder_id, title, content, tags_json, color, is_pinned, is_starred, is_archived,
         word_count, character_count, created_at, updated_at)
        VALUES
        (:id, :user_id, :folder_id, :title, :content, :tags_json, :color, :is_pinned, :is_starred, :is_archived,
         :word_count, :character_count, :created_at, :updated_at)
        """,
        record,
    )
    return await get_note(user_id, record["id"])


async def update_note(user_id: str, note_id: str, patch: dict) -> dict:
    clean = dict(patch)
    if "content" in clean:
        content = clean["content"] or ""
        clean["content"] = content
        clean["word_count"] = count_words(content)
        clean["character_count"] = len(content)
    if "color" in clean and clean["color"] not in NOTE_COLORS:
        clean["color"] = "default"
    updates, params = _build_updates(
        clean,
        {
            "title",
            "content",
            "tags",
            "folder_id",
            "color",
            "is_pinned",
            "is_starred",
            "is_archived",
            "word_count",
            "character_count",
        },
        {
            "tags": _json_column("tags_json", []),
            "is_pinned": _flag_column("is_pinned"),
            "is_starred": _flag_column("is_starred"),
            "is_archived": _flag_column("is_archived"),
        },
    )
    if not updates:
        return await get_note(user_id, note_id)
    updates.append("updated_at = :updated_at")
    params.update({"id": note_id, "user_id": user_id, "updated_at": _now_iso()})
    changed = await _execute(
        f"UPDATE {NOTES_TABLE} SET {', '.join(updates)} WHERE id = :id AND user_id = :user_id",
        params,
    )
    if not changed:
        return {}
    return await get_note(user_id, note_id)


async def delete_note(user_id: str, note_id: str) -> bool:
    deleted = await _execute(
        f"DELETE FROM {NOTES_TABLE} WHERE id = :id AND user_id = :user_id",
        {"id": note_id, "user_id": user_id},
    )
    return deleted > 0


# Calendars and events

async def list_calendars(user_id: str) -> list[dict]:
    rows = await _fetch_all(
        f"SELECT {CALENDAR_COLUMNS} FROM {CALENDARS_TABLE} WHERE user_id = :user_id ORDER BY name ASC",
        {"user_id": user_id},
    )
    return [_normalize_calendar_row(row) for row in rows]


async def get_calendar(user_id: str, calendar_id: str) -> dict:
    row = await _fetch_one(
        f"SELECT {CALENDAR_COLUMNS} FROM {CALENDARS_TABLE} WHERE id = :id AND user_id = :user_id",
        {"id": calendar_id, "user_id": user_id},
    )
    return _normalize_calendar_row(row)


async def create_calendar(user_id: str, payload: dict) -> dict:
    now = _now_iso()
    record = {
        "id": _new_id(),
        "user_id": user_id,
        "name": str(payload.get("name") or "").strip(),
        "color": payload.get("color") or "#3B82F6",
        "description": payload.get("description"),
        "is_default": int(bool(payload.get("is_default"))),
        "is_visible": int(payload.get("is_visible", True) is not False),
        "created_at": now,
        "updated_at": now,
    }
    await _execute(
        f"""
        INSERT INTO {CALENDARS_TABLE}
        (id, user_id, name, color, description, is_default, is_visible, created_at, updated_at)
        VALUES
        (:id, :user_id, :name, :color, :description, :is_default, :is_visible, :created_at, :updated_at)
        """,
        record,
    )
    return _normalize_calendar_row(record)


async def ensure_default_calendar(user_id: str) -> list[dict]:
    calendars = await list_calendars(user_id)
    if calendars:
        return calendars
    await create_calendar(user_id, {**DEFAULT_CALENDAR, "is_default": True, "is_visible": True})
    return await list_calendars(user_id)


EVENT_SELECT = f"""
    SELECT e.id, e.user_id, e.calendar_id, e.title, e.description, e.location, e.start_time, e.end_time,
           e.is_all_day, e.is_recurring, e.reminder_minutes, e.created_at, e.updated_at,
           c.name AS calendar_name, c.color AS calendar_color
    FROM {EVENTS_TABLE} e
    LEFT JOIN {CALENDARS_TABLE} c ON c.id = e.calendar_id AND c.user_id = e.user_id
"""


def _normalize_event_row(row) -> dict:
    payload = _normalize_row(row, bool_fields=("is_all_day", "is_recurring"))
    if not payload:
        return {}
    payload["calendar"] = {
        "id": payload.get("calendar_id"),
        "name": payload.pop("calendar_name", None),
        "color": payload.pop("calendar_color", None),
    }
    return payload


async def list_events(
    user_id: str,
    start: str | None = None,
    end: str | None = None,
    calendar_ids: list[str] | None = None,
) -> list[dict]:
    clauses = ["e.user_id = :user_id"]
    params: dict = {"user_id": user_id}
    # Overlap with the window, so multi-day events crossing either edge are kept.
    if start:
        clauses.append("e.end_time >= :start")
        params["start"] = start
    if end:
        clauses.append("e.start_time <= :end")
        params["end"] = end
    if calendar_ids:
        clauses.append("e.calendar_id IN :calendar_ids")
        params["calendar_ids"] = list(calendar_ids)
    stmt = sql_text(EVENT_SELECT + f" WHERE {' AND '.join(clauses)} ORDER BY e.start_time ASC")
    if calendar_ids:
        stmt = stmt.bindparams(bindparam("calendar_ids", expanding=True))
    rows = await _fetch_all(stmt, params)
    return [_normalize_event_row(row) for row in rows]


async def get_event(user_id: str, event_id: str) -> dict:
    row = await _fetch_one(
        EVENT_SELECT + " WHERE e.id = :id AND e.user_id = :user_id",
        {"id": event_id, "user_id": user_id},
    )
    return _normalize_event_row(row)


def _event_values(payload: dict) -> dict:
    return {
        "calendar_id": payload["calendar_id"],
        "title": str(payload.get("title") or "").strip(),
        "description": payload.get("description"),
        "location": payload.get("location"),
        "start_time": to_utc_iso(payload["start_time"]),
        "end_time": to_utc_iso(payload["end_time"]),
        "is_all_day": int(bool(payload.get("is_all_day"))),
        "is_recurring": 0,
        "reminder_minutes": payload.get("reminder_minutes"),
    }


async def create_event(user_id: str, payload: dict) -> dict:
    now = _now_iso()
    record = {
        "id": _new_id(),
        "user_id": user_id,
        **_event_values(payload),
        "created_at": now,
        "updated_at": now,
    }
    await _execute(
        f"""
        INSERT INTO {EVENTS_TABLE}
        (id, user_id, calendar_id, title, description, location, start_time, end_time, is_all_day,
         is_recurring, reminder_minutes, created_at, updated_at)
        VALUES
        (:id, :user_id, :calendar_id, :title, :description, :location, :start_time, :end_time, :is_all_day,
         :is_recurring, :reminder_minutes, :created_at, :updated_at)
        """,
        record,
    )
    return await get_event(user_id, record["id"])


async def update_event(user_id: str, event_id: str, payload: dict) -> dict:
    params = {**_event_values(payload), "id": event_id, "user_id": user_id, "updated_at": _now_iso()}
    changed = await _execute(
        f"""
        UPDATE {EVENTS_TABLE}
        SET calendar_id = :calendar_id, title = :title, description = :description, location = :location,
            start_time = :start_time, end_time = :end_time, is_all_day = :is_all_day,
            is_recurring = :is_recurring, reminder_minutes = :reminder_minutes, updated_at = :updated_at
        WHERE id = :id AND user_id = :user_id
        """,
        params,
    )
    if not changed:
        return {}
    return await get_event(user_id, event_id)


async def delete_event(user_id: str, event_id: str) -> bool:
    deleted = await _execute(
        f"DELETE FROM {EVENTS_TABLE} WHERE id = :id AND user_id = :user_id",
        {"id": event_id, "user_id": user_id},
    )
    return deleted > 0


# Profiles

async def get_profile(user_id: str) -> dict:
    row = await _fetch_one(
        f"SELECT {PROFILE_COLUMNS} FROM {PROFILES_TABLE} WHERE id = :id",
        {"id": user_id},
    )
    return _normalize_profile_row(row)


async def create_profile(user_id: str, email: str | None, metadata: dict) -> dict:
    now = _now_iso()
    await _execute(
        f"""
        INSERT INTO {PROFILES_TABLE}
        (id, email, full_name, avatar_url, preferences_json, social_links_json,
         notification_settings_json, created_at, updated_at)
        VALUES
        (:id, :email, :full_name, :avatar_url, :preferences_json, :social_links_json,
         :notification_settings_json, :created_at, :updated_at)
        ON CONFLICT (id) DO NOTHING
        """,
        {
            "id": user_id,
            "email": email,
            "full_name": (metadata or {}).get("full_name") or "",
            "avatar_url": (metadata or {}).get("avatar_url") or "",
            "preferences_json": _dump_json({}),
            "social_links_json": _dump_json({}),
            "notification_settings_json": _dump_json({}),
            "created_at": now,
            "updated_at": now,
        },
    )
    return await get_profile(user_id)


async def update_profile(user_id: str, patch: dict) -> dict:
    updates, params = _build_updates(
        patch,
        {
            "full_name",
            "avatar_url",
            "bio",
            "location",
            "website",
            "phone",
            "date_of_birth",
            "timezone",
            "preferences",
            "social_links",
            "notification_settings",
        },
        {
            "preferences": _json_column("preferences_json", {}),
            "social_links": _json_column("social_links_json", {}),
            "notification_settings": _json_column("notification_settings_json", {}),
        },
    )
    if not updates:
        return await get_profile(user_id)
    updates.append("updated_at = :updated_at")
    params.update({"id": user_id, "updated_at": _now_iso()})
    changed = await _execute(
        f"UPDATE {PROFILES_TABLE} SET {', '.join(updates)} WHERE id = :id",
        params,
    )
    if not changed:
        return {}
    return await get_profile(user_id)


async def delete_account_data(user_id: str) -> bool:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        for table in USER_SCOPED_TABLES:
            await session.execute(
                sql_text(f"DELETE FROM {table} WHERE user_id = :user_id"),
                {"user_id": user_id},
            )
        result = await session.execute(
            sql_text(f"DELETE FROM {PROFILES_TABLE} WHERE id = :id"),
            {"id": user_id},
        )
        deleted = result.rowcount or 0
        await session.commit()
    return deleted > 0


# Widgets

def _normalize_widget_type_row(row) -> dict:
    return _normalize_row(row, {"default_config_json": ("default_config", {})})


def _normalize_user_widget_row(row) -> dict:
    payload = _normalize_row(row, {"config_json": ("config", {})}, bool_fields=("is_visible",))
    if not payload:
        return {}
    widget_type = {}
    for key in ("name", "display_name", "description", "icon", "category", "default_config_json"):
        column = f"type_{key}"
        if column in payload:
            widget_type[key] = payload.pop(column)
    if "default_config_json" in widget_type:
        widget_type["default_config"] = _load_json(widget_type.pop("default_config_json"), {})
    payload["widget_types"] = widget_type
    return payload


async def list_widget_types() -> list[dict]:
    rows = await _fetch_all(
        f"""
        SELECT id, name, display_name, description, icon, category, default_config_json
        FROM {WIDGET_TYPES_TABLE}
        ORDER BY category ASC, display_name ASC
        """,
        {},
    )
    return [_normalize_widget_type_row(row) for row in rows]


async def get_widget_type(widget_type_id: str) -> dict:
    row = await _fetch_one(
        f"""
        SELECT id, name, display_name, description, icon, category, default_config_json
        FROM {WIDGET_TYPES_TABLE}
        WHERE id = :id
        """,
        {"id": widget_type_id},
    )
    return _normalize_widget_type_row(row)


USER_WIDGET_SELECT = f"""
    SELECT w.id, w.user_id, w.widget_type_id, w.title, w.position_x, w.position_y, w.width, w.height,
           w.config_json, w.is_visible, w.created_at, w.updated_at,
           t.name AS type_name, t.display_name AS type_display_name, t.description AS type_description,
           t.icon AS type_icon, t.category AS type_category, t.default_config_json AS type_default_config_json
    FROM {USER_WIDGETS_TABLE} w
    JOIN {WIDGET_TYPES_TABLE} t ON t.id = w.widget_type_id
"""


async def list_user_widgets(user_id: str) -> list[dict]:
    rows = await _fetch_all(
        USER_WIDGET_SELECT
        + " WHERE w.user_id = :user_id AND w.is_visible = 1 ORDER BY w.position_y ASC, w.position_x ASC",
        {"user_id": user_id},
    )
    return [_normalize_user_widget_row(row) for row in rows]


async def get_user_widget(user_id: str, widget_id: str) -> dict:
    row = await _fetch_one(
        USER_WIDGET_SELECT + " WHERE w.id = :id AND w.user_id = :user_id",
        {"id": widget_id, "user_id": user_id},
    )
    return _normalize_user_widget_row(row)


async def find_widget_by_type(user_id: str, widget_type_id: str, visible_only: bool = True) -> dict:
    clause = " AND w.is_visible = 1" if visible_only else ""
    row = await _fetch_one(
        USER_WIDGET_SELECT + " WHERE w.user_id = :user_id AND w.widget_type_id = :widget_type_id" + clause,
        {"user_id": user_id, "widget_type_id": widget_type_id},
    )
    return _normalize_user_widget_row(row)


async def count_visible_widgets(user_id: str) -> int:
    row = await _fetch_one(
        f"SELECT COUNT(*) AS total FROM {USER_WIDGETS_TABLE} WHERE user_id = :user_id AND is_visible = 1",
        {"user_id": user_id},
    )
    return int(row["total"] or 0) if row else 0


async def create_user_widget(user_id: str, payload: dict) -> dict:
    now = _now_iso()
    record = {
        "id": _new_id(),
        "user_id": user_id,
        "widget_type_id": payload["widget_type_id"],
        "title": str(payload.get("title") or "").strip(),
        "position_x": int(payload.get("position_x") or 0),
        "position_y": int(payload.get("position_y") or 0),
        "width": int(payload.get("width") or 1),
        "height": int(payload.get("height") or 1),
        "config_json": _dump_json(payload.get("config") or {}),
        "is_visible": 1,
        "created_at": now,
        "updated_at": now,
    }
    await _execute(
        f"""
        INSERT INTO {USER_WIDGETS_TABLE}
        (id, user_id, widget_type_id, title, position_x, position_y, width, height, config_json, is_visible,
         created_at, updated_at)
        VALUES
        (:id, :user_id, :widget_type_id, :title, :position_x, :position_y, :width, :height, :config_json,
         :is_visible, :created_at, :updated_at)
        """,
        record,
    )
    return await get_user_widget(user_id, record["id"])


async def update_user_widget(user_id: str, widget_id: str, patch: dict) -> dict:
    updates, params = _build_updates(
        patch,
        {"title", "position_x", "position_y", "width", "height", "config", "is_visible"},
        {
            "config": _json_column("config_json", {}),
            "is_visible": _flag_column("is_visible"),
        },
    )
    if not updates:
        return await get_user_widget(user_id, widget_id)
    updates.append("updated_at = :updated_at")
    params.update({"id": widget_id, "user_id": user_id, "updated_at": _now_iso()})
    changed = await _execute(
        f"UPDATE {USER_WIDGETS_TABLE} SET {', '.join(updates)} WHERE id = :id AND user_id = :user_id",
        params,
    )
    if not changed:
        return {}
    return await get_user_widget(user_id, widget_id)


async def delete_user_widget(user_id: str, widget_id: str) -> bool:
    deleted = await _execute(
        f"DELETE FROM {USER_WIDGETS_TABLE} WHERE id = :id AND user_id = :user_id",
        {"id": widget_id, "user_id": user_id},
    )
    return deleted > 0
