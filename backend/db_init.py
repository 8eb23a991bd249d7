from __future__ import annotations

import json

from sqlalchemy import text as sql_text

from backend.db import get_engine


TASKS_TABLE = "tasks"
MOOD_TABLE = "mood_entries"
FINANCE_TABLE = "finance_entries"
FOLDERS_TABLE = "folders"
NOTES_TABLE = "notes"
CALENDARS_TABLE = "calendars"
EVENTS_TABLE = "calendar_events"
PROFILES_TABLE = "profiles"
WIDGET_TYPES_TABLE = "widget_types"
USER_WIDGETS_TABLE = "user_widgets"


WIDGET_TYPE_CATALOG = [
    {
        "id": "task_manager",
        "name": "task_manager",
        "display_name": "Task Manager",
        "description": "Manage your daily tasks and to-dos",
        "icon": "CheckSquare",
        "category": "productivity",
        "default_config": {"limit": 5, "show_completed": False},
    },
    {
        "id": "notes",
        "name": "notes",
        "display_name": "Quick Notes",
        "description": "Take quick notes and reminders",
        "icon": "FileText",
        "category": "productivity",
        "default_config": {"limit": 5},
    },
    {
        "id": "calendar",
        "name": "calendar",
        "display_name": "Calendar",
        "description": "Upcoming events from your calendars",
        "icon": "Calendar",
        "category": "productivity",
        "default_config": {"days_ahead": 7},
    },
    {
        "id": "mood_tracker",
        "name": "mood_tracker",
        "display_name": "Mood Tracker",
        "description": "Track your daily mood and emotions",
        "icon": "Smile",
        "category": "health",
        "default_config": {"days": 7},
    },
    {
        "id": "finance_tracker",
        "name": "finance_tracker",
        "display_name": "Finance Tracker",
        "description": "Monitor your expenses and budget",
        "icon": "DollarSign",
        "category": "finance",
        "default_config": {"days": 30, "currency": "USD"},
    },
    {
        "id": "weather",
        "name": "weather",
        "display_name": "Weather",
        "description": "Current weather information",
        "icon": "Cloud",
        "category": "utility",
        "default_config": {
            "location": "London",
            "unit": "celsius",
            "showForecast": True,
            "showHourly": False,
            "autoRefresh": True,
            "refreshInterval": 30,
        },
    },
]


async def init_db():
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {TASKS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT,
                    status TEXT NOT NULL DEFAULT 'pending'
                        CHECK (status IN ('pending', 'in_progress', 'completed', 'cancelled')),
                    priority TEXT NOT NULL DEFAULT 'medium'
                        CHECK (priority IN ('low', 'medium', 'high', 'urgent')),
                    due_date TEXT,
                    category TEXT,
                    tags_json TEXT,
                    created_at TEXT,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {MOOD_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    mood_score INTEGER NOT NULL CHECK (mood_score BETWEEN 1 AND 10),
                    mood_emoji TEXT,
                    mood_label TEXT,
                    notes TEXT,
                    created_at TEXT,
                    updated_at TEXT,
                    UNIQUE (user_id, date)
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {FINANCE_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    type TEXT NOT NULL CHECK (type IN ('income', 'expense', 'transfer')),
                    amount REAL NOT NULL,
                    currency TEXT NOT NULL DEFAULT 'USD',
                    category TEXT,
                    description TEXT,
                    account TEXT,
                    date TEXT NOT NULL,
                    tags_json TEXT,
                    created_at TEXT,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {FOLDERS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    color TEXT DEFAULT 'blue',
                    icon TEXT,
                    emoji TEXT,
                    is_default INTEGER DEFAULT 0,
                    sort_order INTEGER DEFAULT 0,
                    created_at TEXT,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {NOTES_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    folder_id TEXT,
                    title TEXT NOT NULL,
                    content TEXT,
                    tags_json TEXT,
                    color TEXT DEFAULT 'default',
                    is_pinned INTEGER DEFAULT 0,
                    is_starred INTEGER DEFAULT 0,
                    is_archived INTEGER DEFAULT 0,
                    word_count INTEGER DEFAULT 0,
                    character_count INTEGER DEFAULT 0,
                    created_at TEXT,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {CALENDARS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    color TEXT DEFAULT '#3B82F6',
                    description TEXT,
                    is_default INTEGER DEFAULT 0,
                    is_visible INTEGER DEFAULT 1,
                    created_at TEXT,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {EVENTS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    calendar_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT,
                    location TEXT,
                    start_time TEXT NOT NULL,
                    end_time TEXT NOT NULL,
                    is_all_day INTEGER DEFAULT 0,
                    is_recurring INTEGER DEFAULT 0,
                    reminder_minutes INTEGER,
                    created_at TEXT,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {PROFILES_TABLE} (
                    id TEXT PRIMARY KEY,
                    email TEXT,
                    full_name TEXT,
                    avatar_url TEXT,
                    bio TEXT,
                    location TEXT,
                    website TEXT,
                    phone TEXT,
                    date_of_birth TEXT,
                    timezone TEXT,
                    preferences_json TEXT,
                    social_links_json TEXT,
                    notification_settings_json TEXT,
                    created_at TEXT,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {WIDGET_TYPES_TABLE} (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    display_name TEXT NOT NULL,
                    description TEXT,
                    icon TEXT,
                    category TEXT,
                    default_config_json TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {USER_WIDGETS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    widget_type_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    position_x INTEGER NOT NULL DEFAULT 0 CHECK (position_x >= 0),
                    position_y INTEGER NOT NULL DEFAULT 0 CHECK (position_y >= 0),
                    width INTEGER NOT NULL DEFAULT 1 CHECK (width BETWEEN 1 AND 4),
                    height INTEGER NOT NULL DEFAULT 1 CHECK (height BETWEEN 1 AND 4),
                    config_json TEXT,
                    is_visible INTEGER NOT NULL DEFAULT 1,
                    created_at TEXT,
                    updated_at TEXT,
                    UNIQUE (user_id, widget_type_id)
                )
                """
            )
        )
        for statement in (
            f"CREATE INDEX IF NOT EXISTS idx_tasks_user_created ON {TASKS_TABLE} (user_id, created_at)",
            f"CREATE INDEX IF NOT EXISTS idx_finance_user_date ON {FINANCE_TABLE} (user_id, date)",
            f"CREATE INDEX IF NOT EXISTS idx_notes_user_folder ON {NOTES_TABLE} (user_id, folder_id)",
            f"CREATE INDEX IF NOT EXISTS idx_events_user_start ON {EVENTS_TABLE} (user_id, start_time)",
        ):
            await conn.execute(sql_text(statement))

        for widget_type in WIDGET_TYPE_CATALOG:
            await conn.execute(
                sql_text(
                    f"""
                    INSERT INTO {WIDGET_TYPES_TABLE}
                    (id, name, display_name, description, icon, category, default_config_json)
                    VALUES (:id, :name, :display_name, :description, :icon, :category, :default_config_json)
                    ON CONFLICT (id) DO NOTHING
                    """
                ),
                {
                    **{key: value for key, value in widget_type.items() if key != "default_config"},
                    "default_config_json": json.dumps(widget_type["default_config"]),
                },
            )
