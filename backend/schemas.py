from __future__ import annotations

import datetime as dt
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field


class TaskCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[dt.date] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None


class TaskPatch(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[dt.date] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None


class MoodCreate(BaseModel):
    mood_score: Optional[int] = None
    mood_emoji: Optional[str] = None
    mood_label: Optional[str] = None
    notes: Optional[str] = None
    date: Optional[dt.date] = None


class MoodPatch(BaseModel):
    mood_score: Optional[int] = None
    mood_emoji: Optional[str] = None
    mood_label: Optional[str] = None
    notes: Optional[str] = None
    date: Optional[dt.date] = None


class FinanceCreate(BaseModel):
    type: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    account: Optional[str] = None
    date: Optional[dt.date] = None
    tags: Optional[List[str]] = None


class FinancePatch(BaseModel):
    type: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    account: Optional[str] = None
    date: Optional[dt.date] = None
    tags: Optional[List[str]] = None


class CalendarCreate(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None
    description: Optional[str] = None
    is_visible: bool = True


class EventCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    start_time: Optional[dt.datetime] = None
    end_time: Optional[dt.datetime] = None
    is_all_day: bool = False
    calendar_id: Optional[str] = None
    reminder_minutes: Optional[int] = None


class FolderCreate(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    emoji: Optional[str] = None


class FolderPatch(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    emoji: Optional[str] = None


class FolderOrderItem(BaseModel):
    id: str
    sort_order: int


class FolderReorder(BaseModel):
    folders: Optional[List[FolderOrderItem]] = None


class NoteCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    content: Optional[str] = None
    tags: Optional[List[str]] = None
    category: Optional[str] = None
    folder_id: Optional[str] = Field(None, alias="folderId")
    color: Optional[str] = None
    is_pinned: Optional[bool] = Field(None, alias="isPinned")
    is_starred: Optional[bool] = Field(None, alias="isStarred")
    is_archived: Optional[bool] = Field(None, alias="isArchived")


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    timezone: Optional[str] = None
    preferences: Optional[Dict[str, Any]] = None
    social_links: Optional[Dict[str, Any]] = None
    notification_settings: Optional[Dict[str, Any]] = None


class WidgetCreate(BaseModel):
    widget_type_id: Optional[str] = None
    title: Optional[str] = None
    position_x: int = 0
    position_y: int = 0
    width: int = 1
    height: int = 1
    config: Any = None


class WidgetPatch(BaseModel):
    title: Optional[str] = None
    position_x: Optional[int] = None
    position_y: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    config: Any = None
    is_visible: Optional[bool] = None
