from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from backend.auth import require_user_id
from backend.errors import is_check_violation, is_unique_violation
from backend.schemas import WidgetCreate, WidgetPatch
from backend.settings import get_settings
from backend import repositories

logger = logging.getLogger(__name__)

router = APIRouter()


def validate_widget_fields(fields: dict) -> None:
    """Raise a 400 for the first bad field; keys absent from ``fields`` are left alone."""
    if "title" in fields and (not isinstance(fields["title"], str) or not fields["title"].strip()):
        raise HTTPException(status_code=400, detail="Widget title is required and must not be empty")
    for key in ("width", "height"):
        if key in fields and (fields[key] is None or not 1 <= fields[key] <= 4):
            raise HTTPException(status_code=400, detail=f"Widget {key} must be between 1 and 4")
    for key, label in (("position_x", "X"), ("position_y", "Y")):
        if key in fields and (fields[key] is None or fields[key] < 0):
            raise HTTPException(status_code=400, detail=f"Widget position {label} must be non-negative")
    if "is_visible" in fields and not isinstance(fields["is_visible"], bool):
        raise HTTPException(status_code=400, detail="Widget visibility must be true or false")
    config = fields.get("config")
    if config is not None and not isinstance(config, dict):
        raise HTTPException(status_code=400, detail="Widget config must be a valid JSON object")


def _duplicate_response(display_name: str, existing: dict) -> JSONResponse:
    content = {"detail": f"You already have a {display_name} widget"}
    if existing:
        content["existingWidget"] = {"id": existing["id"], "title": existing["title"]}
    return JSONResponse(status_code=409, content=content)


@router.get("/api/widget-types")
async def list_widget_types():
    try:
        widget_types = await repositories.list_widget_types()
    except Exception as exc:
        logger.exception("Failed to list widget types: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    grouped: dict[str, list[dict]] = {}
    for widget_type in widget_types:
        grouped.setdefault(widget_type.get("category") or "other", []).append(widget_type)
    return {"widgetTypes": jsonable_encoder(grouped)}


@router.get("/api/widgets")
async def list_widgets(user_id: str = Depends(require_user_id)):
    try:
        widgets = await repositories.list_user_widgets(user_id)
    except Exception as exc:
        logger.exception("Failed to list widgets: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"widgets": jsonable_encoder(widgets)}


@router.post("/api/widgets", status_code=201)
async def create_widget(payload: WidgetCreate, user_id: str = Depends(require_user_id)):
    if not payload.widget_type_id:
        raise HTTPException(status_code=400, detail="Widget type ID is required")
    fields = payload.model_dump()
    fields["title"] = payload.title
    validate_widget_fields(fields)

    widget_type = await repositories.get_widget_type(payload.widget_type_id)
    if not widget_type:
        raise HTTPException(status_code=400, detail="Invalid widget type")
    display_name = widget_type["display_name"]

    existing = await repositories.find_widget_by_type(user_id, payload.widget_type_id)
    if existing:
        return _duplicate_response(display_name, existing)

    limit = get_settings().max_widgets_per_user
    if await repositories.count_visible_widgets(user_id) >= limit:
        raise HTTPException(
            status_code=400,
            detail=f"Maximum number of widgets ({limit}) reached. Please remove some widgets before adding new ones.",
        )

    fields["title"] = payload.title.strip()
    fields["config"] = payload.config or widget_type.get("default_config") or {}
    try:
        widget = await repositories.create_user_widget(user_id, fields)
    except IntegrityError as exc:
        if is_unique_violation(exc):
            hidden = await repositories.find_widget_by_type(user_id, payload.widget_type_id, visible_only=False)
            return _duplicate_response(display_name, hidden)
        if is_check_violation(exc):
            raise HTTPException(
                status_code=400,
                detail="Invalid widget data. Please check dimensions and position values.",
            )
        logger.exception("Failed to create widget: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"widget": jsonable_encoder(widget), "message": f"{display_name} widget added successfully"}


@router.put("/api/widgets/{widget_id}")
async def update_widget(widget_id: str, payload: WidgetPatch, user_id: str = Depends(require_user_id)):
    patch = payload.model_dump(exclude_unset=True)
    validate_widget_fields(patch)
    if "title" in patch:
        patch["title"] = patch["title"].strip()
    try:
        widget = await repositories.update_user_widget(user_id, widget_id, patch)
    except IntegrityError as exc:
        if is_check_violation(exc):
            raise HTTPException(
                status_code=400,
                detail="Invalid widget data. Please check dimensions and position values.",
            )
        logger.exception("Failed to update widget: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    if not widget:
        raise HTTPException(status_code=404, detail="Widget not found or access denied")
    return {"widget": jsonable_encoder(widget)}


@router.delete("/api/widgets/{widget_id}")
async def delete_widget(widget_id: str, user_id: str = Depends(require_user_id)):
    widget = await repositories.get_user_widget(user_id, widget_id)
    if not widget:
        raise HTTPException(status_code=404, detail="Widget not found or access denied")
    await repositories.delete_user_widget(user_id, widget_id)
    display_name = (widget.get("widget_types") or {}).get("display_name") or "Widget"
    return {
        "message": f"{display_name} widget removed successfully",
        "deletedWidget": {
            "id": widget["id"],
            "widgetTypeId": widget["widget_type_id"],
            "displayName": display_name,
        },
    }
