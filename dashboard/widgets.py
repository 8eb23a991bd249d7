from __future__ import annotations

MAX_TITLE_LENGTH = 100
GRID_COLUMNS = 4

WIDGET_ICONS = {
    "CheckSquare": "✅",
    "Smile": "😊",
    "DollarSign": "💰",
    "FileText": "📝",
    "Target": "🎯",
    "Cloud": "🌤️",
    "Calendar": "📅",
}


def widget_icon(icon_name):
    return WIDGET_ICONS.get(icon_name or "", "📦")


def is_widget_type_added(widgets, widget_type_id):
    return any(widget.get("widget_type_id") == widget_type_id for widget in widgets)


def validate_widget_data(data: dict) -> list[str]:
    """Client-side copy of the server's widget checks; returns error messages."""
    errors = []
    type_id = data.get("widget_type_id")
    if not type_id or not isinstance(type_id, str):
        errors.append("Widget type ID is required")
    elif not type_id.strip():
        errors.append("Widget type ID cannot be empty")

    title = data.get("title")
    if not title or not isinstance(title, str):
        errors.append("Widget title is required")
    elif not title.strip():
        errors.append("Widget title cannot be empty")
    elif len(title.strip()) > MAX_TITLE_LENGTH:
        errors.append("Widget title must be 100 characters or less")

    if "width" in data or "height" in data:
        width = data.get("width", 1)
        height = data.get("height", 1)
        if width < 1 or width > 4:
            errors.append("Widget width must be between 1 and 4")
        elif height < 1 or height > 4:
            errors.append("Widget height must be between 1 and 4")

    if "position_x" in data or "position_y" in data:
        if data.get("position_x", 0) < 0:
            errors.append("Widget position X must be non-negative")
        elif data.get("position_y", 0) < 0:
            errors.append("Widget position Y must be non-negative")

    config = data.get("config")
    if config is not None and not isinstance(config, dict):
        errors.append("Widget config must be an object or null")
    return errors


def generate_unique_title(base_title: str, existing_titles) -> str:
    existing = set(existing_titles)
    if base_title not in existing:
        return base_title
    counter = 1
    while f"{base_title} {counter}" in existing:
        counter += 1
    return f"{base_title} {counter}"


def calculate_optimal_position(widgets) -> tuple[int, int]:
    if not widgets:
        return 0, 0
    max_y = max(widget.get("position_y") or 0 for widget in widgets)
    max_x = max((widget.get("position_x") or 0) for widget in widgets if (widget.get("position_y") or 0) == max_y)
    if max_x < GRID_COLUMNS - 1:
        return max_x + 1, max_y
    return 0, max_y + 1


def grid_rows(widgets) -> list[list[dict]]:
    """Widgets grouped by row, each row sorted left to right."""
    rows: dict[int, list[dict]] = {}
    for widget in widgets:
        rows.setdefault(widget.get("position_y") or 0, []).append(widget)
    return [
        sorted(rows[row], key=lambda widget: widget.get("position_x") or 0)
        for row in sorted(rows)
    ]
