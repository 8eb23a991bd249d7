"""Pure calendar layout helpers shared by the month, week, day and agenda views.

Every function takes plain event dicts as returned by ``/api/calendar/events``
(``start_time``/``end_time`` ISO strings and ``is_all_day``) and a display
timezone. Nothing here touches Streamlit, so the whole module is unit-testable.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from math import floor

HOUR_HEIGHT_PX = 48
MIN_EVENT_HEIGHT_PX = 24
CONTAINER_WIDTH_PX = 180
MIN_COLUMN_WIDTH_PX = 60
ITEMS_PER_COLUMN = 2
MONTH_CELL_LIMIT = 2
MONTH_GRID_CELLS = 42
LAST_MINUTE_OF_DAY = 23 * 60 + 59

VIEWS = ("month", "week", "day", "agenda")


@dataclass(frozen=True)
class EventPosition:
    top: float
    height: float
    start_minutes: int
    end_minutes: int
    duration: int
    is_multi_day: bool
    is_start_of_multi_day: bool
    is_end_of_multi_day: bool


@dataclass
class ColumnLayout:
    columns: list[list[dict]]
    total_events: int
    max_columns: int
    column_width: float
    hidden: list[dict] = field(default_factory=list)

    @property
    def more_count(self) -> int:
        return max(self.total_events - self.max_columns * ITEMS_PER_COLUMN, len(self.hidden), 0)

    @property
    def has_overflow(self) -> bool:
        return self.more_count > 0


def parse_instant(value) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def local_span(event: dict, tz: tzinfo = timezone.utc) -> tuple[datetime, datetime] | None:
    start = parse_instant(event.get("start_time"))
    end = parse_instant(event.get("end_time"))
    if start is None or end is None:
        return None
    return start.astimezone(tz), end.astimezone(tz)


def _day_bounds(day: date, tz: tzinfo) -> tuple[datetime, datetime]:
    day_start = datetime.combine(day, time.min, tzinfo=tz)
    day_end = datetime.combine(day, time(23, 59, 59), tzinfo=tz)
    return day_start, day_end


def occurs_on(event: dict, day: date, tz: tzinfo = timezone.utc) -> bool:
    span = local_span(event, tz)
    if span is None:
        return False
    start, end = span
    if start.date() == day or end.date() == day:
        return True
    day_start, day_end = _day_bounds(day, tz)
    return start < day_start and end > day_end


def events_for_date(events: list[dict], day: date, tz: tzinfo = timezone.utc) -> list[dict]:
    return [event for event in events if occurs_on(event, day, tz)]


def event_position(event: dict, day: date, tz: tzinfo = timezone.utc) -> EventPosition | None:
    if not occurs_on(event, day, tz):
        return None
    start, end = local_span(event, tz)
    start_date, end_date = start.date(), end.date()
    start_minutes = start.hour * 60 + start.minute if start_date == day else 0
    end_minutes = end.hour * 60 + end.minute if end_date == day else LAST_MINUTE_OF_DAY
    duration = end_minutes - start_minutes
    multi_day = start_date != end_date
    return EventPosition(
        top=start_minutes / 60 * HOUR_HEIGHT_PX,
        height=max(duration / 60 * HOUR_HEIGHT_PX, MIN_EVENT_HEIGHT_PX),
        start_minutes=start_minutes,
        end_minutes=end_minutes,
        duration=duration,
        is_multi_day=multi_day,
        is_start_of_multi_day=multi_day and start_date == day,
        is_end_of_multi_day=multi_day and end_date == day,
    )


def _intersects(a: EventPosition, b: EventPosition) -> bool:
    return not (a.end_minutes <= b.start_minutes or a.start_minutes >= b.end_minutes)


def overlap_groups(events: list[dict], day: date, tz: tzinfo = timezone.utc) -> list[list[dict]]:
    """Greedy grouping of the day's timed events in start order: join the first group with an intersecting member."""
    positioned: list[tuple[dict, EventPosition]] = []
    for event in events_for_date(events, day, tz):
        if event.get("is_all_day"):
            continue
        position = event_position(event, day, tz)
        if position is not None:
            positioned.append((event, position))
    positioned.sort(key=lambda item: item[1].start_minutes)

    groups: list[list[tuple[dict, EventPosition]]] = []
    for event, position in positioned:
        for group in groups:
            if any(_intersects(position, other) for _, other in group):
                group.append((event, position))
                break
        else:
            groups.append([(event, position)])
    return [[event for event, _ in group] for group in groups]


def column_layout(group: list[dict], day: date, tz: tzinfo = timezone.utc) -> ColumnLayout:
    max_columns = min(len(group), max(1, floor(CONTAINER_WIDTH_PX / MIN_COLUMN_WIDTH_PX)))
    max_columns = max(max_columns, 1)
    positioned = [(event, event_position(event, day, tz)) for event in group]
    positioned = [(event, position) for event, position in positioned if position is not None]
    positioned.sort(key=lambda item: item[1].start_minutes)

    columns: list[list[tuple[dict, EventPosition]]] = [[] for _ in range(max_columns)]
    hidden: list[dict] = []
    for index, (event, position) in enumerate(positioned):
        # Round-robin slot first; step to the next free column when the slot already holds an overlapping event.
        for offset in range(max_columns):
            column = columns[(index + offset) % max_columns]
            if not any(_intersects(position, other) for _, other in column):
                column.append((event, position))
                break
        else:
            hidden.append(event)

    return ColumnLayout(
        columns=[[event for event, _ in column] for column in columns],
        total_events=len(group),
        max_columns=max_columns,
        column_width=100 / max_columns,
        hidden=hidden,
    )


def month_cell(events: list[dict], day: date, tz: tzinfo = timezone.utc) -> tuple[list[dict], int]:
    day_events = events_for_date(events, day, tz)
    return day_events[:MONTH_CELL_LIMIT], max(len(day_events) - MONTH_CELL_LIMIT, 0)


def start_of_week(anchor: date) -> date:
    # Sunday-first weeks: date.weekday() is Monday=0 .. Sunday=6
    return anchor - timedelta(days=(anchor.weekday() + 1) % 7)


def week_days(anchor: date) -> list[date]:
    first = start_of_week(anchor)
    return [first + timedelta(days=offset) for offset in range(7)]


def _add_months(anchor: date, months: int) -> date:
    month_index = anchor.month - 1 + months
    year = anchor.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(anchor.day, _days_in_month(year, month)))


def _days_in_month(year: int, month: int) -> int:
    if month == 12:
        return 31
    return (date(year, month + 1, 1) - timedelta(days=1)).day


def _month_end(anchor: date) -> date:
    return date(anchor.year, anchor.month, _days_in_month(anchor.year, anchor.month))


def month_grid(anchor: date) -> list[tuple[date, bool]]:
    first = date(anchor.year, anchor.month, 1)
    grid_start = start_of_week(first)
    cells = []
    for offset in range(MONTH_GRID_CELLS):
        day = grid_start + timedelta(days=offset)
        cells.append((day, day.month == anchor.month and day.year == anchor.year))
    return cells


def visible_range(view: str, anchor: date) -> tuple[date, date]:
    if view == "month":
        cells = month_grid(anchor)
        return cells[0][0], cells[-1][0]
    if view == "week":
        days = week_days(anchor)
        return days[0], days[-1]
    if view == "day":
        return anchor, anchor
    if view == "agenda":
        first = date(anchor.year, anchor.month, 1)
        return first, _month_end(_add_months(first, 2))
    raise ValueError(f"Unknown calendar view: {view}")


def fetch_range(view: str, anchor: date) -> tuple[date, date]:
    if view == "day":
        return anchor - timedelta(days=1), anchor + timedelta(days=1)
    return visible_range(view, anchor)


def fetch_window(view: str, anchor: date, tz: tzinfo = timezone.utc) -> tuple[datetime, datetime]:
    """Instants bounding ``fetch_range`` in ``tz``: start-of-first-day to end-of-last-day."""
    first, last = fetch_range(view, anchor)
    return (
        datetime.combine(first, time.min, tzinfo=tz),
        datetime.combine(last, time(23, 59, 59), tzinfo=tz),
    )


def navigate(view: str, anchor: date, direction: str) -> date:
    step = 1 if direction == "next" else -1
    if view in {"month", "agenda"}:
        return _add_months(anchor, step)
    if view == "week":
        return anchor + timedelta(days=7 * step)
    if view == "day":
        return anchor + timedelta(days=step)
    raise ValueError(f"Unknown calendar view: {view}")


def view_title(view: str, anchor: date) -> str:
    if view == "week":
        first, last = week_days(anchor)[0], week_days(anchor)[-1]
        return f"{first.strftime('%b')} {first.day} - {last.strftime('%b')} {last.day}, {last.year}"
    if view == "day":
        return f"{anchor.strftime('%B')} {anchor.day}, {anchor.year}"
    return f"{anchor.strftime('%B')} {anchor.year}"


def agenda_groups(events: list[dict], tz: tzinfo = timezone.utc) -> "OrderedDict[date, list[dict]]":
    """Events bucketed by every local date they span, in start order."""
    spans = []
    for event in events:
        span = local_span(event, tz)
        if span is not None:
            spans.append((span, event))
    spans.sort(key=lambda item: item[0][0])

    buckets: dict[date, list[dict]] = {}
    for (start, end), event in spans:
        day = start.date()
        while day <= end.date():
            buckets.setdefault(day, []).append(event)
            day += timedelta(days=1)
    return OrderedDict(sorted(buckets.items()))


def format_clock(moment: datetime) -> str:
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"


def time_label(event: dict, day: date, tz: tzinfo = timezone.utc) -> str:
    span = local_span(event, tz)
    if span is None:
        return ""
    start, end = span
    multi_day = start.date() != end.date()
    if event.get("is_all_day"):
        return "All day"
    if multi_day and start.date() == day:
        return f"{format_clock(start)} - End of day"
    if multi_day and end.date() == day:
        return f"Start of day - {format_clock(end)}"
    if multi_day:
        return "All day"
    return f"{format_clock(start)} - {format_clock(end)}"


def hour_label(hour: int) -> str:
    if hour == 0:
        return "12 AM"
    if hour == 12:
        return "12 PM"
    return f"{hour - 12} PM" if hour > 12 else f"{hour} AM"
