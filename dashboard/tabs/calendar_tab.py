import html
from datetime import datetime, time, timedelta

import streamlit as st

from dashboard import calendar_layout as layout
from dashboard.constants import CALENDAR_VIEW_LABELS
from dashboard.data import repositories
from dashboard.data.api_client import ApiError

DEFAULT_EVENT_COLOR = "#3B82F6"
WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def _event_color(event):
    return (event.get("calendar") or {}).get("color") or DEFAULT_EVENT_COLOR


def _chip(event, label, style=""):
    title = html.escape(event.get("title") or "Untitled")
    return (
        f"<div class='cal-event' style='background:{html.escape(_event_color(event))};{style}' title='{title}'>"
        f"{html.escape(label)} {title}</div>"
    )


def _month_html(anchor, events, tz, today):
    header = "".join(f"<th>{label}</th>" for label in WEEKDAY_LABELS)
    rows = []
    cells = layout.month_grid(anchor)
    for week_start in range(0, len(cells), 7):
        tds = []
        for day, in_month in cells[week_start:week_start + 7]:
            shown, more = layout.month_cell(events, day, tz)
            classes = ["cal-cell"]
            if not in_month:
                classes.append("muted")
            if day == today:
                classes.append("today")
            chips = "".join(_chip(event, layout.time_label(event, day, tz).split(" - ")[0]) for event in shown)
            if more:
                chips += f"<div class='cal-more'>+{more} more</div>"
            tds.append(f"<td><div class='{' '.join(classes)}'><b>{day.day}</b>{chips}</div></td>")
        rows.append(f"<tr>{''.join(tds)}</tr>")
    return (
        "<table style='width:100%;table-layout:fixed;border-collapse:separate;border-spacing:4px;'>"
        f"<thead><tr>{header}</tr></thead><tbody>{''.join(rows)}</tbody></table>"
    )


def _day_column_html(events, day, tz):
    height = 24 * layout.HOUR_HEIGHT_PX
    blocks = []
    for group in layout.overlap_groups(events, day, tz):
        columns = layout.column_layout(group, day, tz)
        for column_index, column in enumerate(columns.columns):
            for event in column:
                position = layout.event_position(event, day, tz)
                left = column_index * columns.column_width
                style = (
                    f"top:{position.top:.0f}px;height:{position.height:.0f}px;"
                    f"left:{left:.2f}%;width:calc({columns.column_width:.2f}% - 2px);"
                )
                blocks.append(_chip(event, layout.time_label(event, day, tz), style))
        if columns.has_overflow:
            first = layout.event_position(group[0], day, tz)
            blocks.append(
                f"<div class='cal-more' style='position:absolute;right:2px;top:{first.top:.0f}px;'>"
                f"+{columns.more_count} more</div>"
            )
    return f"<div class='day-grid' style='height:{height}px;'>{''.join(blocks)}</div>"


def _hours_html():
    labels = "".join(
        f"<div style='height:{layout.HOUR_HEIGHT_PX}px;font-size:0.7rem;opacity:0.7;'>{layout.hour_label(hour)}</div>"
        for hour in range(24)
    )
    return f"<div>{labels}</div>"


def _all_day_html(events, day, tz):
    all_day = [event for event in layout.events_for_date(events, day, tz) if event.get("is_all_day")]
    return "".join(_chip(event, "") for event in all_day)


def _render_time_grid(days, events, tz, today):
    cols = st.columns([0.6] + [1] * len(days))
    with cols[0]:
        st.markdown("<div style='height:42px;'></div>" + _hours_html(), unsafe_allow_html=True)
    for column, day in zip(cols[1:], days):
        with column:
            marker = " style='color:var(--today-border);'" if day == today else ""
            st.markdown(
                f"<div{marker}><b>{day.strftime('%a')} {day.day}</b></div>"
                f"<div style='min-height:20px;'>{_all_day_html(events, day, tz)}</div>"
                + _day_column_html(events, day, tz),
                unsafe_allow_html=True,
            )


def _render_agenda(events, tz):
    groups = layout.agenda_groups(events, tz)
    if not groups:
        st.caption("No upcoming events.")
        return
    for day, day_events in groups.items():
        st.markdown(f"**{day.strftime('%A, %B')} {day.day}**")
        for event in day_events:
            st.markdown(_chip(event, layout.time_label(event, day, tz)), unsafe_allow_html=True)
            if event.get("location"):
                st.caption(event["location"])


def _event_form(ctx, calendars, event=None):
    prefix = f"calendar.form.{event['id'] if event else 'new'}"
    tz = ctx.zone
    span = layout.local_span(event, tz) if event else None
    default_start = span[0] if span else datetime.combine(ctx.today(), time(9, 0), tzinfo=tz)
    default_end = span[1] if span else default_start + timedelta(hours=1)
    calendar_ids = [item["id"] for item in calendars]
    names = {item["id"]: item["name"] for item in calendars}
    current = event.get("calendar_id") if event else None

    with st.form(prefix):
        title = st.text_input("Title", value=(event or {}).get("title") or "")
        calendar_id = st.selectbox(
            "Calendar",
            calendar_ids,
            index=calendar_ids.index(current) if current in calendar_ids else 0,
            format_func=names.get,
        )
        all_day = st.checkbox("All day", value=bool((event or {}).get("is_all_day")))
        cols = st.columns(4)
        start_day = cols[0].date_input("Start date", value=default_start.date())
        start_time = cols[1].time_input("Start time", value=default_start.time().replace(tzinfo=None))
        end_day = cols[2].date_input("End date", value=default_end.date())
        end_time = cols[3].time_input("End time", value=default_end.time().replace(tzinfo=None))
        location = st.text_input("Location", value=(event or {}).get("location") or "")
        description = st.text_area("Description", value=(event or {}).get("description") or "", height=80)
        submitted = st.form_submit_button("Save event")

    if not submitted:
        return
    if all_day:
        start_time, end_time = time(0, 0), time(23, 59)
    payload = {
        "title": title.strip(),
        "calendar_id": calendar_id,
        "is_all_day": all_day,
        "start_time": datetime.combine(start_day, start_time, tzinfo=tz),
        "end_time": datetime.combine(end_day, end_time, tzinfo=tz),
        "location": location or None,
        "description": description or None,
    }
    try:
        if event:
            repositories.update_event(event["id"], payload)
        else:
            repositories.create_event(payload)
        st.rerun()
    except ApiError as exc:
        st.error(exc.message)


def _render_controls(ctx):
    if "calendar.anchor" not in st.session_state:
        st.session_state["calendar.anchor"] = ctx.today()
    top = st.columns([1.6, 0.5, 0.6, 0.5, 2.2])
    with top[0]:
        view = st.segmented_control(
            "View",
            list(layout.VIEWS),
            key="calendar.view",
            default="month",
            format_func=CALENDAR_VIEW_LABELS.get,
        ) or "month"
    anchor = st.session_state["calendar.anchor"]
    if top[1].button("‹", key="calendar.prev"):
        anchor = layout.navigate(view, anchor, "prev")
    if top[2].button("Today", key="calendar.today"):
        anchor = ctx.today()
    if top[3].button("›", key="calendar.next"):
        anchor = layout.navigate(view, anchor, "next")
    st.session_state["calendar.anchor"] = anchor
    top[4].markdown(f"### {layout.view_title(view, anchor)}")
    return view, anchor


def render_calendar_tab(ctx, compact=False):
    tz = ctx.zone
    today = ctx.today()
    try:
        calendars = repositories.list_calendars()
    except ApiError as exc:
        st.error(exc.message)
        return

    if compact:
        start, end = layout.fetch_window("week", today, tz)
        try:
            events = repositories.list_events(start, end)
        except ApiError as exc:
            st.error(exc.message)
            return
        todays = layout.events_for_date(events, today, tz)
        if not todays:
            st.caption("Nothing scheduled today.")
        for event in todays:
            st.markdown(_chip(event, layout.time_label(event, today, tz)), unsafe_allow_html=True)
        return

    st.markdown("<div class='section-title'>Calendar</div>", unsafe_allow_html=True)
    view, anchor = _render_controls(ctx)

    names = {item["id"]: item["name"] for item in calendars}
    selected = st.multiselect(
        "Calendars",
        list(names),
        default=[item["id"] for item in calendars if item.get("is_visible", True)],
        format_func=names.get,
        key="calendar.visible",
    )
    start, end = layout.fetch_window(view, anchor, tz)
    try:
        events = repositories.list_events(start, end, selected) if selected else []
    except ApiError as exc:
        st.error(exc.message)
        return

    if view == "month":
        st.markdown(_month_html(anchor, events, tz, today), unsafe_allow_html=True)
    elif view == "week":
        _render_time_grid(layout.week_days(anchor), events, tz, today)
    elif view == "day":
        _render_time_grid([anchor], events, tz, today)
    else:
        _render_agenda(events, tz)

    left, right = st.columns(2)
    with left:
        with st.expander("New event"):
            _event_form(ctx, calendars)
        with st.expander("New calendar"):
            with st.form("calendar.new_calendar"):
                name = st.text_input("Name")
                color = st.color_picker("Color", value=DEFAULT_EVENT_COLOR)
                if st.form_submit_button("Create calendar"):
                    try:
                        repositories.create_calendar({"name": name, "color": color})
                        st.rerun()
                    except ApiError as exc:
                        st.error(exc.message)
    with right:
        if events:
            labels = {event["id"]: f"{event.get('title')} ({layout.parse_instant(event['start_time']).astimezone(tz):%b %d %H:%M})" for event in events}
            chosen = st.selectbox("Edit event", list(labels), format_func=labels.get, key="calendar.edit_id")
            event = next(item for item in events if item["id"] == chosen)
            _event_form(ctx, calendars, event)
            if st.button("Delete event", key=f"calendar.delete.{chosen}"):
                try:
                    repositories.delete_event(chosen)
                    st.rerun()
                except ApiError as exc:
                    st.error(exc.message)
