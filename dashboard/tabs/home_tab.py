import streamlit as st

from dashboard import widgets as widget_helpers
from dashboard.data import repositories
from dashboard.data.api_client import ApiError
from dashboard.tabs.calendar_tab import render_calendar_tab
from dashboard.tabs.finance_tab import render_finance_tab
from dashboard.tabs.mood_tab import render_mood_tab
from dashboard.tabs.notes_tab import render_notes_tab
from dashboard.tabs.tasks_tab import render_tasks_tab
from dashboard.tabs.weather_tab import render_weather_tab

WIDGET_RENDERERS = {
    "task_manager": render_tasks_tab,
    "notes": render_notes_tab,
    "calendar": render_calendar_tab,
    "mood_tracker": render_mood_tab,
    "finance_tracker": render_finance_tab,
    "weather": render_weather_tab,
}


def _add_widget(widget_type, widgets):
    payload = {
        "widget_type_id": widget_type["id"],
        "title": widget_helpers.generate_unique_title(
            widget_type.get("display_name") or widget_type["id"],
            [widget.get("title") for widget in widgets],
        ),
        "config": widget_type.get("default_config") or {},
    }
    payload["position_x"], payload["position_y"] = widget_helpers.calculate_optimal_position(widgets)
    errors = widget_helpers.validate_widget_data(payload)
    if errors:
        st.session_state["home.flash"] = "; ".join(errors)
        return
    try:
        repositories.create_widget(payload)
    except ApiError as exc:
        st.session_state["home.flash"] = exc.message


def _remove_widget(widget_id):
    try:
        repositories.delete_widget(widget_id)
    except ApiError as exc:
        st.session_state["home.flash"] = exc.message


def _render_gallery(widgets):
    try:
        catalog = repositories.list_widget_types()
    except ApiError as exc:
        st.error(exc.message)
        return
    with st.expander("Add widgets", expanded=not widgets):
        for category, types in catalog.items():
            st.caption(category.title())
            cols = st.columns(3)
            for index, widget_type in enumerate(types):
                added = widget_helpers.is_widget_type_added(widgets, widget_type["id"])
                with cols[index % 3]:
                    st.markdown(f"{widget_helpers.widget_icon(widget_type.get('icon'))} **{widget_type.get('display_name')}**")
                    if widget_type.get("description"):
                        st.caption(widget_type["description"])
                    st.button(
                        "Added" if added else "Add",
                        key=f"home.add.{widget_type['id']}",
                        disabled=added,
                        on_click=_add_widget,
                        args=(widget_type, widgets),
                    )


def render_home_tab(ctx):
    st.markdown(f"<div class='section-title'>Welcome back, {ctx.display_name}</div>", unsafe_allow_html=True)
    flash = st.session_state.pop("home.flash", None)
    if flash:
        st.error(flash)

    try:
        widgets = repositories.list_widgets()
    except ApiError as exc:
        st.error(exc.message)
        return

    _render_gallery(widgets)

    for row in widget_helpers.grid_rows(widgets):
        cols = st.columns([max(widget.get("width") or 1, 1) for widget in row])
        for column, widget in zip(cols, row):
            with column:
                with st.container(border=True):
                    head = st.columns([0.85, 0.15])
                    head[0].markdown(f"**{widget.get('title')}**")
                    head[1].button("✕", key=f"home.remove.{widget['id']}", on_click=_remove_widget, args=(widget["id"],))
                    renderer = WIDGET_RENDERERS.get(widget.get("widget_type_id"))
                    if renderer is None:
                        st.caption("This widget type is not available.")
                    else:
                        renderer(ctx, compact=True)
