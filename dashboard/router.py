import streamlit as st

from dashboard.tabs.calendar_tab import render_calendar_tab
from dashboard.tabs.finance_tab import render_finance_tab
from dashboard.tabs.home_tab import render_home_tab
from dashboard.tabs.mood_tab import render_mood_tab
from dashboard.tabs.notes_tab import render_notes_tab
from dashboard.tabs.profile_tab import render_profile_tab
from dashboard.tabs.tasks_tab import render_tasks_tab
from dashboard.tabs.weather_tab import render_weather_tab


TAB_OPTIONS = [
    "Dashboard",
    "Tasks",
    "Mood",
    "Finance",
    "Notes",
    "Calendar",
    "Weather",
    "Profile",
]


def render_router(ctx):
    active = st.session_state.get("ui.active_tab") or TAB_OPTIONS[0]
    active = st.segmented_control(
        "Workspace",
        TAB_OPTIONS,
        key="ui.active_tab",
        default=active,
    ) or TAB_OPTIONS[0]

    if active == "Tasks":
        return _render_tasks(ctx)

    if active == "Mood":
        return _render_mood(ctx)

    if active == "Finance":
        return _render_finance(ctx)

    if active == "Notes":
        return _render_notes(ctx)

    if active == "Calendar":
        return _render_calendar(ctx)

    if active == "Weather":
        # Not a fragment: the weather panel is its own polling fragment.
        return render_weather_tab(ctx)

    if active == "Profile":
        return render_profile_tab(ctx)

    return render_home_tab(ctx)


@st.fragment
def _render_tasks(ctx):
    render_tasks_tab(ctx)


@st.fragment
def _render_mood(ctx):
    render_mood_tab(ctx)


@st.fragment
def _render_finance(ctx):
    render_finance_tab(ctx)


@st.fragment
def _render_notes(ctx):
    render_notes_tab(ctx)


@st.fragment
def _render_calendar(ctx):
    render_calendar_tab(ctx)
