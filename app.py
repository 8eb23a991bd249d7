import logging

import streamlit as st

from dashboard import auth, timezone_sync
from dashboard.context import DashboardContext
from dashboard.data import api_client, repositories
from dashboard.logging_config import configure_logging
from dashboard.router import render_router
from dashboard.theme import apply_profile_theme, inject_theme_css, toggle_theme

configure_logging()
auth.load_local_env()
logger = logging.getLogger("dashboard")

st.set_page_config(page_title="LifeHub", layout="wide")

api_client.configure(auth.get_secret, auth.access_token)
if not api_client.is_enabled():
    inject_theme_css()
    st.error("API_BASE_URL is not configured.")
    st.code("[app]\nAPI_BASE_URL = \"http://localhost:8000\"", language="toml")
    st.stop()

if auth.current_session() is None:
    inject_theme_css()
session = auth.enforce_login()

if "profile.data" not in st.session_state:
    try:
        st.session_state["profile.data"] = repositories.get_profile()
    except api_client.ApiError as exc:
        logger.warning("Profile load failed: %s", exc)
        st.session_state["profile.data"] = {}
    apply_profile_theme(st.session_state["profile.data"].get("preferences"))
profile = st.session_state["profile.data"]
timezone = timezone_sync.sync_timezone()
inject_theme_css()

with st.sidebar:
    st.caption(f"Timezone: {timezone}")
    st.button("Toggle theme", key="ui.toggle_theme", on_click=toggle_theme)

context = DashboardContext(
    user_id=session.get("user_id") or "",
    email=session.get("email"),
    display_name=auth.get_display_name(session),
    timezone=timezone,
    profile=profile,
)

render_router(context)
