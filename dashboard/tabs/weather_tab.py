import logging
from datetime import timedelta

import streamlit as st

from dashboard.constants import DEFAULT_WEATHER_SETTINGS, WEATHER_UNITS
from dashboard.data import repositories
from dashboard.data.api_client import ApiError
from dashboard.visualizations import hourly_temperature_chart

logger = logging.getLogger(__name__)

MIN_REFRESH_MINUTES = 1


def weather_settings(config=None):
    settings = dict(DEFAULT_WEATHER_SETTINGS)
    settings.update({key: value for key, value in (config or {}).items() if key in DEFAULT_WEATHER_SETTINGS})
    return settings


def refresh_interval(settings):
    if not settings.get("autoRefresh"):
        return None
    minutes = max(int(settings.get("refreshInterval") or 0), MIN_REFRESH_MINUTES)
    return timedelta(minutes=minutes)


def _degrees(value, unit):
    if value is None:
        return "-"
    return f"{round(float(value))}°{'C' if unit == 'celsius' else 'F'}"


def _render_weather_panel(settings, compact):
    try:
        data = repositories.get_weather(settings)
    except ApiError as exc:
        st.warning(exc.message)
        return
    unit = data.get("unit", settings["unit"])
    location = data.get("location") or {}
    current = data.get("current") or {}
    condition = current.get("condition") or {}

    st.markdown(f"**{location.get('name') or settings['location']}**, {location.get('country') or ''}")
    cols = st.columns([0.2, 0.8])
    if condition.get("icon"):
        icon = condition["icon"]
        cols[0].image(icon if icon.startswith("http") else f"https:{icon}", width=56)
    cols[1].metric(
        condition.get("text") or "Now",
        _degrees(current.get("temperature"), unit),
        help=f"Feels like {_degrees(current.get('feels_like'), unit)}",
    )
    if compact:
        return

    st.caption(f"Humidity {current.get('humidity', '-')}% • Wind {current.get('wind_kph', '-')} kph • UV {current.get('uv', '-')}")
    forecast = data.get("forecast") or []
    if settings.get("showForecast") and forecast:
        day_cols = st.columns(len(forecast))
        for column, day in zip(day_cols, forecast):
            summary = day.get("day") or {}
            column.markdown(f"**{day.get('date')}**")
            column.caption((summary.get("condition") or {}).get("text") or "")
            column.write(f"{_degrees(summary.get('max_temperature'), unit)} / {_degrees(summary.get('min_temperature'), unit)}")
    if settings.get("showHourly") and forecast and forecast[0].get("hour"):
        st.plotly_chart(hourly_temperature_chart(forecast[0]["hour"], unit), use_container_width=True)
    st.caption(f"Last updated {data.get('lastUpdated')}")


def render_weather_panel(settings, compact=False):
    st.fragment(run_every=refresh_interval(settings))(_render_weather_panel)(settings, compact)


def _find_weather_widget():
    try:
        widgets = repositories.list_widgets()
    except ApiError:
        logger.warning("Could not load widgets for weather settings")
        return None
    return next((widget for widget in widgets if widget.get("widget_type_id") == "weather"), None)


def render_weather_tab(ctx, compact=False):
    widget = _find_weather_widget()
    settings = weather_settings((widget or {}).get("config") or st.session_state.get("weather.settings"))
    if compact:
        render_weather_panel(settings, compact=True)
        return

    st.markdown("<div class='section-title'>Weather</div>", unsafe_allow_html=True)
    with st.expander("Settings"):
        with st.form("weather.settings_form"):
            location = st.text_input("Location", value=settings["location"])
            unit = st.selectbox("Unit", WEATHER_UNITS, index=WEATHER_UNITS.index(settings["unit"]) if settings["unit"] in WEATHER_UNITS else 0)
            show_forecast = st.checkbox("Show forecast", value=bool(settings["showForecast"]))
            show_hourly = st.checkbox("Show hourly", value=bool(settings["showHourly"]))
            auto_refresh = st.checkbox("Auto refresh", value=bool(settings["autoRefresh"]))
            interval = st.number_input("Refresh every (minutes)", min_value=MIN_REFRESH_MINUTES, max_value=240, value=int(settings["refreshInterval"]))
            submitted = st.form_submit_button("Apply")
        if submitted:
            settings.update(
                {
                    "location": location.strip() or DEFAULT_WEATHER_SETTINGS["location"],
                    "unit": unit,
                    "showForecast": show_forecast,
                    "showHourly": show_hourly,
                    "autoRefresh": auto_refresh,
                    "refreshInterval": int(interval),
                }
            )
            st.session_state["weather.settings"] = dict(settings)
            if widget:
                try:
                    repositories.update_widget(widget["id"], {"config": settings})
                except ApiError as exc:
                    st.error(exc.message)
    render_weather_panel(settings)
