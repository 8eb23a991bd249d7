import streamlit as st

THEME_KEY = "ui.theme"

THEME_PRESETS = {
    "dark": {
        "bg_main": "#0f1117",
        "bg_card": "#181b24",
        "bg_panel": "#222633",
        "border": "#353b4d",
        "text_main": "#eef1f7",
        "text_soft": "#a4abbd",
        "accent": "#4f8cff",
        "accent_soft": "rgba(79, 140, 255, 0.16)",
        "plot_grid": "#2c3142",
        "today_border": "#f2c14e",
        "divider": "rgba(255,255,255,0.08)",
    },
    "light": {
        "bg_main": "#f5f6fa",
        "bg_card": "#ffffff",
        "bg_panel": "#eef0f5",
        "border": "#d5d9e3",
        "text_main": "#1c1f26",
        "text_soft": "#5d6475",
        "accent": "#2f6fed",
        "accent_soft": "rgba(47, 111, 237, 0.12)",
        "plot_grid": "#e1e4ec",
        "today_border": "#d49b1f",
        "divider": "rgba(0,0,0,0.08)",
    },
}


def ensure_theme_state():
    if st.session_state.get(THEME_KEY) not in THEME_PRESETS:
        st.session_state[THEME_KEY] = "dark"
    return st.session_state[THEME_KEY]


def get_active_theme():
    name = ensure_theme_state()
    return name, THEME_PRESETS[name]


def apply_profile_theme(preferences):
    theme = (preferences or {}).get("theme")
    if theme in THEME_PRESETS:
        st.session_state[THEME_KEY] = theme


def toggle_theme():
    current = ensure_theme_state()
    st.session_state[THEME_KEY] = "light" if current == "dark" else "dark"


def inject_theme_css():
    _, theme = get_active_theme()
    variables = "\n".join(f"    --{key.replace('_', '-')}: {value};" for key, value in theme.items())
    st.markdown(
        f"""
<style>
:root {{
{variables}
}}
.stApp {{
    background: var(--bg-main);
    color: var(--text-main);
}}
.section-title {{
    font-size: 1.15rem;
    font-weight: 600;
    margin: 0.4rem 0 0.6rem;
    color: var(--text-main);
}}
.widget-card {{
    background: var(--bg-card);
    border: 1px solid var(--border);
    border-radius: 12px;
    padding: 0.8rem 1rem;
}}
.cal-cell {{
    background: var(--bg-card);
    border: 1px solid var(--divider);
    border-radius: 8px;
    min-height: 92px;
    padding: 4px 6px;
    font-size: 0.78rem;
}}
.cal-cell.muted {{ opacity: 0.45; }}
.cal-cell.today {{ border-color: var(--today-border); }}
.cal-event {{
    border-radius: 4px;
    padding: 1px 4px;
    margin: 2px 0;
    color: #ffffff;
    overflow: hidden;
    white-space: nowrap;
    text-overflow: ellipsis;
}}
.cal-more {{ color: var(--text-soft); font-size: 0.72rem; }}
.day-grid {{
    position: relative;
    border-left: 1px solid var(--divider);
    background: repeating-linear-gradient(
        to bottom, var(--divider) 0, var(--divider) 1px, transparent 1px, transparent 48px
    );
}}
.day-grid .cal-event {{ position: absolute; white-space: normal; font-size: 0.72rem; }}
</style>
""",
        unsafe_allow_html=True,
    )
    return theme
