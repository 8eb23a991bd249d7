import streamlit as st

from dashboard.constants import MOOD_EMOJIS, MOOD_LABELS
from dashboard.data import repositories
from dashboard.data.api_client import ApiError
from dashboard.metrics import mood_frame, mood_stats, mood_streak
from dashboard.visualizations import mood_trend_chart

HISTORY_DAYS = [7, 30, 90, 365]


def _load_day_state(selected_day, entries):
    loaded_key = selected_day.isoformat()
    if st.session_state.get("mood.loaded_key") == loaded_key:
        return
    existing = next((entry for entry in entries if str(entry.get("date"))[:10] == loaded_key), None)
    st.session_state["mood.score"] = int(existing["mood_score"]) if existing else 5
    st.session_state["mood.notes"] = (existing or {}).get("notes") or ""
    st.session_state["mood.loaded_key"] = loaded_key


def _save_mood(ctx, selected_day):
    score = int(st.session_state.get("mood.score", 5))
    payload = {
        "date": selected_day,
        "mood_score": score,
        "mood_emoji": MOOD_EMOJIS[score],
        "mood_label": MOOD_LABELS[score],
        "notes": st.session_state.get("mood.notes") or None,
    }
    try:
        repositories.save_mood_entry(payload, timezone=ctx.timezone)
        st.session_state["mood.flash"] = ("success", f"Saved {MOOD_LABELS[score]} for {selected_day.isoformat()}")
    except ApiError as exc:
        st.session_state["mood.flash"] = ("error", exc.message)


def render_mood_tab(ctx, compact=False):
    if not compact:
        st.markdown("<div class='section-title'>Mood</div>", unsafe_allow_html=True)

    days = 30 if compact else st.selectbox("History", HISTORY_DAYS, index=1, key="mood.history_days", format_func=lambda d: f"Last {d} days")
    try:
        entries = repositories.list_mood_entries(days=days, timezone=ctx.timezone)
    except ApiError as exc:
        st.error(exc.message)
        return

    flash = st.session_state.pop("mood.flash", None)
    if flash:
        getattr(st, flash[0])(flash[1])

    selected_day = ctx.today() if compact else st.date_input("Date", key="mood.selected_date", value=ctx.today(), max_value=ctx.today())
    _load_day_state(selected_day, entries)

    st.slider(
        "How are you feeling?",
        min_value=1,
        max_value=10,
        key="mood.score",
        format="%d",
    )
    score = int(st.session_state.get("mood.score", 5))
    st.markdown(f"### {MOOD_EMOJIS[score]} {MOOD_LABELS[score]}")
    if not compact:
        st.text_area("Notes", key="mood.notes", height=100)
    st.button("Save mood", key="mood.save", on_click=_save_mood, args=(ctx, selected_day))

    stats = mood_stats(entries)
    streak = mood_streak(entries, ctx.today())
    cols = st.columns(3)
    cols[0].metric("Entries", stats["count"])
    cols[1].metric("Average", stats["average"])
    cols[2].metric("Streak", f"{streak} d")

    if compact:
        return

    frame = mood_frame(entries)
    st.plotly_chart(mood_trend_chart(frame), use_container_width=True)

    st.markdown("<div class='section-title'>Timeline</div>", unsafe_allow_html=True)
    if not entries:
        st.caption("No mood entries yet.")
    for entry in entries[:30]:
        cols = st.columns([0.85, 0.15])
        with cols[0]:
            st.markdown(f"**{entry.get('date')}** • {entry.get('mood_emoji') or ''} {entry.get('mood_label') or ''} ({entry.get('mood_score')}/10)")
            if entry.get("notes"):
                st.caption(entry["notes"])
        with cols[1]:
            if st.button("Delete", key=f"mood.delete.{entry['id']}"):
                try:
                    repositories.delete_mood_entry(entry["id"])
                    st.session_state.pop("mood.loaded_key", None)
                    st.rerun()
                except ApiError as exc:
                    st.error(exc.message)
