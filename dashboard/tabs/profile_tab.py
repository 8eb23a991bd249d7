import streamlit as st

from dashboard import auth, timezone_sync
from dashboard.constants import COMMON_TIMEZONES
from dashboard.data import repositories
from dashboard.data.api_client import ApiError
from dashboard.theme import THEME_PRESETS


def validation_messages(exc):
    if isinstance(exc.detail, dict) and isinstance(exc.detail.get("details"), list):
        return [str(item) for item in exc.detail["details"]]
    return [exc.message]


def render_profile_tab(ctx):
    st.markdown("<div class='section-title'>Profile</div>", unsafe_allow_html=True)
    try:
        profile = repositories.get_profile()
    except ApiError as exc:
        st.error(exc.message)
        return

    timezones = list(COMMON_TIMEZONES)
    if ctx.timezone not in timezones:
        timezones.insert(0, ctx.timezone)
    preferences = dict(profile.get("preferences") or {})
    themes = list(THEME_PRESETS)

    with st.form("profile.form"):
        st.caption(profile.get("email") or ctx.email or "")
        full_name = st.text_input("Full name", value=profile.get("full_name") or "")
        bio = st.text_area("Bio", value=profile.get("bio") or "", height=80)
        cols = st.columns(2)
        location = cols[0].text_input("Location", value=profile.get("location") or "")
        website = cols[1].text_input("Website", value=profile.get("website") or "")
        phone = cols[0].text_input("Phone", value=profile.get("phone") or "")
        date_of_birth = cols[1].text_input("Date of birth (YYYY-MM-DD)", value=profile.get("date_of_birth") or "")
        timezone = cols[0].selectbox("Timezone", timezones, index=timezones.index(ctx.timezone))
        theme = cols[1].selectbox(
            "Theme",
            themes,
            index=themes.index(preferences.get("theme")) if preferences.get("theme") in themes else 0,
        )
        submitted = st.form_submit_button("Save profile")

    if submitted:
        preferences["theme"] = theme
        patch = {
            "full_name": full_name,
            "bio": bio,
            "location": location,
            "website": website.strip(),
            "phone": phone.strip(),
            "date_of_birth": date_of_birth.strip(),
            "timezone": timezone,
            "preferences": preferences,
        }
        try:
            st.session_state["profile.data"] = repositories.update_profile(patch)
            if timezone != ctx.timezone:
                timezone_sync.update_timezone(timezone)
            st.session_state["ui.theme"] = theme
            st.success("Profile updated successfully")
        except ApiError as exc:
            for message in validation_messages(exc):
                st.error(message)

    with st.expander("Danger zone"):
        confirm = st.checkbox("I understand this permanently deletes my data", key="profile.confirm_delete")
        if st.button("Delete account", key="profile.delete", disabled=not confirm):
            try:
                repositories.delete_account()
                auth.sign_out()
                st.rerun()
            except ApiError as exc:
                st.error(exc.message)
