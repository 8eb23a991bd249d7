from __future__ import annotations

import logging
import os
import time

import requests
import streamlit as st

logger = logging.getLogger(__name__)

ENV_PATH = os.path.join(os.path.dirname(__file__), "..", ".env")

ENV_FALLBACK_KEYS = {
    ("auth", "supabase_url"): "SUPABASE_URL",
    ("auth", "supabase_anon_key"): "SUPABASE_ANON_KEY",
    ("app", "API_BASE_URL"): "API_BASE_URL",
}

SESSION_KEY = "auth.session"
AUTH_TIMEOUT_SECONDS = 10
REFRESH_MARGIN_SECONDS = 60


class AuthError(RuntimeError):
    pass


def load_local_env():
    if not os.path.exists(ENV_PATH):
        return
    with open(ENV_PATH, "r", encoding="utf-8") as env_file:
        for raw_line in env_file:
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def get_secret(path, default=None):
    env_key = ENV_FALLBACK_KEYS.get(tuple(path))
    if env_key:
        env_value = os.getenv(env_key)
        if env_value:
            return env_value
    try:
        current = st.secrets
        for key in path:
            if key not in current:
                return default
            current = current[key]
    except (FileNotFoundError, KeyError):
        return default
    return current


def auth_configured():
    return bool(get_secret(("auth", "supabase_url")) and get_secret(("auth", "supabase_anon_key")))


def _auth_url(path):
    return str(get_secret(("auth", "supabase_url"))).rstrip("/") + f"/auth/v1/{path}"


def _auth_headers():
    return {"apikey": str(get_secret(("auth", "supabase_anon_key")))}


def _token_request(grant_type, payload):
    try:
        response = requests.post(
            _auth_url("token"),
            params={"grant_type": grant_type},
            json=payload,
            headers=_auth_headers(),
            timeout=AUTH_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        raise AuthError("Authentication service unreachable") from exc
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not response.ok:
        message = body.get("error_description") or body.get("msg") or body.get("message") or "Sign in failed"
        raise AuthError(message)
    return session_from_token_response(body)


def session_from_token_response(body, now=None):
    token = body.get("access_token")
    if not token:
        raise AuthError("Authentication response did not include an access token")
    now = time.time() if now is None else now
    user = body.get("user") or {}
    return {
        "access_token": token,
        "refresh_token": body.get("refresh_token"),
        "expires_at": now + int(body.get("expires_in") or 3600),
        "user_id": user.get("id"),
        "email": user.get("email"),
        "metadata": user.get("user_metadata") or {},
    }


def sign_in(email, password):
    session = _token_request("password", {"email": email, "password": password})
    st.session_state[SESSION_KEY] = session
    logger.info("Signed in %s", session.get("email"))
    return session


def sign_out():
    session = st.session_state.pop(SESSION_KEY, None)
    for key in [key for key in st.session_state if str(key).startswith("profile.")]:
        st.session_state.pop(key, None)
    if not session:
        return
    try:
        requests.post(
            _auth_url("logout"),
            headers={**_auth_headers(), "Authorization": f"Bearer {session['access_token']}"},
            timeout=AUTH_TIMEOUT_SECONDS,
        )
    except requests.RequestException:
        logger.warning("Sign out request failed; local session cleared")


def current_session():
    session = st.session_state.get(SESSION_KEY)
    if not session:
        return None
    if session.get("refresh_token") and session["expires_at"] - REFRESH_MARGIN_SECONDS <= time.time():
        try:
            session = _token_request("refresh_token", {"refresh_token": session["refresh_token"]})
            st.session_state[SESSION_KEY] = session
        except AuthError:
            logger.warning("Session refresh failed; signing out")
            st.session_state.pop(SESSION_KEY, None)
            return None
    return session


def access_token():
    session = current_session()
    return session["access_token"] if session else None


def get_display_name(session):
    metadata = (session or {}).get("metadata") or {}
    name = str(metadata.get("full_name") or metadata.get("name") or "").strip()
    if name:
        return name.split()[0]
    local = str((session or {}).get("email") or "").split("@")[0].replace(".", " ").strip()
    return local.title() if local else "User"


def enforce_login():
    if not auth_configured():
        st.markdown("<div class='section-title'>Sign-in Setup Required</div>", unsafe_allow_html=True)
        st.markdown("Configure the hosted auth provider before using the app.")
        st.code(
            "[auth]\n"
            "supabase_url = \"https://YOUR-PROJECT.supabase.co\"\n"
            "supabase_anon_key = \"YOUR_ANON_KEY\"\n\n"
            "[app]\n"
            "API_BASE_URL = \"http://localhost:8000\"",
            language="toml",
        )
        st.stop()

    session = current_session()
    if session:
        with st.sidebar:
            st.caption(f"Signed in as: {session.get('email') or 'unknown'}")
            if st.button("Sign out", key="auth.sign_out"):
                sign_out()
                st.rerun()
        return session

    st.markdown("<div class='section-title'>Sign in</div>", unsafe_allow_html=True)
    with st.form("auth.sign_in_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in")
    if submitted:
        if not email or not password:
            st.error("Email and password are required.")
        else:
            try:
                sign_in(email.strip(), password)
                st.rerun()
            except AuthError as exc:
                st.error(str(exc))
    st.stop()
