from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx

from backend.settings import get_settings

logger = logging.getLogger(__name__)


class AuthServiceError(RuntimeError):
    """The hosted auth service rejected the token or could not be reached."""


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: str | None = None
    metadata: dict = field(default_factory=dict)


def _parse_user(payload: dict) -> AuthUser:
    user_id = str(payload.get("id") or "").strip()
    if not user_id:
        raise AuthServiceError("Auth service returned no user id")
    metadata = payload.get("user_metadata") or {}
    return AuthUser(
        id=user_id,
        email=payload.get("email"),
        metadata=metadata if isinstance(metadata, dict) else {},
    )


async def fetch_user(access_token: str, client: httpx.AsyncClient | None = None) -> AuthUser:
    settings = get_settings()
    headers = {
        "Authorization": f"Bearer {access_token}",
        "apikey": settings.supabase_anon_key,
    }
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.auth_timeout_seconds) as own_client:
                response = await own_client.get(settings.auth_user_endpoint, headers=headers)
        else:
            response = await client.get(settings.auth_user_endpoint, headers=headers)
    except httpx.HTTPError as exc:
        raise AuthServiceError(f"Auth service unreachable: {exc}") from exc
    if response.status_code >= 400:
        raise AuthServiceError(f"Auth service rejected token ({response.status_code})")
    try:
        payload = response.json()
    except ValueError as exc:
        raise AuthServiceError("Auth service returned invalid JSON") from exc
    return _parse_user(payload if isinstance(payload, dict) else {})
