from __future__ import annotations

import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.services import auth_service
from backend.services.auth_service import AuthUser

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthUser:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized()
    token = (credentials.credentials or "").strip()
    if not token:
        raise _unauthorized()
    try:
        return await auth_service.fetch_user(token)
    except auth_service.AuthServiceError as exc:
        logger.warning("Rejected bearer token: %s", exc)
        raise _unauthorized()


async def require_user_id(user: AuthUser = Depends(require_user)) -> str:
    return user.id
