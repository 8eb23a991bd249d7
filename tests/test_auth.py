import asyncio

import httpx
import pytest

from backend.services import auth_service
from backend.services.auth_service import AuthServiceError, AuthUser


def test_missing_bearer_token_is_rejected(anonymous_client):
    response = anonymous_client.get("/api/tasks")
    assert response.status_code == 401
    assert response.json() == {"detail": "Unauthorized"}
    assert response.headers["www-authenticate"] == "Bearer"


def test_rejected_token_is_unauthorized(anonymous_client, monkeypatch):
    async def reject(token):
        raise AuthServiceError("expired")

    monkeypatch.setattr(auth_service, "fetch_user", reject)
    response = anonymous_client.get("/api/tasks", headers={"Authorization": "Bearer stale"})
    assert response.status_code == 401


def test_valid_token_reaches_handler(anonymous_client, monkeypatch):
    seen = []

    async def accept(token):
        seen.append(token)
        return AuthUser(id="user-9", email="nine@example.com")

    monkeypatch.setattr(auth_service, "fetch_user", accept)
    response = anonymous_client.get("/api/tasks", headers={"Authorization": "Bearer good-token"})
    assert response.status_code == 200
    assert response.json() == {"tasks": []}
    assert seen == ["good-token"]


def test_widget_catalog_needs_no_token(anonymous_client):
    response = anonymous_client.get("/api/widget-types")
    assert response.status_code == 200


def _fetch_with(handler):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await auth_service.fetch_user("token-123", client=client)

    return asyncio.run(run())


def test_fetch_user_parses_hosted_auth_response():
    def handler(request):
        assert request.url.path == "/auth/v1/user"
        assert request.headers["authorization"] == "Bearer token-123"
        assert request.headers["apikey"] == "test-anon-key"
        return httpx.Response(
            200,
            json={"id": "abc", "email": "a@example.com", "user_metadata": {"full_name": "Ada"}},
        )

    user = _fetch_with(handler)
    assert user == AuthUser(id="abc", email="a@example.com", metadata={"full_name": "Ada"})


def test_fetch_user_raises_on_rejection():
    with pytest.raises(AuthServiceError):
        _fetch_with(lambda request: httpx.Response(401, json={"msg": "invalid JWT"}))


def test_fetch_user_raises_without_user_id():
    with pytest.raises(AuthServiceError):
        _fetch_with(lambda request: httpx.Response(200, json={"email": "a@example.com"}))


def test_fetch_user_raises_when_unreachable():
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    with pytest.raises(AuthServiceError):
        _fetch_with(handler)
