import os

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite:///./lifehub-test.db")
os.environ.setdefault("SUPABASE_URL", "https://auth.example.test")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")

from fastapi.testclient import TestClient

from backend import db, settings
from backend.auth import require_user
from backend.main import app
from backend.services.auth_service import AuthUser


def _reset_backend_state():
    settings._settings = None
    db._engine = None
    db._session_factory = None


@pytest.fixture(autouse=True)
def isolated_database(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'lifehub.db'}")
    monkeypatch.delenv("WEATHER_API_KEY", raising=False)
    monkeypatch.delenv("MAX_WIDGETS_PER_USER", raising=False)
    _reset_backend_state()
    yield
    _reset_backend_state()


class UserSwitch:
    def __init__(self):
        self.user = AuthUser(id="user-1", email="one@example.com")

    def become(self, user_id, email=None):
        self.user = AuthUser(id=user_id, email=email or f"{user_id}@example.com")


@pytest.fixture
def current_user():
    switch = UserSwitch()
    app.dependency_overrides[require_user] = lambda: switch.user
    yield switch
    app.dependency_overrides.pop(require_user, None)


@pytest.fixture
def client(current_user):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def anonymous_client():
    app.dependency_overrides.pop(require_user, None)
    with TestClient(app) as test_client:
        yield test_client
