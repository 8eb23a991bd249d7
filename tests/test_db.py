from sqlalchemy.pool import NullPool

from backend.db import engine_options, to_async_url


def test_plain_urls_get_async_drivers():
    assert to_async_url("sqlite:///./lifehub.db") == "sqlite+aiosqlite:///./lifehub.db"
    assert to_async_url("postgres://u:p@db.example.com/app") == "postgresql+asyncpg://u:p@db.example.com/app"
    assert to_async_url("postgresql+asyncpg://u@localhost/app") == "postgresql+asyncpg://u@localhost/app"


def test_libpq_options_are_translated():
    url = to_async_url("postgresql://u@db.example.com/app?sslmode=require&channel_binding=prefer&application_name=hub")
    assert url == "postgresql+asyncpg://u@db.example.com/app?application_name=hub&ssl=true"
    assert to_async_url("postgresql://u@localhost/app?sslmode=disable") == "postgresql+asyncpg://u@localhost/app"


def test_engine_options():
    assert engine_options("sqlite+aiosqlite:///x.db") == {"poolclass": NullPool}
    remote = engine_options("postgresql+asyncpg://u@db.example.com/app")
    assert remote["connect_args"] == {"ssl": True}
    assert remote["pool_pre_ping"] is True
    assert "connect_args" not in engine_options("postgresql+asyncpg://u@localhost/app")
