from __future__ import annotations

import logging
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from backend.settings import get_settings

logger = logging.getLogger(__name__)

ASYNC_DRIVERS = {
    "sqlite": "sqlite+aiosqlite",
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "postgresql+psycopg2": "postgresql+asyncpg",
}
LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1"}
# libpq query options asyncpg rejects
LIBPQ_ONLY_OPTIONS = {"sslmode", "channel_binding", "ssl"}

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker | None = None


def to_async_url(database_url: str) -> str:
    """Rewrite a plain database URL so SQLAlchemy picks an async driver."""
    url = str(database_url or "").strip()
    scheme, sep, rest = url.partition("://")
    if not sep:
        return url
    scheme = ASYNC_DRIVERS.get(scheme, scheme)
    url = f"{scheme}://{rest}"
    if not scheme.startswith("postgresql"):
        return url
    parsed = urlparse(url)
    options = parse_qsl(parsed.query, keep_blank_values=True)
    wants_ssl = any(key == "sslmode" and value not in {"disable", "allow"} for key, value in options)
    kept = [(key, value) for key, value in options if key not in LIBPQ_ONLY_OPTIONS]
    if wants_ssl:
        kept.append(("ssl", "true"))
    return urlunparse(parsed._replace(query=urlencode(kept)))


def engine_options(async_url: str) -> dict:
    if async_url.startswith("sqlite"):
        # aiosqlite connections belong to the event loop that opened them.
        return {"poolclass": NullPool}
    options: dict = {"pool_pre_ping": True, "pool_size": 20, "max_overflow": 10}
    host = urlparse(async_url).hostname or ""
    if host and host not in LOCAL_HOSTS:
        options["connect_args"] = {"ssl": True}
    return options


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        async_url = to_async_url(get_settings().database_url)
        _engine = create_async_engine(async_url, **engine_options(async_url))
        logger.info("Database engine ready (%s)", async_url.split("://", 1)[0])
    return _engine


def get_sessionmaker() -> async_sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
