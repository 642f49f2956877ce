"""
Engine and session factories.

The server, Alembic and the tests all build their database access through
these helpers so URL handling, JSON encoding and session defaults stay in
one place.
"""

from __future__ import annotations

import json
import re
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .base import Base

_POSTGRES_PREFIX = re.compile(r"^postgres(?:ql)?(?:\+[a-z0-9_]+)?://")


def normalize_database_url(db_url: str) -> str:
    """Point any ``postgres://`` variant at the asyncpg driver.

    Non-Postgres URLs such as ``sqlite+aiosqlite://`` pass through untouched.
    """
    return _POSTGRES_PREFIX.sub("postgresql+asyncpg://", db_url, count=1)


def dumps_json(value: Any) -> str:
    # Non-ASCII aliases ("斑目貘") are stored as-is so LIKE can match them
    return json.dumps(value, ensure_ascii=False)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(db_url: str, **engine_kwargs: Any) -> AsyncEngine:
    """Build an ``AsyncEngine`` for ``db_url``.

    Connections are pre-pinged and JSON columns are written with
    ``dumps_json``. SQLite connections get ``PRAGMA foreign_keys=ON`` so
    ``ON DELETE`` actions behave as they do on PostgreSQL.

    Args:
        db_url: Database connection URL
        **engine_kwargs: Extra ``create_async_engine`` arguments (pool class, connect args)
    """
    engine_kwargs.setdefault("pool_pre_ping", True)
    engine_kwargs.setdefault("json_serializer", dumps_json)
    engine = create_async_engine(normalize_database_url(db_url), **engine_kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Objects stay readable after commit so routers can serialize them
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create every mapped table on ``engine``.

    Used by the tests and by local SQLite setups; deployed databases are
    managed with Alembic.
    """
    from . import entities  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
