"""Async database engine setup.

The catalog engine only reads, so every query runs on
``engine.connect()`` with no transaction management. SQLAlchemy Core (not
ORM) is used: results are row mappings turned into plain dicts, never
identity-mapped objects that could be mutated in place.

The default driver is aiosqlite; any async SQLAlchemy URL works.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from shelfctl.infrastructure.database.schema import metadata


def create_db_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine; SQLite connections get foreign keys enabled."""
    engine = create_async_engine(url, echo=echo)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


async def init_database(url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an engine and make sure the read-model tables exist.

    Idempotent, safe to call on an existing store. Intended for local
    stores and test fixtures; production stores are created by the media
    server.
    """
    engine = create_db_engine(url, echo=echo)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    return engine
