"""
Storage access for the service.

The app talks to the database through a `QueryExecutor`: one long-lived
connection opened by `init_schema()` on startup and handed to route handlers
through the `get_executor` dependency. Statements are SQLAlchemy Core
constructs, so parameters are always bound, never formatted into SQL.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql.expression import Executable

from settings import Settings

log = logging.getLogger("demo")

Base = declarative_base()


class QueryExecutor(Protocol):
    async def fetch_all(self, statement: Executable) -> list[dict[str, Any]]: ...

    async def execute(self, statement: Executable) -> None: ...


class SqlExecutor:
    """QueryExecutor over a single shared connection.

    The connection is not safe for concurrent use, so every statement holds
    the lock for its whole round trip. Each statement is committed on its own.
    """

    def __init__(self, engine: AsyncEngine, conn: AsyncConnection):
        self._engine = engine
        self._conn = conn
        self._lock = asyncio.Lock()

    async def _run(self, statement: Executable) -> list[dict[str, Any]]:
        async with self._lock:
            try:
                result = await self._conn.execute(statement)
                rows = [dict(row) for row in result.mappings()] if result.returns_rows else []
                await self._conn.commit()
            except SQLAlchemyError:
                await self._conn.rollback()
                raise
        return rows

    async def fetch_all(self, statement: Executable) -> list[dict[str, Any]]:
        return await self._run(statement)

    async def execute(self, statement: Executable) -> None:
        await self._run(statement)

    async def close(self) -> None:
        await self._conn.close()
        await self._engine.dispose()


async def _create_database(settings: Settings) -> None:
    server_engine = create_async_engine(settings.server_url(), echo=settings.db_echo)
    try:
        quoted = server_engine.dialect.identifier_preparer.quote(settings.mysql_database)
        async with server_engine.begin() as conn:
            await conn.execute(text(f"CREATE DATABASE IF NOT EXISTS {quoted}"))
    finally:
        await server_engine.dispose()


async def init_schema(settings: Settings) -> SqlExecutor:
    """Make sure the database and the users table exist, return the executor."""
    # register the tables on Base.metadata
    from models.user import User  # noqa: F401

    if settings.creates_database:
        await _create_database(settings)

    engine = create_async_engine(settings.database_url(), echo=settings.db_echo)
    try:
        conn = await engine.connect()
    except BaseException:
        await engine.dispose()
        raise

    try:
        await conn.run_sync(Base.metadata.create_all)
        await conn.commit()
    except BaseException:
        await conn.close()
        await engine.dispose()
        raise

    log.info("Schema ready on %s", engine.url.render_as_string(hide_password=True))
    return SqlExecutor(engine, conn)


def get_executor(request: Request) -> QueryExecutor:
    executor = getattr(request.app.state, "executor", None)
    if executor is None:
        raise RuntimeError("Query executor is not initialized. Run init_schema() on startup.")
    return executor
