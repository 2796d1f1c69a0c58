import time
from typing import Any

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError

from db import init_schema
from main import create_app
from settings import Settings


class FakeExecutor:
    """In-memory QueryExecutor that records statements instead of running them."""

    def __init__(self, rows: list[dict[str, Any]] | None = None, fail: bool = False, error: Exception | None = None):
        self.rows = rows or []
        self.fail = fail
        self.error = error
        self.statements = []

    def _check(self, statement):
        self.statements.append(statement)
        if self.error is not None:
            raise self.error
        if self.fail:
            raise OperationalError(str(statement), {}, Exception("connection lost"))

    async def fetch_all(self, statement):
        self._check(statement)
        return list(self.rows)

    async def execute(self, statement):
        self._check(statement)


@pytest.fixture
def settings(tmp_path):
    return Settings(database_dsn=f"sqlite+aiosqlite:///{tmp_path / 'demo.db'}")


@pytest.fixture
def fake_executor():
    return FakeExecutor()


def _client(app):
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


@pytest_asyncio.fixture
async def client(settings, fake_executor):
    # started well past the readiness delay
    app = create_app(settings, executor=fake_executor, started_at=time.monotonic() - 60)
    async with _client(app) as c:
        yield c


@pytest_asyncio.fixture
async def sqlite_executor(settings):
    executor = await init_schema(settings)
    try:
        yield executor
    finally:
        await executor.close()


@pytest_asyncio.fixture
async def db_client(settings, sqlite_executor):
    app = create_app(settings, executor=sqlite_executor)
    async with _client(app) as c:
        yield c


@pytest.fixture
def make_client():
    return _client
