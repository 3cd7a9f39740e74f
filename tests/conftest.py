"""Pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
import itertools
from typing import Any

import pytest
from fastapi.testclient import TestClient

from guestbook.core.config import Settings
from guestbook.main import create_app


class StoreDown(ConnectionError):
    pass


class FakeDatabase:
    """In-memory stand-in for `guestbook.core.db.Database`.

    Understands the two statements the submissions repository issues and
    counts every call so tests can assert the store was never touched.
    """

    def __init__(self) -> None:
        self.rows: list[dict[str, Any]] = []
        self.reachable = True
        self.fail_inserts = False
        self.fail_queries = False
        self.calls = 0
        self.closed = False
        self._ids = itertools.count(1)

    async def ping(self) -> None:
        self.calls += 1
        if not self.reachable:
            raise StoreDown("connection refused")

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        self.calls += 1
        assert "INSERT INTO submissions" in sql
        if self.fail_inserts:
            raise StoreDown("insert failed")
        # Yield so concurrent requests interleave.
        await asyncio.sleep(0)
        name, message = args
        row = {"id": next(self._ids), "name": name, "message": message}
        self.rows.append(row)
        return {"id": row["id"]}

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        self.calls += 1
        assert "FROM submissions" in sql
        if self.fail_queries:
            raise StoreDown("query failed")
        return sorted((dict(r) for r in self.rows), key=lambda r: r["id"] or 0, reverse=True)

    async def execute(self, sql: str, *args: Any) -> None:
        self.calls += 1

    async def close(self) -> None:
        self.closed = True


class FakeConnection:
    """Records what asyncpg would have been asked to run."""

    def __init__(self, pool: "FakePool") -> None:
        self._pool = pool

    async def fetchval(self, sql: str, *args: Any, timeout: float | None = None) -> Any:
        self._pool.log.append(("fetchval", sql.strip(), args, timeout))
        if self._pool.ping_error is not None:
            raise self._pool.ping_error
        return 1

    async def fetchrow(self, sql: str, *args: Any, timeout: float | None = None) -> Any:
        self._pool.log.append(("fetchrow", sql.strip(), args, timeout))
        return self._pool.rows[0] if self._pool.rows else None

    async def fetch(self, sql: str, *args: Any, timeout: float | None = None) -> list[Any]:
        self._pool.log.append(("fetch", sql.strip(), args, timeout))
        return list(self._pool.rows)

    async def execute(self, sql: str, *args: Any, timeout: float | None = None) -> str:
        self._pool.log.append(("execute", sql.strip(), args, timeout))
        if self._pool.execute_error is not None:
            raise self._pool.execute_error
        return "OK"


class _Acquire:
    def __init__(self, pool: "FakePool") -> None:
        self._pool = pool

    async def __aenter__(self) -> FakeConnection:
        return FakeConnection(self._pool)

    async def __aexit__(self, *exc_info: Any) -> None:
        return None


class FakePool:
    """Just enough of `asyncpg.Pool` for `Database`."""

    def __init__(self) -> None:
        self.log: list[tuple[Any, ...]] = []
        self.acquire_timeouts: list[float | None] = []
        self.rows: list[dict[str, Any]] = []
        self.ping_error: Exception | None = None
        self.execute_error: Exception | None = None
        self.closed = False

    def acquire(self, *, timeout: float | None = None) -> _Acquire:
        self.acquire_timeouts.append(timeout)
        return _Acquire(self)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_pool() -> FakePool:
    return FakePool()


@pytest.fixture
def settings() -> Settings:
    return Settings(connect_attempts=5, connect_backoff_s=0.0)


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def app(settings, fake_db):
    async def _bootstrap(_settings: Settings) -> FakeDatabase:
        return fake_db

    return create_app(settings, bootstrap=_bootstrap)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
