"""
Async database access helpers (raw SQL) using asyncpg.

`Database` owns the connection pool. It is created once by the bootstrapper
(see `core/bootstrap.py`), handed to request handlers through FastAPI
dependency injection and closed on shutdown (see `guestbook/main.py`).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

from typing import Any

import asyncpg


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


class Database:
    """
    Thread/task-safe handle around an `asyncpg.Pool`.

    Every call acquires its own connection, bounded by `timeout_s`, so
    concurrent requests never share a connection.
    """

    def __init__(self, pool: asyncpg.Pool, *, timeout_s: float | None = 30.0) -> None:
        self._pool = pool
        self._timeout_s = timeout_s

    @property
    def pool(self) -> asyncpg.Pool:
        return self._pool

    async def ping(self) -> None:
        async with self._pool.acquire(timeout=self._timeout_s) as conn:
            await conn.fetchval("SELECT 1", timeout=self._timeout_s)

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        async with self._pool.acquire(timeout=self._timeout_s) as conn:
            row = await conn.fetchrow(sql, *args, timeout=self._timeout_s)
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        async with self._pool.acquire(timeout=self._timeout_s) as conn:
            rows = await conn.fetch(sql, *args, timeout=self._timeout_s)
        return [_record_to_dict(r) for r in rows]

    async def execute(self, sql: str, *args: Any) -> None:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL). No result returned.
        """
        async with self._pool.acquire(timeout=self._timeout_s) as conn:
            await conn.execute(sql, *args, timeout=self._timeout_s)

    async def close(self) -> None:
        await self._pool.close()
