"""
Store bootstrap: connect with bounded retry, verify, provision schema.

Runs once at process start. Any failure here is fatal: the caller (the
application lifespan) lets `StoreBootstrapError` abort startup so the process
never serves requests against a half-initialized store.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import asyncpg

from .config import Settings
from .db import Database
from .retry import RetryExhausted, RetryPolicy

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS submissions (
    id SERIAL PRIMARY KEY,
    name TEXT,
    message TEXT
)
"""

PoolOpener = Callable[..., Awaitable[asyncpg.Pool]]


class StoreBootstrapError(RuntimeError):
    pass


def retry_policy_for(settings: Settings) -> RetryPolicy:
    return RetryPolicy(
        max_attempts=settings.connect_attempts,
        backoff_s=settings.connect_backoff_s,
    )


async def bootstrap_store(
    settings: Settings,
    *,
    opener: PoolOpener = asyncpg.create_pool,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> Database:
    """
    Return a live, pinged `Database` whose schema exists.

    Raises `StoreBootstrapError` when the pool cannot be opened within the
    retry budget, when the ping fails, or when schema creation fails.
    """
    connect_kwargs = settings.connect_kwargs()
    target = settings.describe_store()
    policy = retry_policy_for(settings)

    def _report(attempt: int, exc: Exception) -> None:
        logger.error("store_connect_failed attempt=%s target=%s error=%s", attempt, target, exc)

    async def _open() -> asyncpg.Pool:
        return await opener(**connect_kwargs)

    try:
        pool = await policy.run(_open, sleep=sleep, on_failure=_report)
    except RetryExhausted as exc:
        raise StoreBootstrapError(f"Failed to connect to database: {exc.last_error}") from exc

    db = Database(pool, timeout_s=settings.db_command_timeout_s)

    # A pool can open before the network path is actually usable.
    try:
        await db.ping()
    except Exception as exc:
        await _close_quietly(db)
        raise StoreBootstrapError(f"Unable to reach the database: {exc}") from exc
    logger.info("store_connected target=%s", target)

    try:
        await db.execute(SCHEMA_SQL)
    except Exception as exc:
        await _close_quietly(db)
        raise StoreBootstrapError(f"Error creating table: {exc}") from exc
    logger.info("schema_ensured table=submissions")

    return db


async def _close_quietly(db: Database) -> None:
    try:
        await db.close()
    except Exception:
        logger.warning("store_close_failed", exc_info=True)
