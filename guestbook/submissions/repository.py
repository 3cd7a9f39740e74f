"""
Submission persistence (raw SQL).
"""

from __future__ import annotations

from guestbook.core.db import Database


async def insert_submission(db: Database, *, name: str, message: str) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO submissions (name, message)
        VALUES ($1, $2)
        RETURNING id
        """,
        name,
        message,
    )
    if row is None:
        raise RuntimeError("Failed to insert submission.")
    return row


async def list_submissions(db: Database) -> list[dict]:
    """
    Return every submission, newest first.
    """
    return await db.fetch_all(
        """
        SELECT id, name, message
        FROM submissions
        ORDER BY id DESC
        """
    )
