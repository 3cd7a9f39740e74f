"""
Liveness and readiness endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse

from guestbook.core.db import Database
from guestbook.core.dependencies import get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get("/ready", response_class=PlainTextResponse)
async def ready() -> str:
    return "Backend is running"


@router.get("/health", response_class=PlainTextResponse)
async def health(db: Database = Depends(get_store)) -> PlainTextResponse:
    """
    Ping the store on every call; 503 while it is unreachable.
    """
    try:
        await db.ping()
    except Exception as exc:
        logger.warning("health_check_failed error=%s", exc)
        return PlainTextResponse(
            "Database connection error",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return PlainTextResponse("OK")
