"""
FastAPI dependencies for shared resources.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from .db import Database


def get_store(request: Request) -> Database:
    store = getattr(request.app.state, "store", None)
    if store is None:
        # Lifespan did not run (or failed); never reached in a started app.
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database connection error",
        )
    return store
