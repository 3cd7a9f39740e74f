"""
Submission API endpoints.

OPTIONS on both routes is a CORS preflight: headers only, empty body, no
validation and no store access. Other undeclared methods get FastAPI's 405.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response

from guestbook.core.db import Database
from guestbook.core.dependencies import get_store

from . import schemas, service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.post("/submit", response_model=schemas.SubmitResponse)
async def submit(request: Request, db: Database = Depends(get_store)) -> schemas.SubmitResponse:
    logger.info("request method=%s path=%s", request.method, request.url.path)
    name, message = await service.read_submission_form(request)
    return await service.create_submission(db, name=name, message=message)


@router.get("/submissions", response_model=list[schemas.Submission])
async def submissions(request: Request, db: Database = Depends(get_store)) -> list[schemas.Submission]:
    logger.info("request method=%s path=%s", request.method, request.url.path)
    return await service.list_submissions(db)


@router.options("/submit", include_in_schema=False)
@router.options("/submissions", include_in_schema=False)
async def preflight() -> Response:
    return Response(status_code=200)
