"""
Submission business logic.

Scope:
- form validation (both fields present and non-empty)
- create / list against the injected store
- mapping store failures to HTTP errors (details are logged, never returned)
"""

from __future__ import annotations

import logging
import re
from urllib.parse import unquote_to_bytes

from fastapi import HTTPException, Request, status
from pydantic import ValidationError

from guestbook.core.db import Database

from . import repository, schemas

logger = logging.getLogger(__name__)


URLENCODED = "application/x-www-form-urlencoded"

# A percent sign must introduce exactly two hex digits.
_BAD_ESCAPE = re.compile(rb"%(?![0-9A-Fa-f]{2})")


def _form_text(value: object) -> str:
    # File parts in a multipart body are not text fields.
    return value if isinstance(value, str) else ""


def _check_urlencoded(body: bytes) -> None:
    """
    Reject bodies a strict form decoder would refuse.

    Starlette's parser silently keeps malformed escapes as literal text.
    """
    if _BAD_ESCAPE.search(body):
        raise ValueError("invalid percent escape")
    if b";" in body:
        raise ValueError("invalid semicolon separator")
    unquote_to_bytes(body.replace(b"+", b" ")).decode("utf-8")


async def read_submission_form(request: Request) -> tuple[str, str]:
    """
    Parse a form-encoded body and return `(name, message)`.
    """
    content_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()
    try:
        if content_type == URLENCODED:
            _check_urlencoded(await request.body())
        form = await request.form()
    except Exception as exc:
        logger.info("submission_rejected reason=unparseable_form error=%s", exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Error parsing form data",
        ) from exc

    name = _form_text(form.get("name"))
    message = _form_text(form.get("message"))
    if not name or not message:
        logger.info("submission_rejected reason=missing_fields")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing form fields",
        )
    return name, message


async def create_submission(db: Database, *, name: str, message: str) -> schemas.SubmitResponse:
    try:
        row = await repository.insert_submission(db, name=name, message=message)
    except Exception as exc:
        logger.exception("submission_insert_failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error inserting data",
        ) from exc

    logger.info("submission_created id=%s name=%r", row.get("id"), name)
    return schemas.SubmitResponse()


async def list_submissions(db: Database) -> list[schemas.Submission]:
    try:
        rows = await repository.list_submissions(db)
    except Exception as exc:
        logger.exception("submissions_fetch_failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error fetching data",
        ) from exc

    try:
        submissions = [schemas.Submission.model_validate(row) for row in rows]
    except ValidationError as exc:
        logger.exception("submissions_decode_failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error scanning data",
        ) from exc

    logger.info("submissions_fetched count=%s", len(submissions))
    return submissions
