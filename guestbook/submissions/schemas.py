"""
Pydantic schemas for submission endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel

SUBMISSION_SUCCESS = "Submission successful!"


class Submission(BaseModel):
    id: int
    name: str
    message: str


class SubmitResponse(BaseModel):
    status: str = SUBMISSION_SUCCESS
