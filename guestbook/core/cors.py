"""
Permissive cross-origin headers.

The frontend is hosted separately, so every response (errors included)
carries the same headers whether or not the request sent an `Origin`.
Starlette's CORSMiddleware only decorates requests with an `Origin` header
and answers preflights with a body, which the frontend contract forbids.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import PlainTextResponse

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}


def enable_cors(app: FastAPI) -> None:
    @app.middleware("http")
    async def _cors(request: Request, call_next):
        try:
            response = await call_next(request)
        except Exception:
            # Otherwise ServerErrorMiddleware answers without these headers.
            logger.exception("unhandled_error method=%s path=%s", request.method, request.url.path)
            response = PlainTextResponse(
                "Internal Server Error",
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        for name, value in CORS_HEADERS.items():
            response.headers[name] = value
        return response
