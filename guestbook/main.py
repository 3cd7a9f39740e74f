from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Awaitable, Callable

import uvicorn
from fastapi import FastAPI

from guestbook.core import metrics
from guestbook.core.bootstrap import StoreBootstrapError, bootstrap_store
from guestbook.core.config import Settings, load_settings
from guestbook.core.cors import enable_cors
from guestbook.core.db import Database
from guestbook.core.logging_setup import configure_logging
from guestbook.health import router as health_router
from guestbook.submissions import router as submissions_router

logger = logging.getLogger(__name__)

Bootstrapper = Callable[[Settings], Awaitable[Database]]

INSTRUMENTED_PATHS = (
    "/api/ready",
    "/api/health",
    "/api/submit",
    "/api/submissions",
)


def create_app(settings: Settings | None = None, *, bootstrap: Bootstrapper = bootstrap_store) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Open, verify and provision the store once per process.
        try:
            app.state.store = await bootstrap(settings)
        except StoreBootstrapError as exc:
            logger.critical("startup_aborted cause=%s", exc)
            raise
        logger.info("backend_ready public_url=%s", settings.backend_url)
        try:
            yield
        finally:
            store = app.state.store
            app.state.store = None
            await store.close()
            logger.info("store_closed")

    app = FastAPI(title="guestbook-backend", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = None

    # Last registered is outermost: CORS decorates every response, instrumented or not.
    metrics.instrument_requests(app, INSTRUMENTED_PATHS)
    enable_cors(app)

    app.include_router(health_router.router, tags=["health"])
    app.include_router(submissions_router.router, tags=["submissions"])
    app.include_router(metrics.router, tags=["metrics"])

    return app


def run() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    logger.info("backend_starting host=%s port=%s", settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, lifespan="on")
