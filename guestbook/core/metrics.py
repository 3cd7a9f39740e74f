"""
Prometheus request instrumentation.

Records a request count and a latency observation per (path, method) for a
fixed set of instrumented paths. The wrapped handler's response, including
error responses, passes through untouched. `GET /metrics` exposes the
default registry in the Prometheus text format.
"""

from __future__ import annotations

import time
from collections.abc import Iterable

from fastapi import APIRouter, FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

router = APIRouter()

http_requests_total = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["path", "method"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "Duration of HTTP requests in seconds",
    ["path", "method"],
)


def instrument_requests(app: FastAPI, paths: Iterable[str]) -> None:
    # Only known paths become label values; arbitrary URLs would explode cardinality.
    instrumented = frozenset(paths)

    @app.middleware("http")
    async def _instrument(request: Request, call_next):
        path = request.url.path
        if path not in instrumented:
            return await call_next(request)

        method = request.method
        http_requests_total.labels(path=path, method=method).inc()
        started = time.perf_counter()
        try:
            return await call_next(request)
        finally:
            http_request_duration_seconds.labels(path=path, method=method).observe(
                time.perf_counter() - started
            )


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
