"""Prometheus metrics for webhook verification."""

import os
import time

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
    multiprocess,
)
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

# === Counters ===

WEBHOOK_VERIFICATIONS_TOTAL = Counter(
    "stdwebhooks_verifications_total",
    "Total webhook verification attempts",
    ["outcome"],  # outcome: verified, argument, timestamp, signature
)

HTTP_REQUESTS_TOTAL = Counter(
    "stdwebhooks_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

# === Histograms ===

WEBHOOK_VERIFY_LATENCY = Histogram(
    "stdwebhooks_verify_latency_seconds",
    "Webhook verification latency in seconds",
    buckets=[0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05],
)

HTTP_REQUEST_LATENCY = Histogram(
    "stdwebhooks_http_request_latency_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)


# === Helper Functions ===


def record_verification(outcome: str, latency: float) -> None:
    """Record a verification attempt."""
    WEBHOOK_VERIFICATIONS_TOTAL.labels(outcome=outcome).inc()
    WEBHOOK_VERIFY_LATENCY.observe(latency)


def record_http_request(
    method: str,
    endpoint: str,
    status: int,
    latency: float,
) -> None:
    """Record an HTTP request."""
    HTTP_REQUESTS_TOTAL.labels(
        method=method,
        endpoint=endpoint,
        status=str(status),
    ).inc()
    HTTP_REQUEST_LATENCY.labels(
        method=method,
        endpoint=endpoint,
    ).observe(latency)


# === HTTP Endpoint ===

PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


class MetricsMiddleware(BaseHTTPMiddleware):
    """Count and time requests to every path outside ``exclude_paths``."""

    def __init__(self, app: ASGIApp, exclude_paths: list[str] | None = None) -> None:
        super().__init__(app)
        self._exclude_paths = frozenset(exclude_paths or ())

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if path in self._exclude_paths:
            return await call_next(request)

        status = 500
        start = time.perf_counter()
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            record_http_request(request.method, path, status, time.perf_counter() - start)


def _collect() -> bytes:
    if not os.environ.get("PROMETHEUS_MULTIPROC_DIR"):
        return generate_latest()
    registry = CollectorRegistry()
    multiprocess.MultiProcessCollector(registry)  # type: ignore[no-untyped-call]
    return generate_latest(registry)


async def metrics_endpoint(_request: Request) -> Response:
    """Expose verification and HTTP metrics in Prometheus text format."""
    return Response(_collect(), media_type=PROMETHEUS_CONTENT_TYPE)
