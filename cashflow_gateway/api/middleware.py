"""FastAPI middleware for request tracing and metrics"""

import uuid
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from cashflow_gateway.infrastructure.observability.metrics import request_duration_histogram

UNMATCHED_ROUTE = "unmatched"


def route_template(request: Request) -> str:
    """Path template of the matched route ("/v1/projection"), never the raw URL"""
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_ROUTE)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propagate the caller's X-Request-ID, or mint one, so logs can be joined across services"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record request latency per route template, so unknown paths share one label"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        response = await call_next(request)

        request_duration_histogram.labels(
            method=request.method,
            endpoint=route_template(request),
            status=response.status_code,
        ).observe(time.perf_counter() - start_time)

        return response
