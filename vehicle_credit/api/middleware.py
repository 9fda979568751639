"""FastAPI middleware for request tracing and metrics"""

import logging
import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from vehicle_credit.infrastructure.observability.metrics import request_duration_histogram

UNMATCHED_ROUTE = "unmatched"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propagate the caller's X-Request-ID or mint one"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Time each request, label it by route template and write an access log line"""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        # Ids stay out of labels; unknown paths share one series
        route = request.scope.get("route")
        endpoint = getattr(route, "path", UNMATCHED_ROUTE)

        request_duration_histogram.labels(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code,
        ).observe(elapsed)

        logging.info(
            f"{request.method} {endpoint} {response.status_code}",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "user_id": request.headers.get("X-User-Id"),
                "status": response.status_code,
                "duration_ms": round(elapsed * 1000, 2),
            },
        )
        return response
