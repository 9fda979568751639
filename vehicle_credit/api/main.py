"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from vehicle_credit.api.dependencies import get_request_id
from vehicle_credit.api.middleware import RequestIDMiddleware, MetricsMiddleware
from vehicle_credit.api.v1 import applications, quotes
from vehicle_credit.domain.exceptions import DomainException
from vehicle_credit.infrastructure.database.session import init_db
from vehicle_credit.infrastructure.observability.logging import setup_logging
from vehicle_credit.config import settings

setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.create_tables_on_startup:
        init_db()
        logging.info("Database tables ensured", extra={"step": "startup"})
    yield


async def unhandled_domain_error(request: Request, exc: DomainException) -> JSONResponse:
    """Domain errors a route did not translate are server faults"""
    logging.error(
        f"Unhandled {type(exc).__name__}: {exc}",
        extra={"request_id": get_request_id(request), "path": request.url.path},
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Vehicle Credit Engine",
        description="Credit applications, reviewer decisions and financing quotes",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Last added runs first, so request ids exist before metrics are recorded
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, unhandled_domain_error)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(applications.router, prefix="/v1", tags=["applications"])
    app.include_router(quotes.router, prefix="/v1", tags=["quotes"])

    return app


app = create_app()
