"""FastAPI application factory"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from cashflow_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from cashflow_gateway.api.v1 import projection
from cashflow_gateway.domain.validation import error_code_for, error_field_path
from cashflow_gateway.infrastructure.observability.logging import setup_logging
from cashflow_gateway.infrastructure.observability.metrics import record_validation_error
from cashflow_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed JSON with the same {code, field, message} body as domain validation"""
    error = exc.errors()[0]
    field = error_field_path(error["loc"][1:])  # drop "body"
    code = error_code_for(field)
    record_validation_error(code.value)
    return JSONResponse(
        status_code=422,
        content={"code": code.value, "field": field, "message": error["msg"]},
    )


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Household Cashflow Gateway",
        description="Day-by-day cashflow projections under optimistic and pessimistic scenarios",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(projection.router, prefix="/v1", tags=["projections"])

    return app


app = create_app()
