"""FastAPI application factory"""

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from ledger_lite.api.dependencies import get_request_id
from ledger_lite.api.middleware import RequestIDMiddleware, MetricsMiddleware
from ledger_lite.api.v1 import cards, cycles, installments, taxes, transactions
from ledger_lite.domain.exceptions import (
    DomainException,
    NotFoundError,
    StoreError,
    UnauthenticatedError,
    ValidationError,
)
from ledger_lite.infrastructure.observability.logging import setup_logging
from ledger_lite.config import settings

# Setup structured logging
setup_logging(settings.log_level)

# Most specific first
ERROR_STATUS_CODES = [
    (UnauthenticatedError, 401),
    (ValidationError, 422),
    (NotFoundError, 404),
    (StoreError, 500),
]


def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Turn expected failures into JSON error bodies"""
    status_code = next((code for cls, code in ERROR_STATUS_CODES if isinstance(exc, cls)), 400)
    logging.warning(
        f"{type(exc).__name__}: {exc}",
        extra={"request_id": get_request_id(request), "path": request.url.path},
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Ledger Lite",
        description="Billing cycle and card statement accounting service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, domain_exception_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(cycles.router, prefix="/v1", tags=["billing-cycles"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(installments.router, prefix="/v1", tags=["installments"])
    app.include_router(cards.router, prefix="/v1", tags=["card-summaries"])
    app.include_router(taxes.router, prefix="/v1", tags=["taxes"])

    return app


app = create_app()
