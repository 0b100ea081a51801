"""
SAJ Books API - FastAPI application entry point
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from apps.api.middleware.user_session import UserSessionMiddleware
from apps.api.routers import (
    catalogue,
    credit_notes,
    ledger_accounts,
    products,
    purchases,
    receipts,
    reports,
    sales,
    session,
    store,
)
from packages.common.busa_client import BusaApiClient, BusaApiError
from packages.common.config import get_settings

settings = get_settings()

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(settings.log_level)),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager"""
    logger.info("starting_saj_books_api",
                environment=settings.environment,
                busa_api=settings.busa_api_base_url,
                version=VERSION)

    app.state.busa_client = BusaApiClient()

    yield

    logger.info("shutting_down_saj_books_api")
    await app.state.busa_client.aclose()


app = FastAPI(
    title="SAJ Books API",
    description="Sales, receipts, ledger accounts and store records for SAJ Foods",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["https://sajfoods.net"] if settings.environment == "production" else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(UserSessionMiddleware)


# Exception handlers
def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold exception instances that JSON cannot carry
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with structured logging"""
    logger.warning("validation_error",
                   path=request.url.path,
                   errors=exc.errors())
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_errors(exc)},
    )


@app.exception_handler(BusaApiError)
async def busa_api_exception_handler(request: Request, exc: BusaApiError):
    """Upstream business API failed or refused the request"""
    logger.error("busa_api_request_failed",
                 path=request.url.path,
                 resource=exc.resource,
                 operation=exc.operation,
                 upstream_status=exc.status_code,
                 error=exc.message)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "detail": exc.message,
            "resource": exc.resource,
            "operation": exc.operation,
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors"""
    logger.error("unhandled_exception",
                 path=request.url.path,
                 error=str(exc),
                 exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "request_id": request.headers.get("x-request-id"),
        },
    )


# Include routers
app.include_router(session.router, prefix="/api/v1/session", tags=["Session"])
app.include_router(receipts.router, prefix="/api/v1/receipts", tags=["Receipts"])
app.include_router(credit_notes.router, prefix="/api/v1/credit-notes", tags=["Credit Notes"])
app.include_router(ledger_accounts.router, prefix="/api/v1/ledger-accounts", tags=["Ledger Accounts"])
app.include_router(sales.router, prefix="/api/v1", tags=["Sales"])
app.include_router(purchases.router, prefix="/api/v1/purchase-orders", tags=["Purchases"])
app.include_router(store.router, prefix="/api/v1/store", tags=["Store"])
app.include_router(products.router, prefix="/api/v1/products", tags=["Products"])
app.include_router(reports.router, prefix="/api/v1/reports", tags=["Reports"])
app.include_router(catalogue.router, prefix="/api/v1/catalogue", tags=["Catalogue"])


@app.get("/health", tags=["System"])
async def health_check():
    """Liveness check; the business API is not probed"""
    return {
        "status": "healthy",
        "environment": settings.environment,
        "version": VERSION,
        "services": {
            "busa_api": settings.busa_api_base_url,
        },
    }


# Metrics endpoint (Prometheus)
@app.get("/metrics", tags=["System"])
async def metrics():
    """Prometheus metrics endpoint"""
    if not settings.metrics_enabled:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": "Metrics disabled"}
        )

    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )


@app.get("/", tags=["System"])
async def root():
    """API root endpoint"""
    return {
        "name": "SAJ Books API",
        "version": VERSION,
        "environment": settings.environment,
        "currency": settings.currency,
        "docs": "/docs" if settings.environment != "production" else None,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "apps.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )
