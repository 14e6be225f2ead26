"""
Main FastAPI application for the bulletin service.
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from contextlib import asynccontextmanager
import time

from bulletin.core.config import settings
from bulletin.core.exceptions import StoreError, ValidationError
from bulletin.core.observability import (
    init_observability, CorrelationIdMiddleware, health_monitor,
    MetricsCollector, get_logger
)
from bulletin.db.session import init_database, close_database, db_manager
from bulletin.db.redis import init_redis, close_redis, redis_manager
from bulletin.api.v1 import messages, health
from bulletin.api.v1.models import ErrorResponse


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info("Starting bulletin service...")

    init_observability()
    await init_database()
    await init_redis()

    health_monitor.register_check("database", db_manager.health_check)

    logger.info("Bulletin service started successfully")

    yield

    logger.info("Shutting down bulletin service...")

    await close_redis()
    await close_database()

    logger.info("Bulletin service shut down successfully")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Bulletin board for short messages with paged, filterable streaming queries",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

app.add_middleware(CorrelationIdMiddleware)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log and track all HTTP requests."""
    start_time = time.time()

    logger.info(
        "Request received",
        method=request.method,
        path=request.url.path,
        client=request.client.host if request.client else None
    )

    try:
        response = await call_next(request)
    except Exception as e:
        duration = time.time() - start_time
        logger.error(
            "Request failed",
            method=request.method,
            path=request.url.path,
            error=str(e),
            duration=duration
        )
        MetricsCollector.track_api_request(
            method=request.method,
            endpoint=request.url.path,
            status_code=500,
            duration=duration
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="Internal server error",
                message="An unexpected error occurred"
            ).model_dump()
        )

    duration = time.time() - start_time
    MetricsCollector.track_api_request(
        method=request.method,
        endpoint=request.url.path,
        status_code=response.status_code,
        duration=duration
    )
    logger.info(
        "Request completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration=duration
    )

    return response


@app.middleware("http")
async def rate_limit_middleware(request: Request, call_next):
    """Apply rate limiting to API requests."""
    if not settings.rate_limit_enabled:
        return await call_next(request)

    client_id = request.client.host if request.client else "unknown"
    endpoint = request.url.path

    allowed, remaining = await redis_manager.check_rate_limit(
        key=f"rate_limit:{client_id}:{endpoint}",
        limit=settings.rate_limit_requests,
        window=settings.rate_limit_period
    )

    if not allowed:
        MetricsCollector.track_rate_limit(client_id, endpoint)

        return JSONResponse(
            status_code=429,
            content=ErrorResponse(
                error="Rate limit exceeded",
                message="Too many requests. Please try again later."
            ).model_dump(),
            headers={
                "X-RateLimit-Limit": str(settings.rate_limit_requests),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": str(settings.rate_limit_period)
            }
        )

    response = await call_next(request)
    response.headers["X-RateLimit-Limit"] = str(settings.rate_limit_requests)
    response.headers["X-RateLimit-Remaining"] = str(remaining)
    response.headers["X-RateLimit-Reset"] = str(settings.rate_limit_period)

    return response


app.include_router(
    messages.router,
    prefix=settings.messages_path,
    tags=["messages"]
)

app.include_router(
    health.router,
    prefix="",
    tags=["health"]
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "operational",
        "documentation": "/docs" if settings.debug else None
    }


@app.get("/metrics", response_class=PlainTextResponse)
async def metrics():
    """Prometheus metrics endpoint."""
    if not settings.metrics_enabled:
        raise HTTPException(
            status_code=404,
            detail="Metrics not enabled"
        )

    return MetricsCollector.get_metrics()


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    """Client supplied invalid input."""
    logger.warning("Rejected request", path=request.url.path, reason=exc.message)
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error="Bad request", message=exc.message).model_dump()
    )


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed parameters or body are client errors too."""
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error="Bad request",
            message="Malformed request",
            details={"errors": jsonable_errors(exc)}
        ).model_dump()
    )


@app.exception_handler(StoreError)
async def store_exception_handler(request: Request, exc: StoreError):
    logger.error("Store failure", path=request.url.path, operation=exc.operation, error=exc.message)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            message="Message store unavailable"
        ).model_dump()
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True
    )

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            message="An unexpected error occurred"
        ).model_dump()
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg")}
        for error in exc.errors()
    ]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "bulletin.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=settings.workers if not settings.debug else 1,
        log_level=settings.log_level.lower()
    )
