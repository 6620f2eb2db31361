"""
Main FastAPI application
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.routing import Match
import asyncio
import logging
import os
import time
from prometheus_client import make_asgi_app, Counter, Histogram
import uuid

from app.config import settings
from app.core.database import init_db, close_db
from app.core.exceptions import ExplorerException
from app.core.logging import setup_logging
from app.core.redis import close_redis
from app.core.seeding import seed_if_empty
from app.schemas.response import ErrorResponse
from app.api.v1.api import api_router
from app.api.v1.endpoints import websocket
from app.services.websocket_service import RedisBroadcastRelay, connection_manager

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

# Prometheus metrics - use try/except to avoid duplicate registration
try:
    REQUEST_COUNT = Counter(
        "explorer_requests_total",
        "Total requests",
        ["method", "endpoint", "status"]
    )
    REQUEST_DURATION = Histogram(
        "explorer_request_duration_seconds",
        "Request duration",
        ["method", "endpoint"]
    )
except ValueError:
    # Metrics already registered, get them from registry
    from prometheus_client import REGISTRY
    REQUEST_COUNT = REGISTRY._names_to_collectors["explorer_requests_total"]
    REQUEST_DURATION = REGISTRY._names_to_collectors["explorer_request_duration_seconds"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager
    """
    # Startup
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    # Initialize database
    await init_db()
    logger.info("Database connection established")

    if settings.SEED_ON_STARTUP:
        await seed_if_empty()

    # Cross-instance broadcast relay
    relay = None
    if settings.REDIS_BROADCAST_ENABLED:
        relay = RedisBroadcastRelay(connection_manager)
        await relay.start()

    yield

    # Shutdown
    logger.info("Shutting down application")

    try:
        if relay:
            try:
                await relay.stop()
            finally:
                await close_redis()
    finally:
        # Close database connections
        await close_db()


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Stations, places, reviews and events along the BTS Green Line",
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


# Request timeout middleware
@app.middleware("http")
async def enforce_timeout(request: Request, call_next):
    """
    Abort requests that run longer than REQUEST_TIMEOUT_SECONDS
    """
    try:
        return await asyncio.wait_for(
            call_next(request),
            timeout=settings.REQUEST_TIMEOUT_SECONDS
        )
    except asyncio.TimeoutError:
        logger.error(f"Request timed out: {request.method} {request.url.path}")
        return JSONResponse(
            status_code=504,
            content={"error": "Request timed out", "code": "TIMEOUT"}
        )


def route_label(request: Request) -> str:
    """Route template for metric labels, so ids never become new series"""
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return route.path
    return "unmatched"


# Request tracking middleware
@app.middleware("http")
async def track_requests(request: Request, call_next):
    """
    Track request metrics and add request ID
    """
    # Generate request ID
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    # Track request timing
    start_time = time.time()

    response = await call_next(request)

    # Calculate request duration
    duration = time.time() - start_time

    # Record metrics
    endpoint = route_label(request)
    REQUEST_COUNT.labels(
        method=request.method,
        endpoint=endpoint,
        status=response.status_code
    ).inc()

    REQUEST_DURATION.labels(
        method=request.method,
        endpoint=endpoint
    ).observe(duration)

    # Add headers
    response.headers["X-Request-ID"] = request_id
    response.headers["X-Process-Time"] = str(duration)

    return response


def error_body(message: str, code: str = None, details: dict = None) -> dict:
    return ErrorResponse(error=message, code=code, details=details or None).model_dump(exclude_none=True)


def describe_validation_error(error: dict) -> str:
    location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(location)
    return f"{field}: {error.get('msg')}" if field else str(error.get("msg"))


# Exception handlers
@app.exception_handler(ExplorerException)
async def explorer_exception_handler(request: Request, exc: ExplorerException):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.code, exc.details)
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    if exc.status_code == 404 and message == "Not Found":
        message = "The requested resource was not found"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    messages = [describe_validation_error(error) for error in errors]
    return JSONResponse(
        status_code=400,
        content=error_body(
            "; ".join(messages) or "Invalid request",
            "VALIDATION_ERROR",
            {"fields": messages}
        )
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(f"Constraint violation on {request.method} {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=400,
        content=error_body("Referenced record does not exist or constraint violated", "REFERENCE_ERROR")
    )


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    logger.error(f"Internal server error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=error_body("An internal server error occurred", "INTERNAL_ERROR")
    )


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.APP_ENV,
        "api_docs": "/docs" if settings.DEBUG else None
    }


# REST endpoints
app.include_router(api_router, prefix=settings.API_PREFIX)

# WebSocket endpoint
app.include_router(
    websocket.router,
    tags=["WebSocket"]
)

# Uploaded images are served straight from disk
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount(
    settings.UPLOAD_URL_PATH,
    StaticFiles(directory=settings.UPLOAD_DIR),
    name="uploads"
)

# Mount Prometheus metrics endpoint
if settings.PROMETHEUS_ENABLED:
    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
