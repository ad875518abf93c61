"""User Service - FastAPI Application."""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from uuid import uuid4

import structlog
from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from user_service import __version__
from user_service.config import settings
from user_service.database import Database, get_database
from user_service.logger import configure_logging, get_logger
from user_service.responses import register_exception_handlers
from user_service.routers import auth, users
from user_service.schemas import Envelope, HealthStatus
from user_service.utils.exceptions import raise_not_found

# Initialize logging early
configure_logging()
logger = get_logger(__name__)

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create (or adopt) the storage handle on startup and dispose it on shutdown."""
    database: Database | None = getattr(app.state, "database", None)
    owns_database = database is None
    if database is None:
        database = Database.from_settings(settings)
        app.state.database = database

    if settings.auto_create_tables:
        await database.create_tables()

    logger.info("Application started", version=__version__, environment=settings.environment)
    yield

    if owns_database:
        await database.dispose()
    logger.info("Application shutting down")


async def logging_middleware(request: Request, call_next: Any) -> Response:
    """Middleware to inject Request-ID and log request details."""
    request_id = request.headers.get("X-Request-ID", str(uuid4()))

    # Clear and set contextvars for this request
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
    )

    start_time = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as exc:
        duration = time.perf_counter() - start_time
        logger.exception(
            "HTTP Request Failed",
            duration_ms=round(duration * 1000, 2),
            error=str(exc),
        )
        raise

    duration = time.perf_counter() - start_time
    logger.info(
        "HTTP Request",
        status_code=response.status_code,
        duration_ms=round(duration * 1000, 2),
    )

    response.headers["X-Request-ID"] = request_id
    return response


async def health_check(database: Database = Depends(get_database)) -> JSONResponse:
    """Report 200 when storage answers, 503 otherwise."""
    healthy = await database.ping()
    status_code = status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE

    body = Envelope(
        code=status_code,
        success=healthy,
        message="healthy" if healthy else "unhealthy",
        data=HealthStatus(checks={"database": healthy}, version=__version__),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def route_not_found(path: str) -> None:
    """Catch-all for any method/path no router claimed."""
    raise_not_found("Route")


def create_app(database: Database | None = None) -> FastAPI:
    """Build the application.

    Args:
        database: Storage handle to use. When omitted, one is built from
            settings during startup and disposed on shutdown.
    """
    app = FastAPI(
        title="User Service API",
        description="User registration, token authentication and user CRUD",
        version=__version__,
        lifespan=lifespan,
    )
    if database is not None:
        app.state.database = database

    app.middleware("http")(logging_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "PATCH"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )
    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(users.router)
    app.add_api_route("/health", health_check, methods=["GET"], tags=["health"])

    # Must stay last: it matches every path
    app.add_api_route(
        "/{path:path}",
        route_not_found,
        methods=ALL_METHODS,
        include_in_schema=False,
    )
    return app


app = create_app()
