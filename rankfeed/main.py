"""
Main FastAPI application entry point.
Configures logging, exception handlers, telemetry, and routers.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from rankfeed.api.dependencies import close_clients
from rankfeed.api.routers import feeds_router, health_router, rankings_router
from rankfeed.config import get_settings
from rankfeed.config.logging import configure_logging
from rankfeed.core.exceptions import AppException, DependencyUnavailableError, ValidationError
from rankfeed.core.telemetry import setup_telemetry

logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan (Startup/Shutdown)
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()

    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Decay factor: {settings.DECAY_FACTOR}")
    logger.info(
        f"Ranking source for feeds: {settings.RANKING_SERVICE_URL or 'in-process'}"
    )

    yield

    logger.info("Shutting down application")
    await close_clients()


# =============================================================================
# Exception Handlers
# =============================================================================


async def app_exception_handler(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    """Handle custom application exceptions."""
    if isinstance(exc, DependencyUnavailableError):
        # Full cause stays in the logs, the client gets the generic message
        logger.error(
            f"{request.method} {request.url.path} failed: {exc}",
            exc_info=exc,
            extra={"dependency": exc.dependency},
        )
    elif exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Report malformed requests as 400 naming the offending field."""
    errors = exc.errors()
    field = None
    if errors:
        location = [str(part) for part in errors[0].get("loc", ()) if part != "body"]
        field = ".".join(location[-1:]) or None

    message = f"Invalid value for {field}" if field else "Invalid request"
    error = ValidationError(
        message,
        details={
            "field": field,
            "errors": [
                {"loc": [str(p) for p in e.get("loc", ())], "msg": e.get("msg")}
                for e in errors
            ],
        },
    )
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle unexpected exceptions - return generic error."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
            }
        },
    )


# =============================================================================
# Application Factory
# =============================================================================


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    configure_logging(debug=settings.DEBUG)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""
        Ranking Feed API

        Time-decayed popularity rankings and per-user feed composition.

        ## Features
        - Exponential time decay of raw popularity scores
        - Per-cluster rankings replaced atomically on rebuild
        - Concurrent fan-out to ranking, social graph and content services
        - Immutable feed snapshots with lookup by ID or latest per user
        - Observability: JSON logs, Prometheus, OpenTelemetry
        """,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(health_router)
    app.include_router(rankings_router)
    app.include_router(feeds_router)

    setup_telemetry(app)

    return app


app = create_app()


# =============================================================================
# Development Entry Point
# =============================================================================


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rankfeed.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
