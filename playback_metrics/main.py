"""FastAPI application entry point.

Creates the app with lifespan management, builds the metrics registry
and recorder, mounts the event routes and the scrape endpoint, and
configures global exception handling.
Run with: uvicorn playback_metrics.main:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from playback_metrics.api.middleware import (
    APIKeyAuthMiddleware,
    LoggingMiddleware,
    RequestIDMiddleware,
)
from playback_metrics.api.routes import router as api_router
from playback_metrics.api.schemas import ErrorResponse
from playback_metrics.config import Settings, get_settings
from playback_metrics.metrics.recorder import PlaybackMetricsRecorder
from playback_metrics.metrics.registry import PlaybackMetricsRegistry
from playback_metrics.utils.exceptions import PlaybackMetricsError
from playback_metrics.utils.logger import set_log_level, setup_logger

logger = setup_logger("main")


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncGenerator[None, None]:
    """Log startup and shutdown; metric state lives until process exit.

    Args:
        application: The FastAPI application instance.

    Yields:
        Control back to the application during its lifetime.
    """
    config = application.state.config
    logger.info(
        "Playback metrics ready",
        extra={"host": config.api_host, "port": config.api_port, "metrics_path": config.metrics_path},
    )

    yield

    logger.info("Shutdown complete")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Configuration to use; loaded from the environment when omitted.

    Returns:
        Configured FastAPI application instance.
    """
    config = settings or get_settings()
    set_log_level(config.log_level)

    application = FastAPI(
        title="Playback Metrics API",
        description="Playback lifecycle events exposed as Prometheus metrics.",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # One registry per app; the recorder holds it by reference
    registry = PlaybackMetricsRegistry(include_process_metrics=config.include_process_metrics)
    application.state.config = config
    application.state.metrics_registry = registry
    application.state.recorder = PlaybackMetricsRecorder(registry)
    application.state.started_at = time.monotonic()

    # ── Middleware (outermost added last) ────────────────────────────────
    application.add_middleware(APIKeyAuthMiddleware, config=config)
    application.add_middleware(LoggingMiddleware)
    application.add_middleware(RequestIDMiddleware)

    # ── Routers ──────────────────────────────────────────────────────────
    application.include_router(api_router)

    # ── Scrape Endpoint ──────────────────────────────────────────────────
    @application.get(config.metrics_path, include_in_schema=False, tags=["monitoring"])
    async def metrics() -> Response:
        return Response(content=registry.exposition(), media_type=registry.content_type)

    # ── Global Exception Handlers ────────────────────────────────────────

    @application.exception_handler(PlaybackMetricsError)
    async def playback_metrics_error_handler(
        request: Request,
        exc: PlaybackMetricsError,
    ) -> JSONResponse:
        """Handle all PlaybackMetricsError subclasses.

        Args:
            request: The incoming request that caused the error.
            exc: The PlaybackMetricsError exception.

        Returns:
            JSONResponse with ErrorResponse body and 500 status.
        """
        request_id = getattr(request.state, "request_id", None)
        logger.error(
            f"Playback metrics error: {exc.message}",
            extra={"detail": exc.detail, "request_id": request_id},
        )
        error_response = ErrorResponse(
            error=exc.message,
            detail=exc.detail,
            request_id=request_id,
        )
        return JSONResponse(
            status_code=500,
            content=error_response.model_dump(),
        )

    @application.exception_handler(Exception)
    async def general_error_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions.

        Args:
            request: The incoming request.
            exc: The unhandled exception.

        Returns:
            JSONResponse with generic error message and 500 status.
        """
        request_id = getattr(request.state, "request_id", None)
        logger.error(
            f"Unhandled error: {exc}",
            extra={"type": type(exc).__name__, "request_id": request_id},
        )
        error_response = ErrorResponse(
            error="Internal server error",
            detail=str(exc) if config.debug else None,
            request_id=request_id,
        )
        return JSONResponse(
            status_code=500,
            content=error_response.model_dump(),
        )

    return application


def run() -> None:
    """Serve the app with uvicorn using the configured host and port."""
    import uvicorn

    config = get_settings()
    uvicorn.run(
        "playback_metrics.main:app",
        host=config.api_host,
        port=config.api_port,
        log_level=config.log_level.lower(),
    )


# Create the app instance
app = create_app()
