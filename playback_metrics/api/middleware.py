"""FastAPI middleware -- request IDs, logging and auth.

RequestIDMiddleware: adds X-Request-ID to every request.
LoggingMiddleware: logs method, path, status, and latency.
APIKeyAuthMiddleware: rejects event requests without a valid X-API-Key.
"""

from __future__ import annotations

import hmac
import time
import uuid
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from playback_metrics.config import Settings
from playback_metrics.utils.exceptions import AuthenticationError
from playback_metrics.utils.logger import log_with_latency, set_correlation_id, setup_logger

logger = setup_logger("api.middleware")

# Paths excluded from auth (the scrape path is added from config)
_EXCLUDED_PATHS = {"/api/v1/health", "/docs", "/openapi.json", "/redoc"}


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a unique X-Request-ID to every request and response.

    If the client supplies an X-Request-ID header, it is reused;
    otherwise a new UUID4 is generated. The ID is also stored
    in the correlation_id context variable.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)

        set_correlation_id(request_id)
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with method, path, status code, and latency."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()

        response = await call_next(request)

        log_with_latency(
            logger,
            "Request processed",
            (time.perf_counter() - start) * 1000,
            method=request.method,
            path=request.url.path,
            status=response.status_code,
        )
        return response


class APIKeyAuthMiddleware(BaseHTTPMiddleware):
    """Reject event requests without a valid X-API-Key header.

    Health, docs and the scrape path stay open so the collector
    needs no credentials.
    """

    _dev_warning_logged: bool = False

    def __init__(self, app: Any, config: Settings):
        super().__init__(app)
        self.config = config
        self._excluded = _EXCLUDED_PATHS | {config.metrics_path}

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.path in self._excluded:
            return await call_next(request)

        if not self.config.api_key:
            if not APIKeyAuthMiddleware._dev_warning_logged:
                logger.warning("No API key configured, auth disabled (dev mode)")
                APIKeyAuthMiddleware._dev_warning_logged = True
            return await call_next(request)

        client_key = request.headers.get("X-API-Key", "")
        if not hmac.compare_digest(client_key.encode(), self.config.api_key.encode()):
            error = AuthenticationError("Invalid or missing API key")
            logger.warning(error.message, extra={"path": request.url.path})
            return JSONResponse(status_code=403, content=error.to_dict())

        return await call_next(request)
