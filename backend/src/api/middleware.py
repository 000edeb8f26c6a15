"""Middleware for security headers, upload rate limiting and request logging."""

import logging
import time
from collections import defaultdict, deque

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from src.core.config import get_settings
from src.core.metrics import observe_http_request
from src.core.request_context import new_request_id, request_id_context
from src.core.structured_logging import log_json

logger = logging.getLogger(__name__)
settings = get_settings()

UPLOAD_PATHS = ("/api/files/upload", "/api/files/upload-multiple")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add basic security headers to all responses.

    ``nosniff`` matters here: stored files are served inline with the
    content type the uploader declared.
    """

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")

        if settings.environment == "production":
            forwarded_proto = request.headers.get("x-forwarded-proto")
            scheme = forwarded_proto or request.url.scheme
            if scheme == "https":
                response.headers.setdefault(
                    "Strict-Transport-Security",
                    "max-age=63072000; includeSubDomains",
                )

        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding one-minute window per client IP on the upload endpoints.

    Only active in production. Other routes are never throttled.
    """

    window_seconds = 60.0

    def __init__(self, app: ASGIApp, limit_per_minute: int | None = None):
        super().__init__(app)
        self._limit = limit_per_minute or settings.rate_limit_upload_per_minute
        self._hits: dict[str, deque[float]] = defaultdict(deque)

    def _allow(self, client_ip: str) -> bool:
        now = time.monotonic()
        hits = self._hits[client_ip]
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()
        if len(hits) >= self._limit:
            return False
        hits.append(now)
        return True

    async def dispatch(self, request: Request, call_next):
        throttled = (
            settings.environment == "production"
            and request.method == "POST"
            and request.url.path in UPLOAD_PATHS
        )
        if throttled:
            client_ip = request.client.host if request.client else "unknown"
            if not self._allow(client_ip):
                log_json(logger, logging.WARNING, "upload_rate_limited", client_ip=client_ip)
                return JSONResponse(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    content={
                        "success": False,
                        "error": "Too many uploads. Please try again later.",
                    },
                )
        return await call_next(request)


def _incoming_request_id(request: Request) -> str | None:
    """Caller-supplied correlation id, if it is safe to echo back."""
    raw = request.headers.get("X-Request-ID") or request.headers.get("X-Correlation-ID")
    if not raw:
        return None
    candidate = raw.strip()
    if not candidate or len(candidate) > 128 or "\n" in candidate or "\r" in candidate:
        return None
    return candidate


def _route_label(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One structured ``request`` line per request, plus HTTP metrics.

    The correlation id is taken from ``X-Request-ID`` (or minted), bound to
    the log context for the whole request and echoed in the response.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = _incoming_request_id(request) or new_request_id()
        request.state.request_id = request_id
        fields = {
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        }
        started = time.perf_counter()

        with request_id_context(request_id):
            try:
                response = await call_next(request)
            except Exception as exc:
                log_json(
                    logger,
                    logging.ERROR,
                    "request_error",
                    status_code=500,
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                    error=str(exc),
                    exception=exc.__class__.__name__,
                    **fields,
                )
                raise

            duration_ms = (time.perf_counter() - started) * 1000
            response.headers.setdefault("X-Request-ID", request_id)
            observe_http_request(
                method=request.method,
                route=_route_label(request),
                status_code=response.status_code,
                duration_ms=duration_ms,
            )
            log_json(
                logger,
                _level_for(response.status_code),
                "request",
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
                **fields,
            )
            return response
