"""Request correlation and access logging middleware."""

import time
import uuid
from typing import Callable, Iterable, Optional

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .config import settings
from .observability import REQUEST_COUNT, REQUEST_DURATION, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
QUIET_PATHS = ("/health", "/ready", "/metrics", "/favicon.ico")
BODY_LOG_LIMIT = 1000


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Give every request a correlation id.

    An incoming ``X-Request-ID`` is reused, otherwise a UUID is minted. The id
    is echoed on the response and bound into the structlog context so every
    log line written while serving the request carries it.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.header_name) or uuid.uuid4().hex
        request.state.request_id = request_id

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            response = await call_next(request)

        response.headers[self.header_name] = request_id
        return response


def client_address(request: Request) -> str:
    """First hop from proxy headers, falling back to the socket peer."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.headers.get("X-Real-IP"):
        return request.headers["X-Real-IP"]
    return request.client.host if request.client else "unknown"


def route_template(request: Request) -> str:
    # "/api/bookings/{booking_id}" rather than the concrete path
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Log each request once on completion and feed the request series."""

    def __init__(
        self,
        app: ASGIApp,
        log_request_body: bool = False,
        quiet_paths: Optional[Iterable[str]] = None,
    ):
        super().__init__(app)
        self.log_request_body = log_request_body
        self.quiet_paths = frozenset(quiet_paths or QUIET_PATHS)

    async def _request_body(self, request: Request) -> Optional[str]:
        if not self.log_request_body or request.method not in ("POST", "PUT", "PATCH"):
            return None
        # Login payloads carry passwords
        if "/auth/" in request.url.path:
            return None
        body = await request.body()
        return body.decode("utf-8", errors="replace")[:BODY_LOG_LIMIT] if body else None

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        body = await self._request_body(request)

        response = await call_next(request)

        elapsed = time.perf_counter() - started
        endpoint = route_template(request)
        REQUEST_COUNT.labels(
            method=request.method, endpoint=endpoint, status_code=str(response.status_code)
        ).inc()
        REQUEST_DURATION.labels(method=request.method, endpoint=endpoint).observe(elapsed)

        if request.url.path in self.quiet_paths:
            return response

        log = logger.bind(
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(elapsed * 1000, 2),
            client_ip=client_address(request),
            user_agent=request.headers.get("User-Agent", "unknown"),
        )
        if body:
            log = log.bind(request_body=body)

        if response.status_code >= 500:
            log.error("request failed")
        elif response.status_code >= 400:
            log.warning("request rejected")
        else:
            log.info("request completed")

        return response


def setup_middleware(app, enable_logging: bool = True) -> None:
    """
    Install correlation and access logging middleware.

    Starlette runs the most recently added middleware first, so the request
    id is bound before the access log reads the context.
    """
    if enable_logging:
        app.add_middleware(AccessLogMiddleware, log_request_body=settings.debug)
    app.add_middleware(RequestIDMiddleware)
