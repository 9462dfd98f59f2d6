"""API middleware and exception handlers."""
import asyncio
import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.exceptions import BaseAPIException, RateLimitExceeded, ValidationError
from ..core.logging import RequestLogger, SecurityLogger
from ..schemas.common import ErrorResponse

logger = structlog.get_logger(__name__)


def _error_body(message: str, error_code: str, details: dict = None) -> dict:
    return ErrorResponse(
        error=message,
        error_code=error_code,
        details=details or {},
    ).model_dump(mode="json")


async def api_exception_handler(request: Request, exc: BaseAPIException) -> JSONResponse:
    """Render application exceptions."""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.error_code, exc.details),
        headers=headers,
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Malformed input is a 400, not FastAPI's default 422."""
    errors = [
        {"field": ".".join(str(part) for part in error["loc"][1:]), "message": error["msg"]}
        for error in exc.errors()
    ]
    return await api_exception_handler(request, ValidationError(details={"errors": errors}))


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging requests and responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Generate request ID
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()
        RequestLogger.log_request(
            method=request.method,
            path=str(request.url.path),
            request_id=request_id,
            extra_data={
                "client_ip": request.client.host if request.client else None,
                "user_agent": request.headers.get("user-agent")
            }
        )

        response = await call_next(request)

        # Set by the session guard on protected routes
        user = getattr(request.state, "user", None)
        RequestLogger.log_response(
            method=request.method,
            path=str(request.url.path),
            status_code=response.status_code,
            response_time_ms=(time.time() - start_time) * 1000,
            user_id=str(user.id) if user else None,
            request_id=request_id
        )

        response.headers["X-Request-ID"] = request_id
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turns unexpected exceptions into a generic 500 response."""

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except BaseAPIException as e:
            return await api_exception_handler(request, e)

        except Exception as e:
            logger.exception(
                "Unhandled error",
                method=request.method,
                path=str(request.url.path),
            )
            return JSONResponse(
                status_code=500,
                content=_error_body(
                    "Internal server error",
                    "INTERNAL_ERROR",
                    {"message": str(e)} if self.debug else None,
                ),
            )


class RequestTimeoutMiddleware(BaseHTTPMiddleware):
    """Bounds the time spent on a single request."""

    def __init__(self, app, timeout_seconds: float = 30.0):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                "Request timed out",
                method=request.method,
                path=str(request.url.path),
                timeout_seconds=self.timeout_seconds,
            )
            return JSONResponse(
                status_code=504,
                content=_error_body("Request timed out", "REQUEST_TIMEOUT"),
            )


class RateLimitingMiddleware(BaseHTTPMiddleware):
    """Simple in-memory rate limiting middleware."""

    def __init__(
        self,
        app,
        requests_per_window: int = 100,
        window_seconds: int = 900,
        enabled: bool = True
    ):
        super().__init__(app)
        self.requests_per_window = requests_per_window
        self.window_seconds = window_seconds
        self.enabled = enabled
        self.request_times = {}  # client_ip -> list of request times
        self.last_sweep = time.time()

    def sweep(self, current_time: float) -> None:
        """Forget clients with no request inside the window."""
        self.request_times = {
            client_ip: times
            for client_ip, times in self.request_times.items()
            if times and current_time - times[-1] < self.window_seconds
        }
        self.last_sweep = current_time

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.enabled:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        current_time = time.time()

        if current_time - self.last_sweep >= self.window_seconds:
            self.sweep(current_time)

        # Drop requests outside the window
        recent = [
            req_time for req_time in self.request_times.get(client_ip, [])
            if current_time - req_time < self.window_seconds
        ]

        if len(recent) >= self.requests_per_window:
            self.request_times[client_ip] = recent
            SecurityLogger.log_rate_limit_exceeded(
                ip_address=client_ip,
                path=str(request.url.path)
            )
            return await api_exception_handler(
                request, RateLimitExceeded("Too many requests, please try again later")
            )

        recent.append(current_time)
        self.request_times[client_ip] = recent
        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response
