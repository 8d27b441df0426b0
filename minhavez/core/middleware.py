"""Middleware for request processing, error handling, and rate limiting."""
import time
import uuid
import logging
from typing import Callable, Optional
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import redis.asyncio as redis
from minhavez.config.settings import settings

logger = logging.getLogger(__name__)
error_logger = logging.getLogger("minhavez.errors")


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Middleware to ensure each request has a correlation ID.
    Adds/propagates `X-Request-ID` header and stores it in request.state.request_id.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware for handling unhandled exceptions."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            error_logger.error(
                f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True
            )
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error", "code": "internal_error"},
            )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging all requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        logger.info(
            f"Request: {request.method} {request.url.path} "
            f"from {request.client.host if request.client else 'unknown'}"
        )

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"Response: {response.status_code} "
            f"took {process_time:.3f}s"
        )
        response.headers["X-Process-Time"] = str(process_time)

        return response


def is_public_form(request: Request) -> bool:
    """POST {API}/public/queue/{business_id}/entries or POST {API}/public/reservations/{business_id}"""
    if request.method != "POST":
        return False
    path = request.url.path.rstrip("/")
    if path.startswith(f"{settings.API_V1_STR}/public/queue/"):
        return path.endswith("/entries")
    return path.startswith(f"{settings.API_V1_STR}/public/reservations/")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window rate limit for the anonymous join and booking forms."""

    def __init__(
        self,
        app: ASGIApp,
        redis_client: Optional[redis.Redis] = None,
        requests: int = settings.RATE_LIMIT_REQUESTS,
        window: int = settings.RATE_LIMIT_WINDOW,
        applies_to: Callable[[Request], bool] = is_public_form,
    ):
        super().__init__(app)
        self.redis = redis_client
        self.rate_limit_requests = requests
        self.rate_limit_window = window
        self.applies_to = applies_to

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.redis or not self.applies_to(request):
            return await call_next(request)

        client_id = self._get_client_id(request)

        if await self._register_request(client_id):
            logger.warning(f"Rate limit exceeded for {client_id} on {request.url.path}")
            return JSONResponse(
                status_code=429,
                content={
                    "detail": "Rate limit exceeded",
                    "code": "rate_limited",
                    "retry_after": self.rate_limit_window,
                },
            )

        return await call_next(request)

    def _get_client_id(self, request: Request) -> str:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return f"ip:{forwarded.split(',')[0].strip()}"
        return f"ip:{request.client.host if request.client else 'unknown'}"

    async def _register_request(self, client_id: str) -> bool:
        """Count this request, then report whether it went over the limit.

        INCR comes first so concurrent requests each see their own count.
        """
        key = f"rate_limit:{client_id}"
        try:
            count = await self.redis.incr(key)
            if count == 1:
                await self.redis.expire(key, self.rate_limit_window)
            return count > self.rate_limit_requests
        except Exception as e:
            logger.error(f"Rate limit check failed: {e}")
            return False


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware for adding security headers."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if settings.ENVIRONMENT.lower() == "production":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
            response.headers["X-Frame-Options"] = "DENY"

        return response
