"""
Request/response interceptors.

`build_middleware_stack` returns them as an explicit ordered list, outermost
first, which is the order FastAPI(middleware=...) applies them in.
"""

from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware import Middleware

from gohive.settings import Settings

from .json_guard import JSONBodyGuardMiddleware
from .rate_limiter import InMemoryRateLimiter, RateLimitMiddleware
from .request_logging import RequestLoggingMiddleware


def build_middleware_stack(
    settings: Settings,
    *,
    rate_limit: bool = False,
    json_guard: bool = False,
) -> list[Middleware]:
    """
    logging -> CORS -> rate limiter (optional) -> JSON guard (optional)
    """
    stack = [
        Middleware(RequestLoggingMiddleware),
        Middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization"],
        ),
    ]
    if rate_limit:
        stack.append(
            Middleware(
                RateLimitMiddleware,
                max_requests=settings.rate_limit_max_requests,
                window_seconds=settings.rate_limit_window_seconds,
            )
        )
    if json_guard:
        stack.append(
            Middleware(JSONBodyGuardMiddleware, max_body_bytes=settings.json_body_limit_bytes)
        )
    return stack


__all__ = [
    "InMemoryRateLimiter",
    "JSONBodyGuardMiddleware",
    "RateLimitMiddleware",
    "RequestLoggingMiddleware",
    "build_middleware_stack",
]
