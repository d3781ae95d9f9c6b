"""
Per-client request limiting for the gateway.
"""

import time
from collections import deque
from typing import Callable, Iterable, NamedTuple

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from gohive.errors import RateLimitError
from gohive.logging_config import logger


class RateDecision(NamedTuple):
    limited: bool
    remaining: int
    reset_at: int


class InMemoryRateLimiter:
    """
    Sliding-window counter kept in process memory, one per gateway process.

    Each key maps to the timestamps of its admitted requests, oldest first.
    Keys whose window has emptied are dropped on the next check.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._hits: dict[str, deque[float]] = {}
        self.clock = clock

    def __len__(self) -> int:
        return len(self._hits)

    def check(self, key: str, max_requests: int, window_seconds: int) -> RateDecision:
        now = self.clock()
        self._evict(now - window_seconds)

        hits = self._hits.setdefault(key, deque())
        if len(hits) >= max_requests:
            return RateDecision(True, 0, int(hits[0] + window_seconds))

        hits.append(now)
        return RateDecision(False, max_requests - len(hits), int(hits[0] + window_seconds))

    def _evict(self, cutoff: float) -> None:
        for key in list(self._hits):
            hits = self._hits[key]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if not hits:
                del self._hits[key]


def default_client_ip(request: Request) -> str:
    """First X-Forwarded-For hop, then X-Real-IP, then the socket peer."""
    forwarded = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    if forwarded:
        return forwarded
    real_ip = request.headers.get("X-Real-IP", "").strip()
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        max_requests: int = 100,
        window_seconds: int = 60,
        exempt_paths: Iterable[str] = ("/health",),
        limiter: InMemoryRateLimiter | None = None,
        get_client_ip: Callable[[Request], str] | None = None,
    ):
        super().__init__(app)
        self.limiter = limiter or InMemoryRateLimiter()
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.exempt_paths = frozenset(exempt_paths)
        self.get_client_ip = get_client_ip or default_client_ip

    def _headers(self, decision: RateDecision) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.max_requests),
            "X-RateLimit-Remaining": str(decision.remaining),
            "X-RateLimit-Reset": str(decision.reset_at),
        }

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.exempt_paths:
            return await call_next(request)

        client_ip = self.get_client_ip(request)
        decision = self.limiter.check(client_ip, self.max_requests, self.window_seconds)
        headers = self._headers(decision)

        if decision.limited:
            logger.warning(
                "Rate limit exceeded for %s on %s %s",
                client_ip,
                request.method,
                request.url.path,
            )
            headers["Retry-After"] = str(max(0, decision.reset_at - int(self.limiter.clock())))
            return RateLimitError().to_response(headers=headers)

        response: Response = await call_next(request)
        response.headers.update(headers)
        return response


__all__ = ["InMemoryRateLimiter", "RateDecision", "RateLimitMiddleware", "default_client_ip"]
