import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from gohive.errors import handle_unexpected_error
from gohive.log_sanitizer import sanitize_headers_for_log
from gohive.logging_config import logger


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request and its outcome. Authorization, cookies and other
    credential headers are redacted.
    """

    async def dispatch(self, request: Request, call_next):
        client_host = request.client.host if request.client else "-"
        logger.info(
            "HTTP %s %s from %s, headers=%s",
            request.method,
            request.url.path,
            client_host,
            sanitize_headers_for_log(request.headers),
        )
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            response = await handle_unexpected_error(request, exc)
        logger.info(
            "HTTP %s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response


__all__ = ["RequestLoggingMiddleware"]
