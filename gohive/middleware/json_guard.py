"""
Rejects malformed or oversized JSON bodies before they reach a handler.

The gateway forwards raw bytes, so without this interceptor a broken
payload would only be noticed by the upstream service.
"""

import json

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from gohive.errors import INVALID_JSON_MESSAGE, PayloadTooLargeError, error_response
from gohive.logging_config import logger

_BODY_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def _is_json(scope: Scope) -> bool:
    for name, value in scope.get("headers", []):
        if name == b"content-type":
            media_type = value.decode("latin-1").split(";")[0].strip().lower()
            return media_type == "application/json" or media_type.endswith("+json")
    return False


class JSONBodyGuardMiddleware:
    """
    Pure ASGI middleware: buffers JSON request bodies, answers 400 for
    unparsable ones and 413 above `max_body_bytes`, then replays the
    buffered body to the wrapped app.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int = 10 * 1024 * 1024) -> None:
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if (
            scope["type"] != "http"
            or scope.get("method") not in _BODY_METHODS
            or not _is_json(scope)
        ):
            await self.app(scope, receive, send)
            return

        body = bytearray()
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            body.extend(message.get("body", b""))
            more_body = message.get("more_body", False)
            if len(body) > self.max_body_bytes:
                logger.warning(
                    "Rejected %s %s: JSON body above %d bytes",
                    scope.get("method"),
                    scope.get("path"),
                    self.max_body_bytes,
                )
                await PayloadTooLargeError().to_response()(scope, receive, send)
                return

        if body.strip():
            try:
                json.loads(body)
            except ValueError as exc:
                logger.warning(
                    "JSON parsing error on %s %s: %s",
                    scope.get("method"),
                    scope.get("path"),
                    exc,
                )
                await error_response(400, INVALID_JSON_MESSAGE)(scope, receive, send)
                return

        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": bytes(body), "more_body": False}
            return await receive()

        await self.app(scope, replay, send)


__all__ = ["JSONBodyGuardMiddleware"]
