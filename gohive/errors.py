"""
Error taxonomy shared by the gateway and the services, plus the handlers
that turn every failure into the `{"error": ...}` envelope.
"""

import uuid
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException

from .logging_config import logger


INTERNAL_ERROR_MESSAGE = "Internal server error"
INVALID_JSON_MESSAGE = "Invalid JSON payload"


class ErrorResponse(BaseModel):
    """
    Standard error payload returned by every service:

    {"error": "No token provided"}
    """

    error: str | dict[str, Any] = Field(..., description="Human-readable message or details")


class ServiceError(Exception):
    """Base class for failures that map onto a fixed HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = INTERNAL_ERROR_MESSAGE

    def __init__(self, message: str | dict[str, Any] | None = None) -> None:
        self.message = message if message is not None else self.default_message
        super().__init__(str(self.message))

    def to_response(self, headers: dict[str, str] | None = None) -> JSONResponse:
        payload = ErrorResponse(error=self.message)
        return JSONResponse(
            status_code=self.status_code, content=payload.model_dump(), headers=headers
        )


class AuthError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class NoTokenProvided(AuthError):
    default_message = "No token provided"


class ExpiredOrRevokedToken(AuthError):
    default_message = "Invalid or expired token"


class InvalidToken(AuthError):
    default_message = "Invalid token"


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class BackendError(ServiceError):
    """The managed auth/database backend rejected a call."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Backend request failed"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class PayloadTooLargeError(ServiceError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    default_message = "Payload too large"


class RateLimitError(ServiceError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests, please try again later."


class UpstreamError(ServiceError):
    """
    A proxied or third-party call failed. The message stays generic; the
    underlying cause is only logged.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = INTERNAL_ERROR_MESSAGE


def error_response(status_code: int, message: str | dict[str, Any]) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=ErrorResponse(error=message).model_dump()
    )


async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info(
            "%s %s rejected with %s: %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc,
        )
    return exc.to_response()


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail if exc.detail is not None else "Request failed"
    response = error_response(exc.status_code, detail)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Malformed JSON bodies get the fixed "Invalid JSON payload" message;
    missing or mistyped fields report the first offending field.
    """
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        logger.warning("JSON parsing error on %s %s", request.method, request.url.path)
        return error_response(status.HTTP_400_BAD_REQUEST, INVALID_JSON_MESSAGE)

    if not errors:
        return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request")

    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part != "body"]
    field = ".".join(location)
    message = first.get("msg", "Invalid value")
    if first.get("type") == "missing" and field:
        message = f"{field} is required"
    elif field:
        message = f"{field}: {message}"
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """
    Last-resort handler: log with an error id and answer 500 so that a
    failing route never takes the process down.
    """
    error_id = uuid.uuid4().hex
    logger.exception(
        "Unhandled error %s %s (error_id=%s)",
        request.method,
        request.url.path,
        error_id,
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, handle_service_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)


__all__ = [
    "AuthError",
    "BackendError",
    "ErrorResponse",
    "ExpiredOrRevokedToken",
    "INTERNAL_ERROR_MESSAGE",
    "INVALID_JSON_MESSAGE",
    "InvalidToken",
    "NoTokenProvided",
    "NotFoundError",
    "PayloadTooLargeError",
    "RateLimitError",
    "ServiceError",
    "UpstreamError",
    "ValidationError",
    "error_response",
    "handle_unexpected_error",
    "register_error_handlers",
]
