"""
Token gate used by the gateway and by every gated service route.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, Request

from gohive.deps import get_token_service
from gohive.errors import NoTokenProvided
from gohive.services.token_redis_service import TokenRedisService


@dataclass
class AuthenticatedUser:
    """Subject of a validated session token."""

    id: str
    token: str


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an `Authorization: Bearer <token>` header.

    Raises:
        NoTokenProvided: header missing, wrong scheme or empty token
    """
    if not authorization:
        raise NoTokenProvided()
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise NoTokenProvided()
    return token


async def authenticate_request(
    request: Request,
    authorization: Optional[str],
    token_service: TokenRedisService,
) -> AuthenticatedUser:
    """
    Validate the bearer token of a request and attach the user id to
    `request.state.user_id` for downstream handlers.
    """
    token = extract_bearer_token(authorization)
    user_id = await token_service.validate(token)
    request.state.user_id = user_id
    return AuthenticatedUser(id=user_id, token=token)


async def require_jwt_token(
    request: Request,
    authorization: Optional[str] = Header(None),
    token_service: TokenRedisService = Depends(get_token_service),
) -> AuthenticatedUser:
    """FastAPI dependency guarding a route with the session token check."""
    return await authenticate_request(request, authorization, token_service)


__all__ = [
    "AuthenticatedUser",
    "authenticate_request",
    "extract_bearer_token",
    "require_jwt_token",
]
