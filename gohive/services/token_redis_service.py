"""
Session token storage in Redis.

A token is only accepted while its `jwt:<token>` entry exists, which lets
logout revoke a token whose signature would otherwise stay valid until it
expires.
"""

from __future__ import annotations

import datetime
from typing import Optional

from jose import JWTError
from redis.asyncio import Redis

from gohive.errors import ExpiredOrRevokedToken, InvalidToken
from gohive.logging_config import logger
from gohive.services.jwt_auth_service import (
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES,
    create_access_token,
    extract_subject,
)

TOKEN_KEY = "jwt:{token}"
TOKEN_TTL_SECONDS = JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60


class TokenRedisService:
    """Issues, validates and revokes session tokens backed by Redis."""

    def __init__(self, redis: Redis, *, ttl_seconds: int = TOKEN_TTL_SECONDS):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    async def issue(
        self, subject_id: str, *, now: Optional[datetime.datetime] = None
    ) -> str:
        """
        Sign a token for the subject and keep a copy with the same lifetime.
        """
        token = create_access_token(
            subject_id,
            expires_delta=datetime.timedelta(seconds=self.ttl_seconds),
            now=now,
        )
        await self.redis.set(TOKEN_KEY.format(token=token), str(subject_id), ex=self.ttl_seconds)
        logger.info("Issued session token for user %s", subject_id)
        return token

    async def validate(self, token: str) -> str:
        """
        Return the subject id of a live token.

        Raises:
            ExpiredOrRevokedToken: no store entry (logged out or expired)
            InvalidToken: signature/expiry check failed or subject mismatch
        """
        stored_subject = await self.redis.get(TOKEN_KEY.format(token=token))
        if stored_subject is None:
            raise ExpiredOrRevokedToken()

        try:
            subject = extract_subject(token)
        except JWTError as exc:
            logger.info("Rejected session token: %s", exc)
            raise InvalidToken() from exc

        if subject != str(stored_subject):
            logger.warning(
                "Session token subject mismatch: signed=%s stored=%s", subject, stored_subject
            )
            raise InvalidToken()
        return subject

    async def revoke(self, token: str) -> bool:
        removed = await self.redis.delete(TOKEN_KEY.format(token=token))
        logger.info("Revoked session token (removed=%s)", bool(removed))
        return bool(removed)


__all__ = ["TOKEN_KEY", "TOKEN_TTL_SECONDS", "TokenRedisService"]
