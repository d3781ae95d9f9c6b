"""
Registration, login and profile lookups against the managed backend.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from gohive.errors import AuthError, BackendError, NotFoundError, ValidationError
from gohive.logging_config import logger
from gohive.schemas.auth import (
    EmailRegisterRequest,
    LoginRequest,
    ProfileResponse,
    TokenResponse,
)
from gohive.services.supabase_backend import AuthUser, SupabaseBackend
from gohive.services.token_redis_service import TokenRedisService

USERS_TABLE = "users"
PROFILES_TABLE = "profiles"


def _split_full_name(full_name: Optional[str]) -> tuple[str, str]:
    parts = (full_name or "").split()
    first = parts[0] if parts else "Unknown"
    last = parts[1] if len(parts) > 1 else "Unknown"
    return first, last


class UserService:
    def __init__(self, backend: SupabaseBackend, tokens: TokenRedisService):
        self.backend = backend
        self.tokens = tokens

    async def _issue(self, user_id: str) -> TokenResponse:
        token = await self.tokens.issue(user_id)
        return TokenResponse(token=token, userID=user_id)

    async def register_email(self, request: EmailRegisterRequest) -> TokenResponse:
        """
        Create the auth user and its `users` row. When the row cannot be
        written the auth user is deleted again so no half-registered
        account remains.
        """
        if await self.backend.email_exists(request.mail):
            raise ValidationError("Email already exists")

        if request.username:
            existing = await self.backend.select_one(
                USERS_TABLE, columns="username", filters={"username": request.username}
            )
            if existing:
                raise ValidationError("Username already exists")

        auth_user = await self.backend.create_auth_user(
            request.mail, request.password, phone=request.phone
        )
        row = {
            "id": auth_user.id,
            "name": request.name,
            "surname": request.surname,
            "username": request.username,
            "age": request.age,
        }
        try:
            await self.backend.insert(USERS_TABLE, row)
        except BackendError:
            logger.warning("Rolling back auth user %s after users insert failed", auth_user.id)
            await self.backend.delete_auth_user(auth_user.id)
            raise

        logger.info("Registered user %s by email", auth_user.id)
        return await self._issue(auth_user.id)

    async def register_oauth(self, supabase_token: str) -> TokenResponse:
        """
        Sign in with a backend OAuth session; the `users` row is created on
        the first sign-in from the provider metadata.
        """
        auth_user = await self.backend.get_user_for_token(supabase_token)
        existing = await self.backend.select_one(USERS_TABLE, filters={"id": auth_user.id})
        if existing is None:
            await self.backend.insert(USERS_TABLE, self._oauth_user_row(auth_user))
            logger.info("Created users row for OAuth user %s", auth_user.id)
        return await self._issue(auth_user.id)

    @staticmethod
    def _oauth_user_row(auth_user: AuthUser) -> Dict[str, Any]:
        first, last = _split_full_name(auth_user.metadata.get("full_name"))
        return {
            "id": auth_user.id,
            "name": first,
            "surname": last,
            "username": auth_user.metadata.get("preferred_username"),
            "age": None,
        }

    async def login(self, request: LoginRequest) -> TokenResponse:
        if not request.mail or not request.password:
            raise ValidationError("Missing email or password")
        try:
            auth_user = await self.backend.sign_in_with_password(request.mail, request.password)
        except BackendError as exc:
            raise AuthError(exc.message) from exc
        return await self._issue(auth_user.id)

    async def logout(self, token: str) -> None:
        await self.tokens.revoke(token)

    async def get_profile(self, user_id: str) -> ProfileResponse:
        user = await self.backend.select_one(
            USERS_TABLE, columns="id, username", filters={"id": user_id}
        )
        if user is None:
            raise NotFoundError("User not found")
        profile = await self.backend.select_one(PROFILES_TABLE, filters={"id": user_id})
        if profile is None:
            raise NotFoundError("User not found")
        return ProfileResponse(
            id=str(user["id"]),
            username=user.get("username"),
            biography=profile.get("biography"),
            numOfFollowers=profile.get("numOfFollowers") or 0,
            numOfFollowing=profile.get("numOfFollowing") or 0,
            profileImage=profile.get("profileImage"),
        )


__all__ = ["UserService"]
