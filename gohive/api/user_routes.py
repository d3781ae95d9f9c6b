"""
Account routes of the user service: registration, login, logout and
profile lookup.
"""

from fastapi import APIRouter, Depends

from gohive.deps import get_user_service
from gohive.errors import ValidationError
from gohive.jwt_auth import AuthenticatedUser, require_jwt_token
from gohive.schemas.auth import (
    EmailRegisterRequest,
    LoginRequest,
    LogoutResponse,
    OAuthRegisterRequest,
    ProfileResponse,
    TokenResponse,
)
from gohive.services.user_service import UserService

router = APIRouter(tags=["users"])


@router.post("/register/email", response_model=TokenResponse)
async def register_email(
    payload: EmailRegisterRequest,
    service: UserService = Depends(get_user_service),
) -> TokenResponse:
    return await service.register_email(payload)


@router.post("/register/oauth/google", response_model=TokenResponse)
async def register_oauth_google(
    payload: OAuthRegisterRequest,
    service: UserService = Depends(get_user_service),
) -> TokenResponse:
    """
    Exchange a backend OAuth session token for a gateway session token.
    """
    if not payload.supabase_token:
        raise ValidationError("Missing Supabase token")
    return await service.register_oauth(payload.supabase_token)


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    service: UserService = Depends(get_user_service),
) -> TokenResponse:
    return await service.login(payload)


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    current_user: AuthenticatedUser = Depends(require_jwt_token),
    service: UserService = Depends(get_user_service),
) -> LogoutResponse:
    await service.logout(current_user.token)
    return LogoutResponse()


@router.get("/users/{user_id}", response_model=ProfileResponse)
async def get_user_profile(
    user_id: str,
    current_user: AuthenticatedUser = Depends(require_jwt_token),
    service: UserService = Depends(get_user_service),
) -> ProfileResponse:
    return await service.get_profile(user_id)


__all__ = ["router"]
