from typing import Optional

from pydantic import BaseModel, Field


class EmailRegisterRequest(BaseModel):
    """Email/password registration form."""

    name: Optional[str] = None
    surname: Optional[str] = None
    username: Optional[str] = None
    age: Optional[int] = Field(None, ge=0)
    mail: str = Field(..., min_length=3)
    phone: Optional[str] = None
    password: str = Field(..., min_length=1)


class OAuthRegisterRequest(BaseModel):
    supabase_token: Optional[str] = None


class LoginRequest(BaseModel):
    mail: Optional[str] = None
    password: Optional[str] = None


class TokenResponse(BaseModel):
    token: str
    userID: str


class LogoutResponse(BaseModel):
    message: str = "Logged out"


class ProfileResponse(BaseModel):
    id: str
    username: Optional[str] = None
    biography: Optional[str] = None
    numOfFollowers: int = 0
    numOfFollowing: int = 0
    profileImage: Optional[str] = None
