"""
Signing and decoding of session tokens.
"""

import datetime
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from gohive.settings import settings

JWT_ALGORITHM = settings.jwt_algorithm
JWT_ACCESS_TOKEN_EXPIRE_MINUTES = settings.jwt_expire_minutes


def create_access_token(
    subject_id: str,
    *,
    expires_delta: Optional[datetime.timedelta] = None,
    now: Optional[datetime.datetime] = None,
) -> str:
    """
    Create a signed token carrying the subject id.

    Args:
        subject_id: user id embedded as the `sub` claim
        expires_delta: custom lifetime, defaults to JWT_ACCESS_TOKEN_EXPIRE_MINUTES
        now: issuance time, defaults to the current UTC time

    Returns:
        Encoded JWT
    """
    issued_at = now or datetime.datetime.now(datetime.timezone.utc)
    lifetime = expires_delta or datetime.timedelta(minutes=JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode: Dict[str, Any] = {
        "sub": str(subject_id),
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Raises:
        JWTError: if the token is malformed, tampered with or expired
    """
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[JWT_ALGORITHM])


def extract_subject(token: str) -> str:
    payload = decode_token(token)
    subject = payload.get("sub")
    if not subject:
        raise JWTError("Token has no subject")
    return str(subject)


__all__ = [
    "JWT_ACCESS_TOKEN_EXPIRE_MINUTES",
    "JWT_ALGORITHM",
    "create_access_token",
    "decode_token",
    "extract_subject",
]
