"""
Access tokens (HS256 JWT) carrying the Principal snapshot.
"""
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from fastapi import HTTPException, status
from ulid import ULID

from skillharbor.core import config
from skillharbor.features.auth.principal import Principal


def create_access_token(principal: Principal, expires_minutes: int | None = None) -> tuple[str, str, datetime]:
    """
    Sign an access token for a principal.

    Returns:
        (token, jti, expires_at)
    """
    minutes = config.ACCESS_TOKEN_EXPIRE_MINUTES if expires_minutes is None else expires_minutes
    issued_at = datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(minutes=minutes)
    jti = str(ULID())
    payload = {
        "sub": principal.id,
        "jti": jti,
        "iat": issued_at,
        "exp": expires_at,
        "principal": principal.to_claims(),
    }
    token = jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)
    return token, jti, expires_at


def unauthorized(error: str, code: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "code": code},
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify an access token and return its payload.

    Raises:
        HTTPException: 401 TOKEN_EXPIRED or TOKEN_INVALID
    """
    try:
        payload = jwt.decode(
            token,
            config.JWT_SECRET,
            algorithms=[config.JWT_ALGORITHM],
            options={"require": ["exp", "sub", "jti"]},
        )
    except jwt.ExpiredSignatureError:
        raise unauthorized("Token expired", "TOKEN_EXPIRED")
    except jwt.InvalidTokenError:
        raise unauthorized("Invalid token", "TOKEN_INVALID")

    return payload
