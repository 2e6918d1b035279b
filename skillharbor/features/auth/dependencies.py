"""
FastAPI dependencies resolving the current Principal from a bearer token.
"""
from typing import Annotated, Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from skillharbor.core.database.engine import get_db
from skillharbor.features.auth.exceptions import SessionCorruption
from skillharbor.features.auth.models import RevokedToken
from skillharbor.features.auth.principal import Principal
from skillharbor.features.auth.tokens import decode_access_token, unauthorized
from skillharbor.features.users.models import User
from skillharbor.utils import get_logger


log = get_logger(__name__)
security = HTTPBearer(auto_error=False)


async def get_optional_principal(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> Optional[Principal]:
    """
    Resolve the Principal for this request, or None when no token was sent.

    The token's embedded Principal is used as-is (permissions as resolved at
    login), but the user must still exist and be active.

    Raises:
        HTTPException: 401 on an invalid, expired, revoked or malformed token,
            or when the user is gone or deactivated
    """
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)

    revoked = await db.get(RevokedToken, payload["jti"])
    if revoked is not None:
        raise unauthorized("Token revoked", "TOKEN_REVOKED")

    try:
        principal = Principal.from_claims(payload.get("principal"))
    except SessionCorruption as e:
        log.warning(f"Rejecting token with malformed principal: {e}")
        raise unauthorized("Invalid token", "TOKEN_INVALID")

    if principal.id != payload["sub"]:
        raise unauthorized("Invalid token", "TOKEN_INVALID")

    result = await db.execute(
        select(User.is_active).where(User.id == principal.id)
    )
    is_active = result.scalar_one_or_none()
    if not is_active:
        raise unauthorized("User not found or inactive", "USER_INACTIVE")

    request.state.token_payload = payload
    return principal


async def get_current_principal(
    principal: Annotated[Optional[Principal], Depends(get_optional_principal)]
) -> Principal:
    """
    Require an authenticated Principal.

    Usage:
        @router.get("/me")
        async def me(principal: Principal = Depends(get_current_principal)):
            return principal
    """
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Access token required", "code": "TOKEN_REQUIRED"},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal
