"""
Authentication routes: login, logout, current principal.
"""
from datetime import datetime, timezone
from typing import Annotated
from fastapi import APIRouter, Depends, Request
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from skillharbor.core import config
from skillharbor.core.database.engine import get_db
from skillharbor.core.rate_limit import limiter
from skillharbor.features.auth.dependencies import get_current_principal
from skillharbor.features.auth.exceptions import AuthenticationFailure
from skillharbor.features.auth.models import RevokedToken
from skillharbor.features.auth.principal import Principal
from skillharbor.features.auth.schemas import LoginRequest, LoginResponse, LogoutResponse
from skillharbor.features.auth.session import authenticate_user
from skillharbor.features.auth.tokens import create_access_token
from skillharbor.features.permissions.dependencies import create_audit_log
from skillharbor.features.users.store import SqlUserStore
from skillharbor.utils import get_logger


log = get_logger(__name__)
router = APIRouter(tags=["auth"])


@router.post("/login", response_model=LoginResponse)
@limiter.limit(config.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """
    Log in with email and password.

    Every failure answers with the same 401 INVALID_CREDENTIALS; the real
    cause only goes to the log and the audit trail.
    """
    store = SqlUserStore(db)
    try:
        principal = await authenticate_user(store, body.email, body.password)
    except AuthenticationFailure as e:
        record = await store.get_by_email(body.email) if e.reason != "unknown_email" else None
        await create_audit_log(
            db,
            user_id=record.id if record is not None else None,
            action="login_failed",
            resource_type="session",
            details={"email": body.email, "reason": e.reason},
            request=request,
        )
        raise

    token, jti, expires_at = create_access_token(principal)
    await create_audit_log(
        db,
        user_id=principal.id,
        action="login",
        resource_type="session",
        resource_id=jti,
        details={"role": principal.role.value},
        request=request,
    )
    return LoginResponse(access_token=token, expires_at=expires_at, principal=principal)


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    request: Request,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """
    End the session by revoking the presented access token.

    Revocations of tokens that have since expired are purged here; an expired
    token is rejected on its own, so those rows no longer matter.
    """
    payload = request.state.token_payload
    expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
    await db.execute(
        delete(RevokedToken).where(RevokedToken.expires_at < datetime.now(timezone.utc))
    )
    db.add(RevokedToken(jti=payload["jti"], user_id=principal.id, expires_at=expires_at))
    await db.commit()

    await create_audit_log(
        db,
        user_id=principal.id,
        action="logout",
        resource_type="session",
        resource_id=payload["jti"],
        request=request,
    )
    return LogoutResponse(message="Logout successful")


@router.get("/me", response_model=Principal)
async def get_me(
    principal: Annotated[Principal, Depends(get_current_principal)]
):
    """Get the principal attached to the current access token."""
    return principal
