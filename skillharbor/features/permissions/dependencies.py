"""
Authorization dependencies for route protection, plus audit logging helpers.

Implements:
- HTTP mapping of guard decisions (401 unauthenticated, 403 denied)
- FastAPI dependencies for permission, any-permission and resource checks
- Audit log writer
"""
from typing import Annotated, Dict, Any, Optional, List
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from skillharbor.features.auth.dependencies import get_optional_principal
from skillharbor.features.auth.principal import Principal
from skillharbor.features.permissions.catalog import Permission
from skillharbor.features.permissions.guard import AccessRequest, AccessDecision, authorize
from skillharbor.features.permissions.models import AuditLog
from skillharbor.utils import get_logger


log = get_logger(__name__)


# ============================================================================
# Decision Enforcement
# ============================================================================

def raise_for_decision(decision: AccessDecision, request: AccessRequest) -> None:
    """
    Turn a denial into an HTTP error.

    Raises:
        HTTPException: 401 AUTH_REQUIRED when there is no principal,
            403 PERMISSION_DENIED for any other denial
    """
    if decision.allowed:
        return

    if decision.reason == "unauthenticated":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Authentication required", "code": "AUTH_REQUIRED"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    detail: Dict[str, Any] = {
        "error": "Permission denied",
        "code": "PERMISSION_DENIED",
        "reason": decision.reason,
    }
    if decision.reason == "resource_denied":
        detail["resource"] = request.resource
        detail["action"] = request.action
    elif request.permissions:
        detail["required"] = [permission.value for permission in request.permissions]
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def enforce(principal: Optional[Principal], request: AccessRequest) -> AccessDecision:
    """
    Authorize a request and raise on denial.

    Used directly by routes that only know the target record after loading it
    (self-access checks):

        enforce(principal, AccessRequest(
            permissions=[Permission.VIEW_ALL_EMPLOYEES],
            allow_self_access=True,
            target_email=user.email,
        ))
    """
    decision = authorize(principal, request)
    if not decision.allowed:
        log.debug(
            f"Access denied ({decision.reason}) for "
            f"{principal.id if principal else 'anonymous'}: {request.model_dump(exclude_none=True)}"
        )
    raise_for_decision(decision, request)
    return decision


# ============================================================================
# FastAPI Dependencies
# ============================================================================

def require_access(
    permissions: Optional[List[Permission]] = None,
    resource: Optional[str] = None,
    action: Optional[str] = None,
):
    """
    FastAPI dependency factory guarding a route with a fixed access request.

    Usage:
        @router.get("/organization")
        async def organization_overview(
            principal: Principal = Depends(require_access(resource="organization", action="view"))
        ):
            ...

    Returns:
        Dependency function that returns the current principal if authorized

    Raises:
        HTTPException: 401 or 403, see raise_for_decision()
    """
    access_request = AccessRequest(permissions=list(permissions or []), resource=resource, action=action)

    async def access_dependency(
        principal: Annotated[Optional[Principal], Depends(get_optional_principal)]
    ) -> Principal:
        enforce(principal, access_request)
        return principal

    return access_dependency


def require_permission(permission: Permission):
    """
    FastAPI dependency to require a specific permission.

    Usage:
        @router.get("/audit-logs")
        async def list_audit_logs(
            principal: Principal = Depends(require_permission(Permission.VIEW_AUDIT_LOGS))
        ):
            ...
    """
    return require_access(permissions=[permission])


def require_any_permission(permissions: List[Permission]):
    """
    FastAPI dependency to require ANY of the specified permissions.

    The list must not be empty; an empty requirement can never be satisfied.
    """
    if not permissions:
        raise ValueError("require_any_permission needs at least one permission")
    return require_access(permissions=permissions)


# ============================================================================
# Audit Logging
# ============================================================================

async def create_audit_log(
    db: AsyncSession,
    user_id: Optional[str],
    action: str,
    resource_type: str,
    resource_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> AuditLog:
    """
    Create an audit log entry.

    Args:
        db: Database session
        user_id: User performing the action
        action: Action performed (e.g., "login", "login_failed", "deactivate")
        resource_type: Type of resource (e.g., "session", "user")
        resource_id: ID of the resource
        details: Additional details
        request: Incoming request, for client IP and user agent

    Returns:
        Created AuditLog object
    """
    audit_log = AuditLog(
        user_id=user_id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        details=details,
        ip_address=request.client.host if request is not None and request.client else None,
        user_agent=request.headers.get("user-agent") if request is not None else None,
    )

    db.add(audit_log)
    await db.commit()
    await db.refresh(audit_log)

    log.info(f"Audit: user={user_id} action={action} resource={resource_type}:{resource_id}")

    return audit_log
