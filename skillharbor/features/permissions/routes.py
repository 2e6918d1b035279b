"""
Permission API routes.

Read-only views of the catalog, registry and resource rules, the caller's
effective permissions, access checks, and the audit trail.
"""
from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from skillharbor.core.database.engine import get_db
from skillharbor.features.auth.dependencies import get_current_principal
from skillharbor.features.auth.principal import Principal
from skillharbor.features.permissions.catalog import Permission
from skillharbor.features.permissions.dependencies import require_permission
from skillharbor.features.permissions.engine import RESOURCE_RULES, EDIT_RULES, can_access_resource
from skillharbor.features.permissions.guard import AccessRequest, authorize
from skillharbor.features.permissions.models import AuditLog
from skillharbor.features.permissions.registry import ROLE_REGISTRY
from skillharbor.features.permissions.schemas import (
    PermissionInfo,
    RoleResponse,
    ResourceRuleResponse,
    PrincipalPermissionsResponse,
    AccessCheckResponse,
    AuditLogResponse,
    AuditLogListResponse,
)
from skillharbor.utils import get_logger


log = get_logger(__name__)
router = APIRouter()


# ============================================================================
# Catalog & Registry
# ============================================================================

@router.get("/catalog", response_model=List[PermissionInfo])
async def list_permission_catalog(
    principal: Annotated[Principal, Depends(get_current_principal)]
):
    """List every permission token."""
    return [PermissionInfo(name=permission.name, value=permission) for permission in Permission]


@router.get("/roles", response_model=List[RoleResponse])
async def list_roles(
    principal: Annotated[Principal, Depends(get_current_principal)]
):
    """List roles with their descriptions and granted permissions."""
    return [
        RoleResponse(role=definition.role, description=definition.description, permissions=list(definition.permissions))
        for definition in ROLE_REGISTRY.values()
    ]


@router.get("/resources", response_model=List[ResourceRuleResponse])
async def list_resource_rules(
    principal: Annotated[Principal, Depends(get_current_principal)]
):
    """List resource rules (view and edit requirements)."""
    resources = sorted(set(RESOURCE_RULES) | set(EDIT_RULES))
    return [
        ResourceRuleResponse(
            resource=resource,
            view=list(RESOURCE_RULES.get(resource, ())),
            edit=list(EDIT_RULES.get(resource, ())),
        )
        for resource in resources
    ]


# ============================================================================
# Caller Access
# ============================================================================

@router.get("/me", response_model=PrincipalPermissionsResponse)
async def get_my_permissions(
    principal: Annotated[Principal, Depends(get_current_principal)]
):
    """Get the caller's permissions and the resources they can open."""
    return PrincipalPermissionsResponse(
        user_id=principal.id,
        role=principal.role,
        permissions=list(principal.permissions),
        resources=[resource for resource in RESOURCE_RULES if can_access_resource(principal, resource)],
    )


@router.post("/check", response_model=AccessCheckResponse)
async def check_access(
    access_request: AccessRequest,
    principal: Annotated[Principal, Depends(get_current_principal)]
):
    """Evaluate an access request for the caller without enforcing it."""
    decision = authorize(principal, access_request)
    return AccessCheckResponse(allowed=decision.allowed, reason=decision.reason)


# ============================================================================
# Audit Logs
# ============================================================================

@router.get("/audit-logs", response_model=AuditLogListResponse)
async def list_audit_logs(
    principal: Annotated[Principal, Depends(require_permission(Permission.VIEW_AUDIT_LOGS))],
    db: Annotated[AsyncSession, Depends(get_db)],
    skip: int = 0,
    limit: int = 50,
    user_id: Optional[str] = None,
    action: Optional[str] = None,
    resource_type: Optional[str] = None,
):
    """List audit logs with optional filtering."""
    stmt = select(AuditLog)

    if user_id:
        stmt = stmt.where(AuditLog.user_id == user_id)
    if action:
        stmt = stmt.where(AuditLog.action == action)
    if resource_type:
        stmt = stmt.where(AuditLog.resource_type == resource_type)

    count_stmt = select(func.count()).select_from(stmt.subquery())
    total_result = await db.execute(count_stmt)
    total = total_result.scalar() or 0

    stmt = stmt.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).offset(skip).limit(limit)
    result = await db.execute(stmt)
    logs = result.scalars().all()

    pages = (total + limit - 1) // limit if limit > 0 else 0
    page = (skip // limit) + 1 if limit > 0 else 1

    return AuditLogListResponse(
        items=[AuditLogResponse.model_validate(entry) for entry in logs],
        total=total,
        page=page,
        page_size=limit,
        pages=pages
    )
