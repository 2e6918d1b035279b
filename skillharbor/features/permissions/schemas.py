"""
Pydantic schemas for the permissions API.
"""
from datetime import datetime
from typing import Dict, Any, List, Optional
from pydantic import BaseModel, ConfigDict

from skillharbor.features.permissions.catalog import Permission, Role


class PermissionInfo(BaseModel):
    """A catalog entry."""
    name: str
    value: Permission


class RoleResponse(BaseModel):
    """A registry entry."""
    role: Role
    description: str
    permissions: List[Permission]


class ResourceRuleResponse(BaseModel):
    """Permissions any one of which grants a resource."""
    resource: str
    view: List[Permission] = []
    edit: List[Permission] = []


class PrincipalPermissionsResponse(BaseModel):
    """The caller's role and the permissions resolved at login."""
    user_id: str
    role: Role
    permissions: List[Permission]
    resources: List[str] = []


class AccessCheckResponse(BaseModel):
    """Outcome of evaluating an access request for the caller."""
    allowed: bool
    reason: str


class AuditLogResponse(BaseModel):
    """Schema for audit log response."""
    id: str
    user_id: Optional[str]
    action: str
    resource_type: str
    resource_id: Optional[str]
    details: Optional[Dict[str, Any]]
    ip_address: Optional[str]
    user_agent: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuditLogListResponse(BaseModel):
    """Schema for paginated audit log list."""
    items: List[AuditLogResponse]
    total: int
    page: int
    page_size: int
    pages: int
