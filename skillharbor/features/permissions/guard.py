"""
Resource guard: combines the engine's checks into one allow/deny decision.

Precedence when several criteria are supplied:

1. resource + action: evaluated first; a denial ends evaluation, so neither
   the self-access override nor the permission list can rescue it.
2. permission list: the self-access override is tried first, then the list.
3. no criteria at all: open, any authenticated principal passes.
"""
from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, Field

from skillharbor.features.auth.principal import Principal
from skillharbor.features.permissions.catalog import Permission, BASELINE_PERMISSION
from skillharbor.features.permissions.engine import (
    can_access_resource,
    has_any_permission,
    has_permission,
    is_self,
)
from skillharbor.utils import get_logger


log = get_logger(__name__)

# Actions the self-access override may grant. Writes always need the real permission.
READ_ACTIONS = frozenset({"view", "read", "list"})


class AccessRequest(BaseModel):
    """What a call site requires before it proceeds."""
    permissions: List[Permission] = Field(default_factory=list, description="Any one of these suffices")
    resource: Optional[str] = Field(None, description="Named resource (e.g., 'employees')")
    action: Optional[str] = Field(None, description="Action on the resource (e.g., 'view')")
    allow_self_access: bool = Field(False, description="Grant read access to the principal's own record")
    target_email: Optional[str] = Field(None, description="Email of the record being accessed")


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of a guard evaluation; truthy iff access is allowed."""
    allowed: bool
    reason: str

    def __bool__(self) -> bool:
        return self.allowed


UNAUTHENTICATED = AccessDecision(False, "unauthenticated")
RESOURCE_DENIED = AccessDecision(False, "resource_denied")
PERMISSION_DENIED = AccessDecision(False, "permission_denied")
PERMISSION_GRANTED = AccessDecision(True, "permission_granted")
SELF_ACCESS = AccessDecision(True, "self_access")
OPEN = AccessDecision(True, "open")


def self_access_applies(principal: Optional[Principal], request: AccessRequest) -> bool:
    """
    The self-access override applies when it is enabled, the action is a read,
    the target record is the principal's own, and the principal holds the
    baseline view-own-profile permission.
    """
    if not request.allow_self_access:
        return False
    if request.action is not None and request.action not in READ_ACTIONS:
        return False
    if not is_self(principal, request.target_email):
        return False
    return has_permission(principal, BASELINE_PERMISSION)


def authorize(principal: Optional[Principal], request: AccessRequest) -> AccessDecision:
    """Evaluate an access request for a principal."""
    if principal is None:
        return UNAUTHENTICATED

    if request.resource and request.action:
        if not can_access_resource(principal, request.resource, request.action):
            return RESOURCE_DENIED
        if not request.permissions:
            return PERMISSION_GRANTED

    if request.permissions:
        if self_access_applies(principal, request):
            log.debug(f"Principal {principal.id} granted self-access to {request.target_email}")
            return SELF_ACCESS
        if not has_any_permission(principal, request.permissions):
            return PERMISSION_DENIED
        return PERMISSION_GRANTED

    return OPEN
