"""
Authorization engine.

Pure decision functions over a Principal and the static rule tables. Every
check is total: it returns a bool, never raises, and treats a missing
principal, an unknown resource, or an unknown token as a denial.
"""
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional

from skillharbor.features.auth.principal import Principal
from skillharbor.features.permissions.catalog import Permission
from skillharbor.features.permissions.errors import ConfigurationError
from skillharbor.utils import get_logger


log = get_logger(__name__)


# ============================================================================
# Resource Rules
# ============================================================================

_VIEW_RULES: dict[str, list[str]] = {
    # All authenticated users can access their dashboard
    "dashboard": ["view_own_profile"],
    "skills": ["view_own_profile"],
    # Own assessments, or conducting assessments for others
    "assessments": ["view_own_assessments", "conduct_assessments"],
    # Employees browse job profiles for career planning, managers maintain them
    "job-profiles": ["view_own_profile", "manage_job_profiles"],
    "learning-paths": ["view_own_profile"],
    "organization": [
        "view_organization_dashboard",
        "view_all_employees",
        "view_team_profiles",
        "view_department_profiles",
    ],
    "employees": ["view_all_employees", "view_team_profiles", "view_department_profiles"],
}

_EDIT_RULES: dict[str, list[str]] = {
    # Own skills, or managers editing others
    "skills": ["edit_own_skills", "edit_employee_profiles"],
    # Self-assessment, or assessors assessing others
    "assessments": ["view_own_assessments", "conduct_assessments"],
    "profile": ["view_own_profile", "edit_employee_profiles"],
}


def build_rules(table: dict[str, list[str]]) -> Mapping[str, tuple[Permission, ...]]:
    """
    Validate a resource rule table and freeze it.

    Raises:
        ConfigurationError: empty resource name, empty requirement list, or a
            token outside the permission catalog.
    """
    rules: dict[str, tuple[Permission, ...]] = {}
    for resource, tokens in table.items():
        if not resource:
            raise ConfigurationError("Resource rule with an empty resource name")
        if not tokens:
            raise ConfigurationError(f"Resource rule for {resource!r} requires no permissions")
        try:
            rules[resource] = tuple(Permission(token) for token in tokens)
        except ValueError as e:
            raise ConfigurationError(f"Resource rule for {resource!r} references {e}") from e
    return MappingProxyType(rules)


RESOURCE_RULES: Mapping[str, tuple[Permission, ...]] = build_rules(_VIEW_RULES)
EDIT_RULES: Mapping[str, tuple[Permission, ...]] = build_rules(_EDIT_RULES)


# ============================================================================
# Permission Checks
# ============================================================================

def has_permission(principal: Optional[Principal], permission: Permission) -> bool:
    """True iff the principal exists and holds the permission."""
    if principal is None:
        return False
    return permission in principal.permissions


def has_any_permission(principal: Optional[Principal], permissions: Iterable[Permission]) -> bool:
    """
    True iff the principal holds at least one of the permissions.

    An empty requirement list is never satisfied.
    """
    if principal is None:
        return False
    return any(permission in principal.permissions for permission in permissions)


def required_permissions(resource: str) -> tuple[Permission, ...]:
    """Permissions any one of which grants the default action on a resource."""
    return RESOURCE_RULES.get(resource, ())


def can_access_resource(
    principal: Optional[Principal],
    resource: str,
    action: str = "view",
    context: Optional[Dict[str, Any]] = None,
) -> bool:
    """
    Check whether the principal may access a named resource.

    Args:
        principal: Current principal, or None when unauthenticated
        resource: Resource name (e.g., "employees", "organization")
        action: Requested action. Rules are keyed by resource alone, so every
            action on a resource currently shares one requirement list
        context: Caller context, reserved for conditional rules

    Returns:
        True if access is granted; unknown resources are denied
    """
    if principal is None:
        return False

    required = required_permissions(resource)
    if not required:
        log.debug(f"No access rule for resource {resource!r}; denying {principal.id}")
        return False

    granted = has_any_permission(principal, required)
    if not granted:
        log.debug(f"Principal {principal.id} denied {action} on {resource}")
    return granted


def can_edit_resource(
    principal: Optional[Principal],
    resource: str,
    context: Optional[Dict[str, Any]] = None,
) -> bool:
    """Check whether the principal may edit a named resource; unknown resources deny."""
    if principal is None:
        return False
    return has_any_permission(principal, EDIT_RULES.get(resource, ()))


def is_self(principal: Optional[Principal], target_email: Optional[str]) -> bool:
    """True when the principal is the same person as the target record (matched by email)."""
    if principal is None or not target_email:
        return False
    return principal.email.strip().casefold() == target_email.strip().casefold()
