"""
Role-permission registry.

Static population data: each Role maps to an explicitly enumerated, ordered set
of permissions plus a description. Privilege nesting between roles is encoded
by hand here and is not computed; keep the lists consistent when editing them.
"""
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, ValidationError

from skillharbor.features.permissions.catalog import Permission, Role, BASELINE_PERMISSION
from skillharbor.features.permissions.errors import ConfigurationError
from skillharbor.utils import get_logger


log = get_logger(__name__)


class RoleDefinition(BaseModel):
    """A role's granted permissions and human-readable description."""
    model_config = ConfigDict(frozen=True)

    role: Role
    description: str
    permissions: tuple[Permission, ...]


_ROLE_TABLE: list[tuple[Role, str, list[str]]] = [
    (
        Role.ADMIN,
        "Full system access and administration",
        [
            "view_own_profile", "edit_own_skills", "view_own_assessments",
            "view_team_profiles", "view_department_profiles", "conduct_assessments",
            "view_all_employees", "edit_employee_profiles", "manage_job_profiles",
            "view_organization_dashboard", "manage_users", "manage_permissions",
            "system_configuration", "view_audit_logs",
        ],
    ),
    (
        Role.HR_MANAGER,
        "Human resources management and oversight",
        [
            "view_own_profile", "edit_own_skills", "view_own_assessments",
            "view_all_employees", "edit_employee_profiles", "conduct_assessments",
            "manage_job_profiles", "view_organization_dashboard",
        ],
    ),
    (
        Role.DEPARTMENT_MANAGER,
        "Department-level management and oversight",
        [
            "view_own_profile", "edit_own_skills", "view_own_assessments",
            "view_department_profiles", "conduct_assessments", "view_organization_dashboard",
        ],
    ),
    (
        Role.TEAM_LEAD,
        "Team leadership and skill development",
        [
            "view_own_profile", "edit_own_skills", "view_own_assessments",
            "view_team_profiles", "conduct_assessments",
        ],
    ),
    (
        Role.ASSESSOR,
        "Skill assessment and evaluation",
        [
            "view_own_profile", "edit_own_skills", "view_own_assessments",
            "conduct_assessments", "view_team_profiles",
        ],
    ),
    (
        Role.EMPLOYEE,
        "Basic employee access to personal information",
        [
            "view_own_profile", "edit_own_skills", "view_own_assessments",
        ],
    ),
]


def build_registry(table: list[tuple[Role, str, list[str]]]) -> Mapping[Role, RoleDefinition]:
    """
    Build and validate a read-only registry from raw table rows.

    Raises:
        ConfigurationError: unknown role or permission token, duplicate role,
            a role without an entry, or an entry granting nothing.
    """
    registry: dict[Role, RoleDefinition] = {}
    for role, description, tokens in table:
        try:
            definition = RoleDefinition(role=role, description=description, permissions=tuple(tokens))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid registry entry for role {role!r}: {e}") from e
        if definition.role in registry:
            raise ConfigurationError(f"Duplicate registry entry for role {definition.role.value}")
        if len(set(definition.permissions)) != len(definition.permissions):
            raise ConfigurationError(f"Duplicate permission in registry entry for {definition.role.value}")
        registry[definition.role] = definition

    validate_registry(registry)
    return MappingProxyType(registry)


def validate_registry(registry: Mapping[Role, RoleDefinition]) -> None:
    """Fail fast if any Role lacks a usable entry."""
    missing = [role.value for role in Role if role not in registry]
    if missing:
        raise ConfigurationError(f"Roles without a registry entry: {', '.join(missing)}")

    for role, definition in registry.items():
        if not definition.permissions:
            raise ConfigurationError(f"Role {role.value} grants no permissions")
        if BASELINE_PERMISSION not in definition.permissions:
            raise ConfigurationError(
                f"Role {role.value} does not grant {BASELINE_PERMISSION.value}"
            )


ROLE_REGISTRY: Mapping[Role, RoleDefinition] = build_registry(_ROLE_TABLE)


def lookup(role: Role | str, registry: Mapping[Role, RoleDefinition] = ROLE_REGISTRY) -> RoleDefinition | None:
    """Return the registry entry for a role, or None if it has none."""
    try:
        return registry.get(Role(role))
    except ValueError:
        return None


def resolve_permissions(
    role: Role | str,
    registry: Mapping[Role, RoleDefinition] = ROLE_REGISTRY,
) -> tuple[Permission, ...]:
    """
    Resolve a role to a copy of its granted permissions.

    Unregistered roles resolve to no permissions.
    """
    definition = lookup(role, registry)
    if definition is None:
        log.warning(f"No registry entry for role {role!r}; resolving to no permissions")
        return ()
    return tuple(definition.permissions)
