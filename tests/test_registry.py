import pytest

from skillharbor.features.permissions.catalog import (
    BASELINE_PERMISSION,
    Permission,
    Role,
    parse_permission,
    parse_role,
)
from skillharbor.features.permissions.errors import ConfigurationError
from skillharbor.features.permissions.registry import (
    ROLE_REGISTRY,
    _ROLE_TABLE,
    build_registry,
    lookup,
    resolve_permissions,
)


def test_catalog_is_closed():
    assert len(Permission) == 14
    assert len(Role) == 6
    assert parse_permission("manage_users") is Permission.MANAGE_USERS
    assert parse_permission("delete_everything") is None
    assert parse_role("team_lead") is Role.TEAM_LEAD
    assert parse_role("superuser") is None


def test_every_role_is_registered_with_baseline():
    assert set(ROLE_REGISTRY) == set(Role)
    for definition in ROLE_REGISTRY.values():
        assert definition.description
        assert BASELINE_PERMISSION in definition.permissions


def test_admin_holds_the_whole_catalog():
    assert set(resolve_permissions(Role.ADMIN)) == set(Permission)


def test_employee_permissions_in_declared_order():
    assert resolve_permissions(Role.EMPLOYEE) == (
        Permission.VIEW_OWN_PROFILE,
        Permission.EDIT_OWN_SKILLS,
        Permission.VIEW_OWN_ASSESSMENTS,
    )


def test_team_lead_and_assessor():
    lead = resolve_permissions(Role.TEAM_LEAD)
    assert Permission.VIEW_TEAM_PROFILES in lead
    assert Permission.CONDUCT_ASSESSMENTS in lead
    assert Permission.MANAGE_USERS not in lead

    assessor = resolve_permissions("assessor")
    assert Permission.CONDUCT_ASSESSMENTS in assessor
    assert Permission.VIEW_ALL_EMPLOYEES not in assessor


def test_lookup_accepts_names_and_rejects_unknowns():
    assert lookup("hr_manager").role is Role.HR_MANAGER
    assert lookup("superuser") is None


def test_unregistered_role_resolves_to_nothing():
    registry = {role: definition for role, definition in ROLE_REGISTRY.items() if role is not Role.ASSESSOR}
    assert resolve_permissions(Role.ASSESSOR, registry) == ()
    assert resolve_permissions("superuser") == ()


def test_resolve_returns_a_copy():
    first = resolve_permissions(Role.EMPLOYEE)
    assert first == ROLE_REGISTRY[Role.EMPLOYEE].permissions
    assert isinstance(first, tuple)


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        ROLE_REGISTRY[Role.EMPLOYEE] = ROLE_REGISTRY[Role.ADMIN]


def test_build_rejects_unknown_permission():
    table = [row if row[0] is not Role.EMPLOYEE else (Role.EMPLOYEE, "x", ["view_own_profile", "fly"])
             for row in _ROLE_TABLE]
    with pytest.raises(ConfigurationError):
        build_registry(table)


def test_build_rejects_missing_role():
    table = [row for row in _ROLE_TABLE if row[0] is not Role.ASSESSOR]
    with pytest.raises(ConfigurationError, match="assessor"):
        build_registry(table)


def test_build_rejects_duplicate_role():
    with pytest.raises(ConfigurationError, match="Duplicate"):
        build_registry(_ROLE_TABLE + [_ROLE_TABLE[0]])


def test_build_rejects_role_without_baseline():
    table = [row if row[0] is not Role.EMPLOYEE else (Role.EMPLOYEE, "x", ["edit_own_skills"])
             for row in _ROLE_TABLE]
    with pytest.raises(ConfigurationError, match="view_own_profile"):
        build_registry(table)
