"""
Permission catalog and role enumeration.

Both sets are closed: a token that is not a member of Permission is not a
permission, and is rejected wherever it shows up (registry, rule tables,
restored sessions, API payloads).
"""
import enum


class Permission(str, enum.Enum):
    # Employee permissions
    VIEW_OWN_PROFILE = "view_own_profile"
    EDIT_OWN_SKILLS = "edit_own_skills"
    VIEW_OWN_ASSESSMENTS = "view_own_assessments"

    # Team/Department permissions
    VIEW_TEAM_PROFILES = "view_team_profiles"
    VIEW_DEPARTMENT_PROFILES = "view_department_profiles"
    CONDUCT_ASSESSMENTS = "conduct_assessments"

    # Management permissions
    VIEW_ALL_EMPLOYEES = "view_all_employees"
    EDIT_EMPLOYEE_PROFILES = "edit_employee_profiles"
    MANAGE_JOB_PROFILES = "manage_job_profiles"
    VIEW_ORGANIZATION_DASHBOARD = "view_organization_dashboard"

    # Admin permissions
    MANAGE_USERS = "manage_users"
    MANAGE_PERMISSIONS = "manage_permissions"
    SYSTEM_CONFIGURATION = "system_configuration"
    VIEW_AUDIT_LOGS = "view_audit_logs"


class Role(str, enum.Enum):
    ADMIN = "admin"
    HR_MANAGER = "hr_manager"
    DEPARTMENT_MANAGER = "department_manager"
    TEAM_LEAD = "team_lead"
    ASSESSOR = "assessor"
    EMPLOYEE = "employee"


# Baseline permission every role carries; gates the self-access override
BASELINE_PERMISSION = Permission.VIEW_OWN_PROFILE


def parse_permission(value: str) -> Permission | None:
    """Map a raw token to a catalog Permission, or None if it is not one."""
    try:
        return Permission(value)
    except ValueError:
        return None


def parse_role(value: str) -> Role | None:
    """Map a raw role name to a Role, or None if it is not one."""
    try:
        return Role(value)
    except ValueError:
        return None
