"""
User administration routes.
"""
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from skillharbor.core.database.engine import get_db
from skillharbor.features.auth.dependencies import get_current_principal
from skillharbor.features.auth.principal import Principal
from skillharbor.features.permissions.catalog import Permission, Role
from skillharbor.features.permissions.dependencies import create_audit_log, enforce, require_permission
from skillharbor.features.permissions.engine import can_edit_resource, is_self
from skillharbor.features.permissions.guard import AccessRequest
from skillharbor.features.users.dependencies import get_user_by_id
from skillharbor.features.users.models import User
from skillharbor.features.users.passwords import hash_password
from skillharbor.features.users.schemas import (
    UserCreate,
    UserUpdate,
    UserRoleUpdate,
    UserResponse,
    UserListResponse,
)


router = APIRouter(tags=["users"])

# Any of these lets a principal look at someone else's profile
PROFILE_VIEW_PERMISSIONS = [
    Permission.VIEW_ALL_EMPLOYEES,
    Permission.VIEW_DEPARTMENT_PROFILES,
    Permission.VIEW_TEAM_PROFILES,
]


@router.get("/", response_model=UserListResponse)
async def list_users(
    principal: Annotated[Principal, Depends(require_permission(Permission.MANAGE_USERS))],
    db: Annotated[AsyncSession, Depends(get_db)],
    role: Optional[Role] = None,
    department: Optional[str] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 50
):
    """List users (requires manage_users)."""
    stmt = select(User)
    if role is not None:
        stmt = stmt.where(User.role == role.value)
    if department:
        stmt = stmt.where(User.department == department)
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(User.name.ilike(pattern), User.email.ilike(pattern)))

    total_result = await db.execute(select(func.count()).select_from(stmt.subquery()))
    total = total_result.scalar() or 0

    result = await db.execute(stmt.order_by(User.name).offset(skip).limit(limit))
    return UserListResponse(
        items=[UserResponse.model_validate(user) for user in result.scalars().all()],
        total=total
    )


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    request: Request,
    principal: Annotated[Principal, Depends(require_permission(Permission.MANAGE_USERS))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Create a user account (requires manage_users)."""
    user = User(
        email=user_data.email,
        name=user_data.name,
        department=user_data.department,
        role=user_data.role.value,
        password_hash=hash_password(user_data.password),
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "User already exists", "code": "USER_EXISTS"}
        )
    await db.refresh(user)

    await create_audit_log(
        db,
        user_id=principal.id,
        action="create",
        resource_type="user",
        resource_id=user.id,
        details={"email": user.email, "role": user.role},
        request=request,
    )
    return user


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    principal: Annotated[Principal, Depends(get_current_principal)],
    user: Annotated[User, Depends(get_user_by_id)]
):
    """Get a user's profile. Users can always read their own."""
    enforce(principal, AccessRequest(
        permissions=PROFILE_VIEW_PERMISSIONS,
        action="view",
        allow_self_access=True,
        target_email=user.email,
    ))
    return user


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    update_data: UserUpdate,
    principal: Annotated[Principal, Depends(get_current_principal)],
    user: Annotated[User, Depends(get_user_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """
    Update profile fields.

    Users may rename themselves; changing a department, or editing anyone
    else, requires edit_employee_profiles.
    """
    own_rename = is_self(principal, user.email) and update_data.department is None
    if not (own_rename and can_edit_resource(principal, "profile")):
        enforce(principal, AccessRequest(permissions=[Permission.EDIT_EMPLOYEE_PROFILES]))

    if update_data.name is not None:
        user.name = update_data.name
    if update_data.department is not None:
        user.department = update_data.department

    await db.commit()
    await db.refresh(user)
    return user


@router.patch("/{user_id}/role", response_model=UserResponse)
async def change_user_role(
    role_update: UserRoleUpdate,
    request: Request,
    principal: Annotated[Principal, Depends(require_permission(Permission.MANAGE_PERMISSIONS))],
    user: Annotated[User, Depends(get_user_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """
    Change a user's role (requires manage_permissions).

    Takes effect at the user's next login; tokens already issued keep the
    permissions resolved when they were created.
    """
    if user.id == principal.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Cannot modify your own role", "code": "SELF_MODIFICATION"}
        )

    previous = user.role
    user.role = role_update.role.value
    await db.commit()
    await db.refresh(user)

    await create_audit_log(
        db,
        user_id=principal.id,
        action="role_change",
        resource_type="user",
        resource_id=user.id,
        details={"from": previous, "to": user.role},
        request=request,
    )
    return user


@router.delete("/{user_id}")
async def deactivate_user(
    request: Request,
    principal: Annotated[Principal, Depends(require_permission(Permission.MANAGE_USERS))],
    user: Annotated[User, Depends(get_user_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Deactivate a user account (requires manage_users)."""
    if user.id == principal.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Cannot deactivate your own account", "code": "SELF_MODIFICATION"}
        )

    user.is_active = False
    await db.commit()

    await create_audit_log(
        db,
        user_id=principal.id,
        action="deactivate",
        resource_type="user",
        resource_id=user.id,
        request=request,
    )
    return {"message": "User deactivated successfully"}
