"""
Pydantic schemas for user-related requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator

from skillharbor.features.permissions.catalog import Role


class UserBase(BaseModel):
    """Base user schema with common fields."""
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)
    department: str = Field("", max_length=255)


class UserCreate(UserBase):
    """Schema for creating a new user."""
    password: str = Field(..., min_length=8, max_length=1024)
    role: Role = Role.EMPLOYEE

    @field_validator("email")
    @classmethod
    def email_lowercase(cls, v: str) -> str:
        """Store emails lower-cased so lookups are case-insensitive."""
        return v.lower()


class UserUpdate(BaseModel):
    """Schema for updating profile fields."""
    name: str | None = Field(None, min_length=1, max_length=255)
    department: str | None = Field(None, max_length=255)


class UserRoleUpdate(BaseModel):
    """Schema for changing a user's role."""
    role: Role


class UserResponse(BaseModel):
    """Schema for user responses."""
    id: str
    email: str
    name: str
    role: str
    department: str
    is_active: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserListResponse(BaseModel):
    """Paginated user list."""
    items: list[UserResponse]
    total: int
