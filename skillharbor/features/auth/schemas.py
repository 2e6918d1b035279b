"""
Pydantic schemas for login and session responses.
"""
from datetime import datetime
from pydantic import BaseModel, Field

from skillharbor.features.auth.principal import Principal


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=1024)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    principal: Principal


class LogoutResponse(BaseModel):
    message: str
