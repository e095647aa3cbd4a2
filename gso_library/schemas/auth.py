from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    username: str
    password: str


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=256)
    email: EmailStr
    password: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class UpdateCredentialsRequest(BaseModel):
    email: Optional[EmailStr] = None
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    new_password: str = Field(..., min_length=1)


class RoleManagementRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    role: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    token: Optional[str] = None
    refresh_token: Optional[str] = None
    user_id: Optional[str] = None
    username: Optional[str] = None
    roles: Optional[list[str]] = None


class RoleManagementResponse(BaseModel):
    success: bool = True
    message: str
    user_id: str
    username: str
    roles: list[str]


class AuditEventOut(BaseModel):
    id: int
    event_type: str
    username: Optional[str] = None
    target_username: Optional[str] = None
    ip_address: Optional[str] = None
    detail: Optional[str] = None
    created_at: datetime
