from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, model_validator


class RegisterRequest(BaseModel):
    email: EmailStr
    full_name: str = Field(..., min_length=2, max_length=120)
    password: str = Field(..., min_length=8)
    confirm_password: str = Field(..., min_length=8)

    @model_validator(mode="after")
    def validate_passwords(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("password and confirm_password do not match")
        if not self.full_name.strip():
            raise ValueError("full_name must not be blank")
        return self


class RegisterResponse(BaseModel):
    success: bool
    message: str
    user_id: UUID


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class MagicLinkRequest(BaseModel):
    email: EmailStr


class InviteLoginRequest(BaseModel):
    code: str = Field(..., min_length=1)


class MagicLinkVerifyRequest(BaseModel):
    token: str


class MagicLinkSentResponse(BaseModel):
    sent: bool = True
    email: EmailStr
    invite_code: Optional[str] = None


class AccountStatusInfo(BaseModel):
    is_admin: bool
    approval_status: str
    has_profile_setup: bool
    next_route: str


class UserInfo(BaseModel):
    id: UUID
    email: EmailStr
    full_name: Optional[str] = None


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserInfo
    status: AccountStatusInfo
    issued_at: datetime


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class CurrentUser(BaseModel):
    """Lightweight representation of the authenticated account."""

    id: UUID
    email: str
