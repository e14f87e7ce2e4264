from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.api.profile.schemas import FormModel, StagedDetailResponse, validate_full_name


class AdminDashboardStats(BaseModel):
    total_users: int
    total_alumni: int
    approved: int
    pending: int
    rejected: int
    imported: int
    invites_sent: int
    invites_accepted: int
    upcoming_events: int


class AdminAlumniItem(BaseModel):
    id: UUID
    full_name: Optional[str] = None
    email: Optional[str] = None
    headline: Optional[str] = None
    grad_year: Optional[int] = None
    department: Optional[str] = None
    current_company: Optional[str] = None
    current_title: Optional[str] = None
    location: Optional[str] = None


class AdminAlumniPage(BaseModel):
    items: List[AdminAlumniItem]
    total: int
    page: int
    page_size: int
    total_pages: int


class PendingSubmission(BaseModel):
    user_id: UUID
    full_name: Optional[str] = None
    email: str
    staged: Optional[StagedDetailResponse] = None


class ImportedAlumniItem(BaseModel):
    id: UUID
    batch_id: UUID
    external_id: Optional[str] = None
    full_name: str
    email: str
    grad_year: Optional[int] = None
    department: Optional[str] = None
    company: Optional[str] = None
    role: Optional[str] = None
    invite_status: str
    created_at: datetime

    class Config:
        from_attributes = True


class CreateAlumniRequest(FormModel):
    """Manual entry form; accepts the camelCase keys the admin form posts."""

    full_name: str = Field(..., alias="fullName")
    email: EmailStr
    grad_year: Optional[int] = Field(None, alias="gradYear", ge=1900, le=2100)
    department: Optional[str] = Field(None, max_length=120)
    current_company: Optional[str] = Field(None, alias="currentCompany", max_length=120)
    current_title: Optional[str] = Field(None, alias="currentTitle", max_length=120)

    class Config:
        populate_by_name = True

    @field_validator("full_name", mode="before")
    @classmethod
    def check_full_name(cls, value: Optional[str]) -> str:
        return validate_full_name(value)

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()


class CreateAlumniResponse(BaseModel):
    success: bool
    message: str
    imported_id: UUID = Field(..., alias="importedId")

    class Config:
        populate_by_name = True
