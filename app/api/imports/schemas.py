from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.api.profile.schemas import FormModel


class ImportRow(FormModel):
    """One alumnus as sent by the preview table for commit."""

    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    headline: Optional[str] = Field(None, max_length=160)
    bio: Optional[str] = None
    grad_year: Optional[int] = Field(None, ge=1900, le=2100)
    department: Optional[str] = Field(None, max_length=120)
    company: Optional[str] = Field(None, max_length=120)
    role: Optional[str] = Field(None, max_length=120)
    location: Optional[str] = Field(None, max_length=120)
    father_name: Optional[str] = Field(None, max_length=120)
    primary_mobile: Optional[str] = Field(None, max_length=20)
    whatsapp_number: Optional[str] = Field(None, max_length=20)
    linkedin_url: Optional[str] = Field(None, max_length=512)
    twitter_url: Optional[str] = Field(None, max_length=512)
    facebook_url: Optional[str] = Field(None, max_length=512)
    instagram_url: Optional[str] = Field(None, max_length=512)
    github_url: Optional[str] = Field(None, max_length=512)
    website_url: Optional[str] = Field(None, max_length=512)

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()


class PreviewRow(BaseModel):
    """Parsed cells as text; grad_year is only checked at commit."""

    full_name: str
    email: str
    headline: Optional[str] = None
    bio: Optional[str] = None
    grad_year: Optional[str] = None
    department: Optional[str] = None
    company: Optional[str] = None
    role: Optional[str] = None
    location: Optional[str] = None
    father_name: Optional[str] = None
    primary_mobile: Optional[str] = None
    whatsapp_number: Optional[str] = None
    linkedin_url: Optional[str] = None
    twitter_url: Optional[str] = None
    facebook_url: Optional[str] = None
    instagram_url: Optional[str] = None
    github_url: Optional[str] = None
    website_url: Optional[str] = None


class ImportPreviewResponse(BaseModel):
    filename: str
    total: int
    rows: List[PreviewRow]


class ImportCommitRequest(BaseModel):
    filename: str = Field("upload.csv", max_length=255)
    rows: List[ImportRow]


class ImportCommitResponse(BaseModel):
    ok: bool
    inserted: int
    batch_id: UUID


class ImportBatchResponse(BaseModel):
    id: UUID
    filename: str
    row_count: int
    status: str
    uploaded_by: Optional[UUID] = None
    created_at: datetime

    class Config:
        from_attributes = True
