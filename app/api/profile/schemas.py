from datetime import date, datetime
from typing import Any, List, Optional
from urllib.parse import urlparse
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

URL_FIELDS = (
    "linkedin_url",
    "twitter_url",
    "facebook_url",
    "instagram_url",
    "github_url",
    "website_url",
)


def _blank_to_none(data: Any) -> Any:
    """Trim strings; empty strings become None (forms send "" for untouched inputs)."""
    if not isinstance(data, dict):
        return data
    cleaned = {}
    for key, value in data.items():
        if isinstance(value, str):
            value = value.strip() or None
        cleaned[key] = value
    return cleaned


class FormModel(BaseModel):
    @model_validator(mode="before")
    @classmethod
    def blank_strings_to_none(cls, data: Any) -> Any:
        return _blank_to_none(data)


def validate_full_name(value: Optional[str]) -> str:
    name = (value or "").strip()
    if len(name) < 2:
        raise ValueError("Full Name is required and must be at least 2 characters")
    if len(name) > 120:
        raise ValueError("Full Name must be at most 120 characters")
    return name


class AlumniDetailFields(FormModel):
    headline: Optional[str] = Field(None, max_length=160)
    bio: Optional[str] = Field(None, max_length=1000)
    grad_year: Optional[int] = Field(None, ge=1900, le=2100)
    department: Optional[str] = Field(None, max_length=120)
    current_company: Optional[str] = Field(None, max_length=120)
    current_title: Optional[str] = Field(None, max_length=120)
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

    @field_validator(*URL_FIELDS)
    @classmethod
    def validate_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("Invalid URL")
        return value


class StagedProfileSubmit(AlumniDetailFields):
    """Profile setup form. Saved to the staged table and sent for review."""

    full_name: str
    avatar_path: Optional[str] = Field(None, max_length=1024)
    enrollment_number: Optional[str] = Field(None, max_length=50)
    roll_number: Optional[str] = Field(None, max_length=50)
    registration_number: Optional[str] = Field(None, max_length=50)
    certificate_number: Optional[str] = Field(None, max_length=50)

    @field_validator("full_name", mode="before")
    @classmethod
    def check_full_name(cls, value: Optional[str]) -> str:
        return validate_full_name(value)


class EducationItem(FormModel):
    degree: Optional[str] = Field(None, max_length=120)
    major: Optional[str] = Field(None, max_length=120)
    start_year: Optional[int] = Field(None, ge=1900, le=2100)
    end_year: Optional[int] = Field(None, ge=1900, le=2100)

    class Config:
        from_attributes = True


class WorkItem(FormModel):
    company: Optional[str] = Field(None, max_length=120)
    role: Optional[str] = Field(None, max_length=120)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    description: Optional[str] = Field(None, max_length=2000)

    class Config:
        from_attributes = True


class SkillItem(BaseModel):
    name: str = Field(..., min_length=1, max_length=80)

    class Config:
        from_attributes = True


class LiveProfileUpdate(AlumniDetailFields):
    """Edit form for approved users. Child collections replace the stored ones wholesale."""

    full_name: str
    avatar_path: Optional[str] = Field(None, max_length=1024)
    education: List[EducationItem] = Field(default_factory=list)
    work_history: List[WorkItem] = Field(default_factory=list)
    skills: List[SkillItem] = Field(default_factory=list)

    @field_validator("full_name", mode="before")
    @classmethod
    def check_full_name(cls, value: Optional[str]) -> str:
        return validate_full_name(value)


class AlumniDetailResponse(AlumniDetailFields):
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StagedDetailResponse(AlumniDetailResponse):
    enrollment_number: Optional[str] = None
    roll_number: Optional[str] = None
    registration_number: Optional[str] = None
    certificate_number: Optional[str] = None
    submitted_at: Optional[datetime] = None


class MyProfileResponse(BaseModel):
    id: UUID
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    is_admin: bool
    approval_status: str
    staged: Optional[StagedDetailResponse] = None
    live: Optional[AlumniDetailResponse] = None
    education: List[EducationItem] = Field(default_factory=list)
    work_history: List[WorkItem] = Field(default_factory=list)
    skills: List[SkillItem] = Field(default_factory=list)


class SubmitResponse(BaseModel):
    ok: bool
    status: str
    next_route: str


class PrefillResponse(BaseModel):
    """Setup form values taken from the imported row behind a redeemed invite."""

    found: bool
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    headline: Optional[str] = None
    bio: Optional[str] = None
    grad_year: Optional[int] = None
    department: Optional[str] = None
    current_company: Optional[str] = None
    current_title: Optional[str] = None
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
