from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from app.api.profile.schemas import FormModel


class JobCreate(FormModel):
    title: str = Field(..., min_length=1, max_length=255)
    company: str = Field(..., min_length=1, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    job_type: Optional[str] = Field(None, max_length=50)
    salary_range: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    apply_url: Optional[str] = Field(None, max_length=1024)
    contact_email: Optional[EmailStr] = None
    is_published: bool = True
    expires_at: Optional[datetime] = None


class JobResponse(BaseModel):
    id: UUID
    title: str
    company: str
    location: Optional[str] = None
    job_type: Optional[str] = None
    salary_range: Optional[str] = None
    description: Optional[str] = None
    apply_url: Optional[str] = None
    contact_email: Optional[str] = None
    is_published: bool
    expires_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class NewsCreate(FormModel):
    title: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    excerpt: Optional[str] = None
    content: str = Field(..., min_length=1)
    category: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = Field(None, max_length=1024)
    is_published: bool = False
    published_at: Optional[datetime] = None


class NewsAuthor(BaseModel):
    id: UUID
    full_name: Optional[str] = None


class NewsResponse(BaseModel):
    id: UUID
    title: str
    slug: str
    excerpt: Optional[str] = None
    content: str
    category: Optional[str] = None
    image_url: Optional[str] = None
    is_published: bool
    published_at: Optional[datetime] = None
    created_at: datetime
    author: Optional[NewsAuthor] = None


class GalleryItemCreate(FormModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: str = Field(..., min_length=1, max_length=1024)
    category: Optional[str] = Field(None, max_length=100)
    event_id: Optional[UUID] = None
    is_published: bool = True


class GalleryEvent(BaseModel):
    id: UUID
    title: str


class GalleryItemResponse(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    image_url: str
    category: Optional[str] = None
    is_published: bool
    created_at: datetime
    event: Optional[GalleryEvent] = None


class CategoryListResponse(BaseModel):
    categories: List[str]
