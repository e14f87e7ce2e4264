from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from app.api.profile.schemas import EducationItem, SkillItem, WorkItem


class AlumniCard(BaseModel):
    id: UUID
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    headline: Optional[str] = None
    grad_year: Optional[int] = None
    department: Optional[str] = None
    current_company: Optional[str] = None
    current_title: Optional[str] = None
    location: Optional[str] = None


class DirectoryPage(BaseModel):
    items: List[AlumniCard]
    total: int
    page: int
    page_size: int
    total_pages: int


class AlumniPublicProfile(AlumniCard):
    bio: Optional[str] = None
    father_name: Optional[str] = None
    primary_mobile: Optional[str] = None
    whatsapp_number: Optional[str] = None
    linkedin_url: Optional[str] = None
    twitter_url: Optional[str] = None
    facebook_url: Optional[str] = None
    instagram_url: Optional[str] = None
    github_url: Optional[str] = None
    website_url: Optional[str] = None
    education: List[EducationItem] = []
    work_history: List[WorkItem] = []
    skills: List[SkillItem] = []


class DirectoryFilters(BaseModel):
    years: List[int]
    departments: List[str]


class UserDashboard(BaseModel):
    profile_name: str
    total_alumni: int
    profile_complete: bool
    completion_percent: int
