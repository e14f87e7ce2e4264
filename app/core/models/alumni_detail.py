"""
Alumni details in two tables: staged (what the user submitted, awaiting review) and
live (what the directory shows). Promotion copies staged -> live; identifying numbers
stay in the staged table only.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base


# Fields shared by staged and live rows; promotion copies exactly these
PUBLIC_DETAIL_FIELDS = (
    "headline",
    "bio",
    "grad_year",
    "department",
    "current_company",
    "current_title",
    "location",
    "father_name",
    "primary_mobile",
    "whatsapp_number",
    "linkedin_url",
    "twitter_url",
    "facebook_url",
    "instagram_url",
    "github_url",
    "website_url",
)

IDENTIFYING_FIELDS = (
    "enrollment_number",
    "roll_number",
    "registration_number",
    "certificate_number",
)


class AlumniDetailColumns:
    headline = Column(String(160), nullable=True)
    bio = Column(Text, nullable=True)
    grad_year = Column(Integer, nullable=True, index=True)
    department = Column(String(120), nullable=True)
    current_company = Column(String(120), nullable=True)
    current_title = Column(String(120), nullable=True)
    location = Column(String(120), nullable=True)
    father_name = Column(String(120), nullable=True)
    primary_mobile = Column(String(20), nullable=True)
    whatsapp_number = Column(String(20), nullable=True)
    linkedin_url = Column(String(512), nullable=True)
    twitter_url = Column(String(512), nullable=True)
    facebook_url = Column(String(512), nullable=True)
    instagram_url = Column(String(512), nullable=True)
    github_url = Column(String(512), nullable=True)
    website_url = Column(String(512), nullable=True)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class StagedAlumniDetail(AlumniDetailColumns, Base):
    """User submission pending admin review. Overwritten on every submission."""

    __tablename__ = "staged_alumni_details"

    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    enrollment_number = Column(String(50), nullable=True)
    roll_number = Column(String(50), nullable=True)
    registration_number = Column(String(50), nullable=True)
    certificate_number = Column(String(50), nullable=True)
    submitted_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)


class AlumniDetail(AlumniDetailColumns, Base):
    """Live directory record. Created by promotion, then edited by the approved user."""

    __tablename__ = "alumni_details"

    id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
