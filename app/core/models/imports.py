"""
Bulk imports: a batch groups rows uploaded together; imported alumni are pre-account
placeholders later linked to a real account through an invite.
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.enums import ImportBatchStatus, ImportedInviteStatus
from app.db.session import Base


class ImportBatch(Base):
    __tablename__ = "import_batches"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    filename = Column(String(255), nullable=False)
    row_count = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=ImportBatchStatus.COMMITTED.value)
    uploaded_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    rows = relationship("ImportedAlumni", back_populates="batch", cascade="all, delete-orphan")


class ImportedAlumni(Base):
    __tablename__ = "imported_alumni"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    batch_id = Column(UUID(as_uuid=True), ForeignKey("import_batches.id", ondelete="CASCADE"), nullable=False, index=True)
    # Set for manual entries (MANUAL_<timestamp>); null for CSV rows
    external_id = Column(String(100), nullable=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    headline = Column(String(160), nullable=True)
    bio = Column(Text, nullable=True)
    grad_year = Column(Integer, nullable=True)
    department = Column(String(120), nullable=True)
    company = Column(String(120), nullable=True)
    role = Column(String(120), nullable=True)
    location = Column(String(120), nullable=True)
    father_name = Column(String(120), nullable=True)
    avatar_url = Column(String(1024), nullable=True)
    primary_mobile = Column(String(20), nullable=True)
    whatsapp_number = Column(String(20), nullable=True)
    linkedin_url = Column(String(512), nullable=True)
    twitter_url = Column(String(512), nullable=True)
    facebook_url = Column(String(512), nullable=True)
    instagram_url = Column(String(512), nullable=True)
    github_url = Column(String(512), nullable=True)
    website_url = Column(String(512), nullable=True)
    invite_status = Column(String(20), nullable=False, default=ImportedInviteStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    batch = relationship("ImportBatch", back_populates="rows")
