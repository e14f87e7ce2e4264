import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.enums import InviteStatus
from app.db.session import Base


class Invite(Base):
    """Single-use code binding an imported alumnus to the account that redeems it."""

    __tablename__ = "invites"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    imported_alumni_id = Column(
        UUID(as_uuid=True), ForeignKey("imported_alumni.id", ondelete="CASCADE"), nullable=False, index=True
    )
    code = Column(String(64), nullable=False, unique=True, index=True)
    status = Column(String(20), nullable=False, default=InviteStatus.SENT.value)
    redeemed_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    redeemed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    imported_alumni = relationship("ImportedAlumni")
