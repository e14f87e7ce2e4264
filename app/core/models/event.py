import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.enums import AttendeeStatus
from app.db.session import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    event_date = Column(DateTime(timezone=True), nullable=False, index=True)
    event_end_date = Column(DateTime(timezone=True), nullable=True)
    location = Column(String(255), nullable=True)
    venue = Column(String(255), nullable=True)
    image_url = Column(String(1024), nullable=True)
    is_published = Column(Boolean, nullable=False, default=True)
    registration_required = Column(Boolean, nullable=False, default=False)
    # Null means unlimited
    max_attendees = Column(Integer, nullable=True)
    # Only changed by the conditional increment in register_for_event
    current_attendees = Column(Integer, nullable=False, default=0)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    attendees = relationship("EventAttendee", back_populates="event", cascade="all, delete-orphan")


class EventAttendee(Base):
    __tablename__ = "event_attendees"
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_attendee_event_user"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(UUID(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=AttendeeStatus.REGISTERED.value)
    registered_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    event = relationship("Event", back_populates="attendees")
