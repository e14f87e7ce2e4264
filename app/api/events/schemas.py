from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from app.api.profile.schemas import FormModel


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class EventCreate(FormModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    event_date: datetime
    event_end_date: Optional[datetime] = None
    location: Optional[str] = Field(None, max_length=255)
    venue: Optional[str] = Field(None, max_length=255)
    image_url: Optional[str] = Field(None, max_length=1024)
    is_published: bool = True
    registration_required: bool = False
    max_attendees: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def check_dates(self) -> "EventCreate":
        if self.event_end_date is not None and _as_utc(self.event_end_date) < _as_utc(self.event_date):
            raise ValueError("Event end date cannot be before the start date")
        return self


class EventResponse(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    event_date: datetime
    event_end_date: Optional[datetime] = None
    location: Optional[str] = None
    venue: Optional[str] = None
    image_url: Optional[str] = None
    is_published: bool
    registration_required: bool
    max_attendees: Optional[int] = None
    current_attendees: int
    created_at: datetime

    class Config:
        from_attributes = True


class EventDetailResponse(EventResponse):
    is_registered: bool = False
    is_full: bool = False


class EventCreateResponse(BaseModel):
    event: EventResponse
    notified: int = 0


class EventListResponse(BaseModel):
    events: List[EventResponse]


class EventRegisterRequest(BaseModel):
    event_id: UUID


class AttendeeResponse(BaseModel):
    id: UUID
    event_id: UUID
    user_id: UUID
    status: str
    registered_at: datetime

    class Config:
        from_attributes = True


class EventRegisterResponse(BaseModel):
    registration: AttendeeResponse
