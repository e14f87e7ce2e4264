"""
Events: admin creation (with a notification fan-out to approved alumni) and
registration. Capacity is enforced by a conditional increment and duplicates by the
(event_id, user_id) unique constraint, both inside the registration transaction.
"""

import logging
from datetime import datetime, timezone
from typing import List
from uuid import UUID

from fastapi import status
from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import ApprovalStatus, AttendeeStatus, NotificationType
from app.core.exceptions import ServiceError
from app.core.models import AdminFlag, Event, EventAttendee

from app.api.notifications.service import add_notifications

from .schemas import (
    AttendeeResponse,
    EventCreate,
    EventCreateResponse,
    EventDetailResponse,
    EventResponse,
)

logger = logging.getLogger(__name__)


async def create_event(db: AsyncSession, payload: EventCreate, created_by: UUID) -> EventCreateResponse:
    try:
        event = Event(**payload.model_dump(), created_by=created_by, current_attendees=0)
        db.add(event)
        await db.flush()

        notified = 0
        if event.is_published:
            user_ids = (await db.execute(
                select(AdminFlag.user_id).where(AdminFlag.status == ApprovalStatus.APPROVED.value)
            )).scalars().all()
            notified = add_notifications(
                db,
                user_ids,
                NotificationType.EVENT_CREATED.value,
                f"New event: {event.title}",
                event.description[:200] if event.description else None,
                related_event_id=event.id,
            )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Failed to create event %r", payload.title)
        raise ServiceError("Failed to create event", status.HTTP_500_INTERNAL_SERVER_ERROR) from e

    logger.info("Event %s created, %s alumni notified", event.id, notified)
    return EventCreateResponse(event=EventResponse.model_validate(event), notified=notified)


async def list_events(db: AsyncSession, upcoming_only: bool = False) -> List[EventResponse]:
    """Published events ordered by date."""
    stmt = select(Event).where(Event.is_published.is_(True))
    if upcoming_only:
        stmt = stmt.where(Event.event_date >= datetime.now(timezone.utc))
    result = await db.execute(stmt.order_by(Event.event_date.asc()))
    return [EventResponse.model_validate(e) for e in result.scalars().all()]


async def get_event(db: AsyncSession, event_id: UUID, user_id: UUID, is_admin: bool = False) -> EventDetailResponse:
    event = await db.get(Event, event_id)
    if event is None or (not event.is_published and not is_admin):
        raise ServiceError("Event not found", status.HTTP_404_NOT_FOUND)
    registered = await db.scalar(
        select(EventAttendee.id).where(EventAttendee.event_id == event_id, EventAttendee.user_id == user_id)
    )
    detail = EventDetailResponse.model_validate(event)
    detail.is_registered = registered is not None
    detail.is_full = event.max_attendees is not None and event.current_attendees >= event.max_attendees
    return detail


async def register_for_event(db: AsyncSession, event_id: UUID, user_id: UUID) -> AttendeeResponse:
    event = await db.get(Event, event_id)
    if event is None:
        raise ServiceError("Event not found", status.HTTP_404_NOT_FOUND)
    if not event.is_published:
        raise ServiceError("Event is not published", status.HTTP_400_BAD_REQUEST)
    if not event.registration_required:
        raise ServiceError("Event does not require registration", status.HTTP_400_BAD_REQUEST)

    existing = await db.scalar(
        select(EventAttendee.id).where(EventAttendee.event_id == event_id, EventAttendee.user_id == user_id)
    )
    if existing is not None:
        raise ServiceError("Already registered for this event", status.HTTP_400_BAD_REQUEST)

    try:
        result = await db.execute(
            update(Event)
            .where(
                Event.id == event_id,
                or_(Event.max_attendees.is_(None), Event.current_attendees < Event.max_attendees),
            )
            .values(current_attendees=Event.current_attendees + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            raise ServiceError("Event is full", status.HTTP_400_BAD_REQUEST)

        attendee = EventAttendee(event_id=event_id, user_id=user_id, status=AttendeeStatus.REGISTERED.value)
        db.add(attendee)
        await db.commit()
    except IntegrityError as e:
        # Concurrent duplicate; the increment is rolled back with it
        await db.rollback()
        raise ServiceError("Already registered for this event", status.HTTP_400_BAD_REQUEST) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Registration failed for event %s", event_id)
        raise ServiceError("Failed to register", status.HTTP_500_INTERNAL_SERVER_ERROR) from e

    return AttendeeResponse.model_validate(attendee)
