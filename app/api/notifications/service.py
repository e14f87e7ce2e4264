"""Notification rows per account: created by workflows, listed and marked read by the owner."""

from typing import Iterable, List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.core.models import Notification

from .schemas import NotificationResponse

LIST_LIMIT = 50


def add_notification(
    db: AsyncSession,
    user_id: UUID,
    type_: str,
    title: str,
    message: Optional[str] = None,
    related_event_id: Optional[UUID] = None,
) -> None:
    """Append one notification. Caller must commit."""
    db.add(
        Notification(
            user_id=user_id,
            type=type_,
            title=title,
            message=message,
            related_event_id=related_event_id,
        )
    )


def add_notifications(
    db: AsyncSession,
    user_ids: Iterable[UUID],
    type_: str,
    title: str,
    message: Optional[str] = None,
    related_event_id: Optional[UUID] = None,
) -> int:
    count = 0
    for user_id in user_ids:
        add_notification(db, user_id, type_, title, message, related_event_id)
        count += 1
    return count


async def list_notifications(
    db: AsyncSession,
    user_id: UUID,
    unread_only: bool = False,
) -> List[NotificationResponse]:
    stmt = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))
    stmt = stmt.order_by(Notification.created_at.desc()).limit(LIST_LIMIT)
    result = await db.execute(stmt)
    return [NotificationResponse.model_validate(n) for n in result.scalars().all()]


async def count_unread(db: AsyncSession, user_id: UUID) -> int:
    count = await db.scalar(
        select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
    )
    return count or 0


async def mark_read(db: AsyncSession, user_id: UUID, notification_id: UUID) -> None:
    result = await db.execute(
        update(Notification)
        .where(Notification.id == notification_id, Notification.user_id == user_id)
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise ServiceError("Notification not found", status.HTTP_404_NOT_FOUND)
    await db.commit()


async def mark_all_read(db: AsyncSession, user_id: UUID) -> int:
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount
