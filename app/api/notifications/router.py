import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import (
    NotificationCountResponse,
    NotificationListResponse,
    NotificationUpdate,
    NotificationUpdateResponse,
)
from . import service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    unread_only: bool = False,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> NotificationListResponse:
    """Latest notifications of the caller, newest first. Clients poll this every 30 seconds."""
    notifications = await service.list_notifications(db, current_user.id, unread_only=unread_only)
    return NotificationListResponse(notifications=notifications)


@router.patch("", response_model=NotificationUpdateResponse)
async def update_notifications(
    payload: NotificationUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> NotificationUpdateResponse:
    try:
        if payload.mark_all_read:
            updated = await service.mark_all_read(db, current_user.id)
            return NotificationUpdateResponse(success=True, updated=updated)
        await service.mark_read(db, current_user.id, payload.notification_id)
        return NotificationUpdateResponse(success=True, updated=1)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/count", response_model=NotificationCountResponse)
async def unread_count(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> NotificationCountResponse:
    """Unread count for the bell badge. A backend failure reads as zero."""
    try:
        count = await service.count_unread(db, current_user.id)
    except SQLAlchemyError:
        logger.exception("Error counting notifications for %s", current_user.id)
        count = 0
    return NotificationCountResponse(count=count)
