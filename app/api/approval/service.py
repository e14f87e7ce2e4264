"""
Promotion and rejection of staged profiles.

promote() is one transaction: read staged row, upsert the live row from it, flip the flag
to approved, log the transition, notify the user. Any failure rolls back all of it.
The staged row is copied, not moved: has_profile_setup is derived from it.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.core.enums import ApprovalStatus, NotificationType
from app.core.exceptions import ServiceError
from app.core.models import AlumniDetail, StagedAlumniDetail, StatusTransition
from app.core.models.alumni_detail import PUBLIC_DETAIL_FIELDS

from app.api.notifications.service import add_notification

from . import transitions
from .schemas import ApprovalResult, StatusHistoryResponse, StatusTransitionResponse

logger = logging.getLogger(__name__)


def copy_staged_to_live(staged: StagedAlumniDetail, live: AlumniDetail) -> None:
    for field in PUBLIC_DETAIL_FIELDS:
        setattr(live, field, getattr(staged, field))


async def promote(db: AsyncSession, user_id: UUID, performed_by: UUID) -> ApprovalResult:
    staged = await db.get(StagedAlumniDetail, user_id)
    if staged is None:
        raise ServiceError("No staged profile to promote for this user", status.HTTP_400_BAD_REQUEST)

    try:
        live = await db.get(AlumniDetail, user_id)
        if live is None:
            live = AlumniDetail(id=user_id)
            db.add(live)
        copy_staged_to_live(staged, live)

        await transitions.transition(
            db,
            user_id,
            ApprovalStatus.APPROVED,
            transitions.ACTION_APPROVED,
            performed_by=performed_by,
        )
        add_notification(
            db,
            user_id,
            NotificationType.PROFILE_APPROVED.value,
            "Your profile has been approved",
            "You now have full access to the alumni directory.",
        )
        await db.commit()
    except ServiceError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Promotion failed for %s", user_id)
        raise ServiceError("Failed to promote profile", status.HTTP_500_INTERNAL_SERVER_ERROR) from e

    return ApprovalResult(ok=True, user_id=user_id, status=ApprovalStatus.APPROVED.value)


async def reject(
    db: AsyncSession,
    user_id: UUID,
    performed_by: UUID,
    remarks: Optional[str] = None,
) -> ApprovalResult:
    if await db.get(User, user_id) is None:
        raise ServiceError("User not found", status.HTTP_404_NOT_FOUND)
    try:
        await transitions.transition(
            db,
            user_id,
            ApprovalStatus.REJECTED,
            transitions.ACTION_REJECTED,
            performed_by=performed_by,
            remarks=remarks,
        )
        add_notification(
            db,
            user_id,
            NotificationType.PROFILE_REJECTED.value,
            "Your profile was not approved",
            remarks or "Please review your details and submit your profile again.",
        )
        await db.commit()
    except ServiceError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Rejection failed for %s", user_id)
        raise ServiceError("Failed to reject profile", status.HTTP_500_INTERNAL_SERVER_ERROR) from e

    return ApprovalResult(ok=True, user_id=user_id, status=ApprovalStatus.REJECTED.value)


async def status_history(db: AsyncSession, user_id: UUID) -> StatusHistoryResponse:
    result = await db.execute(
        select(StatusTransition)
        .where(StatusTransition.user_id == user_id)
        .order_by(StatusTransition.created_at.asc())
    )
    return StatusHistoryResponse(
        user_id=user_id,
        transitions=[StatusTransitionResponse.model_validate(t) for t in result.scalars().all()],
    )
