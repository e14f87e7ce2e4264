"""
Approval state machine. Every status change goes through transition(), which checks the
allowed moves and appends a StatusTransition row. Caller must commit.
"""

import logging
from typing import Dict, FrozenSet, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import ApprovalStatus
from app.core.exceptions import ServiceError
from app.core.models import AdminFlag, StatusTransition

logger = logging.getLogger(__name__)

ACTION_SUBMITTED = "profile_submitted"
ACTION_APPROVED = "profile_approved"
ACTION_REJECTED = "profile_rejected"

ALLOWED_TRANSITIONS: Dict[ApprovalStatus, FrozenSet[ApprovalStatus]] = {
    # pending -> pending is a repeat submission before review
    ApprovalStatus.PENDING: frozenset(
        {ApprovalStatus.PENDING, ApprovalStatus.APPROVED, ApprovalStatus.REJECTED}
    ),
    ApprovalStatus.REJECTED: frozenset({ApprovalStatus.PENDING}),
    ApprovalStatus.APPROVED: frozenset(),
}


def can_transition(from_status: ApprovalStatus, to_status: ApprovalStatus) -> bool:
    return to_status in ALLOWED_TRANSITIONS.get(from_status, frozenset())


async def get_flag(db: AsyncSession, user_id: UUID) -> Optional[AdminFlag]:
    result = await db.execute(select(AdminFlag).where(AdminFlag.user_id == user_id))
    return result.scalar_one_or_none()


async def transition(
    db: AsyncSession,
    user_id: UUID,
    to_status: ApprovalStatus,
    action: str,
    *,
    performed_by: Optional[UUID] = None,
    remarks: Optional[str] = None,
) -> AdminFlag:
    flag = await get_flag(db, user_id)
    if flag is None:
        # Accounts created before flags existed start as pending
        flag = AdminFlag(user_id=user_id, status=ApprovalStatus.PENDING.value)
        db.add(flag)

    from_status = ApprovalStatus(flag.status)
    if not can_transition(from_status, to_status):
        raise ServiceError(
            f"Cannot move profile from {from_status.value} to {to_status.value}",
            status.HTTP_409_CONFLICT,
        )

    flag.status = to_status.value
    db.add(
        StatusTransition(
            user_id=user_id,
            from_status=from_status.value,
            to_status=to_status.value,
            action=action,
            performed_by=performed_by,
            remarks=remarks,
        )
    )
    logger.info("Approval status of %s: %s -> %s (%s)", user_id, from_status.value, to_status.value, action)
    return flag
