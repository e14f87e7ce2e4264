"""
Identity & status resolution used to gate every protected route.

Three independent point reads, no caching. A failed read never propagates: the
caller gets the safe default (not admin, pending, no profile set up).
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import ApprovalStatus
from app.core.models import AdminFlag, Profile, StagedAlumniDetail

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountStatus:
    is_admin: bool = False
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    has_profile_setup: bool = False


SAFE_DEFAULT = AccountStatus()


async def resolve_account_status(db: AsyncSession, user_id: UUID) -> AccountStatus:
    try:
        is_admin = await db.scalar(select(Profile.is_admin).where(Profile.id == user_id))
        raw_status = await db.scalar(select(AdminFlag.status).where(AdminFlag.user_id == user_id))
        staged_id = await db.scalar(
            select(StagedAlumniDetail.user_id).where(StagedAlumniDetail.user_id == user_id)
        )
    except SQLAlchemyError:
        logger.exception("Status lookup failed for user %s; using safe default", user_id)
        return SAFE_DEFAULT

    try:
        approval_status = ApprovalStatus(raw_status) if raw_status else ApprovalStatus.PENDING
    except ValueError:
        logger.error("Unknown approval status %r for user %s", raw_status, user_id)
        approval_status = ApprovalStatus.PENDING

    return AccountStatus(
        is_admin=bool(is_admin),
        approval_status=approval_status,
        has_profile_setup=staged_id is not None,
    )


def landing_route(status: AccountStatus) -> str:
    """Route the client should show next for this account."""
    if status.is_admin:
        return "/admin/dashboard"
    if status.approval_status == ApprovalStatus.APPROVED:
        return "/dashboard"
    if not status.has_profile_setup:
        return "/profile/setup"
    return "/profile/pending"
