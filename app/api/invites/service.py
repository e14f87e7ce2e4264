"""
Invite codes link an imported alumnus to a real account. Codes are minted per imported
row and redeemed once; redemption is a single conditional UPDATE so two concurrent
claims cannot both succeed.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List
from urllib.parse import urlencode
from uuid import UUID

from fastapi import status
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.enums import ImportedInviteStatus, InviteStatus
from app.core.exceptions import ServiceError
from app.core.models import ImportedAlumni, Invite

from .schemas import (
    ClaimInviteResponse,
    GeneratedInvite,
    GenerateInvitesResponse,
    SkippedInvite,
)

logger = logging.getLogger(__name__)


def build_claim_link(code: str) -> str:
    return f"{settings.site_url.rstrip('/')}/invite/claim?{urlencode({'code': code})}"


async def generate_invites(db: AsyncSession, imported_ids: List[UUID]) -> GenerateInvitesResponse:
    """
    Mint one code per imported row. Each invite commits on its own; rows that are
    missing or already accepted are skipped.
    """
    invites: List[GeneratedInvite] = []
    skipped: List[SkippedInvite] = []

    for imported_id in dict.fromkeys(imported_ids):
        row = await db.get(ImportedAlumni, imported_id)
        if row is None:
            skipped.append(SkippedInvite(imported_id=imported_id, reason="not found"))
            continue
        if row.invite_status == ImportedInviteStatus.ACCEPTED.value:
            skipped.append(SkippedInvite(imported_id=imported_id, reason="already accepted"))
            continue

        code = str(uuid.uuid4())
        try:
            db.add(Invite(imported_alumni_id=row.id, code=code, status=InviteStatus.SENT.value))
            row.invite_status = ImportedInviteStatus.SENT.value
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            logger.exception("Failed to create invite for imported row %s", imported_id)
            skipped.append(SkippedInvite(imported_id=imported_id, reason="error"))
            continue

        invites.append(
            GeneratedInvite(
                imported_id=imported_id,
                email=row.email,
                full_name=row.full_name,
                code=code,
                link=build_claim_link(code),
            )
        )

    logger.info("Generated %s invites, skipped %s", len(invites), len(skipped))
    return GenerateInvitesResponse(invites=invites, skipped=skipped)


async def redeem_invite(db: AsyncSession, code: str, user_id: UUID) -> ClaimInviteResponse:
    code = code.strip()
    try:
        result = await db.execute(
            update(Invite)
            .where(Invite.code == code, Invite.status == InviteStatus.SENT.value)
            .values(
                status=InviteStatus.REDEEMED.value,
                redeemed_by=user_id,
                redeemed_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            exists = await db.scalar(select(Invite.id).where(Invite.code == code))
            if exists is None:
                raise ServiceError("Invalid invite code", status.HTTP_404_NOT_FOUND)
            raise ServiceError("Invite code has already been used", status.HTTP_409_CONFLICT)

        imported_id = await db.scalar(select(Invite.imported_alumni_id).where(Invite.code == code))
        await db.execute(
            update(ImportedAlumni)
            .where(ImportedAlumni.id == imported_id)
            .values(invite_status=ImportedInviteStatus.ACCEPTED.value)
            .execution_options(synchronize_session=False)
        )
        full_name = await db.scalar(select(ImportedAlumni.full_name).where(ImportedAlumni.id == imported_id))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Invite redemption failed")
        raise ServiceError("Failed to redeem invite", status.HTTP_500_INTERNAL_SERVER_ERROR) from e

    logger.info("Invite for imported row %s redeemed by %s", imported_id, user_id)
    return ClaimInviteResponse(
        ok=True,
        imported_alumni_id=imported_id,
        full_name=full_name,
        next_route="/profile/setup",
    )
