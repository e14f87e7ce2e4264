"""Admin views: counts, approved and pending lists, imported rows, manual entry and CSV export."""

import csv
import io
import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.core.enums import ApprovalStatus, ImportBatchStatus, ImportedInviteStatus, InviteStatus
from app.core.exceptions import ServiceError
from app.core.models import (
    AdminFlag,
    AlumniDetail,
    Event,
    ImportBatch,
    ImportedAlumni,
    Invite,
    Profile,
    StagedAlumniDetail,
)

from app.api.directory.service import total_pages
from app.api.profile.schemas import StagedDetailResponse

from .schemas import (
    AdminAlumniItem,
    AdminAlumniPage,
    AdminDashboardStats,
    CreateAlumniRequest,
    CreateAlumniResponse,
    ImportedAlumniItem,
    PendingSubmission,
)

logger = logging.getLogger(__name__)

PAGE_SIZE = 50
EXPORT_CHUNK = 500
EXPORT_HEADERS = ("Name", "Email", "Graduation Year", "Department", "Company", "Title", "Location")
MANUAL_ENTRY_FILENAME = "manual_entry"


async def _count(db: AsyncSession, stmt) -> int:
    return await db.scalar(stmt) or 0


async def get_dashboard_stats(db: AsyncSession) -> AdminDashboardStats:
    flag_counts = dict(
        (await db.execute(select(AdminFlag.status, func.count()).group_by(AdminFlag.status))).all()
    )
    return AdminDashboardStats(
        total_users=await _count(db, select(func.count()).select_from(Profile)),
        total_alumni=await _count(db, select(func.count()).select_from(AlumniDetail)),
        approved=flag_counts.get(ApprovalStatus.APPROVED.value, 0),
        pending=flag_counts.get(ApprovalStatus.PENDING.value, 0),
        rejected=flag_counts.get(ApprovalStatus.REJECTED.value, 0),
        imported=await _count(db, select(func.count()).select_from(ImportedAlumni)),
        invites_sent=await _count(db, select(func.count()).select_from(Invite)),
        invites_accepted=await _count(
            db, select(func.count()).select_from(Invite).where(Invite.status == InviteStatus.REDEEMED.value)
        ),
        upcoming_events=await _count(
            db, select(func.count()).select_from(Event).where(Event.event_date >= datetime.now(timezone.utc))
        ),
    )


def _approved_ids():
    return select(AdminFlag.user_id).where(AdminFlag.status == ApprovalStatus.APPROVED.value)


async def list_approved_alumni(db: AsyncSession, page: int = 1) -> AdminAlumniPage:
    where = AlumniDetail.id.in_(_approved_ids())
    total = await _count(db, select(func.count()).select_from(AlumniDetail).where(where))
    result = await db.execute(
        select(AlumniDetail, Profile.full_name, User.email)
        .join(User, User.id == AlumniDetail.id)
        .outerjoin(Profile, Profile.id == AlumniDetail.id)
        .where(where)
        .order_by(AlumniDetail.grad_year.desc().nulls_last(), AlumniDetail.id)
        .offset((page - 1) * PAGE_SIZE)
        .limit(PAGE_SIZE)
    )
    items = [
        AdminAlumniItem(
            id=detail.id,
            full_name=full_name,
            email=email,
            headline=detail.headline,
            grad_year=detail.grad_year,
            department=detail.department,
            current_company=detail.current_company,
            current_title=detail.current_title,
            location=detail.location,
        )
        for detail, full_name, email in result.all()
    ]
    return AdminAlumniPage(
        items=items, total=total, page=page, page_size=PAGE_SIZE, total_pages=total_pages(total, PAGE_SIZE)
    )


async def list_pending_submissions(db: AsyncSession) -> List[PendingSubmission]:
    """Pending accounts with their staged data, oldest submission first. Accounts that never submitted have staged=None."""
    result = await db.execute(
        select(User.id, User.email, Profile.full_name, StagedAlumniDetail)
        .join(AdminFlag, AdminFlag.user_id == User.id)
        .outerjoin(Profile, Profile.id == User.id)
        .outerjoin(StagedAlumniDetail, StagedAlumniDetail.user_id == User.id)
        .where(AdminFlag.status == ApprovalStatus.PENDING.value)
        .order_by(StagedAlumniDetail.submitted_at.asc().nulls_last(), User.created_at.asc())
    )
    return [
        PendingSubmission(
            user_id=user_id,
            email=email,
            full_name=full_name,
            staged=StagedDetailResponse.model_validate(staged) if staged is not None else None,
        )
        for user_id, email, full_name, staged in result.all()
    ]


async def list_imported(db: AsyncSession, invite_status: Optional[str] = None) -> List[ImportedAlumniItem]:
    stmt = select(ImportedAlumni).order_by(ImportedAlumni.created_at.desc())
    if invite_status:
        stmt = stmt.where(ImportedAlumni.invite_status == invite_status)
    result = await db.execute(stmt)
    return [ImportedAlumniItem.model_validate(r) for r in result.scalars().all()]


async def create_alumni(db: AsyncSession, payload: CreateAlumniRequest, created_by: UUID) -> CreateAlumniResponse:
    """Add one alumnus to the imported list (its own single-row batch) so an invite can be sent later."""
    existing = await db.scalar(
        select(ImportedAlumni.id).where(func.lower(ImportedAlumni.email) == payload.email)
    )
    if existing is not None:
        raise ServiceError("An imported alumnus with this e-mail already exists", status.HTTP_409_CONFLICT)

    try:
        batch = ImportBatch(
            filename=MANUAL_ENTRY_FILENAME,
            row_count=1,
            status=ImportBatchStatus.COMMITTED.value,
            uploaded_by=created_by,
        )
        db.add(batch)
        await db.flush()
        imported = ImportedAlumni(
            batch_id=batch.id,
            external_id=f"MANUAL_{int(datetime.now(timezone.utc).timestamp() * 1000)}",
            full_name=payload.full_name,
            email=payload.email,
            grad_year=payload.grad_year,
            department=payload.department,
            company=payload.current_company,
            role=payload.current_title,
            invite_status=ImportedInviteStatus.PENDING.value,
        )
        db.add(imported)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Manual alumni entry failed for %s", payload.email)
        raise ServiceError("Failed to create alumni", status.HTTP_500_INTERNAL_SERVER_ERROR) from e

    logger.info("Manual alumni entry %s created", imported.id)
    return CreateAlumniResponse(
        success=True,
        message="Alumni added to imported list. You can now send an invite from the Invites page.",
        imported_id=imported.id,
    )


def _csv_line(values) -> str:
    out = io.StringIO()
    csv.writer(out, lineterminator="\n").writerow(values)
    return out.getvalue()


async def build_export_lines(db: AsyncSession) -> List[str]:
    """CSV lines (header first) for every approved alumnus. Records are read in chunks of ids."""
    ids = (await db.execute(
        select(AdminFlag.user_id).where(AdminFlag.status == ApprovalStatus.APPROVED.value).order_by(AdminFlag.user_id)
    )).scalars().all()

    lines = [_csv_line(EXPORT_HEADERS)]
    for start in range(0, len(ids), EXPORT_CHUNK):
        chunk = ids[start:start + EXPORT_CHUNK]
        result = await db.execute(
            select(AlumniDetail, Profile.full_name)
            .outerjoin(Profile, Profile.id == AlumniDetail.id)
            .where(AlumniDetail.id.in_(chunk))
        )
        for detail, full_name in result.all():
            lines.append(_csv_line((
                full_name or "",
                "",
                detail.grad_year if detail.grad_year is not None else "",
                detail.department or "",
                detail.current_company or "",
                detail.current_title or "",
                detail.location or "",
            )))
    return lines


def export_filename(today: Optional[datetime] = None) -> str:
    return f"alumni_export_{(today or datetime.now(timezone.utc)).date().isoformat()}.csv"
