"""
Profile submission store: staged submissions for review, the live record approved users
edit, and setup-form prefill from a redeemed invite.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.auth.status_resolver import AccountStatus, landing_route, resolve_account_status
from app.core.enums import ApprovalStatus, InviteStatus
from app.core.exceptions import ServiceError
from app.core.models import (
    AlumniDetail,
    Education,
    ImportedAlumni,
    Invite,
    Profile,
    Skill,
    StagedAlumniDetail,
    WorkHistory,
)
from app.core.models.alumni_detail import IDENTIFYING_FIELDS, PUBLIC_DETAIL_FIELDS
from app.core.storage import public_object_url

from app.api.approval import transitions

from .schemas import (
    AlumniDetailResponse,
    EducationItem,
    LiveProfileUpdate,
    MyProfileResponse,
    PrefillResponse,
    SkillItem,
    StagedDetailResponse,
    StagedProfileSubmit,
    SubmitResponse,
    WorkItem,
)

logger = logging.getLogger(__name__)

# imported_alumni column -> setup form field
PREFILL_FIELD_MAP = {
    "headline": "headline",
    "bio": "bio",
    "grad_year": "grad_year",
    "department": "department",
    "company": "current_company",
    "role": "current_title",
    "location": "location",
    "father_name": "father_name",
    "primary_mobile": "primary_mobile",
    "whatsapp_number": "whatsapp_number",
    "linkedin_url": "linkedin_url",
    "twitter_url": "twitter_url",
    "facebook_url": "facebook_url",
    "instagram_url": "instagram_url",
    "github_url": "github_url",
    "website_url": "website_url",
}


async def _get_or_create_profile(db: AsyncSession, user_id: UUID) -> Profile:
    profile = await db.get(Profile, user_id)
    if profile is None:
        profile = Profile(id=user_id, is_admin=False)
        db.add(profile)
    return profile


async def save_staged(db: AsyncSession, user_id: UUID, payload: StagedProfileSubmit) -> SubmitResponse:
    """
    Upsert the staged submission and move the account to pending. A rejected account
    becomes pending again; an approved one edits its live profile instead.
    """
    flag = await transitions.get_flag(db, user_id)
    if flag is not None and flag.status == ApprovalStatus.APPROVED.value:
        raise ServiceError(
            "Profile is already approved; edit your live profile instead",
            status.HTTP_409_CONFLICT,
        )

    try:
        profile = await _get_or_create_profile(db, user_id)
        profile.full_name = payload.full_name
        profile.avatar_path = payload.avatar_path

        staged = await db.get(StagedAlumniDetail, user_id)
        if staged is None:
            staged = StagedAlumniDetail(user_id=user_id)
            db.add(staged)
        for field in PUBLIC_DETAIL_FIELDS + IDENTIFYING_FIELDS:
            setattr(staged, field, getattr(payload, field))

        await transitions.transition(
            db,
            user_id,
            ApprovalStatus.PENDING,
            transitions.ACTION_SUBMITTED,
            performed_by=user_id,
        )
        await db.commit()
    except ServiceError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Failed to save staged profile for %s", user_id)
        raise ServiceError("Failed to save profile", status.HTTP_500_INTERNAL_SERVER_ERROR) from e

    next_route = landing_route(
        AccountStatus(is_admin=bool(profile.is_admin), approval_status=ApprovalStatus.PENDING, has_profile_setup=True)
    )
    return SubmitResponse(ok=True, status=ApprovalStatus.PENDING.value, next_route=next_route)


async def update_live_profile(db: AsyncSession, user_id: UUID, payload: LiveProfileUpdate) -> MyProfileResponse:
    """Approved users edit the directory record. Education, work and skills are replaced wholesale."""
    try:
        profile = await _get_or_create_profile(db, user_id)
        profile.full_name = payload.full_name
        profile.avatar_path = payload.avatar_path

        live = await db.get(AlumniDetail, user_id)
        if live is None:
            live = AlumniDetail(id=user_id)
            db.add(live)
        for field in PUBLIC_DETAIL_FIELDS:
            setattr(live, field, getattr(payload, field))

        await db.execute(delete(Education).where(Education.user_id == user_id))
        await db.execute(delete(WorkHistory).where(WorkHistory.user_id == user_id))
        await db.execute(delete(Skill).where(Skill.user_id == user_id))
        for item in payload.education:
            db.add(Education(user_id=user_id, **item.model_dump()))
        for item in payload.work_history:
            db.add(WorkHistory(user_id=user_id, **item.model_dump()))
        for name in dict.fromkeys(s.name.strip() for s in payload.skills if s.name.strip()):
            db.add(Skill(user_id=user_id, name=name))

        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Failed to update live profile for %s", user_id)
        raise ServiceError("Failed to save profile", status.HTTP_500_INTERNAL_SERVER_ERROR) from e

    return await get_my_profile(db, user_id)


async def get_my_profile(db: AsyncSession, user_id: UUID) -> MyProfileResponse:
    user = await db.get(User, user_id)
    if user is None:
        raise ServiceError("User not found", status.HTTP_404_NOT_FOUND)
    profile = await db.get(Profile, user_id)
    staged = await db.get(StagedAlumniDetail, user_id)
    live = await db.get(AlumniDetail, user_id)
    account = await resolve_account_status(db, user_id)

    education = (await db.execute(
        select(Education).where(Education.user_id == user_id).order_by(Education.start_year.desc())
    )).scalars().all()
    work = (await db.execute(
        select(WorkHistory).where(WorkHistory.user_id == user_id).order_by(WorkHistory.start_date.desc())
    )).scalars().all()
    skills = (await db.execute(
        select(Skill).where(Skill.user_id == user_id).order_by(Skill.name)
    )).scalars().all()

    return MyProfileResponse(
        id=user.id,
        email=user.email,
        full_name=profile.full_name if profile else None,
        avatar_url=public_object_url(profile.avatar_path) if profile else None,
        is_admin=account.is_admin,
        approval_status=account.approval_status.value,
        staged=StagedDetailResponse.model_validate(staged) if staged else None,
        live=AlumniDetailResponse.model_validate(live) if live else None,
        education=[EducationItem.model_validate(e) for e in education],
        work_history=[WorkItem.model_validate(w) for w in work],
        skills=[SkillItem.model_validate(s) for s in skills],
    )


async def _redeemed_import(db: AsyncSession, user_id: UUID) -> Optional[ImportedAlumni]:
    result = await db.execute(
        select(ImportedAlumni)
        .join(Invite, Invite.imported_alumni_id == ImportedAlumni.id)
        .where(Invite.redeemed_by == user_id, Invite.status == InviteStatus.REDEEMED.value)
        .order_by(Invite.redeemed_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_prefill(db: AsyncSession, user_id: UUID) -> PrefillResponse:
    """
    Setup form values from the imported row linked through a redeemed invite. Name and
    avatar are also copied onto the profile.
    """
    imported = await _redeemed_import(db, user_id)
    if imported is None:
        return PrefillResponse(found=False)

    profile = await _get_or_create_profile(db, user_id)
    if imported.full_name:
        profile.full_name = imported.full_name
    if imported.avatar_url:
        profile.avatar_path = imported.avatar_url
    try:
        await db.commit()
    except SQLAlchemyError:
        # Prefill still works without the profile copy
        await db.rollback()
        logger.exception("Could not copy imported name/avatar to profile %s", user_id)

    values = {form_field: getattr(imported, column) for column, form_field in PREFILL_FIELD_MAP.items()}
    return PrefillResponse(
        found=True,
        full_name=imported.full_name,
        avatar_url=public_object_url(imported.avatar_url),
        **values,
    )
