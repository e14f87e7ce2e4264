"""Directory listing over the live alumni records, plus the signed-in user's dashboard."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.core.models import AlumniDetail, Education, Profile, Skill, WorkHistory
from app.core.storage import public_object_url

from app.api.profile.schemas import EducationItem, SkillItem, WorkItem

from .schemas import AlumniCard, AlumniPublicProfile, DirectoryFilters, DirectoryPage, UserDashboard

logger = logging.getLogger(__name__)

PAGE_SIZE = 20

# Fields counted for profile completion on the dashboard
COMPLETION_FIELDS = (
    "headline",
    "bio",
    "grad_year",
    "department",
    "current_company",
    "current_title",
    "location",
    "linkedin_url",
)


LIKE_ESCAPE = "\\"


def _like(value: str) -> str:
    """Substring pattern with the LIKE wildcards in user input matched literally. Use with escape=LIKE_ESCAPE."""
    escaped = (
        value.strip()
        .replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def total_pages(total: int, page_size: int) -> int:
    # An empty listing still has one (empty) page
    return max(1, (total + page_size - 1) // page_size)


def _card(detail: AlumniDetail, full_name: Optional[str], avatar_path: Optional[str]) -> AlumniCard:
    return AlumniCard(
        id=detail.id,
        full_name=full_name,
        avatar_url=public_object_url(avatar_path),
        headline=detail.headline,
        grad_year=detail.grad_year,
        department=detail.department,
        current_company=detail.current_company,
        current_title=detail.current_title,
        location=detail.location,
    )


async def search_alumni(
    db: AsyncSession,
    q: Optional[str] = None,
    year: Optional[int] = None,
    dept: Optional[str] = None,
    company: Optional[str] = None,
    page: int = 1,
) -> DirectoryPage:
    """
    Filter live records. q matches name, department, company or title (case-insensitive);
    year is exact; dept and company are substring matches. Ordered by grad_year, newest first.
    """
    conditions = []
    if year:
        conditions.append(AlumniDetail.grad_year == year)
    if dept and dept.strip():
        conditions.append(AlumniDetail.department.ilike(_like(dept), escape=LIKE_ESCAPE))
    if company and company.strip():
        conditions.append(AlumniDetail.current_company.ilike(_like(company), escape=LIKE_ESCAPE))
    if q and q.strip():
        pattern = _like(q)
        name_ids = (await db.execute(
            select(Profile.id).where(Profile.full_name.ilike(pattern, escape=LIKE_ESCAPE))
        )).scalars().all()
        alternatives = [
            AlumniDetail.department.ilike(pattern, escape=LIKE_ESCAPE),
            AlumniDetail.current_company.ilike(pattern, escape=LIKE_ESCAPE),
            AlumniDetail.current_title.ilike(pattern, escape=LIKE_ESCAPE),
        ]
        if name_ids:
            alternatives.insert(0, AlumniDetail.id.in_(name_ids))
        conditions.append(or_(*alternatives))

    total = await db.scalar(select(func.count()).select_from(AlumniDetail).where(*conditions)) or 0

    result = await db.execute(
        select(AlumniDetail, Profile.full_name, Profile.avatar_path)
        .outerjoin(Profile, Profile.id == AlumniDetail.id)
        .where(*conditions)
        .order_by(AlumniDetail.grad_year.desc().nulls_last(), AlumniDetail.id)
        .offset((page - 1) * PAGE_SIZE)
        .limit(PAGE_SIZE)
    )
    items = [_card(detail, full_name, avatar) for detail, full_name, avatar in result.all()]
    return DirectoryPage(
        items=items,
        total=total,
        page=page,
        page_size=PAGE_SIZE,
        total_pages=total_pages(total, PAGE_SIZE),
    )


async def get_alumni_profile(db: AsyncSession, alumni_id: UUID) -> AlumniPublicProfile:
    row = (await db.execute(
        select(AlumniDetail, Profile.full_name, Profile.avatar_path)
        .outerjoin(Profile, Profile.id == AlumniDetail.id)
        .where(AlumniDetail.id == alumni_id)
    )).first()
    if row is None:
        raise ServiceError("Alumni not found", status.HTTP_404_NOT_FOUND)
    detail, full_name, avatar = row

    education = (await db.execute(
        select(Education).where(Education.user_id == alumni_id).order_by(Education.start_year.asc())
    )).scalars().all()
    work = (await db.execute(
        select(WorkHistory).where(WorkHistory.user_id == alumni_id).order_by(WorkHistory.start_date.desc())
    )).scalars().all()
    skills = (await db.execute(
        select(Skill).where(Skill.user_id == alumni_id).order_by(Skill.name)
    )).scalars().all()

    card = _card(detail, full_name, avatar)
    return AlumniPublicProfile(
        **card.model_dump(),
        bio=detail.bio,
        father_name=detail.father_name,
        primary_mobile=detail.primary_mobile,
        whatsapp_number=detail.whatsapp_number,
        linkedin_url=detail.linkedin_url,
        twitter_url=detail.twitter_url,
        facebook_url=detail.facebook_url,
        instagram_url=detail.instagram_url,
        github_url=detail.github_url,
        website_url=detail.website_url,
        education=[EducationItem.model_validate(e) for e in education],
        work_history=[WorkItem.model_validate(w) for w in work],
        skills=[SkillItem.model_validate(s) for s in skills],
    )


async def get_filters(db: AsyncSession) -> DirectoryFilters:
    years = (await db.execute(
        select(AlumniDetail.grad_year)
        .where(AlumniDetail.grad_year.is_not(None))
        .distinct()
        .order_by(AlumniDetail.grad_year.desc())
    )).scalars().all()
    departments = (await db.execute(
        select(AlumniDetail.department)
        .where(AlumniDetail.department.is_not(None))
        .distinct()
        .order_by(AlumniDetail.department)
    )).scalars().all()
    return DirectoryFilters(years=list(years), departments=list(departments))


def completion_percent(full_name: Optional[str], detail: Optional[AlumniDetail]) -> int:
    filled = 1 if full_name else 0
    if detail is not None:
        filled += sum(1 for f in COMPLETION_FIELDS if getattr(detail, f) not in (None, ""))
    return round(100 * filled / (len(COMPLETION_FIELDS) + 1))


async def get_dashboard(db: AsyncSession, user_id: UUID) -> UserDashboard:
    total_alumni = await db.scalar(select(func.count()).select_from(AlumniDetail)) or 0
    profile = await db.get(Profile, user_id)
    detail = await db.get(AlumniDetail, user_id)
    full_name = profile.full_name if profile else None
    return UserDashboard(
        profile_name=full_name or "User",
        total_alumni=total_alumni,
        profile_complete=bool(full_name and detail is not None and detail.headline),
        completion_percent=completion_percent(full_name, detail),
    )
