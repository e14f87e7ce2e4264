from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import require_approved
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import AlumniPublicProfile, DirectoryFilters, DirectoryPage, UserDashboard
from . import service

router = APIRouter(prefix="/api/alumni", tags=["directory"])
dashboard_router = APIRouter(prefix="/api/dashboard", tags=["directory"])


@router.get("", response_model=DirectoryPage, dependencies=[Depends(require_approved)])
async def search_alumni(
    q: Optional[str] = Query(None, max_length=100, description="Name, department, company or title"),
    year: Optional[int] = Query(None, ge=1900, le=2100),
    dept: Optional[str] = Query(None, max_length=120),
    company: Optional[str] = Query(None, max_length=120),
    page: int = Query(1, ge=1),
    db: AsyncSession = Depends(get_db),
) -> DirectoryPage:
    """Approved alumni, 20 per page."""
    return await service.search_alumni(db, q=q, year=year, dept=dept, company=company, page=page)


@router.get("/filters", response_model=DirectoryFilters, dependencies=[Depends(require_approved)])
async def directory_filters(db: AsyncSession = Depends(get_db)) -> DirectoryFilters:
    """Distinct graduation years and departments for the filter dropdowns."""
    return await service.get_filters(db)


@router.get("/{alumni_id}", response_model=AlumniPublicProfile, dependencies=[Depends(require_approved)])
async def get_alumni(alumni_id: UUID, db: AsyncSession = Depends(get_db)) -> AlumniPublicProfile:
    try:
        return await service.get_alumni_profile(db, alumni_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@dashboard_router.get("", response_model=UserDashboard)
async def user_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_approved),
) -> UserDashboard:
    return await service.get_dashboard(db, current_user.id)
