from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import require_admin
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import (
    AdminAlumniPage,
    AdminDashboardStats,
    CreateAlumniRequest,
    CreateAlumniResponse,
    ImportedAlumniItem,
    PendingSubmission,
)
from . import service

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/dashboard", response_model=AdminDashboardStats, dependencies=[Depends(require_admin)])
async def admin_dashboard(db: AsyncSession = Depends(get_db)) -> AdminDashboardStats:
    return await service.get_dashboard_stats(db)


@router.get("/alumni", response_model=AdminAlumniPage, dependencies=[Depends(require_admin)])
async def list_alumni(
    page: int = Query(1, ge=1),
    db: AsyncSession = Depends(get_db),
) -> AdminAlumniPage:
    """Approved alumni, 50 per page."""
    return await service.list_approved_alumni(db, page=page)


@router.get("/alumni/pending", response_model=List[PendingSubmission], dependencies=[Depends(require_admin)])
async def list_pending(db: AsyncSession = Depends(get_db)) -> List[PendingSubmission]:
    """Accounts awaiting review, with the staged submission to approve or reject."""
    return await service.list_pending_submissions(db)


@router.get("/alumni/export", dependencies=[Depends(require_admin)])
async def export_alumni(db: AsyncSession = Depends(get_db)) -> StreamingResponse:
    """CSV of approved alumni."""
    lines = await service.build_export_lines(db)
    return StreamingResponse(
        iter(lines),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f"attachment; filename={service.export_filename()}",
            "Cache-Control": "no-store",
        },
    )


@router.get("/imported", response_model=List[ImportedAlumniItem], dependencies=[Depends(require_admin)])
async def list_imported(
    invite_status: Optional[str] = Query(None, description="pending, sent or accepted"),
    db: AsyncSession = Depends(get_db),
) -> List[ImportedAlumniItem]:
    return await service.list_imported(db, invite_status=invite_status)


@router.post(
    "/create-alumni",
    response_model=CreateAlumniResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_alumni(
    payload: CreateAlumniRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> CreateAlumniResponse:
    try:
        return await service.create_alumni(db, payload, created_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
