from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import require_admin
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import ApprovalResult, PromoteRequest, RejectRequest, StatusHistoryResponse
from . import service

router = APIRouter(prefix="/api/approval", tags=["approval"])


@router.post("/promote", response_model=ApprovalResult)
async def promote(
    payload: PromoteRequest,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
) -> ApprovalResult:
    """Copy the staged profile into the directory and approve the account."""
    try:
        return await service.promote(db, payload.user_id, performed_by=admin.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/reject", response_model=ApprovalResult)
async def reject(
    payload: RejectRequest,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
) -> ApprovalResult:
    """Reject a pending submission. The user may resubmit afterwards."""
    try:
        return await service.reject(db, payload.user_id, performed_by=admin.id, remarks=payload.remarks)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/history/{user_id}", response_model=StatusHistoryResponse)
async def history(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(require_admin),
) -> StatusHistoryResponse:
    """Status transitions of one account, oldest first."""
    return await service.status_history(db, user_id)
