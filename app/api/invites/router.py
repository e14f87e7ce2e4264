from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import require_admin
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import ClaimInviteRequest, ClaimInviteResponse, GenerateInvitesRequest, GenerateInvitesResponse
from . import service

router = APIRouter(prefix="/api/invites", tags=["invites"])


@router.post("/generate", response_model=GenerateInvitesResponse, dependencies=[Depends(require_admin)])
async def generate_invites(
    payload: GenerateInvitesRequest,
    db: AsyncSession = Depends(get_db),
) -> GenerateInvitesResponse:
    """Mint invite codes and claim links for imported alumni."""
    return await service.generate_invites(db, payload.imported_ids)


@router.post("/claim", response_model=ClaimInviteResponse)
async def claim_invite(
    payload: ClaimInviteRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> ClaimInviteResponse:
    """Redeem a code for the signed-in account. Codes are single-use."""
    try:
        return await service.redeem_invite(db, payload.code, current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
