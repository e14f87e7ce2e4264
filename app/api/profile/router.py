from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import require_approved
from app.auth.schemas import AccountStatusInfo, CurrentUser
from app.auth.status_resolver import landing_route, resolve_account_status
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import LiveProfileUpdate, MyProfileResponse, PrefillResponse, StagedProfileSubmit, SubmitResponse
from . import service

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("/status", response_model=AccountStatusInfo)
async def account_status(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> AccountStatusInfo:
    """Admin bit, approval status, setup state and where the client should go next."""
    account = await resolve_account_status(db, current_user.id)
    return AccountStatusInfo(
        is_admin=account.is_admin,
        approval_status=account.approval_status.value,
        has_profile_setup=account.has_profile_setup,
        next_route=landing_route(account),
    )


@router.get("/me", response_model=MyProfileResponse)
async def my_profile(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> MyProfileResponse:
    try:
        return await service.get_my_profile(db, current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/prefill", response_model=PrefillResponse)
async def prefill(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> PrefillResponse:
    """Values for the setup form from a claimed invite, if any."""
    return await service.get_prefill(db, current_user.id)


@router.post("/submit", response_model=SubmitResponse)
async def submit_profile(
    payload: StagedProfileSubmit,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> SubmitResponse:
    """Save the setup form for review. Resubmitting after rejection moves the account back to pending."""
    try:
        return await service.save_staged(db, current_user.id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/me", response_model=MyProfileResponse)
async def update_profile(
    payload: LiveProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_approved),
) -> MyProfileResponse:
    try:
        return await service.update_live_profile(db, current_user.id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
