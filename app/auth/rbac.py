from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.auth.status_resolver import resolve_account_status
from app.core.enums import ApprovalStatus
from app.db.session import get_db

PENDING_ROUTE = "/profile/pending"


async def require_admin(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Require profiles.is_admin. Used on every admin route."""
    account = await resolve_account_status(db, current_user.id)
    if not account.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only admins can perform this action",
        )
    return current_user


async def require_approved(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """
    Require an approved account (admins pass too). Pending and rejected accounts get 403
    with the route they should be sent to.
    """
    account = await resolve_account_status(db, current_user.id)
    if account.is_admin or account.approval_status == ApprovalStatus.APPROVED:
        return current_user
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "message": "Your profile is awaiting approval",
            "approval_status": account.approval_status.value,
            "redirect_to": PENDING_ROUTE,
        },
    )
