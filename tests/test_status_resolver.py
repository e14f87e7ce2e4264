"""Account status resolution and landing routes."""

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.status_resolver import SAFE_DEFAULT, AccountStatus, landing_route, resolve_account_status
from app.core.enums import ApprovalStatus



class BrokenSession:
    async def scalar(self, *args, **kwargs):
        raise SQLAlchemyError("connection lost")


@pytest.mark.asyncio
async def test_resolve_for_new_account(db_session: AsyncSession, make_account) -> None:
    user = await make_account("new@example.com")
    status = await resolve_account_status(db_session, user.id)
    assert status == AccountStatus(is_admin=False, approval_status=ApprovalStatus.PENDING, has_profile_setup=False)


@pytest.mark.asyncio
async def test_resolve_with_staged_profile(db_session: AsyncSession, make_account) -> None:
    user = await make_account(
        "staged@example.com", status=ApprovalStatus.REJECTED, staged={"grad_year": 2015}
    )
    status = await resolve_account_status(db_session, user.id)
    assert status.approval_status == ApprovalStatus.REJECTED
    assert status.has_profile_setup is True


@pytest.mark.asyncio
async def test_resolve_admin(db_session: AsyncSession, make_account) -> None:
    user = await make_account("admin2@example.com", is_admin=True)
    assert (await resolve_account_status(db_session, user.id)).is_admin is True


@pytest.mark.asyncio
async def test_resolve_failure_returns_safe_default(db_session: AsyncSession, make_account) -> None:
    user = await make_account("x@example.com", is_admin=True, status=ApprovalStatus.APPROVED)
    assert await resolve_account_status(BrokenSession(), user.id) == SAFE_DEFAULT
    assert SAFE_DEFAULT.is_admin is False
    assert SAFE_DEFAULT.approval_status == ApprovalStatus.PENDING


@pytest.mark.parametrize(
    "status, expected",
    [
        (AccountStatus(is_admin=True), "/admin/dashboard"),
        (AccountStatus(is_admin=True, approval_status=ApprovalStatus.REJECTED), "/admin/dashboard"),
        (AccountStatus(approval_status=ApprovalStatus.APPROVED, has_profile_setup=True), "/dashboard"),
        (AccountStatus(), "/profile/setup"),
        (AccountStatus(has_profile_setup=True), "/profile/pending"),
        (AccountStatus(approval_status=ApprovalStatus.REJECTED, has_profile_setup=True), "/profile/pending"),
    ],
)
def test_landing_route(status: AccountStatus, expected: str) -> None:
    assert landing_route(status) == expected
