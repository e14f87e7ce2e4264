import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.approval import transitions
from app.core.enums import ApprovalStatus
from app.core.exceptions import ServiceError
from app.core.models import AdminFlag, StatusTransition


P, A, R = ApprovalStatus.PENDING, ApprovalStatus.APPROVED, ApprovalStatus.REJECTED


@pytest.mark.parametrize(
    "from_status, to_status, allowed",
    [
        (P, A, True),
        (P, R, True),
        (P, P, True),
        (R, P, True),
        (R, A, False),
        (R, R, False),
        (A, P, False),
        (A, R, False),
        (A, A, False),
    ],
)
def test_allowed_moves(from_status, to_status, allowed) -> None:
    assert transitions.can_transition(from_status, to_status) is allowed


@pytest.mark.asyncio
async def test_transition_records_history(db_session: AsyncSession, make_account) -> None:
    user = await make_account("t@example.com")
    flag = await transitions.transition(db_session, user.id, R, transitions.ACTION_REJECTED, remarks="blurry photo")
    await db_session.commit()
    assert flag.status == "rejected"

    rows = (await db_session.execute(
        select(StatusTransition).where(StatusTransition.user_id == user.id)
    )).scalars().all()
    assert len(rows) == 1
    assert (rows[0].from_status, rows[0].to_status, rows[0].action) == ("pending", "rejected", "profile_rejected")
    assert rows[0].remarks == "blurry photo"


@pytest.mark.asyncio
async def test_disallowed_transition_raises_conflict(db_session: AsyncSession, make_account) -> None:
    user = await make_account("r@example.com", status=R)
    with pytest.raises(ServiceError) as exc:
        await transitions.transition(db_session, user.id, A, transitions.ACTION_APPROVED)
    assert exc.value.status_code == 409
    await db_session.rollback()
    assert (await db_session.get(AdminFlag, user.id)).status == "rejected"


@pytest.mark.asyncio
async def test_transition_creates_missing_flag(db_session: AsyncSession, make_account) -> None:
    user = await make_account("noflag@example.com")
    await db_session.delete(await db_session.get(AdminFlag, user.id))
    await db_session.commit()

    await transitions.transition(db_session, user.id, P, transitions.ACTION_SUBMITTED)
    await db_session.commit()
    assert (await db_session.get(AdminFlag, user.id)).status == "pending"
