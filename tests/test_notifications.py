import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.notifications.service import add_notification


async def _seed(db: AsyncSession, user_id, count: int) -> None:
    for i in range(count):
        add_notification(db, user_id, "event_created", f"Event {i}", "Details")
    await db.commit()


@pytest.mark.asyncio
async def test_list_and_count(
    client: AsyncClient, db_session: AsyncSession, approved_user, approved_headers
) -> None:
    await _seed(db_session, approved_user.id, 3)

    response = await client.get("/api/notifications", headers=approved_headers)
    assert response.status_code == 200
    notifications = response.json()["notifications"]
    assert len(notifications) == 3
    assert all(n["is_read"] is False for n in notifications)

    count = await client.get("/api/notifications/count", headers=approved_headers)
    assert count.json() == {"count": 3}


@pytest.mark.asyncio
async def test_mark_one_read(
    client: AsyncClient, db_session: AsyncSession, approved_user, approved_headers
) -> None:
    await _seed(db_session, approved_user.id, 2)
    listed = (await client.get("/api/notifications", headers=approved_headers)).json()["notifications"]

    response = await client.patch(
        "/api/notifications",
        json={"notification_id": listed[0]["id"]},
        headers=approved_headers,
    )
    assert response.status_code == 200
    assert response.json() == {"success": True, "updated": 1}

    assert (await client.get("/api/notifications/count", headers=approved_headers)).json() == {"count": 1}
    unread = await client.get("/api/notifications", params={"unread_only": True}, headers=approved_headers)
    assert [n["id"] for n in unread.json()["notifications"]] == [listed[1]["id"]]


@pytest.mark.asyncio
async def test_mark_all_read(
    client: AsyncClient, db_session: AsyncSession, approved_user, approved_headers
) -> None:
    await _seed(db_session, approved_user.id, 4)

    response = await client.patch("/api/notifications", json={"mark_all_read": True}, headers=approved_headers)
    assert response.json() == {"success": True, "updated": 4}
    assert (await client.get("/api/notifications/count", headers=approved_headers)).json() == {"count": 0}


@pytest.mark.asyncio
async def test_cannot_mark_someone_elses_notification(
    client: AsyncClient, db_session: AsyncSession, approved_user, make_account, headers_for
) -> None:
    await _seed(db_session, approved_user.id, 1)
    other = await make_account("other@example.com")
    # Pending accounts can still read their own notifications
    listed = (await client.get("/api/notifications", headers=headers_for(other.id))).json()["notifications"]
    assert listed == []

    own = (await client.get("/api/notifications", headers=headers_for(approved_user.id))).json()["notifications"]
    response = await client.patch(
        "/api/notifications",
        json={"notification_id": own[0]["id"]},
        headers=headers_for(other.id),
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_unknown_notification(client: AsyncClient, approved_headers) -> None:
    response = await client.patch(
        "/api/notifications",
        json={"notification_id": str(uuid.uuid4())},
        headers=approved_headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_requires_target(client: AsyncClient, approved_headers) -> None:
    response = await client.patch("/api/notifications", json={}, headers=approved_headers)
    assert response.status_code == 422
