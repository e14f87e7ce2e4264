import asyncio
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import ApprovalStatus
from app.core.models import Event, EventAttendee, Notification


def _when(days: int) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


async def _create(client: AsyncClient, headers, **overrides):
    payload = {
        "title": "Annual reunion",
        "description": "Dinner on campus",
        "event_date": _when(30),
        "location": "Main hall",
        **overrides,
    }
    return await client.post("/api/events/create", json=payload, headers=headers)


@pytest.mark.asyncio
async def test_create_event_notifies_approved_alumni(
    client: AsyncClient, db_session: AsyncSession, admin_headers, approved_user, make_account
) -> None:
    await make_account("pending@example.com")

    response = await _create(client, admin_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["notified"] == 1
    assert data["event"]["title"] == "Annual reunion"
    assert data["event"]["current_attendees"] == 0

    notifications = (await db_session.execute(select(Notification))).scalars().all()
    assert len(notifications) == 1
    assert notifications[0].user_id == approved_user.id
    assert notifications[0].type == "event_created"
    assert notifications[0].title == "New event: Annual reunion"
    assert str(notifications[0].related_event_id) == data["event"]["id"]


@pytest.mark.asyncio
async def test_unpublished_event_sends_no_notifications(client: AsyncClient, admin_headers, approved_user) -> None:
    response = await _create(client, admin_headers, is_published=False)
    assert response.json()["notified"] == 0


@pytest.mark.asyncio
async def test_create_event_validation(client: AsyncClient, admin_headers) -> None:
    response = await _create(client, admin_headers, event_date=_when(5), event_end_date=_when(4))
    assert response.status_code == 422
    assert "Event end date cannot be before the start date" in response.text

    response = await _create(client, admin_headers, max_attendees=0)
    assert response.status_code == 422

    response = await _create(client, admin_headers, title="  ")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_event_requires_admin(client: AsyncClient, approved_headers) -> None:
    response = await _create(client, approved_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_events_shows_published_only(client: AsyncClient, admin_headers, approved_headers) -> None:
    await _create(client, admin_headers, title="Later", event_date=_when(20))
    await _create(client, admin_headers, title="Sooner", event_date=_when(2))
    await _create(client, admin_headers, title="Past", event_date=_when(-2))
    await _create(client, admin_headers, title="Draft", is_published=False)

    response = await client.get("/api/events", headers=approved_headers)
    assert [e["title"] for e in response.json()["events"]] == ["Past", "Sooner", "Later"]

    upcoming = await client.get("/api/events", params={"upcoming": True}, headers=approved_headers)
    assert [e["title"] for e in upcoming.json()["events"]] == ["Sooner", "Later"]


@pytest.mark.asyncio
async def test_unpublished_event_hidden_from_alumni(client: AsyncClient, admin_headers, approved_headers) -> None:
    event_id = (await _create(client, admin_headers, is_published=False)).json()["event"]["id"]
    assert (await client.get(f"/api/events/{event_id}", headers=approved_headers)).status_code == 404
    assert (await client.get(f"/api/events/{event_id}", headers=admin_headers)).status_code == 200


@pytest.mark.asyncio
async def test_register_for_event(
    client: AsyncClient, db_session: AsyncSession, admin_headers, approved_user, approved_headers
) -> None:
    event_id = (await _create(client, admin_headers, registration_required=True)).json()["event"]["id"]

    response = await client.post("/api/events/register", json={"event_id": event_id}, headers=approved_headers)
    assert response.status_code == 201
    registration = response.json()["registration"]
    assert registration["user_id"] == str(approved_user.id)
    assert registration["status"] == "registered"

    detail = (await client.get(f"/api/events/{event_id}", headers=approved_headers)).json()
    assert detail["is_registered"] is True
    assert detail["current_attendees"] == 1
    assert detail["is_full"] is False

    again = await client.post("/api/events/register", json={"event_id": event_id}, headers=approved_headers)
    assert again.status_code == 400
    assert again.json()["detail"] == "Already registered for this event"

    event = await db_session.get(Event, uuid.UUID(event_id))
    await db_session.refresh(event)
    assert event.current_attendees == 1


@pytest.mark.asyncio
async def test_register_rejections(client: AsyncClient, admin_headers, approved_headers) -> None:
    missing = await client.post("/api/events/register", json={"event_id": str(uuid.uuid4())}, headers=approved_headers)
    assert missing.status_code == 404

    open_event = (await _create(client, admin_headers)).json()["event"]["id"]
    response = await client.post("/api/events/register", json={"event_id": open_event}, headers=approved_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Event does not require registration"

    draft = (await _create(client, admin_headers, is_published=False, registration_required=True)).json()["event"]["id"]
    response = await client.post("/api/events/register", json={"event_id": draft}, headers=approved_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Event is not published"


@pytest.mark.asyncio
async def test_register_respects_capacity(
    client: AsyncClient, db_session: AsyncSession, admin_headers, make_account, headers_for
) -> None:
    event_id = (await _create(client, admin_headers, registration_required=True, max_attendees=1)).json()["event"]["id"]
    first = await make_account("first@example.com", status=ApprovalStatus.APPROVED)
    second = await make_account("second@example.com", status=ApprovalStatus.APPROVED)

    ok = await client.post("/api/events/register", json={"event_id": event_id}, headers=headers_for(first.id))
    assert ok.status_code == 201
    full = await client.post("/api/events/register", json={"event_id": event_id}, headers=headers_for(second.id))
    assert full.status_code == 400
    assert full.json()["detail"] == "Event is full"

    attendees = (await db_session.execute(
        select(EventAttendee).where(EventAttendee.event_id == uuid.UUID(event_id))
    )).scalars().all()
    assert [a.user_id for a in attendees] == [first.id]

    detail = (await client.get(f"/api/events/{event_id}", headers=headers_for(second.id))).json()
    assert detail["is_full"] is True
    assert detail["is_registered"] is False


@pytest.mark.asyncio
async def test_pending_user_cannot_register(client: AsyncClient, admin_headers, make_account, headers_for) -> None:
    event_id = (await _create(client, admin_headers, registration_required=True)).json()["event"]["id"]
    user = await make_account("waiting@example.com")
    response = await client.post("/api/events/register", json={"event_id": event_id}, headers=headers_for(user.id))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_concurrent_registrations_never_exceed_capacity(
    file_client: AsyncClient, file_db_session: AsyncSession, make_file_account, headers_for
) -> None:
    event = Event(
        title="Limited workshop",
        event_date=datetime.now(timezone.utc) + timedelta(days=7),
        registration_required=True,
        max_attendees=1,
    )
    file_db_session.add(event)
    await file_db_session.commit()
    users = [
        await make_file_account(f"racer{i}@example.com", status=ApprovalStatus.APPROVED)
        for i in range(5)
    ]

    responses = await asyncio.gather(*(
        file_client.post("/api/events/register", json={"event_id": str(event.id)}, headers=headers_for(u.id))
        for u in users
    ))
    codes = sorted(r.status_code for r in responses)
    assert codes == [201, 400, 400, 400, 400]
    assert all(r.json()["detail"] == "Event is full" for r in responses if r.status_code == 400)

    attendees = await file_db_session.scalar(
        select(func.count(EventAttendee.id)).where(EventAttendee.event_id == event.id)
    )
    assert attendees == 1
    current = await file_db_session.scalar(select(Event.current_attendees).where(Event.id == event.id))
    assert current == 1
