import asyncio
import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.models import ImportBatch, ImportedAlumni, Invite


async def _imported(db: AsyncSession, *emails: str) -> list:
    batch = ImportBatch(filename="seed.csv", row_count=len(emails))
    db.add(batch)
    await db.flush()
    rows = [ImportedAlumni(batch_id=batch.id, full_name=e.split("@")[0].title(), email=e) for e in emails]
    db.add_all(rows)
    await db.commit()
    return rows


@pytest.mark.asyncio
async def test_generate_invites(client: AsyncClient, db_session: AsyncSession, admin_headers) -> None:
    first, second = await _imported(db_session, "first@example.com", "second@example.com")
    missing = uuid.uuid4()

    response = await client.post(
        "/api/invites/generate",
        json={"imported_ids": [str(first.id), str(second.id), str(first.id), str(missing)]},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert [i["email"] for i in data["invites"]] == ["first@example.com", "second@example.com"]
    assert data["skipped"] == [{"imported_id": str(missing), "reason": "not found"}]

    invite = data["invites"][0]
    assert invite["link"] == f"http://alumni.test/invite/claim?code={invite['code']}"

    db_session.expunge_all()
    assert (await db_session.get(ImportedAlumni, first.id)).invite_status == "sent"
    stored = (await db_session.execute(select(Invite).where(Invite.code == invite["code"]))).scalar_one()
    assert stored.status == "sent"
    assert stored.imported_alumni_id == first.id


@pytest.mark.asyncio
async def test_generate_requires_ids(client: AsyncClient, admin_headers) -> None:
    response = await client.post("/api/invites/generate", json={"imported_ids": []}, headers=admin_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_generate_requires_admin(client: AsyncClient, db_session: AsyncSession, approved_headers) -> None:
    (row,) = await _imported(db_session, "x@example.com")
    response = await client.post(
        "/api/invites/generate", json={"imported_ids": [str(row.id)]}, headers=approved_headers
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_claim_invite_once(
    client: AsyncClient, db_session: AsyncSession, admin_headers, make_account, headers_for
) -> None:
    (row,) = await _imported(db_session, "claimer@example.com")
    generated = await client.post(
        "/api/invites/generate", json={"imported_ids": [str(row.id)]}, headers=admin_headers
    )
    code = generated.json()["invites"][0]["code"]
    user = await make_account("claimer@example.com", None)
    other = await make_account("late@example.com", None)

    response = await client.post("/api/invites/claim", json={"code": code}, headers=headers_for(user.id))
    assert response.status_code == 200
    assert response.json() == {
        "ok": True,
        "imported_alumni_id": str(row.id),
        "full_name": "Claimer",
        "next_route": "/profile/setup",
    }

    again = await client.post("/api/invites/claim", json={"code": code}, headers=headers_for(other.id))
    assert again.status_code == 409

    db_session.expunge_all()
    invite = (await db_session.execute(select(Invite).where(Invite.code == code))).scalar_one()
    assert invite.status == "redeemed"
    assert invite.redeemed_by == user.id
    assert (await db_session.get(ImportedAlumni, row.id)).invite_status == "accepted"

    # Accepted rows get no new invites
    regenerated = await client.post(
        "/api/invites/generate", json={"imported_ids": [str(row.id)]}, headers=admin_headers
    )
    assert regenerated.json()["skipped"] == [{"imported_id": str(row.id), "reason": "already accepted"}]


@pytest.mark.asyncio
async def test_claim_unknown_code(client: AsyncClient, make_account, headers_for) -> None:
    user = await make_account("someone@example.com")
    response = await client.post("/api/invites/claim", json={"code": "does-not-exist"}, headers=headers_for(user.id))
    assert response.status_code == 404
    assert response.json()["detail"] == "Invalid invite code"


@pytest.mark.asyncio
async def test_concurrent_claims_redeem_once(
    file_client: AsyncClient, file_db_session: AsyncSession, make_file_account, headers_for
) -> None:
    (row,) = await _imported(file_db_session, "contested@example.com")
    file_db_session.add(Invite(imported_alumni_id=row.id, code="shared-code", status="sent"))
    await file_db_session.commit()
    first = await make_file_account("one@example.com", None)
    second = await make_file_account("two@example.com", None)

    responses = await asyncio.gather(*(
        file_client.post("/api/invites/claim", json={"code": "shared-code"}, headers=headers_for(u.id))
        for u in (first, second)
    ))
    assert sorted(r.status_code for r in responses) == [200, 409]

    winner = first if responses[0].status_code == 200 else second
    redeemed_by = await file_db_session.scalar(select(Invite.redeemed_by).where(Invite.code == "shared-code"))
    assert redeemed_by == winner.id
    status = await file_db_session.scalar(
        select(ImportedAlumni.invite_status).where(ImportedAlumni.id == row.id)
    )
    assert status == "accepted"
