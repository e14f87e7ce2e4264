import io

import pytest
from httpx import AsyncClient
from openpyxl import Workbook
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.imports.parser import IMPORT_COLUMNS, parse_import_csv, parse_import_xlsx, sample_csv
from app.core.models import ImportBatch, ImportedAlumni

CSV_TEXT = (
    "Full Name,Email,Grad Year,Department,Company\n"
    "  Anil Menon ,anil@example.com,2015,Mechanical,  Tata \n"
    "Bina Das,bina@example.com,,Civil,\n"
    ",nobody@example.com,2010,Civil,Acme\n"
    "Chetan Joshi,chetan@example.com,2019,,\n"
)


def test_parse_csv_normalizes_headers_and_trims_cells() -> None:
    rows = parse_import_csv(CSV_TEXT)
    assert [r["email"] for r in rows] == ["anil@example.com", "bina@example.com", "chetan@example.com"]
    assert rows[0]["full_name"] == "Anil Menon"
    assert rows[0]["company"] == "Tata"
    assert rows[0]["grad_year"] == "2015"
    assert rows[1]["grad_year"] is None
    assert rows[1]["company"] is None
    assert set(rows[0]) == set(IMPORT_COLUMNS)


def test_parse_csv_strips_byte_order_mark() -> None:
    rows = parse_import_csv("\ufefffull_name,email\nA B,ab@example.com\n")
    assert rows == [dict({c: None for c in IMPORT_COLUMNS}, full_name="A B", email="ab@example.com")]


def test_parse_csv_missing_required_column() -> None:
    with pytest.raises(ValueError, match="Missing required column: email"):
        parse_import_csv("full_name,company\nA B,Acme\n")


def test_parse_xlsx() -> None:
    wb = Workbook()
    ws = wb.active
    ws.append(["full_name", "email", "grad_year", "role"])
    ws.append(["Deepa Nair", "deepa@example.com", 2014, "Analyst"])
    ws.append([None, "skip@example.com", 2014, None])
    buf = io.BytesIO()
    wb.save(buf)

    rows = parse_import_xlsx(buf.getvalue())
    assert len(rows) == 1
    assert rows[0]["full_name"] == "Deepa Nair"
    assert rows[0]["grad_year"] == "2014"
    assert rows[0]["role"] == "Analyst"


def test_parse_xlsx_rejects_garbage() -> None:
    with pytest.raises(ValueError, match="Invalid Excel file"):
        parse_import_xlsx(b"not a workbook")


def test_sample_csv_round_trips_through_parser() -> None:
    rows = parse_import_csv(sample_csv())
    assert [r["email"] for r in rows] == ["john.doe@example.com", "jane.smith@example.com"]
    assert rows[1]["twitter_url"] is None


@pytest.mark.asyncio
async def test_preview_upload(client: AsyncClient, admin_headers) -> None:
    response = await client.post(
        "/api/import/preview",
        files={"file": ("alumni.csv", CSV_TEXT.encode("utf-8"), "text/csv")},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["filename"] == "alumni.csv"
    assert data["total"] == 3
    assert data["rows"][0]["full_name"] == "Anil Menon"


@pytest.mark.asyncio
async def test_preview_is_capped(client: AsyncClient, admin_headers) -> None:
    lines = ["full_name,email"] + [f"Person {i},p{i}@example.com" for i in range(60)]
    response = await client.post(
        "/api/import/preview",
        files={"file": ("big.csv", "\n".join(lines).encode("utf-8"), "text/csv")},
        headers=admin_headers,
    )
    assert response.json()["total"] == 60
    assert len(response.json()["rows"]) == 50


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "content",
    [b"", b"name,company\nA,B\n"],
)
async def test_preview_rejects_bad_files(client: AsyncClient, admin_headers, content) -> None:
    response = await client.post(
        "/api/import/preview",
        files={"file": ("alumni.csv", content, "text/csv")},
        headers=admin_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_commit_inserts_one_batch(
    client: AsyncClient, db_session: AsyncSession, admin_headers
) -> None:
    rows = parse_import_csv(CSV_TEXT)
    response = await client.post(
        "/api/import/commit",
        json={"filename": "alumni.csv", "rows": rows},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert data["inserted"] == 3

    imported = (await db_session.execute(
        select(ImportedAlumni).order_by(ImportedAlumni.email)
    )).scalars().all()
    assert [r.email for r in imported] == ["anil@example.com", "bina@example.com", "chetan@example.com"]
    assert imported[0].grad_year == 2015
    assert all(r.invite_status == "pending" for r in imported)
    assert {str(r.batch_id) for r in imported} == {data["batch_id"]}

    batches = await client.get("/api/import/batches", headers=admin_headers)
    assert [(b["filename"], b["row_count"]) for b in batches.json()] == [("alumni.csv", 3)]


@pytest.mark.asyncio
async def test_commit_requires_rows(client: AsyncClient, admin_headers) -> None:
    response = await client.post("/api/import/commit", json={"rows": []}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "rows required"


@pytest.mark.asyncio
async def test_commit_rejects_duplicates_in_upload(
    client: AsyncClient, db_session: AsyncSession, admin_headers
) -> None:
    rows = [
        {"full_name": "One", "email": "same@example.com"},
        {"full_name": "Two", "email": "SAME@example.com"},
    ]
    response = await client.post("/api/import/commit", json={"rows": rows}, headers=admin_headers)
    assert response.status_code == 400
    assert "same@example.com" in response.json()["detail"]
    assert await db_session.scalar(select(func.count(ImportBatch.id))) == 0


@pytest.mark.asyncio
async def test_commit_rejects_already_imported(
    client: AsyncClient, db_session: AsyncSession, admin_headers
) -> None:
    first = await client.post(
        "/api/import/commit",
        json={"rows": [{"full_name": "Old", "email": "old@example.com"}]},
        headers=admin_headers,
    )
    assert first.status_code == 200

    second = await client.post(
        "/api/import/commit",
        json={"rows": [
            {"full_name": "New", "email": "new@example.com"},
            {"full_name": "Old Again", "email": "old@example.com"},
        ]},
        headers=admin_headers,
    )
    assert second.status_code == 409
    # Nothing from the rejected upload is saved
    assert await db_session.scalar(select(func.count(ImportedAlumni.id))) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "row",
    [
        {"full_name": "Bad Year", "email": "y@example.com", "grad_year": "twenty"},
        {"full_name": "Bad Mail", "email": "not-an-email"},
        {"full_name": "", "email": "blank@example.com"},
    ],
)
async def test_commit_validates_rows(client: AsyncClient, admin_headers, row) -> None:
    response = await client.post("/api/import/commit", json={"rows": [row]}, headers=admin_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_sample_csv_download(client: AsyncClient, admin_headers) -> None:
    response = await client.get("/api/import/sample-csv", headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "alumni_import_sample.csv" in response.headers["content-disposition"]
    assert response.text.splitlines()[0] == ",".join(IMPORT_COLUMNS)


@pytest.mark.asyncio
async def test_import_routes_require_admin(client: AsyncClient, approved_headers) -> None:
    assert (await client.get("/api/import/sample-csv", headers=approved_headers)).status_code == 403
    response = await client.post(
        "/api/import/commit",
        json={"rows": [{"full_name": "X Y", "email": "xy@example.com"}]},
        headers=approved_headers,
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_commit_failure_saves_nothing(
    client: AsyncClient, db_session: AsyncSession, admin_headers, monkeypatch
) -> None:
    async def failing_commit(self) -> None:
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(AsyncSession, "commit", failing_commit)
    response = await client.post(
        "/api/import/commit",
        json={"filename": "alumni.csv", "rows": parse_import_csv(CSV_TEXT)},
        headers=admin_headers,
    )
    assert response.status_code == 500
    assert response.json()["detail"] == "Import failed; no rows were saved"

    assert await db_session.scalar(select(func.count(ImportBatch.id))) == 0
    assert await db_session.scalar(select(func.count(ImportedAlumni.id))) == 0
