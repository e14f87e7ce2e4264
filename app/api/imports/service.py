"""
Bulk alumni import: preview an uploaded file, then commit the previewed rows as one
batch. A commit either inserts every row or none.
"""

import logging
from collections import Counter
from typing import List
from uuid import UUID

from fastapi import UploadFile, status
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import ImportBatchStatus, ImportedInviteStatus
from app.core.exceptions import ServiceError
from app.core.models import ImportBatch, ImportedAlumni

from .parser import parse_import_csv, parse_import_xlsx
from .schemas import (
    ImportBatchResponse,
    ImportCommitRequest,
    ImportCommitResponse,
    ImportPreviewResponse,
    PreviewRow,
)

logger = logging.getLogger(__name__)

PREVIEW_LIMIT = 50


async def preview_upload(file: UploadFile) -> ImportPreviewResponse:
    """Parse an uploaded .csv or .xlsx file; return the first rows and the total parsed."""
    filename = file.filename or "upload.csv"
    content = await file.read()
    if not content:
        raise ServiceError("File is empty", status.HTTP_400_BAD_REQUEST)

    try:
        if filename.lower().endswith((".xlsx", ".xlsm")):
            rows = parse_import_xlsx(content)
        else:
            try:
                text = content.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise ValueError("CSV file must be UTF-8 encoded") from e
            rows = parse_import_csv(text)
    except ValueError as e:
        raise ServiceError(str(e), status.HTTP_400_BAD_REQUEST) from e

    return ImportPreviewResponse(
        filename=filename,
        total=len(rows),
        rows=[PreviewRow(**row) for row in rows[:PREVIEW_LIMIT]],
    )


async def commit_import(
    db: AsyncSession,
    payload: ImportCommitRequest,
    uploaded_by: UUID,
) -> ImportCommitResponse:
    if not payload.rows:
        raise ServiceError("rows required", status.HTTP_400_BAD_REQUEST)

    duplicates = sorted(email for email, n in Counter(r.email for r in payload.rows).items() if n > 1)
    if duplicates:
        raise ServiceError(
            f"Duplicate e-mail in upload: {', '.join(duplicates)}",
            status.HTTP_400_BAD_REQUEST,
        )

    emails = [r.email for r in payload.rows]
    existing = (await db.execute(
        select(ImportedAlumni.email).where(func.lower(ImportedAlumni.email).in_(emails))
    )).scalars().all()
    if existing:
        raise ServiceError(
            f"Already imported: {', '.join(sorted(set(e.lower() for e in existing)))}",
            status.HTTP_409_CONFLICT,
        )

    try:
        batch = ImportBatch(
            filename=payload.filename,
            row_count=len(payload.rows),
            status=ImportBatchStatus.COMMITTED.value,
            uploaded_by=uploaded_by,
        )
        db.add(batch)
        await db.flush()
        db.add_all(
            ImportedAlumni(
                batch_id=batch.id,
                invite_status=ImportedInviteStatus.PENDING.value,
                **row.model_dump(),
            )
            for row in payload.rows
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Import commit failed for %s", payload.filename)
        raise ServiceError("Import failed; no rows were saved", status.HTTP_500_INTERNAL_SERVER_ERROR) from e

    logger.info("Imported %s rows from %s into batch %s", len(payload.rows), payload.filename, batch.id)
    return ImportCommitResponse(ok=True, inserted=len(payload.rows), batch_id=batch.id)


async def list_batches(db: AsyncSession) -> List[ImportBatchResponse]:
    result = await db.execute(select(ImportBatch).order_by(ImportBatch.created_at.desc()))
    return [ImportBatchResponse.model_validate(b) for b in result.scalars().all()]
