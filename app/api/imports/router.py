from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import require_admin
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .parser import sample_csv
from .schemas import ImportBatchResponse, ImportCommitRequest, ImportCommitResponse, ImportPreviewResponse
from . import service

router = APIRouter(prefix="/api/import", tags=["import"])


@router.post("/preview", response_model=ImportPreviewResponse, dependencies=[Depends(require_admin)])
async def preview_import(
    file: UploadFile = File(..., description="CSV (or .xlsx) with a header row; full_name and email required"),
) -> ImportPreviewResponse:
    """Parse the upload and return the first 50 rows plus the total count. Nothing is saved."""
    try:
        return await service.preview_upload(file)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/commit", response_model=ImportCommitResponse)
async def commit_import(
    payload: ImportCommitRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> ImportCommitResponse:
    """Save the rows as one batch. All-or-nothing."""
    try:
        return await service.commit_import(db, payload, uploaded_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/sample-csv", dependencies=[Depends(require_admin)])
async def download_sample_csv() -> Response:
    return Response(
        content=sample_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=alumni_import_sample.csv"},
    )


@router.get("/batches", response_model=List[ImportBatchResponse], dependencies=[Depends(require_admin)])
async def list_batches(db: AsyncSession = Depends(get_db)) -> List[ImportBatchResponse]:
    return await service.list_batches(db)
