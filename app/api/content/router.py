from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import require_admin, require_approved
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import (
    CategoryListResponse,
    GalleryItemCreate,
    GalleryItemResponse,
    JobCreate,
    JobResponse,
    NewsCreate,
    NewsResponse,
)
from . import service

jobs_router = APIRouter(prefix="/api/jobs", tags=["jobs"])
news_router = APIRouter(prefix="/api/news", tags=["news"])
gallery_router = APIRouter(prefix="/api/gallery", tags=["gallery"])


# ----- Jobs -----

@jobs_router.get("", response_model=List[JobResponse], dependencies=[Depends(require_approved)])
async def list_jobs(db: AsyncSession = Depends(get_db)) -> List[JobResponse]:
    """Open positions: published and not expired, newest first."""
    return await service.list_jobs(db)


@jobs_router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def create_job(
    payload: JobCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> JobResponse:
    try:
        return await service.create_job(db, payload, posted_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# ----- News -----

@news_router.get("", response_model=List[NewsResponse], dependencies=[Depends(require_approved)])
async def list_news(
    category: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
) -> List[NewsResponse]:
    return await service.list_news(db, category=category)


@news_router.get("/categories", response_model=CategoryListResponse, dependencies=[Depends(require_approved)])
async def news_categories(db: AsyncSession = Depends(get_db)) -> CategoryListResponse:
    return CategoryListResponse(categories=await service.list_news_categories(db))


@news_router.post("", response_model=NewsResponse, status_code=status.HTTP_201_CREATED)
async def create_news(
    payload: NewsCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> NewsResponse:
    """Create an article. The slug is derived from the title when omitted."""
    try:
        return await service.create_news(db, payload, author_id=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@news_router.get("/{slug}", response_model=NewsResponse, dependencies=[Depends(require_approved)])
async def get_news(slug: str, db: AsyncSession = Depends(get_db)) -> NewsResponse:
    try:
        return await service.get_news(db, slug)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# ----- Gallery -----

@gallery_router.get("", response_model=List[GalleryItemResponse], dependencies=[Depends(require_approved)])
async def list_gallery(
    category: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
) -> List[GalleryItemResponse]:
    return await service.list_gallery(db, category=category)


@gallery_router.get("/categories", response_model=CategoryListResponse, dependencies=[Depends(require_approved)])
async def gallery_categories(db: AsyncSession = Depends(get_db)) -> CategoryListResponse:
    return CategoryListResponse(categories=await service.list_gallery_categories(db))


@gallery_router.post("", response_model=GalleryItemResponse, status_code=status.HTTP_201_CREATED)
async def create_gallery_item(
    payload: GalleryItemCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> GalleryItemResponse:
    try:
        return await service.create_gallery_item(db, payload, created_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
