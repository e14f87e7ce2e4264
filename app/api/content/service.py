"""Jobs board, news and gallery. Readers only see published rows; admins create them."""

import logging
import re
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.core.models import Event, GalleryItem, Job, NewsArticle, Profile

from .schemas import (
    GalleryEvent,
    GalleryItemCreate,
    GalleryItemResponse,
    JobCreate,
    JobResponse,
    NewsAuthor,
    NewsCreate,
    NewsResponse,
)

logger = logging.getLogger(__name__)


def slugify(title: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug or "article"


def _parse_uuid(value: str) -> Optional[UUID]:
    try:
        return UUID(value)
    except ValueError:
        return None


# ----- Jobs -----

async def list_jobs(db: AsyncSession) -> List[JobResponse]:
    """Published jobs that have not expired, newest first."""
    now = datetime.now(timezone.utc)
    result = await db.execute(
        select(Job)
        .where(Job.is_published.is_(True), or_(Job.expires_at.is_(None), Job.expires_at > now))
        .order_by(Job.created_at.desc())
    )
    return [JobResponse.model_validate(j) for j in result.scalars().all()]


async def create_job(db: AsyncSession, payload: JobCreate, posted_by: UUID) -> JobResponse:
    try:
        job = Job(**payload.model_dump(), posted_by=posted_by)
        db.add(job)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Failed to create job %r", payload.title)
        raise ServiceError("Failed to create job", status.HTTP_500_INTERNAL_SERVER_ERROR) from e
    return JobResponse.model_validate(job)


# ----- News -----

def _news_response(article: NewsArticle, author_name: Optional[str]) -> NewsResponse:
    return NewsResponse(
        id=article.id,
        title=article.title,
        slug=article.slug,
        excerpt=article.excerpt,
        content=article.content,
        category=article.category,
        image_url=article.image_url,
        is_published=article.is_published,
        published_at=article.published_at,
        created_at=article.created_at,
        author=NewsAuthor(id=article.author_id, full_name=author_name) if article.author_id else None,
    )


def _visible_news():
    return select(NewsArticle, Profile.full_name).outerjoin(Profile, Profile.id == NewsArticle.author_id).where(
        NewsArticle.is_published.is_(True),
        NewsArticle.published_at.is_not(None),
        NewsArticle.published_at <= datetime.now(timezone.utc),
    )


async def list_news(db: AsyncSession, category: Optional[str] = None) -> List[NewsResponse]:
    stmt = _visible_news()
    if category:
        stmt = stmt.where(NewsArticle.category == category)
    result = await db.execute(stmt.order_by(NewsArticle.published_at.desc()))
    return [_news_response(article, name) for article, name in result.all()]


async def list_news_categories(db: AsyncSession) -> List[str]:
    result = await db.execute(
        select(NewsArticle.category)
        .where(NewsArticle.is_published.is_(True), NewsArticle.category.is_not(None))
        .distinct()
        .order_by(NewsArticle.category)
    )
    return list(result.scalars().all())


async def get_news(db: AsyncSession, slug_or_id: str) -> NewsResponse:
    """Look up a published article by slug, or by id."""
    article_id = _parse_uuid(slug_or_id)
    match = NewsArticle.slug == slug_or_id
    if article_id is not None:
        match = or_(match, NewsArticle.id == article_id)
    row = (await db.execute(_visible_news().where(match))).first()
    if row is None:
        raise ServiceError("Article not found", status.HTTP_404_NOT_FOUND)
    return _news_response(*row)


async def create_news(db: AsyncSession, payload: NewsCreate, author_id: UUID) -> NewsResponse:
    data = payload.model_dump()
    data["slug"] = payload.slug or slugify(payload.title)
    if payload.is_published and payload.published_at is None:
        data["published_at"] = datetime.now(timezone.utc)

    if await db.scalar(select(NewsArticle.id).where(NewsArticle.slug == data["slug"])) is not None:
        raise ServiceError(f"Slug '{data['slug']}' is already in use", status.HTTP_409_CONFLICT)

    try:
        article = NewsArticle(**data, author_id=author_id)
        db.add(article)
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ServiceError(f"Slug '{data['slug']}' is already in use", status.HTTP_409_CONFLICT) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Failed to create article %r", payload.title)
        raise ServiceError("Failed to create article", status.HTTP_500_INTERNAL_SERVER_ERROR) from e

    author_name = await db.scalar(select(Profile.full_name).where(Profile.id == author_id))
    return _news_response(article, author_name)


# ----- Gallery -----

def _gallery_response(item: GalleryItem, event_title: Optional[str]) -> GalleryItemResponse:
    return GalleryItemResponse(
        id=item.id,
        title=item.title,
        description=item.description,
        image_url=item.image_url,
        category=item.category,
        is_published=item.is_published,
        created_at=item.created_at,
        event=GalleryEvent(id=item.event_id, title=event_title) if item.event_id and event_title else None,
    )


async def list_gallery(db: AsyncSession, category: Optional[str] = None) -> List[GalleryItemResponse]:
    stmt = (
        select(GalleryItem, Event.title)
        .outerjoin(Event, Event.id == GalleryItem.event_id)
        .where(GalleryItem.is_published.is_(True))
    )
    if category:
        stmt = stmt.where(GalleryItem.category == category)
    result = await db.execute(stmt.order_by(GalleryItem.created_at.desc()))
    return [_gallery_response(item, title) for item, title in result.all()]


async def list_gallery_categories(db: AsyncSession) -> List[str]:
    result = await db.execute(
        select(GalleryItem.category)
        .where(GalleryItem.is_published.is_(True), GalleryItem.category.is_not(None))
        .distinct()
        .order_by(GalleryItem.category)
    )
    return list(result.scalars().all())


async def create_gallery_item(db: AsyncSession, payload: GalleryItemCreate, created_by: UUID) -> GalleryItemResponse:
    event_title = None
    if payload.event_id is not None:
        event_title = await db.scalar(select(Event.title).where(Event.id == payload.event_id))
        if event_title is None:
            raise ServiceError("Event not found", status.HTTP_404_NOT_FOUND)
    try:
        item = GalleryItem(**payload.model_dump(), created_by=created_by)
        db.add(item)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Failed to create gallery item %r", payload.title)
        raise ServiceError("Failed to create gallery item", status.HTTP_500_INTERNAL_SERVER_ERROR) from e
    return _gallery_response(item, event_title)
