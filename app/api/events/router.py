from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import require_admin, require_approved
from app.auth.schemas import CurrentUser
from app.auth.status_resolver import resolve_account_status
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import (
    EventCreate,
    EventCreateResponse,
    EventDetailResponse,
    EventListResponse,
    EventRegisterRequest,
    EventRegisterResponse,
)
from . import service

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("", response_model=EventListResponse, dependencies=[Depends(require_approved)])
async def list_events(
    upcoming: bool = Query(False, description="Only events that have not started yet"),
    db: AsyncSession = Depends(get_db),
) -> EventListResponse:
    return EventListResponse(events=await service.list_events(db, upcoming_only=upcoming))


@router.post("/create", response_model=EventCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: EventCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> EventCreateResponse:
    """Create an event. Published events notify every approved alumnus."""
    try:
        return await service.create_event(db, payload, created_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/register", response_model=EventRegisterResponse, status_code=status.HTTP_201_CREATED)
async def register_for_event(
    payload: EventRegisterRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_approved),
) -> EventRegisterResponse:
    try:
        registration = await service.register_for_event(db, payload.event_id, current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return EventRegisterResponse(registration=registration)


@router.get("/{event_id}", response_model=EventDetailResponse)
async def get_event(
    event_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_approved),
) -> EventDetailResponse:
    account = await resolve_account_status(db, current_user.id)
    try:
        return await service.get_event(db, event_id, current_user.id, is_admin=account.is_admin)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
