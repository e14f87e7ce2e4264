from fastapi import APIRouter, Depends, HTTPException
from fastapi import status as http_status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.schemas import (
    AccessTokenResponse,
    InviteLoginRequest,
    LoginRequest,
    LoginResponse,
    MagicLinkRequest,
    MagicLinkSentResponse,
    MagicLinkVerifyRequest,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
)
from app.auth import services
from app.core.exceptions import ServiceError
from app.db.session import get_db

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _to_http(e: ServiceError) -> HTTPException:
    if e.status_code == http_status.HTTP_500_INTERNAL_SERVER_ERROR:
        return HTTPException(status_code=e.status_code, detail="Internal server error")
    return HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=http_status.HTTP_201_CREATED,
)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> RegisterResponse:
    """Create an account, its profile and a pending approval flag."""
    try:
        return await services.register_account(db, payload)
    except ServiceError as e:
        raise _to_http(e)


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=http_status.HTTP_200_OK,
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    try:
        return await services.login_user(db, payload)
    except ServiceError as e:
        raise _to_http(e)


@router.post("/login-oauth")
async def login_oauth(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
):
    payload = LoginRequest(
        email=form_data.username.strip(),
        password=form_data.password,
    )
    try:
        result = await services.login_user(db, payload)
    except ServiceError as e:
        raise _to_http(e)
    return {
        "access_token": result.access_token,
        "token_type": "bearer",
    }


@router.post("/refresh", response_model=AccessTokenResponse)
async def refresh(
    payload: RefreshRequest,
    db: AsyncSession = Depends(get_db),
) -> AccessTokenResponse:
    try:
        return await services.refresh_access_token(db, payload)
    except ServiceError as e:
        raise _to_http(e)


@router.post("/magic-link", response_model=MagicLinkSentResponse)
async def magic_link(payload: MagicLinkRequest) -> MagicLinkSentResponse:
    """Send a passwordless login link to the given address."""
    return await services.request_login_link(payload)


@router.post("/invite-login", response_model=MagicLinkSentResponse)
async def invite_login(
    payload: InviteLoginRequest,
    db: AsyncSession = Depends(get_db),
) -> MagicLinkSentResponse:
    """Send a login link to the address an invite was issued for. Redemption happens at /api/invites/claim."""
    try:
        return await services.request_invite_login(db, payload)
    except ServiceError as e:
        raise _to_http(e)


@router.post("/magic-link/verify", response_model=LoginResponse)
async def verify_magic_link(
    payload: MagicLinkVerifyRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    try:
        return await services.verify_login_link(db, payload.token)
    except ServiceError as e:
        raise _to_http(e)
