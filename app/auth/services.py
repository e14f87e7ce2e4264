import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.login_links import build_login_link, send_login_link
from app.auth.models import RefreshToken, User
from app.auth.schemas import (
    AccessTokenResponse,
    AccountStatusInfo,
    InviteLoginRequest,
    LoginRequest,
    LoginResponse,
    MagicLinkRequest,
    MagicLinkSentResponse,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    UserInfo,
)
from app.auth.security import (
    create_access_token,
    create_login_link_token,
    create_refresh_token,
    decode_login_link_token,
    hash_password,
    verify_password,
)
from app.auth.status_resolver import landing_route, resolve_account_status
from app.core.enums import ApprovalStatus
from app.core.exceptions import ServiceError
from app.core.models import AdminFlag, ImportedAlumni, Invite, Profile

logger = logging.getLogger(__name__)


async def _get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(func.lower(User.email) == email.strip().lower()))
    return result.scalar_one_or_none()


def _add_account(
    db: AsyncSession,
    email: str,
    full_name: Optional[str],
    password_hash: Optional[str],
) -> User:
    """Stage a new account with its profile and a pending admin flag. Caller must commit."""
    user = User(email=email.strip().lower(), password_hash=password_hash)
    db.add(user)
    db.add(Profile(user=user, full_name=full_name, is_admin=False))
    return user


async def register_account(db: AsyncSession, payload: RegisterRequest) -> RegisterResponse:
    if await _get_user_by_email(db, payload.email):
        raise ServiceError("Email is already in use", status.HTTP_409_CONFLICT)

    try:
        user = _add_account(db, payload.email, payload.full_name.strip(), hash_password(payload.password))
        await db.flush()  # to populate user.id
        db.add(AdminFlag(user_id=user.id, status=ApprovalStatus.PENDING.value))
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ServiceError("Email is already in use", status.HTTP_409_CONFLICT) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Failed to register %s", payload.email)
        raise ServiceError("Failed to create account", status.HTTP_500_INTERNAL_SERVER_ERROR) from e

    logger.info("Registered account %s", user.id)
    return RegisterResponse(success=True, message="Account created successfully", user_id=user.id)


async def _issue_session(db: AsyncSession, user: User) -> LoginResponse:
    issued_at = datetime.now(timezone.utc)
    access_token = create_access_token(
        subject={"sub": str(user.id), "email": user.email, "iat": int(issued_at.timestamp())}
    )
    refresh_token_str, refresh_expires_at = create_refresh_token()
    db.add(RefreshToken(user_id=user.id, token=refresh_token_str, expires_at=refresh_expires_at))
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise ServiceError(
            "Failed to persist authentication state",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        ) from e

    account = await resolve_account_status(db, user.id)
    full_name = await db.scalar(select(Profile.full_name).where(Profile.id == user.id))
    return LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token_str,
        user=UserInfo(id=user.id, email=user.email, full_name=full_name),
        status=AccountStatusInfo(
            is_admin=account.is_admin,
            approval_status=account.approval_status.value,
            has_profile_setup=account.has_profile_setup,
            next_route=landing_route(account),
        ),
        issued_at=issued_at,
    )


async def login_user(db: AsyncSession, payload: LoginRequest) -> LoginResponse:
    user = await _get_user_by_email(db, payload.email)
    if not user or not verify_password(payload.password, user.password_hash):
        raise ServiceError("Invalid credentials", status.HTTP_401_UNAUTHORIZED)
    return await _issue_session(db, user)


async def refresh_access_token(db: AsyncSession, payload: RefreshRequest) -> AccessTokenResponse:
    result = await db.execute(select(RefreshToken).where(RefreshToken.token == payload.refresh_token))
    stored = result.scalar_one_or_none()
    if not stored:
        raise ServiceError("Invalid refresh token", status.HTTP_401_UNAUTHORIZED)
    expires_at = stored.expires_at
    if expires_at.tzinfo is None:
        # SQLite drops tzinfo; stored values are UTC
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at <= datetime.now(timezone.utc):
        raise ServiceError("Refresh token expired", status.HTTP_401_UNAUTHORIZED)
    user = await db.get(User, stored.user_id)
    if not user:
        raise ServiceError("Invalid refresh token", status.HTTP_401_UNAUTHORIZED)
    access_token = create_access_token(subject={"sub": str(user.id), "email": user.email})
    return AccessTokenResponse(access_token=access_token)


def _dispatch_login_link(email: str, invite_code: Optional[str] = None) -> None:
    token = create_login_link_token(email, invite_code=invite_code)
    send_login_link(email, build_login_link(token, invite_code=invite_code))


async def request_login_link(payload: MagicLinkRequest) -> MagicLinkSentResponse:
    """Send a passwordless login link. The account is created on first verification."""
    _dispatch_login_link(payload.email.lower())
    return MagicLinkSentResponse(email=payload.email)


async def request_invite_login(db: AsyncSession, payload: InviteLoginRequest) -> MagicLinkSentResponse:
    """Send a login link to the e-mail of the imported row behind an invite. Does not redeem it."""
    code = payload.code.strip()
    result = await db.execute(
        select(ImportedAlumni.email)
        .join(Invite, Invite.imported_alumni_id == ImportedAlumni.id)
        .where(Invite.code == code)
    )
    email = result.scalar_one_or_none()
    if not email:
        raise ServiceError("Invalid invite code", status.HTTP_404_NOT_FOUND)
    _dispatch_login_link(email.lower(), invite_code=code)
    return MagicLinkSentResponse(email=email, invite_code=code)


async def verify_login_link(db: AsyncSession, token: str) -> LoginResponse:
    payload = decode_login_link_token(token)
    if not payload:
        raise ServiceError("Invalid or expired login link", status.HTTP_401_UNAUTHORIZED)

    email = payload["email"]
    user = await _get_user_by_email(db, email)
    if not user:
        try:
            user = _add_account(db, email, None, None)
            await db.flush()
            db.add(AdminFlag(user_id=user.id, status=ApprovalStatus.PENDING.value))
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.exception("Failed to create account for login link %s", email)
            raise ServiceError("Failed to create account", status.HTTP_500_INTERNAL_SERVER_ERROR) from e
        logger.info("Created account %s from login link", user.id)
    return await _issue_session(db, user)
