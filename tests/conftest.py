import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator, Dict, Optional
from uuid import UUID

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("SITE_URL", "http://alumni.test")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.main import app
from app.auth.models import User
from app.auth.security import create_access_token, hash_password
from app.core.enums import ApprovalStatus
from app.core.models import AdminFlag, AlumniDetail, Profile, StagedAlumniDetail
from app.db.session import Base, get_db


TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture()
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh in-memory database per test; StaticPool keeps every session on one connection."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture()
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging and asserting; requests get their own sessions."""
    async with session_factory() as session:
        yield session


@asynccontextmanager
async def serve_app(factory: async_sessionmaker) -> AsyncIterator[AsyncClient]:
    """HTTP client for the app with get_db bound to the given session factory."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
async def client(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncClient, None]:
    async with serve_app(session_factory) as ac:
        yield ac


@pytest.fixture()
async def file_session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """
    SQLite file database with a regular connection pool: every session gets its own
    connection and transaction, so concurrent requests contend on real database locks.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'alumni.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture()
async def file_db_session(file_session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with file_session_factory() as session:
        yield session


@pytest.fixture()
async def file_client(file_session_factory: async_sessionmaker) -> AsyncGenerator[AsyncClient, None]:
    async with serve_app(file_session_factory) as ac:
        yield ac


def auth_headers(user_id: UUID) -> Dict[str, str]:
    token = create_access_token(subject={"sub": str(user_id)})
    return {"Authorization": f"Bearer {token}"}


async def create_account(
    db: AsyncSession,
    email: str,
    full_name: Optional[str] = "Test User",
    *,
    is_admin: bool = False,
    status: ApprovalStatus = ApprovalStatus.PENDING,
    password: Optional[str] = None,
    staged: Optional[dict] = None,
    live: Optional[dict] = None,
) -> User:
    """Insert an account directly: user, profile, approval flag and optional detail rows."""
    user = User(email=email.lower(), password_hash=hash_password(password) if password else None)
    db.add(user)
    await db.flush()
    db.add(Profile(id=user.id, full_name=full_name, is_admin=is_admin))
    db.add(AdminFlag(user_id=user.id, status=status.value))
    if staged is not None:
        db.add(StagedAlumniDetail(user_id=user.id, **staged))
    if live is not None:
        db.add(AlumniDetail(id=user.id, **live))
    await db.commit()
    return user


@pytest.fixture()
async def admin(db_session: AsyncSession) -> User:
    return await create_account(db_session, "admin@example.com", "Site Admin", is_admin=True)


@pytest.fixture()
async def admin_headers(admin: User) -> Dict[str, str]:
    return auth_headers(admin.id)


@pytest.fixture()
async def approved_user(db_session: AsyncSession) -> User:
    return await create_account(
        db_session,
        "approved@example.com",
        "Asha Rao",
        status=ApprovalStatus.APPROVED,
        staged={"grad_year": 2018, "department": "Computer Science"},
        live={"grad_year": 2018, "department": "Computer Science", "current_company": "Acme"},
    )


@pytest.fixture()
async def approved_headers(approved_user: User) -> Dict[str, str]:
    return auth_headers(approved_user.id)


@pytest.fixture()
def make_account(db_session: AsyncSession):
    async def _make(email: str, full_name: Optional[str] = "Test User", **kwargs) -> User:
        return await create_account(db_session, email, full_name, **kwargs)

    return _make


@pytest.fixture()
def make_file_account(file_db_session: AsyncSession):
    async def _make(email: str, full_name: Optional[str] = "Test User", **kwargs) -> User:
        return await create_account(file_db_session, email, full_name, **kwargs)

    return _make


@pytest.fixture()
def headers_for():
    return auth_headers
