from __future__ import annotations

import os
from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path

os.environ.setdefault("BECS_ENVIRONMENT", "test")

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from becs_portal import models  # noqa: F401  registers every table on the metadata
from becs_portal.core.config import get_settings
from becs_portal.core.security import revoked_tokens
from becs_portal.core.storage import FileStorage
from becs_portal.deps import get_db_session, get_file_storage
from becs_portal.main import create_app
from becs_portal.models import User, UserRole
from becs_portal.schemas import UserCreate
from becs_portal.services import UserService

TEST_PASSWORD = "Secret123!"
TEST_UPLOAD_LIMIT = 4096

UserFactory = Callable[..., Awaitable[User]]
LoginHelper = Callable[[User], Awaitable[dict[str, str]]]


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    engine: AsyncEngine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        try:
            yield session
        finally:
            transaction = session.in_transaction()
            if transaction is not None:
                await session.rollback()


@pytest.fixture
def storage(tmp_path: Path) -> FileStorage:
    return FileStorage(tmp_path / "uploads", TEST_UPLOAD_LIMIT)


@pytest_asyncio.fixture
async def app(session: AsyncSession, storage: FileStorage) -> AsyncIterator[FastAPI]:
    get_settings.cache_clear()
    revoked_tokens.clear()
    application = create_app()

    async def _override_db_session() -> AsyncIterator[AsyncSession]:
        yield session

    application.dependency_overrides[get_db_session] = _override_db_session
    application.dependency_overrides[get_file_storage] = lambda: storage

    try:
        yield application
    finally:
        application.dependency_overrides.clear()
        revoked_tokens.clear()
        get_settings.cache_clear()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client


@pytest.fixture
def make_user(session: AsyncSession) -> UserFactory:
    counter = {"value": 0}

    async def _make_user(
        role: UserRole = UserRole.STAFF,
        *,
        email: str | None = None,
        staff_id: str | None = None,
        department: str | None = "Consulting",
        is_active: bool = True,
    ) -> User:
        counter["value"] += 1
        index = counter["value"]
        payload = UserCreate(
            email=email or f"{role.value}{index}@example.com",
            password=TEST_PASSWORD,
            first_name=role.value.title(),
            last_name=f"User{index}",
            staff_id=staff_id or f"ST-{index:03d}",
            role=role,
            department=department,
            is_active=is_active,
        )
        return await UserService(session).create_user(payload)

    return _make_user


@pytest.fixture
def login(client: AsyncClient) -> LoginHelper:
    async def _login(user: User) -> dict[str, str]:
        response = await client.post(
            "/api/auth/login",
            data={"username": user.email, "password": TEST_PASSWORD},
        )
        assert response.status_code == 200, response.text
        token = response.json()["tokens"]["access_token"]
        return {"Authorization": f"Bearer {token}"}

    return _login


@pytest_asyncio.fixture
async def admin(make_user: UserFactory) -> User:
    return await make_user(UserRole.ADMIN)


@pytest_asyncio.fixture
async def director(make_user: UserFactory) -> User:
    return await make_user(UserRole.DIRECTOR)


@pytest_asyncio.fixture
async def staff(make_user: UserFactory) -> User:
    return await make_user(UserRole.STAFF)
