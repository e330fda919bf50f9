"""Shared fixtures and utilities for tests."""

import os
import tempfile

# Settings are read when the application modules are imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-min-32-chars-long-for-security")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JSON_LOGS", "false")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="helpdesk-uploads-"))

from dataclasses import dataclass

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from core.middleware.authentication import CurrentUser
from core.storage.local import LocalStorage
from database.engine import Base
from database.models import RoleName
from tests.helpers import create_user


@dataclass
class Actors:
    """Principals used across the workflow tests."""

    admin: CurrentUser
    agent: CurrentUser
    ceo: CurrentUser
    requester: CurrentUser
    other: CurrentUser


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    import database.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def actors(session) -> Actors:
    return Actors(
        admin=await create_user(session, "admin@example.com", "Ada", "Admin", RoleName.ADMIN),
        agent=await create_user(session, "agent@example.com", "Hana", "Agent", RoleName.AGENT),
        ceo=await create_user(session, "ceo@example.com", "Cora", "Chief", RoleName.CEO),
        requester=await create_user(session, "manager@example.com", "Maya", "Manager", RoleName.USER),
        other=await create_user(session, "other@example.com", "Otto", "Other", RoleName.USER),
    )


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    return LocalStorage(base_path=str(tmp_path / "uploads"))


@pytest_asyncio.fixture
async def client(session_factory, storage):
    """HTTP client against the application, wired to the test database."""
    from api.dependencies import get_storage
    from api.main import app
    from database.engine import get_db

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
