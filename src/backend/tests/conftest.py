"""
Pytest configuration and fixtures for testing.

Provides:
- A throwaway SQLite database (aiosqlite) per test, schema created from models
- An httpx AsyncClient bound to the app with the session dependency overridden
- Users for every role plus bearer-header helpers

Environment is set before any application module is imported, since the
settings object is built at import time.
"""

import os
import tempfile
from typing import AsyncGenerator

os.environ.setdefault("SECURITY_SECRET_KEY", "test-secret-key-not-for-production-use-0123456789")
os.environ.setdefault("SECURITY_BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_ENABLE_FILE_LOGGING", "false")
os.environ.setdefault("UPLOAD_UPLOAD_DIR", tempfile.mkdtemp(prefix="maintenance-uploads-"))

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

import db  # noqa: F401  (registers tables)
from core.config import settings
from core.security import create_access_token
from db import User
from tests.factories import UserFactory


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """File-backed SQLite engine so every session gets its own connection."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging data and checking results directly."""
    async with session_factory() as session:
        yield session


# ============================================================================
# Application Fixtures
# ============================================================================

@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    path.mkdir()
    monkeypatch.setattr(settings.file_upload, "upload_dir", str(path))
    return path


@pytest_asyncio.fixture
async def client(session_factory, upload_dir) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the app; lifespan is not run, tables come from test_engine."""
    from app import create_app
    from core.database import get_session

    app = create_app()

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                if session.in_transaction():
                    await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ============================================================================
# User Fixtures
# ============================================================================

async def _persist(session: AsyncSession, user: User) -> User:
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest_asyncio.fixture
async def resident(db_session: AsyncSession) -> User:
    return await _persist(
        db_session,
        UserFactory.create_resident(first_name="Alice", last_name="Lee", apartment_number="4B"),
    )


@pytest_asyncio.fixture
async def other_resident(db_session: AsyncSession) -> User:
    return await _persist(db_session, UserFactory.create_resident(first_name="Bob", last_name="Stone"))


@pytest_asyncio.fixture
async def technician(db_session: AsyncSession) -> User:
    return await _persist(
        db_session,
        UserFactory.create_technician(first_name="Tom", last_name="Fixer", phone_number="5550001111"),
    )


@pytest_asyncio.fixture
async def other_technician(db_session: AsyncSession) -> User:
    return await _persist(db_session, UserFactory.create_technician(first_name="Ann", last_name="Wrench"))


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> User:
    return await _persist(db_session, UserFactory.create_admin())


def auth_headers(user: User) -> dict:
    """Authorization header carrying a freshly issued token for the user."""
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def headers_for():
    return auth_headers
