"""
Test fixtures for the Streaming Accounts test suite.

This module provides shared fixtures used across all test files:

  - db_engine / db_session: Fresh in-memory SQLite database for each test
  - client: Async HTTP test client (unauthenticated)
  - authenticated_client: Test client with a registered USER and session token
  - admin_client: Test client with a registered ADMIN and session token
  - registered_user: A user created directly through the service layer

Key design decisions:
  - In-memory SQLite (sqlite+aiosqlite://) is used for speed and isolation.
    Each test gets a completely fresh database — no state leaks between tests.
  - We override FastAPI's get_db dependency to inject our test session,
    so the application code works exactly as it does in production —
    including committing on domain errors, so failed-login counters persist.
  - The authenticated_client fixture registers and logs in through the real
    endpoints (not just DB inserts).
  - The admin_client fixture registers normally and then updates the role
    directly in the DB — admins are provisioned by an operator, not
    self-service.
"""

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import update
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from streaming_accounts import models  # noqa: F401
from streaming_accounts.database import Base, get_db
from streaming_accounts.exceptions import StreamingAccountsError
from streaming_accounts.main import app
from streaming_accounts.models.user import User, UserRole
from streaming_accounts.services import user_service

from helpers import TEST_PASSWORD, login, register

# In-memory SQLite for fast, isolated tests
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Provide an async session bound to the test engine."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def registered_user(db_session):
    """An ACTIVE user (with security, profile and preferences rows) created via the service."""
    user = await user_service.register_user(
        db_session,
        username="alice",
        email="alice@example.com",
        password=TEST_PASSWORD,
        first_name="Alice",
        last_name="Wong",
    )
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def client(db_engine):
    """
    Async HTTP test client with the test database injected.

    This overrides the get_db dependency so all requests hit the
    in-memory test database instead of the real one.
    """
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except StreamingAccountsError:
                await session.commit()
                raise
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def authenticated_client(client):
    """
    Test client with a registered user and a session token.

    Registers "testuser" via the real endpoint, logs in, and sets the
    Authorization header on the client for all subsequent requests.
    """
    await register(client, "testuser", "testuser@example.com", first_name="Test", last_name="User")
    token = await login(client, "testuser")
    client.headers["Authorization"] = f"Bearer {token}"
    return client


@pytest_asyncio.fixture
async def admin_client(client, db_engine):
    """
    Test client with a registered ADMIN user and a session token.

    Registers a normal user, then promotes it to ADMIN directly in the
    database before logging in.
    """
    data = await register(client, "admin", "admin@example.com")

    async_session = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False,
    )
    async with async_session() as session:
        await session.execute(
            update(User)
            .where(User.id == data["id"])
            .values(role=UserRole.ADMIN)
        )
        await session.commit()

    token = await login(client, "admin")
    client.headers["Authorization"] = f"Bearer {token}"
    return client
