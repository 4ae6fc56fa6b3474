"""
Database engine, session management, and base model class.

This module sets up SQLAlchemy 2.0 with async support. Key components:

  - engine: The async database engine (connection pool for production DBs)
  - AsyncSessionLocal: Factory for creating async database sessions
  - Base: Declarative base class that all ORM models inherit from
  - get_db(): FastAPI dependency that provides a session per request

Session lifecycle:
  Each API request gets its own session via get_db(), and that session is
  the unit of work for the whole request. It commits on success and on
  expected business errors (so a failed login still persists its attempt
  counter and audit entry), and rolls back on anything unexpected so a
  crashed or timed-out request leaves no partial session or lockout change.
"""

import logging

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from streaming_accounts.config import settings
from streaming_accounts.exceptions import StreamingAccountsError

logger = logging.getLogger(__name__)


# Create the async engine.
# echo=True in debug mode logs all SQL statements.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
)

# Session factory: creates new AsyncSession instances.
# expire_on_commit=False prevents lazy-load errors after commit:
# without this, accessing attributes on a committed object would trigger
# a synchronous DB call, which fails in async context.
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class, which provides:
      - Metadata tracking for table creation
      - Common declarative mapping features
    """
    pass


async def get_db():
    """
    FastAPI dependency that provides a database session.

    Usage in a route:
        @router.get("/items")
        async def list_items(db: AsyncSession = Depends(get_db)):
            ...

    The session is committed on success and on domain errors, rolled back
    on any other exception, then closed when the request completes.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except StreamingAccountsError:
            # Business outcomes (wrong password, locked account): commit so the
            # failed-attempt counter and the audit trail are persisted.
            await session.commit()
            raise
        except HTTPException:
            # Request rejected by a dependency (e.g. missing admin role): nothing to keep
            await session.rollback()
            raise
        except Exception:
            logger.exception("Unexpected error, rolling back unit of work")
            await session.rollback()
            raise
