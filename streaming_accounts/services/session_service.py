"""
Session service — storage operations on user_sessions.

This is the session store the authentication service builds on:

  - create_session()           insert a new row with a fresh token
  - find_by_token()            exact-match lookup on the unique token
  - find_by_user()             every session a user ever had
  - list_active_sessions()     currently valid sessions of one user
  - count_active_sessions()    is_active rows of one user
  - deactivate_all()           bulk is_active = False for one user

There's no policy here (user status, audit logging) — that lives in
auth_service.py.
"""

from datetime import datetime, timedelta

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from streaming_accounts.config import settings
from streaming_accounts.models.session import UserSession
from streaming_accounts.models.user import User
from streaming_accounts.security import generate_session_token
from streaming_accounts.timeutils import utc_now


async def create_session(
    db: AsyncSession,
    user: User,
    ip_address: str | None = None,
    user_agent: str | None = None,
    device_info: str | None = None,
    now: datetime | None = None,
) -> UserSession:
    """
    Insert a new active session expiring SESSION_TTL_DAYS from now.

    The token's uniqueness is guaranteed by its 256 bits of entropy and
    enforced by the unique constraint on session_token.
    """
    moment = now or utc_now()
    session = UserSession(
        user=user,
        session_token=generate_session_token(),
        ip_address=ip_address,
        user_agent=user_agent,
        device_info=device_info,
        login_at=moment,
        is_active=True,
        expires_at=moment + timedelta(days=settings.SESSION_TTL_DAYS),
    )
    db.add(session)
    await db.flush()
    return session


async def find_by_token(db: AsyncSession, session_token: str) -> UserSession | None:
    result = await db.execute(
        select(UserSession).where(UserSession.session_token == session_token)
    )
    return result.scalar_one_or_none()


async def find_by_user(db: AsyncSession, user_id: int) -> list[UserSession]:
    result = await db.execute(
        select(UserSession)
        .where(UserSession.user_id == user_id)
        .order_by(UserSession.login_at.desc(), UserSession.id.desc())
    )
    return list(result.scalars().all())


async def list_active_sessions(
    db: AsyncSession,
    user_id: int,
    now: datetime | None = None,
) -> list[UserSession]:
    """Sessions of a user that are active and not yet expired, newest first."""
    moment = now or utc_now()
    result = await db.execute(
        select(UserSession)
        .where(
            UserSession.user_id == user_id,
            UserSession.is_active.is_(True),
            or_(UserSession.expires_at.is_(None), UserSession.expires_at > moment),
        )
        .order_by(UserSession.login_at.desc(), UserSession.id.desc())
    )
    return list(result.scalars().all())


async def count_active_sessions(db: AsyncSession, user_id: int) -> int:
    """Number of sessions still flagged active (expired or not)."""
    result = await db.execute(
        select(func.count())
        .select_from(UserSession)
        .where(UserSession.user_id == user_id, UserSession.is_active.is_(True))
    )
    return result.scalar_one()


async def deactivate_all(db: AsyncSession, user_id: int) -> int:
    """
    Flip is_active to False on every session of a user.

    logout_at is left untouched: this is a bulk revocation, not a per-row
    logout. Returns the number of rows updated.
    """
    result = await db.execute(
        update(UserSession)
        .where(UserSession.user_id == user_id)
        .values(is_active=False)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount
