"""
Authentication service — login, logout, and session lifecycle logic.

This module contains the core auth logic, separated from HTTP concerns.
The router calls these functions and translates the results into HTTP
responses, so the rules can be tested without spinning up a web server.

Login flow:
  1. Resolve the user by username or email (case-insensitive)
  2. Reject users whose status isn't ACTIVE
  3. Load the AccountSecurity row (missing row = server fault)
  4. Reject while the lockout window is open
  5. Verify the password; on failure bump the counter (locking on the 5th
     failure), audit the failure, and reject
  6. On success reset the counter, open a 30-day session, audit the login

Session flows:
  - logout(): end one session by token
  - find_active_session(): token -> session, only if valid AND owner ACTIVE
  - validate_and_update_session(): same, plus heartbeat (last_activity)
  - end_all_user_sessions(): bulk revocation for one user

Security notes:
  - "Unknown identifier" and "wrong password" raise the same error to
    prevent user enumeration
  - Every call runs inside the caller's unit of work; get_db() commits on
    business errors so failed-attempt counters and audit rows persist
  - Full tokens never reach the logs
"""

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from streaming_accounts.exceptions import (
    AccountLockedError,
    AccountNotActiveError,
    InvalidCredentialsError,
    SecurityRecordMissingError,
)
from streaming_accounts.models.activity_log import UserAction
from streaming_accounts.models.session import UserSession
from streaming_accounts.models.user import UserStatus
from streaming_accounts.security import verify_password
from streaming_accounts.services import lockout_service, session_service, user_service
from streaming_accounts.services.activity_service import record_activity
from streaming_accounts.timeutils import ensure_utc, utc_now

logger = logging.getLogger(__name__)


async def login(
    db: AsyncSession,
    identifier: str,
    password: str,
    ip_address: str | None = None,
    user_agent: str | None = None,
    device_info: str | None = None,
    now: datetime | None = None,
) -> UserSession:
    """
    Authenticate a user and open a new session.

    Args:
        db: Database session.
        identifier: Username or email (case-insensitive).
        password: Plaintext password to verify.
        ip_address / user_agent / device_info: Client context recorded on
            the session and in the audit entry.
        now: Timestamp override (defaults to current UTC time).

    Returns:
        The new active UserSession (its `user` is loaded).

    Raises:
        InvalidCredentialsError: Unknown identifier or wrong password.
        AccountNotActiveError: User status isn't ACTIVE.
        SecurityRecordMissingError: The user has no AccountSecurity row.
        AccountLockedError: Too many recent failures; carries the unlock time.
    """
    moment = now or utc_now()

    user = await user_service.find_by_username_or_email(db, identifier)
    # Same error for both cases: prevents user enumeration
    if user is None:
        logger.info("Login failed: unknown identifier")
        raise InvalidCredentialsError()

    if user.status != UserStatus.ACTIVE:
        logger.warning(
            "Login attempt for non-active user: user_id=%s status=%s",
            user.id,
            user.status.value,
        )
        raise AccountNotActiveError(user.status.value)

    security = await lockout_service.get_security_record(db, user.id)
    if security is None:
        logger.error("Security record missing: user_id=%s", user.id)
        raise SecurityRecordMissingError(user.id)

    if security.is_locked(moment):
        logger.warning("Login attempt for locked account: user_id=%s", user.id)
        raise AccountLockedError(ensure_utc(security.account_locked_until))

    if not verify_password(password, user.password_hash):
        security = await lockout_service.record_failed_attempt(db, user.id, moment)
        await record_activity(
            db,
            user_id=user.id,
            action=UserAction.LOGIN,
            description="Failed login attempt",
            details={"result": "failed", "failed_attempts": security.failed_login_attempts},
            ip_address=ip_address,
            user_agent=user_agent,
            now=moment,
        )
        logger.warning(
            "Invalid password: user_id=%s failed_attempts=%d",
            user.id,
            security.failed_login_attempts,
        )
        raise InvalidCredentialsError()

    await lockout_service.reset_failed_attempts(db, user.id, moment)

    session = await session_service.create_session(
        db,
        user=user,
        ip_address=ip_address,
        user_agent=user_agent,
        device_info=device_info,
        now=moment,
    )

    details = {"result": "success"}
    if device_info:
        details["device"] = device_info
    await record_activity(
        db,
        user_id=user.id,
        action=UserAction.LOGIN,
        description="User logged in",
        details=details,
        ip_address=ip_address,
        user_agent=user_agent,
        now=moment,
    )

    logger.info("User authenticated: user_id=%s session_id=%s", user.id, session.id)
    return session


async def logout(
    db: AsyncSession,
    session_token: str,
    ip_address: str | None = None,
    user_agent: str | None = None,
    now: datetime | None = None,
) -> bool:
    """
    End one session.

    Returns:
        True if an active session was ended. False if the token is unknown
        or the session was already inactive — neither is an error, and
        neither mutates anything.
    """
    session = await session_service.find_by_token(db, session_token)
    if session is None or not session.is_active:
        return False

    moment = now or utc_now()
    session.is_active = False
    session.logout_at = moment
    await db.flush()

    await record_activity(
        db,
        user_id=session.user_id,
        action=UserAction.LOGOUT,
        description="User logged out",
        ip_address=ip_address,
        user_agent=user_agent,
        now=moment,
    )

    logger.info("User logged out: user_id=%s session_id=%s", session.user_id, session.id)
    return True


async def find_active_session(
    db: AsyncSession,
    session_token: str,
    now: datetime | None = None,
) -> UserSession | None:
    """
    Look up a session that is usable right now.

    A session qualifies only if it is active, not expired, and owned by a
    user whose status is still ACTIVE — a suspended user's sessions stop
    working immediately, even though they were never revoked.
    """
    session = await session_service.find_by_token(db, session_token)
    if session is None:
        return None

    if not session.is_valid(now):
        return None

    if session.user.status != UserStatus.ACTIVE:
        logger.info(
            "Session rejected, owner not active: user_id=%s status=%s",
            session.user_id,
            session.user.status.value,
        )
        return None

    return session


async def validate_and_update_session(
    db: AsyncSession,
    session_token: str,
    now: datetime | None = None,
) -> UserSession | None:
    """
    Heartbeat: validate a session and stamp last_activity.

    Called on every authenticated request. An invalid session is returned
    as None and left untouched.
    """
    moment = now or utc_now()
    session = await find_active_session(db, session_token, moment)
    if session is None:
        return None

    session.last_activity = moment
    await db.flush()
    return session


async def end_all_user_sessions(db: AsyncSession, user_id: int) -> bool:
    """
    Revoke every session of a user ("log out everywhere").

    Flips is_active on all of the user's sessions regardless of their
    current validity. logout_at is not stamped per row.

    Returns:
        True once the bulk update has been applied. Storage errors are
        logged and propagate to the caller's unit of work.
    """
    try:
        revoked = await session_service.deactivate_all(db, user_id)
    except SQLAlchemyError:
        logger.exception("Failed to end all sessions: user_id=%s", user_id)
        raise

    logger.info("All sessions ended: user_id=%s rows=%d", user_id, revoked)
    return True


async def count_active_user_sessions(db: AsyncSession, user_id: int) -> int:
    return await session_service.count_active_sessions(db, user_id)


async def list_active_user_sessions(
    db: AsyncSession,
    user_id: int,
    now: datetime | None = None,
) -> list[UserSession]:
    return await session_service.list_active_sessions(db, user_id, now)


async def list_all_user_sessions(db: AsyncSession, user_id: int) -> list[UserSession]:
    """Session history of a user, newest first, ended and expired sessions included."""
    return await session_service.find_by_user(db, user_id)
