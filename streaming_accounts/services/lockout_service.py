"""
Lockout service — transitions of the AccountSecurity state machine.

Both transitions are expressed as a single UPDATE statement so the database
applies them atomically under its row lock:

  record_failed_attempt:
      failed_login_attempts = failed_login_attempts + 1
      last_failed_login     = now
      account_locked_until  = now + LOCKOUT_MINUTES   if the new count >= threshold
                              (unchanged)             otherwise

  reset_failed_attempts:
      failed_login_attempts = 0, last_failed_login = NULL,
      account_locked_until  = NULL

The increment is computed by the database from the stored value, not by
Python from a value read earlier, so two concurrent failed attempts always
produce two increments. The threshold comparison uses the same old-value
expression, so the attempt that reaches the threshold is the one that locks.
Standard SQL evaluates every SET expression against the pre-update row, but
MySQL applies assignments left to right, so the lock column is assigned
before the counter and both dialects compare against the old count.

updated_at is stamped explicitly in each statement.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy import DateTime, case, literal, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from streaming_accounts.config import settings
from streaming_accounts.models.account_security import AccountSecurity
from streaming_accounts.timeutils import utc_now

logger = logging.getLogger(__name__)


async def get_security_record(
    db: AsyncSession,
    user_id: int,
) -> AccountSecurity | None:
    """
    Load a user's AccountSecurity row, always fresh from the database.

    populate_existing overwrites any copy already in the identity map, so the
    caller sees the result of atomic UPDATEs issued earlier in this session.
    """
    result = await db.execute(
        select(AccountSecurity)
        .where(AccountSecurity.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def record_failed_attempt(
    db: AsyncSession,
    user_id: int,
    now: datetime | None = None,
) -> AccountSecurity | None:
    """
    Apply the failed-login transition.

    Args:
        db: Database session.
        user_id: The user whose password check failed.
        now: Timestamp override (defaults to current UTC time).

    Returns:
        The refreshed AccountSecurity row (None if it doesn't exist).
    """
    moment = now or utc_now()
    lock_until = moment + timedelta(minutes=settings.LOCKOUT_MINUTES)
    attempts_after = AccountSecurity.failed_login_attempts + 1

    await db.execute(
        update(AccountSecurity)
        .where(AccountSecurity.user_id == user_id)
        .ordered_values(
            (
                AccountSecurity.account_locked_until,
                case(
                    (
                        attempts_after >= settings.MAX_FAILED_LOGIN_ATTEMPTS,
                        literal(lock_until, DateTime(timezone=True)),
                    ),
                    else_=AccountSecurity.account_locked_until,
                ),
            ),
            (AccountSecurity.failed_login_attempts, attempts_after),
            (AccountSecurity.last_failed_login, moment),
            (AccountSecurity.updated_at, moment),
        )
        .execution_options(synchronize_session=False)
    )

    security = await get_security_record(db, user_id)
    if security is not None and security.is_locked(moment):
        logger.warning(
            "Account locked after %d failed attempts: user_id=%s until=%s",
            security.failed_login_attempts,
            user_id,
            lock_until.isoformat(),
        )
    return security


async def reset_failed_attempts(
    db: AsyncSession,
    user_id: int,
    now: datetime | None = None,
) -> None:
    """Apply the successful-login transition: counter to zero, lock cleared."""
    await db.execute(
        update(AccountSecurity)
        .where(AccountSecurity.user_id == user_id)
        .values(
            failed_login_attempts=0,
            last_failed_login=None,
            account_locked_until=None,
            updated_at=now or utc_now(),
        )
        .execution_options(synchronize_session=False)
    )
