"""
User service — registration and user-registry business logic.

Registration flow:
  1. Reject a username or email that's already taken (case-insensitive)
  2. Hash the password with Argon2id
  3. Create User + AccountSecurity + UserProfile + UserPreferences in the
     same unit of work, so a user never exists without its security row
  4. Append a REGISTER audit entry

Lookups:
  - find_by_username_or_email() is the login resolver: one identifier,
    matched case-insensitively against both columns
  - get_user() raises UserNotFoundError; the find_* helpers return None

Administrative operations (status changes, listings, search) live here too;
the router layer restricts them to ADMIN users.
"""

import logging
from datetime import datetime

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from streaming_accounts.exceptions import (
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from streaming_accounts.models.account_security import AccountSecurity
from streaming_accounts.models.activity_log import UserAction
from streaming_accounts.models.preferences import UserPreferences
from streaming_accounts.models.profile import UserProfile
from streaming_accounts.models.user import User, UserStatus
from streaming_accounts.security import hash_password, verify_password
from streaming_accounts.services.activity_service import record_activity
from streaming_accounts.timeutils import utc_now

logger = logging.getLogger(__name__)


async def username_exists(db: AsyncSession, username: str) -> bool:
    result = await db.execute(
        select(User.id).where(func.lower(User.username) == username.strip().lower())
    )
    return result.first() is not None


async def email_exists(db: AsyncSession, email: str) -> bool:
    result = await db.execute(
        select(User.id).where(func.lower(User.email) == email.strip().lower())
    )
    return result.first() is not None


async def register_user(
    db: AsyncSession,
    username: str,
    email: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
    display_name: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> User:
    """
    Register a new user with security, profile, and preference records.

    All rows are created in the caller's transaction — if any insert fails,
    none of them is persisted.

    Args:
        db: Database session.
        username: Desired username (unique, case-insensitive).
        email: Email address (unique, stored lower-cased).
        password: Plaintext password (hashed before storage).
        first_name / last_name / display_name: Optional profile fields.
        ip_address / user_agent: Client context for the audit entry.

    Returns:
        The new User (status ACTIVE, email not yet verified).

    Raises:
        DuplicateUsernameError: If the username is taken.
        DuplicateEmailError: If the email is already registered.
    """
    username = username.strip()
    email = email.strip().lower()

    if await username_exists(db, username):
        raise DuplicateUsernameError(username)
    if await email_exists(db, email):
        raise DuplicateEmailError(email)

    now = utc_now()
    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        email_verified=False,
        status=UserStatus.ACTIVE,
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    # Flush to get user.id assigned (needed for the FKs below)
    await db.flush()

    db.add(AccountSecurity(user_id=user.id, created_at=now, updated_at=now))
    db.add(
        UserProfile(
            user_id=user.id,
            first_name=first_name,
            last_name=last_name,
            display_name=display_name or username,
            created_at=now,
            updated_at=now,
        )
    )
    db.add(UserPreferences(user_id=user.id, created_at=now, updated_at=now))
    await db.flush()

    await record_activity(
        db,
        user_id=user.id,
        action=UserAction.REGISTER,
        description="User registered",
        ip_address=ip_address,
        user_agent=user_agent,
        now=now,
    )

    logger.info("User registered: user_id=%s username=%s", user.id, user.username)
    return user


async def find_by_id(db: AsyncSession, user_id: int) -> User | None:
    return await db.get(User, user_id)


async def get_user(db: AsyncSession, user_id: int) -> User:
    """
    Get a user by id.

    Raises:
        UserNotFoundError: If no such user exists.
    """
    user = await find_by_id(db, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


async def find_by_username_or_email(db: AsyncSession, identifier: str) -> User | None:
    """Resolve a login identifier against username OR email, case-insensitively."""
    needle = identifier.strip().lower()
    result = await db.execute(
        select(User).where(
            or_(func.lower(User.username) == needle, func.lower(User.email) == needle)
        )
    )
    # A username can't equal another user's email in practice, but if it ever
    # did, prefer the username match over an arbitrary row
    users = list(result.scalars().all())
    for user in users:
        if user.username.lower() == needle:
            return user
    return users[0] if users else None


async def list_active_users(db: AsyncSession) -> list[User]:
    """All ACTIVE users, newest first."""
    result = await db.execute(
        select(User)
        .where(User.status == UserStatus.ACTIVE)
        .order_by(User.created_at.desc(), User.id.desc())
    )
    return list(result.scalars().all())


async def count_active_users(db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count()).select_from(User).where(User.status == UserStatus.ACTIVE)
    )
    return result.scalar_one()


async def search_users(db: AsyncSession, term: str) -> list[User]:
    """
    Case-insensitive substring search over username, email, and profile names.

    Newest users first.
    """
    pattern = f"%{term.strip().lower()}%"
    result = await db.execute(
        select(User)
        .outerjoin(UserProfile, UserProfile.user_id == User.id)
        .where(
            or_(
                func.lower(User.username).like(pattern),
                func.lower(User.email).like(pattern),
                func.lower(UserProfile.first_name).like(pattern),
                func.lower(UserProfile.last_name).like(pattern),
                func.lower(UserProfile.display_name).like(pattern),
            )
        )
        .order_by(User.created_at.desc(), User.id.desc())
    )
    return list(result.scalars().unique().all())


async def update_user_status(
    db: AsyncSession,
    user_id: int,
    status: UserStatus,
    now: datetime | None = None,
) -> User:
    """
    Change a user's status.

    Moving a user out of ACTIVE is enough to invalidate all of their sessions:
    session validation checks the owner's status on every lookup.
    """
    user = await get_user(db, user_id)
    if user.status != status:
        logger.info(
            "User status changed: user_id=%s %s -> %s",
            user_id,
            user.status.value,
            status.value,
        )
        user.status = status
        user.updated_at = now or utc_now()
        await db.flush()
    return user


async def mark_email_verified(db: AsyncSession, user_id: int) -> User:
    user = await get_user(db, user_id)
    user.email_verified = True
    user.updated_at = utc_now()
    await db.flush()
    return user


async def change_password(
    db: AsyncSession,
    user_id: int,
    current_password: str,
    new_password: str,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> User:
    """
    Replace a user's password after re-checking the current one.

    Raises:
        UserNotFoundError: If the user doesn't exist.
        InvalidCredentialsError: If current_password is wrong.
    """
    user = await get_user(db, user_id)
    if not verify_password(current_password, user.password_hash):
        logger.warning("Password change rejected, wrong current password: user_id=%s", user_id)
        raise InvalidCredentialsError()

    now = utc_now()
    user.password_hash = hash_password(new_password)
    user.updated_at = now
    await db.flush()

    await record_activity(
        db,
        user_id=user.id,
        action=UserAction.PASSWORD_CHANGE,
        description="Password changed",
        ip_address=ip_address,
        user_agent=user_agent,
        now=now,
    )
    logger.info("Password changed: user_id=%s", user_id)
    return user
