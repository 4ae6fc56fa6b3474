"""
User model — the authentication identity.

Each User is a login credential (username + email + hashed password) with an
account status and a role. Everything else about the person lives in rows
that point back at the user id:

  - AccountSecurity  (lockout counters)         one-to-one
  - UserProfile      (names, bio, avatar)       one-to-one
  - UserPreferences  (playback, parental PIN)   one-to-one
  - UserSession      (login sessions)           many-to-one
  - ActivityLogEntry (audit trail)              many-to-one

Ownership is one-directional: those rows hold a foreign key to users.id and
the User never holds collections of them. Services fetch related rows with
explicit queries instead of walking a cyclic object graph.

Uniqueness:
  username and email are both unique and compared case-insensitively.
  Emails are stored lower-cased; usernames keep the casing the user chose
  and are protected by a unique index on lower(username).

Timestamps:
  updated_at is stamped by the service layer on every change (there is no
  implicit on-update hook), so the audit meaning of the column is explicit
  at each call site.
"""

import enum
from datetime import datetime

from sqlalchemy import Integer, String, Boolean, DateTime, Enum, Index, func
from sqlalchemy.orm import Mapped, mapped_column

from streaming_accounts.database import Base
from streaming_accounts.timeutils import utc_now


class UserStatus(str, enum.Enum):
    """
    Account status. Only ACTIVE users can log in or hold valid sessions.

    Inherits from str so the enum value serializes naturally to JSON.
    """
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    BANNED = "BANNED"


class UserRole(str, enum.Enum):
    """Role held within the platform. ADMIN gates the /admin/* endpoints."""
    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"
    PREMIUM = "PREMIUM"
    USER = "USER"


class User(Base):
    __tablename__ = "users"

    # AUTOINCREMENT keeps SQLite from handing out a previously used rowid
    __table_args__ = {"sqlite_autoincrement": True}

    # Numeric identity, assigned once by the database and never reused
    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
    )

    # Always stored lower-cased, so the plain unique constraint is case-insensitive
    email: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
    )

    # Argon2id hash of the password (never store plaintext!)
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    email_verified: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    status: Mapped[UserStatus] = mapped_column(
        Enum(UserStatus),
        default=UserStatus.ACTIVE,
        nullable=False,
        index=True,
    )

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole),
        default=UserRole.USER,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE


# Case-insensitive uniqueness for usernames ("Alice" and "alice" collide)
Index("uq_users_username_lower", func.lower(User.username), unique=True)
