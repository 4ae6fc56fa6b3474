"""
UserSession model — one authenticated client connection.

A session is created on every successful login and is identified by an
opaque bearer token. The token is the only thing the client holds; every
authenticated request presents it and the server looks the row up.

Validity rule:
    valid  <=>  is_active AND (expires_at IS NULL OR expires_at > now)

Expired sessions are never swept: expiry is a filter applied at lookup
time. Sessions are never deleted either — logout flips is_active and stamps
logout_at, and "log out everywhere" flips is_active in bulk.

Relationship to User:
  Many-to-one and one-directional. The session eagerly joins its owning
  User (lazy="joined") so validation can check the user's status and the
  login response can embed a user summary without extra round-trips, but
  the User has no back-reference collection.
"""

from datetime import datetime

from sqlalchemy import Integer, String, Text, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from streaming_accounts.database import Base
from streaming_accounts.models.user import User
from streaming_accounts.timeutils import ensure_utc, utc_now


class UserSession(Base):
    __tablename__ = "user_sessions"

    __table_args__ = (
        Index("ix_user_sessions_user_active", "user_id", "is_active"),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    # Opaque bearer credential, unique at the storage level, never rewritten
    session_token: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )

    # 45 chars fits the longest textual IPv6 address
    ip_address: Mapped[str | None] = mapped_column(
        String(45),
        nullable=True,
    )

    user_agent: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    device_info: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    login_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
        index=True,
    )

    # Heartbeat, updated on every successful validation
    last_activity: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    logout_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # NULL means the session never expires by time
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    user: Mapped[User] = relationship(lazy="joined")

    def is_valid(self, now: datetime | None = None) -> bool:
        """Active and not past expires_at."""
        if not self.is_active:
            return False
        expires_at = ensure_utc(self.expires_at)
        return expires_at is None or expires_at > (now or utc_now())
