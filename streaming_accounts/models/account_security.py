"""
AccountSecurity model — per-user lockout state.

One row per User (UNIQUE user_id), created at registration and mutated on
every login attempt.

Lock state machine:
    UNLOCKED  account_locked_until is NULL or in the past
    LOCKED    account_locked_until is in the future

  - A failed password check increments failed_login_attempts and stamps
    last_failed_login. The attempt that reaches the threshold (5) also sets
    account_locked_until = now + 30 minutes.
  - A successful login resets the counter and clears both timestamps.
  - Unlocking is purely time-based: nothing flips the account back, the
    check simply compares account_locked_until against "now".

The transitions themselves are single atomic UPDATE statements in
services/lockout_service.py, so two concurrent failed attempts can never
overwrite each other's increment.
"""

from datetime import datetime

from sqlalchemy import Integer, Boolean, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from streaming_accounts.database import Base
from streaming_accounts.timeutils import ensure_utc, utc_now


class AccountSecurity(Base):
    __tablename__ = "account_security"

    __table_args__ = (
        CheckConstraint(
            "failed_login_attempts >= 0",
            name="ck_account_security_non_negative_attempts",
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    # Foreign key to User; UNIQUE enforces the one-to-one relationship
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        unique=True,
        nullable=False,
    )

    failed_login_attempts: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    last_failed_login: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Presence + future value means locked
    account_locked_until: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Reserved; no 2FA flow is implemented
    two_factor_enabled: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    def is_locked(self, now: datetime | None = None) -> bool:
        """True while account_locked_until lies in the future."""
        locked_until = ensure_utc(self.account_locked_until)
        return locked_until is not None and locked_until > (now or utc_now())
