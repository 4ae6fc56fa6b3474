"""
UserProfile model — the viewer's public-facing profile.

Kept separate from User so authentication data (password hash, status,
role) and presentation data (names, bio, avatar) change independently.
One row per User, created at registration with display_name defaulting
to the username.
"""

from datetime import date, datetime

from sqlalchemy import Integer, String, Date, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from streaming_accounts.database import Base
from streaming_accounts.timeutils import utc_now


class UserProfile(Base):
    __tablename__ = "user_profiles"

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

    first_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(50), nullable=True)

    display_name: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        index=True,
    )

    bio: Mapped[str | None] = mapped_column(String(500), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    country: Mapped[str | None] = mapped_column(String(50), nullable=True)
    timezone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    language: Mapped[str] = mapped_column(
        String(10),
        default="id",
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

    @property
    def full_name(self) -> str | None:
        names = [name for name in (self.first_name, self.last_name) if name]
        return " ".join(names) or None

    def age(self, today: date | None = None) -> int | None:
        """Whole years since birth_date, or None if it isn't set."""
        if self.birth_date is None:
            return None
        today = today or date.today()
        years = today.year - self.birth_date.year
        if (today.month, today.day) < (self.birth_date.month, self.birth_date.day):
            years -= 1
        return years
