"""
UserPreferences model — playback, notification, and parental-control settings.

One row per User, created at registration with platform defaults.

Parental control:
  The parental-control PIN is stored as an Argon2 hash, exactly like a
  password. Parental control is "enabled" whenever a PIN hash is present.
  While it's enabled, adult content stays switched off; the service layer
  refuses to turn it back on until the PIN is cleared.
"""

import enum
from datetime import datetime

from sqlalchemy import Integer, String, Boolean, DateTime, Enum, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column

from streaming_accounts.database import Base
from streaming_accounts.timeutils import utc_now


class VideoQuality(str, enum.Enum):
    AUTO = "AUTO"
    SD = "SD"
    HD = "HD"
    FHD = "FHD"
    UHD = "UHD"


class UserPreferences(Base):
    __tablename__ = "user_preferences"

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

    # --- Playback ---
    preferred_language: Mapped[str] = mapped_column(String(10), default="id", nullable=False)
    preferred_quality: Mapped[VideoQuality] = mapped_column(
        Enum(VideoQuality),
        default=VideoQuality.AUTO,
        nullable=False,
    )
    autoplay_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    subtitles_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    subtitle_language: Mapped[str] = mapped_column(String(10), default="id", nullable=False)

    # --- Content ---
    adult_content_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Blocked content categories, e.g. ["horror", "violence"]
    content_filters: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    # --- Notifications ---
    email_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    marketing_emails: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    push_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # --- Parental control ---
    # Argon2 hash of the PIN; NULL means parental control is off
    parental_control_pin_hash: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
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
    def parental_control_enabled(self) -> bool:
        return self.parental_control_pin_hash is not None
