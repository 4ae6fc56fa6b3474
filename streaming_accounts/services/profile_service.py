"""
Profile service — profile, preferences, and parental-control logic.

Profile updates:
  Only fields whose value actually changes are written. If anything
  changed, one PROFILE_UPDATE audit entry lists the changed field names.

Preferences:
  Partial updates of playback/notification settings. While parental
  control is enabled, adult content can't be switched back on.

Parental control PIN:
  - A PIN is 4 to 6 digits and is stored as an Argon2 hash
  - Setting a PIN turns adult content off
  - Clearing the PIN (None) disables parental control
  - verify_parental_pin() is False whenever no PIN is set
"""

import logging
import re
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from streaming_accounts.exceptions import ParentalControlError, UserNotFoundError
from streaming_accounts.models.activity_log import UserAction
from streaming_accounts.models.preferences import UserPreferences
from streaming_accounts.models.profile import UserProfile
from streaming_accounts.security import hash_password, verify_password
from streaming_accounts.services.activity_service import record_activity
from streaming_accounts.timeutils import utc_now

logger = logging.getLogger(__name__)

PIN_PATTERN = re.compile(r"[0-9]{4,6}")

PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "display_name",
    "bio",
    "avatar_url",
    "birth_date",
    "phone_number",
    "country",
    "timezone",
    "language",
)

PREFERENCE_FIELDS = (
    "preferred_language",
    "preferred_quality",
    "autoplay_enabled",
    "subtitles_enabled",
    "subtitle_language",
    "adult_content_enabled",
    "content_filters",
    "email_notifications",
    "marketing_emails",
    "push_notifications",
)


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


async def get_profile(db: AsyncSession, user_id: int) -> UserProfile:
    """
    Get a user's profile.

    Raises:
        UserNotFoundError: If the user has no profile row.
    """
    result = await db.execute(select(UserProfile).where(UserProfile.user_id == user_id))
    profile = result.scalar_one_or_none()
    if profile is None:
        raise UserNotFoundError(user_id)
    return profile


async def update_profile(
    db: AsyncSession,
    user_id: int,
    changes: dict[str, Any],
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> UserProfile:
    """
    Apply a partial profile update.

    Args:
        db: Database session.
        user_id: Owner of the profile.
        changes: Field -> new value, only for fields the client sent.
        ip_address / user_agent: Client context for the audit entry.

    Returns:
        The (possibly unchanged) profile.
    """
    profile = await get_profile(db, user_id)

    changed_fields = []
    for field in PROFILE_FIELDS:
        if field in changes and getattr(profile, field) != changes[field]:
            setattr(profile, field, changes[field])
            changed_fields.append(field)

    if not changed_fields:
        return profile

    now = utc_now()
    profile.updated_at = now
    await db.flush()

    await record_activity(
        db,
        user_id=user_id,
        action=UserAction.PROFILE_UPDATE,
        description=f"Profile updated: {', '.join(changed_fields)}",
        details={"changed_fields": changed_fields},
        ip_address=ip_address,
        user_agent=user_agent,
        now=now,
    )
    logger.info("Profile updated: user_id=%s fields=%s", user_id, changed_fields)
    return profile


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------


async def get_preferences(db: AsyncSession, user_id: int) -> UserPreferences:
    """
    Get a user's preferences.

    Raises:
        UserNotFoundError: If the user has no preferences row.
    """
    result = await db.execute(
        select(UserPreferences).where(UserPreferences.user_id == user_id)
    )
    preferences = result.scalar_one_or_none()
    if preferences is None:
        raise UserNotFoundError(user_id)
    return preferences


async def update_preferences(
    db: AsyncSession,
    user_id: int,
    changes: dict[str, Any],
) -> UserPreferences:
    """
    Apply a partial preferences update.

    Raises:
        ParentalControlError: If adult content is being enabled while a
            parental-control PIN is set.
    """
    preferences = await get_preferences(db, user_id)

    if changes.get("adult_content_enabled") and preferences.parental_control_enabled:
        raise ParentalControlError(
            "Adult content can't be enabled while parental control is on"
        )

    for field in PREFERENCE_FIELDS:
        if field in changes:
            setattr(preferences, field, changes[field])

    preferences.updated_at = utc_now()
    await db.flush()
    logger.info("Preferences updated: user_id=%s", user_id)
    return preferences


async def set_parental_pin(
    db: AsyncSession,
    user_id: int,
    pin: str | None,
) -> UserPreferences:
    """
    Enable (with a new PIN) or disable (pin=None) parental control.

    Raises:
        ParentalControlError: If the PIN isn't 4 to 6 digits.
    """
    preferences = await get_preferences(db, user_id)

    if pin is None:
        preferences.parental_control_pin_hash = None
    else:
        if not PIN_PATTERN.fullmatch(pin):
            raise ParentalControlError("PIN must be 4 to 6 digits")
        preferences.parental_control_pin_hash = hash_password(pin)
        preferences.adult_content_enabled = False

    preferences.updated_at = utc_now()
    await db.flush()
    logger.info(
        "Parental control %s: user_id=%s",
        "enabled" if pin is not None else "disabled",
        user_id,
    )
    return preferences


async def verify_parental_pin(db: AsyncSession, user_id: int, pin: str) -> bool:
    preferences = await get_preferences(db, user_id)
    if not preferences.parental_control_enabled:
        return False
    return verify_password(pin, preferences.parental_control_pin_hash)
