"""
Pydantic schemas for profile and preferences endpoints.

Response schemas use from_attributes=True to auto-convert from SQLAlchemy
model instances. Update schemas make every field optional: the routers pass
model_dump(exclude_unset=True) to the service, so only fields the client
actually sent are touched. Fields backed by NOT NULL columns reject an
explicit null with a 422.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from streaming_accounts.models.preferences import VideoQuality


class ProfileResponse(BaseModel):
    """Public representation of a UserProfile."""
    id: int
    user_id: int
    first_name: str | None
    last_name: str | None
    display_name: str | None
    full_name: str | None
    bio: str | None
    avatar_url: str | None
    birth_date: date | None
    phone_number: str | None
    country: str | None
    timezone: str | None
    language: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProfileUpdateRequest(BaseModel):
    """Request body for PATCH /profiles/me (all fields optional)."""
    first_name: str | None = Field(None, max_length=50)
    last_name: str | None = Field(None, max_length=50)
    display_name: str | None = Field(None, min_length=1, max_length=100)
    bio: str | None = Field(None, max_length=500)
    avatar_url: str | None = Field(None, max_length=255)
    birth_date: date | None = None
    phone_number: str | None = Field(None, max_length=20)
    country: str | None = Field(None, max_length=50)
    timezone: str | None = Field(None, max_length=50)
    language: str | None = Field(None, min_length=2, max_length=10)

    @field_validator("language")
    @classmethod
    def language_not_null(cls, value: str | None) -> str | None:
        # Omit the field to keep the current value; the column can't be cleared
        if value is None:
            raise ValueError("language cannot be null")
        return value


class PreferencesResponse(BaseModel):
    """Public representation of UserPreferences. The PIN hash is never exposed."""
    preferred_language: str
    preferred_quality: VideoQuality
    autoplay_enabled: bool
    subtitles_enabled: bool
    subtitle_language: str
    adult_content_enabled: bool
    content_filters: list[str] | None
    email_notifications: bool
    marketing_emails: bool
    push_notifications: bool
    parental_control_enabled: bool

    model_config = {"from_attributes": True}


class PreferencesUpdateRequest(BaseModel):
    """Request body for PUT /preferences/me (all fields optional)."""
    preferred_language: str | None = Field(None, min_length=2, max_length=10)
    preferred_quality: VideoQuality | None = None
    autoplay_enabled: bool | None = None
    subtitles_enabled: bool | None = None
    subtitle_language: str | None = Field(None, min_length=2, max_length=10)
    adult_content_enabled: bool | None = None
    content_filters: list[str] | None = None
    email_notifications: bool | None = None
    marketing_emails: bool | None = None
    push_notifications: bool | None = None

    @field_validator(
        "preferred_language",
        "preferred_quality",
        "autoplay_enabled",
        "subtitles_enabled",
        "subtitle_language",
        "adult_content_enabled",
        "email_notifications",
        "marketing_emails",
        "push_notifications",
    )
    @classmethod
    def not_null(cls, value, info):
        # Only content_filters may be cleared with an explicit null
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class ParentalPinRequest(BaseModel):
    """Request body for PUT /preferences/me/parental-pin. null disables parental control."""
    pin: str | None = None


class ParentalPinVerifyRequest(BaseModel):
    """Request body for POST /preferences/me/parental-pin/verify."""
    pin: str = Field(min_length=1, max_length=6)


class ParentalPinVerifyResponse(BaseModel):
    valid: bool
