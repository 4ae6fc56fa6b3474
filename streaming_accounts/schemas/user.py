"""
Pydantic schemas for User-related requests and responses.

These schemas control what user data is exposed through the API.
Notice that password_hash is NEVER included in any response schema —
this is a critical security boundary.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from streaming_accounts.models.activity_log import UserAction
from streaming_accounts.models.user import UserRole, UserStatus


class UserResponse(BaseModel):
    """Public representation of a User (never includes the password hash)."""
    id: int
    username: str
    email: str
    email_verified: bool
    status: UserStatus
    role: UserRole
    created_at: datetime

    model_config = {"from_attributes": True}


class UserStatusUpdateRequest(BaseModel):
    """Request body for PUT /admin/users/{user_id}/status."""
    status: UserStatus


class UserCountResponse(BaseModel):
    """Response body for GET /admin/users/count."""
    count: int


class PasswordChangeRequest(BaseModel):
    """Request body for PUT /users/me/password."""
    current_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=8, max_length=128)


class ActivityLogResponse(BaseModel):
    """One audit entry from the caller's activity history."""
    id: int
    action: UserAction
    description: str | None
    details: dict | None
    ip_address: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
