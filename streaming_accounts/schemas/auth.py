"""
Pydantic schemas for authentication endpoints (register, login, sessions).

These schemas define the request/response contracts for the auth API.
Pydantic validates incoming data automatically — if a required field is
missing or the wrong type, FastAPI returns a 422 error before our code
even runs.
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from streaming_accounts.schemas.user import UserResponse


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register."""
    username: str = Field(min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    email: EmailStr                                # Validates email format
    password: str = Field(min_length=8, max_length=128)
    first_name: str | None = Field(None, max_length=50)
    last_name: str | None = Field(None, max_length=50)
    display_name: str | None = Field(None, max_length=100)


class LoginRequest(BaseModel):
    """Request body for POST /auth/login. The identifier is a username or an email."""
    username_or_email: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=128)
    device_info: str | None = Field(None, max_length=255)


class SessionResponse(BaseModel):
    """Response body for login and validation — the bearer token plus a user summary."""
    session_token: str
    token_type: str = "bearer"
    expires_at: datetime | None
    user: UserResponse

    model_config = {"from_attributes": True}


class SessionInfoResponse(BaseModel):
    """One of the caller's sessions. Never includes the token itself."""
    id: int
    ip_address: str | None
    user_agent: str | None
    device_info: str | None
    login_at: datetime
    last_activity: datetime | None
    expires_at: datetime | None

    model_config = {"from_attributes": True}


class ActiveSessionsResponse(BaseModel):
    """Response body for GET /users/me/sessions."""
    count: int
    sessions: list[SessionInfoResponse]


class AdminSessionInfoResponse(SessionInfoResponse):
    """A session as seen by an admin, ended ones included."""
    is_active: bool
    logout_at: datetime | None


class UserSessionsResponse(BaseModel):
    """Response body for GET /admin/users/{user_id}/sessions."""
    active_count: int
    sessions: list[AdminSessionInfoResponse]


class OperationResponse(BaseModel):
    """Generic outcome for logout-style operations."""
    success: bool
    message: str
