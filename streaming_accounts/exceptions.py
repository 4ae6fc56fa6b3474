"""
Custom exception classes and FastAPI exception handlers.

Why custom exceptions?
  The service layer raises domain-specific errors (like AccountLockedError)
  without importing HTTP concepts. The handler layer then translates these
  into HTTP responses.

  This separation means:
    - Service code is testable without HTTP
    - Error responses are consistent across all endpoints
    - Every user-visible message stays generic, while the service logs
      keep the specific cause

Exception hierarchy:
    StreamingAccountsError (base)
    ├── InvalidCredentialsError     — unknown identifier or wrong password (conflated)
    ├── AccountNotActiveError       — user status is not ACTIVE
    ├── AccountLockedError          — lockout window still open
    ├── SecurityRecordMissingError  — user has no AccountSecurity row (server fault)
    ├── SessionInvalidError         — token unknown, expired, or revoked
    ├── DuplicateUsernameError      — registration with a taken username
    ├── DuplicateEmailError         — registration with a taken email
    ├── UserNotFoundError           — requested user doesn't exist
    ├── ParentalControlError        — PIN format or parental-control rule violation
    └── TokenGenerationError        — the OS random source failed
"""

import logging
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class StreamingAccountsError(Exception):
    """Base exception for all Streaming Accounts domain errors."""

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Authentication exceptions
# ---------------------------------------------------------------------------

class InvalidCredentialsError(StreamingAccountsError):
    """
    Raised when login credentials are incorrect.

    The same error covers "no such user" and "wrong password" so callers
    can't enumerate registered usernames or emails.
    """

    def __init__(self):
        super().__init__("Invalid credentials")


class AccountNotActiveError(StreamingAccountsError):
    """Raised when an INACTIVE, SUSPENDED or BANNED user tries to log in."""

    def __init__(self, status: str | None = None):
        self.status = status
        super().__init__("Account is not available")


class AccountLockedError(StreamingAccountsError):
    """
    Raised while the lockout window from repeated failed logins is open.

    Attributes:
        locked_until: When the lock expires (UTC).
    """

    def __init__(self, locked_until: datetime):
        self.locked_until = locked_until
        super().__init__("Account is temporarily locked")


class SecurityRecordMissingError(StreamingAccountsError):
    """
    Raised when a user has no AccountSecurity row.

    Registration always creates one, so this is an internal consistency
    fault and is reported as a server error, not a user error.
    """

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"Security record missing for user {user_id}")


class SessionInvalidError(StreamingAccountsError):
    """
    Raised when a bearer token doesn't resolve to a valid session.

    Unknown, expired, logged-out and revoked tokens are deliberately
    indistinguishable: the answer is always "please log in again".
    """

    def __init__(self):
        super().__init__("Invalid or expired session")


class TokenGenerationError(StreamingAccountsError):
    """Raised when the cryptographic random source is unavailable."""

    def __init__(self):
        super().__init__("Could not generate a session token")


# ---------------------------------------------------------------------------
# User registry exceptions
# ---------------------------------------------------------------------------

class DuplicateUsernameError(StreamingAccountsError):
    """Raised when registering with a username that's already taken."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Username {username} is already registered")


class DuplicateEmailError(StreamingAccountsError):
    """Raised when registering with an email that's already in use."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email {email} is already registered")


class UserNotFoundError(StreamingAccountsError):
    """Raised when a requested user does not exist."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class ParentalControlError(StreamingAccountsError):
    """Raised when a parental-control rule rejects a preference change."""

    def __init__(self, detail: str):
        super().__init__(detail)


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    Each handler maps a domain exception to an HTTP status code and
    consistent JSON response format: {"detail": ..., "error_type": ...}

    This is called once during app startup in main.py.
    """

    @app.exception_handler(InvalidCredentialsError)
    async def invalid_credentials_handler(
        request: Request, exc: InvalidCredentialsError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={"detail": exc.detail, "error_type": "invalid_credentials"},
        )

    @app.exception_handler(AccountNotActiveError)
    async def account_not_active_handler(
        request: Request, exc: AccountNotActiveError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=403,
            content={"detail": exc.detail, "error_type": "account_not_active"},
        )

    @app.exception_handler(AccountLockedError)
    async def account_locked_handler(
        request: Request, exc: AccountLockedError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=423,  # Locked
            content={
                "detail": exc.detail,
                "error_type": "account_locked",
                "locked_until": exc.locked_until.isoformat(),
            },
        )

    @app.exception_handler(SessionInvalidError)
    async def session_invalid_handler(
        request: Request, exc: SessionInvalidError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={"detail": exc.detail, "error_type": "session_invalid"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(SecurityRecordMissingError)
    async def security_record_missing_handler(
        request: Request, exc: SecurityRecordMissingError
    ) -> JSONResponse:
        logger.error("Security record missing for user_id=%s", exc.user_id)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error_type": "internal_error"},
        )

    @app.exception_handler(TokenGenerationError)
    async def token_generation_handler(
        request: Request, exc: TokenGenerationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error_type": "internal_error"},
        )

    @app.exception_handler(DuplicateUsernameError)
    async def duplicate_username_handler(
        request: Request, exc: DuplicateUsernameError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={"detail": exc.detail, "error_type": "duplicate_username"},
        )

    @app.exception_handler(DuplicateEmailError)
    async def duplicate_email_handler(
        request: Request, exc: DuplicateEmailError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={"detail": exc.detail, "error_type": "duplicate_email"},
        )

    @app.exception_handler(UserNotFoundError)
    async def user_not_found_handler(
        request: Request, exc: UserNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"detail": exc.detail, "error_type": "user_not_found"},
        )

    @app.exception_handler(ParentalControlError)
    async def parental_control_handler(
        request: Request, exc: ParentalControlError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": exc.detail, "error_type": "parental_control"},
        )
