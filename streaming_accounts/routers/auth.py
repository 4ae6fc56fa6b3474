"""
Authentication router — registration, login, and session endpoints.

Register and login are the only public (unauthenticated) endpoints in the
API. Everything else requires a valid session token.

Endpoints:
  POST /auth/register    — Register a new user
  POST /auth/login       — Authenticate and open a session
  POST /auth/logout      — End the presented session
  GET  /auth/validate    — Check the presented session (heartbeat)
  POST /auth/logout-all  — End every session of the caller

Security audit notes:
  - Plaintext passwords exist only in memory during request processing;
    they are hashed before any database operation and never logged.
  - Session tokens appear only in the login/validate response bodies, which
    are not logged by uvicorn (it logs method, path, and status code only).
  - Failed logins for unknown users and wrong passwords produce the same
    401 response body.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from streaming_accounts.database import get_db
from streaming_accounts.dependencies import (
    ClientContext,
    get_client_context,
    get_current_session,
    oauth2_scheme,
)
from streaming_accounts.models.session import UserSession
from streaming_accounts.schemas.auth import (
    LoginRequest,
    OperationResponse,
    RegisterRequest,
    SessionResponse,
)
from streaming_accounts.schemas.user import UserResponse
from streaming_accounts.services import auth_service, user_service

router = APIRouter()


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    request: RegisterRequest,
    client: ClientContext = Depends(get_client_context),
    db: AsyncSession = Depends(get_db),
):
    """
    Register a new streaming member.

    Creates the User together with its security record, profile and default
    preferences in a single atomic transaction. The new user must then log
    in to obtain a session token.

    - **username**: 3-50 characters, letters, digits, `_`, `.` and `-`; unique (case-insensitive)
    - **email**: Must be a valid email format and not already registered
    - **password**: Minimum 8 characters
    """
    return await user_service.register_user(
        db=db,
        username=request.username,
        email=request.email,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
        display_name=request.display_name,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )


@router.post(
    "/login",
    response_model=SessionResponse,
    summary="Authenticate and open a session",
)
async def login(
    request: LoginRequest,
    client: ClientContext = Depends(get_client_context),
    db: AsyncSession = Depends(get_db),
):
    """
    Authenticate with a username or email and a password.

    Returns a session token that must be included in the Authorization
    header for all subsequent requests:

        Authorization: Bearer <token>

    The session expires after SESSION_TTL_DAYS (default: 30). Five failed
    attempts in a row lock the account for LOCKOUT_MINUTES (default: 30).
    """
    return await auth_service.login(
        db=db,
        identifier=request.username_or_email,
        password=request.password,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
        device_info=request.device_info,
    )


@router.post(
    "/logout",
    response_model=OperationResponse,
    summary="End the current session",
)
async def logout(
    token: str = Depends(oauth2_scheme),
    client: ClientContext = Depends(get_client_context),
    db: AsyncSession = Depends(get_db),
):
    """
    End the session identified by the bearer token.

    Logging out an unknown or already-ended session is not an error; the
    response simply reports that nothing was ended.
    """
    ended = await auth_service.logout(
        db=db,
        session_token=token,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    if ended:
        return OperationResponse(success=True, message="Logged out")
    return OperationResponse(success=False, message="No active session for this token")


@router.get(
    "/validate",
    response_model=SessionResponse,
    summary="Validate the current session",
)
async def validate(session: UserSession = Depends(get_current_session)):
    """Return the current session if it is still usable. Also refreshes last_activity."""
    return session


@router.post(
    "/logout-all",
    response_model=OperationResponse,
    summary="End every session of the current user",
)
async def logout_all(
    session: UserSession = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    """Revoke all sessions of the caller, including the one used for this request."""
    await auth_service.end_all_user_sessions(db, session.user_id)
    return OperationResponse(success=True, message="All sessions ended")
