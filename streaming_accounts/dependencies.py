"""
FastAPI dependencies for authentication and authorization.

Dependencies are reusable functions that FastAPI injects into route handlers.
They form a dependency chain that enforces both authentication and
role-based access control:

  get_current_session (bearer token -> UserSession, heartbeat)
      └── get_current_user (UserSession -> User)
              └── require_admin (User -> User)               [ADMIN role]

Sessions are opaque random tokens stored server-side, not self-contained
JWTs. Every authenticated request looks the token up, checks it is active,
unexpired and owned by an ACTIVE user, and stamps last_activity. A logout,
a "log out everywhere", or a suspension therefore takes effect on the very
next request.

Role-based access control:
  - USER / PREMIUM / MODERATOR: Can only access their own profile,
    preferences, sessions and activity history.
  - ADMIN: Can list and search users, change account status, and revoke a
    user's sessions through the /admin/* endpoints.
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from streaming_accounts.database import get_db
from streaming_accounts.exceptions import SessionInvalidError
from streaming_accounts.models.session import UserSession
from streaming_accounts.models.user import User, UserRole
from streaming_accounts.services import auth_service


# OAuth2PasswordBearer tells FastAPI where to look for the token:
# the "Authorization: Bearer <token>" header. The tokenUrl points to
# the login endpoint (used by Swagger UI's "Authorize" button).
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


@dataclass
class ClientContext:
    """Where a request came from, as recorded on sessions and audit entries."""
    ip_address: str | None
    user_agent: str | None


def get_client_context(request: Request) -> ClientContext:
    """
    Extract the client IP and User-Agent from the request.

    Behind a reverse proxy the first X-Forwarded-For hop is the real client.
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        ip_address = forwarded_for.split(",")[0].strip()
    elif request.client is not None:
        ip_address = request.client.host
    else:
        ip_address = None

    return ClientContext(
        ip_address=ip_address,
        user_agent=request.headers.get("user-agent"),
    )


async def get_current_session(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> UserSession:
    """
    Resolve the bearer token to a live session and record the activity.

    This dependency is the first line of defense: if the token is unknown,
    expired, revoked, or belongs to a user who is no longer ACTIVE, the
    request is rejected with 401.

    Args:
        token: Session token from the Authorization header.
        db: Database session (injected by get_db).

    Returns:
        The validated UserSession (its user is loaded).

    Raises:
        SessionInvalidError: If the token doesn't resolve to a usable session.
    """
    session = await auth_service.validate_and_update_session(db, token)
    if session is None:
        raise SessionInvalidError()
    return session


async def get_current_user(
    session: UserSession = Depends(get_current_session),
) -> User:
    """Return the User who owns the current session."""
    return session.user


async def require_admin(
    user: User = Depends(get_current_user),
) -> User:
    """
    Require the authenticated user to have the ADMIN role.

    Regular users who attempt to access admin endpoints receive a
    403 Forbidden.

    Raises:
        HTTPException 403: If the user is not an admin.
    """
    if user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user
