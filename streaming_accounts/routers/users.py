"""
Users router — the authenticated caller's own account.

Endpoints:
  GET /users/me           — Current user
  PUT /users/me/password  — Change password
  GET /users/me/sessions  — Active sessions (with count)
  GET /users/me/activity  — Activity history, newest first

Every endpoint is scoped to the session's owner; there is no way to name
another user here.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from streaming_accounts.database import get_db
from streaming_accounts.dependencies import ClientContext, get_client_context, get_current_user
from streaming_accounts.models.activity_log import UserAction
from streaming_accounts.models.user import User
from streaming_accounts.schemas.auth import (
    ActiveSessionsResponse,
    OperationResponse,
    SessionInfoResponse,
)
from streaming_accounts.schemas.user import (
    ActivityLogResponse,
    PasswordChangeRequest,
    UserResponse,
)
from streaming_accounts.services import activity_service, auth_service, user_service

router = APIRouter()


@router.get("/me", response_model=UserResponse, summary="Get the current user")
async def get_me(user: User = Depends(get_current_user)):
    return user


@router.put(
    "/me/password",
    response_model=OperationResponse,
    summary="Change password",
)
async def change_password(
    request: PasswordChangeRequest,
    user: User = Depends(get_current_user),
    client: ClientContext = Depends(get_client_context),
    db: AsyncSession = Depends(get_db),
):
    """
    Change the caller's password.

    The current password must be supplied. Existing sessions, including the
    one used for this request, stay valid.
    """
    await user_service.change_password(
        db=db,
        user_id=user.id,
        current_password=request.current_password,
        new_password=request.new_password,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    return OperationResponse(success=True, message="Password changed")


@router.get(
    "/me/sessions",
    response_model=ActiveSessionsResponse,
    summary="List active sessions",
)
async def list_my_sessions(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's unexpired active sessions. Tokens are never returned."""
    sessions = await auth_service.list_active_user_sessions(db, user.id)
    return ActiveSessionsResponse(
        count=len(sessions),
        sessions=[SessionInfoResponse.model_validate(s) for s in sessions],
    )


@router.get(
    "/me/activity",
    response_model=list[ActivityLogResponse],
    summary="List activity history",
)
async def list_my_activity(
    action: UserAction | None = Query(None, description="Filter by action"),
    limit: int = Query(50, ge=1, le=200),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await activity_service.list_user_activity(
        db, user.id, limit=limit, action=action
    )
