"""
Admin router — user administration endpoints.

All endpoints require ADMIN role.

Endpoints:
  GET  /admin/users                          — List active users
  GET  /admin/users/count                    — Number of ACTIVE users
  GET  /admin/users/search?q=                — Search by username, email or display name
  GET  /admin/users/{user_id}                — Get any user by ID
  PUT  /admin/users/{user_id}/status         — Change a user's status
  POST /admin/users/{user_id}/verify-email   — Mark a user's email as verified
  GET  /admin/users/{user_id}/sessions       — Full session history of a user
  POST /admin/users/{user_id}/sessions/revoke — End every session of a user

Status changes take effect immediately: sessions of a user who is no longer
ACTIVE are rejected on their next request even without an explicit revoke.

The static /users/count and /users/search routes are declared before
/users/{user_id} so the path parameter doesn't swallow them.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from streaming_accounts.database import get_db
from streaming_accounts.dependencies import require_admin
from streaming_accounts.models.user import User
from streaming_accounts.schemas.auth import (
    AdminSessionInfoResponse,
    OperationResponse,
    UserSessionsResponse,
)
from streaming_accounts.schemas.user import (
    UserCountResponse,
    UserResponse,
    UserStatusUpdateRequest,
)
from streaming_accounts.services import auth_service, user_service

router = APIRouter()


@router.get(
    "/users",
    response_model=list[UserResponse],
    summary="[Admin] List active users",
)
async def admin_list_active_users(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.list_active_users(db)


@router.get(
    "/users/count",
    response_model=UserCountResponse,
    summary="[Admin] Count active users",
)
async def admin_count_active_users(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return UserCountResponse(count=await user_service.count_active_users(db))


@router.get(
    "/users/search",
    response_model=list[UserResponse],
    summary="[Admin] Search users",
)
async def admin_search_users(
    q: str = Query(..., min_length=1, max_length=100, description="Search term"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Case-insensitive substring match on username, email and display name."""
    return await user_service.search_users(db, q)


@router.get(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="[Admin] Get any user by ID",
)
async def admin_get_user(
    user_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_user(db, user_id)


@router.put(
    "/users/{user_id}/status",
    response_model=UserResponse,
    summary="[Admin] Change a user's status",
)
async def admin_update_user_status(
    user_id: int,
    request: UserStatusUpdateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Set a user's status to ACTIVE, INACTIVE, SUSPENDED or BANNED."""
    return await user_service.update_user_status(db, user_id, request.status)


@router.post(
    "/users/{user_id}/sessions/revoke",
    response_model=OperationResponse,
    summary="[Admin] End every session of a user",
)
async def admin_revoke_user_sessions(
    user_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await user_service.get_user(db, user_id)
    await auth_service.end_all_user_sessions(db, user_id)
    return OperationResponse(success=True, message=f"All sessions of user {user_id} ended")


@router.post(
    "/users/{user_id}/verify-email",
    response_model=UserResponse,
    summary="[Admin] Mark a user's email as verified",
)
async def admin_verify_email(
    user_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.mark_email_verified(db, user_id)


@router.get(
    "/users/{user_id}/sessions",
    response_model=UserSessionsResponse,
    summary="[Admin] List every session of a user",
)
async def admin_list_user_sessions(
    user_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Every session the user has had, newest first, ended ones included.

    active_count counts sessions not yet logged out or revoked, whether or
    not they have expired.
    """
    await user_service.get_user(db, user_id)
    sessions = await auth_service.list_all_user_sessions(db, user_id)
    return UserSessionsResponse(
        active_count=await auth_service.count_active_user_sessions(db, user_id),
        sessions=[AdminSessionInfoResponse.model_validate(s) for s in sessions],
    )
