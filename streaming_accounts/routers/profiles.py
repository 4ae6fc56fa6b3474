"""
Profiles router — view and edit the caller's profile.

Endpoints:
  GET   /profiles/me  — Current user's profile
  PATCH /profiles/me  — Partial update (only sent fields are changed)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from streaming_accounts.database import get_db
from streaming_accounts.dependencies import ClientContext, get_client_context, get_current_user
from streaming_accounts.models.user import User
from streaming_accounts.schemas.profile import ProfileResponse, ProfileUpdateRequest
from streaming_accounts.services import profile_service

router = APIRouter()


@router.get("/me", response_model=ProfileResponse, summary="Get my profile")
async def get_my_profile(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await profile_service.get_profile(db, user.id)


@router.patch("/me", response_model=ProfileResponse, summary="Update my profile")
async def update_my_profile(
    request: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    client: ClientContext = Depends(get_client_context),
    db: AsyncSession = Depends(get_db),
):
    """
    Update the caller's profile.

    Only fields present in the request body are considered; send `null` to
    clear an optional field. An activity entry lists the fields that changed.
    """
    return await profile_service.update_profile(
        db=db,
        user_id=user.id,
        changes=request.model_dump(exclude_unset=True),
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
