"""
Preferences router — playback, notification and parental-control settings.

Endpoints:
  GET  /preferences/me                      — Current preferences
  PUT  /preferences/me                      — Partial update
  PUT  /preferences/me/parental-pin         — Set (or clear with null) the PIN
  POST /preferences/me/parental-pin/verify  — Check a PIN

While a parental-control PIN is set, adult content stays disabled.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from streaming_accounts.database import get_db
from streaming_accounts.dependencies import get_current_user
from streaming_accounts.models.user import User
from streaming_accounts.schemas.profile import (
    ParentalPinRequest,
    ParentalPinVerifyRequest,
    ParentalPinVerifyResponse,
    PreferencesResponse,
    PreferencesUpdateRequest,
)
from streaming_accounts.services import profile_service

router = APIRouter()


@router.get("/me", response_model=PreferencesResponse, summary="Get my preferences")
async def get_my_preferences(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await profile_service.get_preferences(db, user.id)


@router.put("/me", response_model=PreferencesResponse, summary="Update my preferences")
async def update_my_preferences(
    request: PreferencesUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Update the caller's preferences.

    Returns 422 if adult content is being enabled while parental control is on.
    """
    return await profile_service.update_preferences(
        db=db,
        user_id=user.id,
        changes=request.model_dump(exclude_unset=True),
    )


@router.put(
    "/me/parental-pin",
    response_model=PreferencesResponse,
    summary="Set or clear the parental-control PIN",
)
async def set_parental_pin(
    request: ParentalPinRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Enable parental control with a 4-6 digit PIN, or disable it with `null`.

    Enabling parental control also switches adult content off.
    """
    return await profile_service.set_parental_pin(db, user.id, request.pin)


@router.post(
    "/me/parental-pin/verify",
    response_model=ParentalPinVerifyResponse,
    summary="Verify the parental-control PIN",
)
async def verify_parental_pin(
    request: ParentalPinVerifyRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    valid = await profile_service.verify_parental_pin(db, user.id, request.pin)
    return ParentalPinVerifyResponse(valid=valid)
