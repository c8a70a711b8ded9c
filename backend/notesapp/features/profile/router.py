"""
Profile feature: API routes for the signed-in user's account.
"""

from fastapi import APIRouter, Depends
from supabase import Client

from notesapp.core.dependencies import get_db, get_current_user_id
from notesapp.features.auth.schemas import (
    ChangePasswordRequest,
    DeleteAccountRequest,
    MessageResponse,
    UpdatePreferencesRequest,
    UpdateProfileRequest,
)
from notesapp.features.auth.service import AuthService
from notesapp.features.profile.service import ProfileService

router = APIRouter()


@router.get("/")
async def get_profile(
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Profile with note, folder and tag counts."""
    user = await AuthService(db).get_profile(user_id)
    counts = ProfileService(db, user_id).counts()
    return {"data": {**user.model_dump(mode="json"), "stats": counts}}


@router.put("/")
async def update_profile(
    data: UpdateProfileRequest,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    user = await AuthService(db).update_profile(user_id, data)
    return {"data": user.model_dump(mode="json")}


@router.put("/preferences")
async def update_preferences(
    data: UpdatePreferencesRequest,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    return {"data": await AuthService(db).update_preferences(user_id, data)}


@router.put("/password", response_model=MessageResponse)
async def change_password(
    data: ChangePasswordRequest,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    await AuthService(db).change_password(user_id, data)
    return {"message": "Password changed successfully"}


@router.delete("/", response_model=MessageResponse)
async def delete_account(
    data: DeleteAccountRequest,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Delete the account and all of its data. Irreversible."""
    await AuthService(db).delete_account(user_id, data.password)
    return {"message": "Account deleted successfully"}


@router.get("/stats")
async def get_stats(
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    return {"data": ProfileService(db, user_id).stats()}


@router.get("/export")
async def export_data(
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """JSON export of notes, folders and tags."""
    return {"data": ProfileService(db, user_id).export()}
