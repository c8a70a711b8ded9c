"""
Shares feature: API routes.
"""

from fastapi import APIRouter, Depends, Response, status
from supabase import Client

from notesapp.core.dependencies import get_db, get_current_user_id
from notesapp.features.shares.schemas import ShareLinkCreate, ShareUpdate, ShareWithUser
from notesapp.features.shares.service import SharesService, open_shared_note

router = APIRouter()


@router.post("/")
async def share_note(
    data: ShareWithUser,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Share a note with a user by email. Re-sharing updates the settings."""
    service = SharesService(db, user_id)
    share, created = service.share_with_user(data)
    if created:
        response.status_code = status.HTTP_201_CREATED
        return {"data": share}
    return {"message": "Share settings updated", "data": share}


@router.post("/link", status_code=status.HTTP_201_CREATED)
async def create_share_link(
    data: ShareLinkCreate,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = SharesService(db, user_id)
    return {"data": service.create_link(data)}


@router.get("/public/{token}")
async def get_public_note(token: str, db: Client = Depends(get_db)):
    """Read a note through its public link. No login required."""
    return {"data": open_shared_note(db, token)}


@router.get("/with-me")
async def shared_with_me(
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = SharesService(db, user_id)
    return {"data": service.received()}


@router.get("/by-me")
async def shared_by_me(
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = SharesService(db, user_id)
    return {"data": service.sent()}


@router.get("/note/{note_id}")
async def note_share_settings(
    note_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = SharesService(db, user_id)
    return {"data": service.for_note(note_id)}


@router.put("/{share_id}")
async def update_share(
    share_id: str,
    data: ShareUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = SharesService(db, user_id)
    return {"data": service.update_share(share_id, data)}


@router.delete("/{share_id}")
async def revoke_share(
    share_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = SharesService(db, user_id)
    service.revoke(share_id)
    return {"message": "Share removed successfully"}
