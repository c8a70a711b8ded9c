"""
Tags feature: API routes.
"""

from fastapi import APIRouter, Depends, status
from supabase import Client

from notesapp.core.dependencies import get_db, get_current_user_id
from notesapp.features.notes.filters import NoteQuery
from notesapp.features.notes.router import note_query_params
from notesapp.features.tags.schemas import TagCreate, TagUpdate
from notesapp.features.tags.service import TagsService

router = APIRouter()


@router.get("/")
async def list_tags(
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """List tags with note counts."""
    service = TagsService(db, user_id)
    return {"data": service.list_tags()}


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_tag(
    data: TagCreate,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = TagsService(db, user_id)
    return {"data": service.create_tag(data)}


@router.put("/{tag_id}")
async def update_tag(
    tag_id: str,
    data: TagUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = TagsService(db, user_id)
    return {"data": service.update_tag(tag_id, data)}


@router.delete("/{tag_id}")
async def delete_tag(
    tag_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Delete a tag; notes holding it lose the reference."""
    service = TagsService(db, user_id)
    updated = service.delete_tag(tag_id)
    return {"message": "Tag deleted successfully", "notes_updated": updated}


@router.get("/{tag_id}/notes")
async def notes_with_tag(
    tag_id: str,
    query: NoteQuery = Depends(note_query_params),
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = TagsService(db, user_id)
    return {"data": service.notes_with_tag(tag_id, query)}
