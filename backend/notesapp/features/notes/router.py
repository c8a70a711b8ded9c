"""
Notes feature: API routes for note management.
"""

from fastapi import APIRouter, Depends, status
from supabase import Client

from notesapp.core.dependencies import get_db, get_current_user_id
from notesapp.features.notes.filters import NoteQuery
from notesapp.features.notes.schemas import (
    NoteCreate,
    NoteStatus,
    NoteUpdate,
    SortDirection,
    SortField,
)
from notesapp.features.notes.service import NotesService

router = APIRouter()


def note_query_params(
    page: int = 1,
    page_size: int | None = None,
    search: str | None = None,
    sort_field: SortField = SortField.UPDATED_AT,
    sort_direction: SortDirection = SortDirection.DESC,
    tag: str | None = None,
    folder: str | None = None,
    color: str | None = None,
    favorite: bool = False,
) -> NoteQuery:
    """Listing query parameters. `folder=null` selects notes in no folder."""
    return NoteQuery(
        page=page,
        page_size=page_size,
        search=search,
        sort_field=sort_field,
        sort_direction=sort_direction,
        tag_id=tag,
        folder_id=folder,
        color=color,
        favorite_only=favorite,
    )


@router.get("/")
async def list_notes(
    query: NoteQuery = Depends(note_query_params),
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """List active notes (pinned first) with filters and pagination."""
    service = NotesService(db, user_id)
    return {"data": service.list_notes(query)}


@router.get("/search")
async def search_notes(
    q: str = "",
    query: NoteQuery = Depends(note_query_params),
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Search active notes by title or content."""
    service = NotesService(db, user_id)
    return {"data": service.search_notes(q, query)}


@router.get("/trash")
async def list_trash(
    query: NoteQuery = Depends(note_query_params),
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """List trashed notes."""
    service = NotesService(db, user_id)
    return {"data": service.list_notes(query.model_copy(update={"view": NoteStatus.TRASHED}))}


@router.delete("/trash")
async def empty_trash(
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Permanently delete every trashed note."""
    service = NotesService(db, user_id)
    deleted = service.empty_trash()
    return {"message": f"{deleted} notes permanently deleted", "deleted_count": deleted}


@router.get("/archive")
async def list_archive(
    query: NoteQuery = Depends(note_query_params),
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """List archived notes."""
    service = NotesService(db, user_id)
    return {"data": service.list_notes(query.model_copy(update={"view": NoteStatus.ARCHIVED}))}


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_note(
    data: NoteCreate,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Create a new note."""
    service = NotesService(db, user_id)
    return {"data": service.create_note(data)}


@router.get("/{note_id}")
async def get_note(
    note_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Get a note. Each fetch counts as a view."""
    service = NotesService(db, user_id)
    return {"data": service.get_note(note_id)}


@router.put("/{note_id}")
async def update_note(
    note_id: str,
    data: NoteUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Update an existing note (partial)."""
    service = NotesService(db, user_id)
    return {"data": service.update_note(note_id, data)}


@router.delete("/{note_id}")
async def delete_note(
    note_id: str,
    permanent: bool = False,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Move a note to trash, or delete it for good with `permanent=true`."""
    service = NotesService(db, user_id)
    if permanent:
        deleted = service.hard_delete(note_id)
        return {"message": "Note permanently deleted", "data": deleted}
    return {"message": "Note moved to trash", "data": service.soft_delete(note_id)}


@router.patch("/{note_id}/pin")
async def toggle_pin(
    note_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = NotesService(db, user_id)
    note = service.toggle_pin(note_id)
    return {"message": "Note pinned" if note["is_pinned"] else "Note unpinned", "data": note}


@router.patch("/{note_id}/favorite")
async def toggle_favorite(
    note_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = NotesService(db, user_id)
    note = service.toggle_favorite(note_id)
    message = "Added to favorites" if note["is_favorite"] else "Removed from favorites"
    return {"message": message, "data": note}


@router.put("/{note_id}/archive")
async def toggle_archive(
    note_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Archive an active note or unarchive an archived one."""
    service = NotesService(db, user_id)
    note = service.toggle_archive(note_id)
    return {"message": "Note archived" if note["is_archived"] else "Note unarchived", "data": note}


@router.put("/{note_id}/restore")
async def restore_note(
    note_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Restore a note from trash."""
    service = NotesService(db, user_id)
    return {"message": "Note restored", "data": service.restore(note_id)}


@router.post("/{note_id}/duplicate", status_code=status.HTTP_201_CREATED)
async def duplicate_note(
    note_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = NotesService(db, user_id)
    return {"data": service.duplicate_note(note_id)}
