"""
Folders feature: API routes.
"""

from fastapi import APIRouter, Depends, status
from supabase import Client

from notesapp.core.dependencies import get_db, get_current_user_id
from notesapp.features.folders.schemas import FolderCreate, FolderReorder, FolderUpdate
from notesapp.features.folders.service import FoldersService
from notesapp.features.notes.filters import NoteQuery
from notesapp.features.notes.router import note_query_params

router = APIRouter()


@router.get("/")
async def list_folders(
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = FoldersService(db, user_id)
    return {"data": service.list_folders()}


@router.get("/tree")
async def folder_tree(
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Folders nested under their parents."""
    service = FoldersService(db, user_id)
    return {"data": service.folder_tree()}


@router.put("/reorder")
async def reorder_folders(
    data: FolderReorder,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Bulk position update. Partial success is reported, not rolled back."""
    service = FoldersService(db, user_id)
    return {"data": service.reorder(data.folders)}


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_folder(
    data: FolderCreate,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = FoldersService(db, user_id)
    return {"data": service.create_folder(data)}


@router.put("/{folder_id}")
async def update_folder(
    folder_id: str,
    data: FolderUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = FoldersService(db, user_id)
    return {"data": service.update_folder(folder_id, data)}


@router.delete("/{folder_id}")
async def delete_folder(
    folder_id: str,
    move_notes_to: str | None = None,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = FoldersService(db, user_id)
    moved = service.delete_folder(folder_id, move_notes_to)
    return {"message": "Folder deleted successfully", "notes_moved": moved}


@router.get("/{folder_id}/notes")
async def notes_in_folder(
    folder_id: str,
    query: NoteQuery = Depends(note_query_params),
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = FoldersService(db, user_id)
    return {"data": service.notes_in_folder(folder_id, query)}
