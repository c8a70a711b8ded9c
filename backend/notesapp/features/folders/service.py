"""
Folders feature: Service layer for the per-user folder hierarchy.
"""

import logging

from postgrest.exceptions import APIError
from supabase import Client

from notesapp.core.exceptions import ConflictError, NotFoundError, ValidationError
from notesapp.core.repository import OwnedTable, is_uuid, now_iso, unique_violation_as_conflict
from notesapp.features.notes.filters import NoteQuery
from notesapp.features.notes.schemas import NoteStatus
from notesapp.features.notes.service import NotesService
from notesapp.features.folders.schemas import FolderCreate, FolderPosition, FolderUpdate

logger = logging.getLogger(__name__)

DUPLICATE_FOLDER = "Folder with this name already exists at this level"


def build_tree(folders: list[dict], parent_id: str | None = None) -> list[dict]:
    """Nest a flat, already ordered folder list under `children` keys."""
    return [
        {**folder, "children": build_tree(folders, folder["id"])}
        for folder in folders
        if folder.get("parent_id") == parent_id
    ]


class FoldersService:
    """Folder CRUD. Names are unique among siblings, ignoring case."""

    def __init__(self, db: Client, user_id: str):
        self.db = db
        self.user_id = user_id
        self.folders = OwnedTable(db, "folders", user_id)
        self.notes = OwnedTable(db, "notes", user_id)

    def _get(self, folder_id: str, message: str = "Folder not found") -> dict:
        folder = self.folders.get(folder_id)
        if folder is None:
            raise NotFoundError(message)
        return folder

    def _name_taken(self, name: str, parent_id: str | None, exclude_id: str | None = None) -> bool:
        query = self.folders.select("id,name")
        if parent_id:
            query = query.eq("parent_id", parent_id)
        else:
            query = query.is_("parent_id", "null")
        # not ilike: PostgREST reads `*` there as a wildcard
        wanted = name.lower()
        siblings = query.execute().data or []
        return any(row["name"].lower() == wanted and row["id"] != exclude_id for row in siblings)

    def _ordered(self) -> list[dict]:
        return self.folders.select().order("position").order("name").execute().data or []

    def _note_count(self, folder_id: str) -> int:
        result = (
            self.notes.select("id", count="exact")
            .eq("folder_id", folder_id)
            .neq("status", NoteStatus.TRASHED.value)
            .execute()
        )
        return result.count or 0

    def _descendant_ids(self, folder_id: str) -> set[str]:
        folders = self._ordered()
        found: set[str] = set()
        frontier = [folder_id]
        while frontier:
            current = frontier.pop()
            for folder in folders:
                if folder.get("parent_id") == current and folder["id"] not in found:
                    found.add(folder["id"])
                    frontier.append(folder["id"])
        return found

    # ── Reads ────────────────────────────────────────────

    def list_folders(self) -> list[dict]:
        """Flat list ordered by position then name, with non-trashed note counts."""
        return [{**f, "note_count": self._note_count(f["id"])} for f in self._ordered()]

    def folder_tree(self) -> list[dict]:
        return build_tree(self._ordered())

    def notes_in_folder(self, folder_id: str, query: NoteQuery) -> dict:
        folder = self._get(folder_id)
        page = NotesService(self.db, self.user_id).list_notes(
            query.model_copy(update={"folder_id": folder_id})
        )
        return {"folder": folder, **page}

    # ── Writes ───────────────────────────────────────────

    def create_folder(self, data: FolderCreate) -> dict:
        parent_id = data.parent_id or None
        if parent_id:
            self._get(parent_id, "Parent folder not found")
        if self._name_taken(data.name, parent_id):
            raise ConflictError(DUPLICATE_FOLDER)

        siblings = self.folders.select("position")
        siblings = siblings.eq("parent_id", parent_id) if parent_id else siblings.is_("parent_id", "null")
        last = siblings.order("position", desc=True).limit(1).execute().data
        position = last[0]["position"] + 1 if last else 0

        with unique_violation_as_conflict(DUPLICATE_FOLDER):
            result = self.folders.insert({
                "name": data.name,
                "parent_id": parent_id,
                "icon": data.icon or "📁",
                "color": data.color,
                "position": position,
            }).execute()
        folder = result.data[0]
        logger.info(f"Folder created: {folder['id']} by user {self.user_id}")
        return folder

    def update_folder(self, folder_id: str, data: FolderUpdate) -> dict:
        folder = self._get(folder_id)
        changes = {
            k: v
            for k, v in data.model_dump(exclude_unset=True).items()
            if v is not None or k == "parent_id"
        }
        if not changes:
            raise ValidationError("Please provide at least one field to update")

        if "parent_id" in changes:
            parent_id = changes["parent_id"] or None
            changes["parent_id"] = parent_id
            if parent_id == folder_id:
                raise ValidationError("Folder cannot be its own parent")
            if parent_id:
                self._get(parent_id, "Parent folder not found")
                if parent_id in self._descendant_ids(folder_id):
                    raise ValidationError("Folder cannot be moved into its own subfolder")
        target_parent = changes.get("parent_id", folder.get("parent_id"))

        name = changes.get("name", folder["name"])
        moved = target_parent != folder.get("parent_id")
        if (moved or name != folder["name"]) and self._name_taken(name, target_parent, exclude_id=folder_id):
            raise ConflictError(DUPLICATE_FOLDER)

        changes["updated_at"] = now_iso()
        with unique_violation_as_conflict(DUPLICATE_FOLDER):
            result = self.folders.update(changes).eq("id", folder_id).execute()
        if not result.data:
            raise NotFoundError("Folder not found")
        return result.data[0]

    def delete_folder(self, folder_id: str, move_notes_to: str | None = None) -> int:
        """Delete an empty-of-subfolders folder, rehoming its notes.

        Notes go to `move_notes_to` when given, otherwise to no folder.
        Returns the number of notes moved.
        """
        self._get(folder_id)

        if self.folders.select("id").eq("parent_id", folder_id).limit(1).execute().data:
            raise ConflictError("Cannot delete folder with subfolders. Delete subfolders first.")

        target = move_notes_to if move_notes_to and move_notes_to != "null" else None
        if target:
            if target == folder_id:
                raise ValidationError("Cannot move notes into the folder being deleted")
            self._get(target, "Target folder not found")

        moved = self.notes.update({"folder_id": target}).eq("folder_id", folder_id).execute()
        self.folders.delete().eq("id", folder_id).execute()
        count = len(moved.data or [])
        logger.info(f"Folder deleted: {folder_id}, {count} note(s) moved to {target or 'no folder'}")
        return count

    def reorder(self, positions: list[FolderPosition]) -> dict:
        """Apply new positions one folder at a time.

        Not atomic: folders that fail (unknown id or a store error) are
        reported and the rest are still applied.
        """
        updated, failed = [], []
        for item in positions:
            if not is_uuid(item.id):
                failed.append(item.id)
                continue
            try:
                result = self.folders.update({"position": item.position}).eq("id", item.id).execute()
            except APIError as e:
                logger.warning(f"Reorder failed for folder {item.id}: {e}")
                failed.append(item.id)
                continue
            (updated if result.data else failed).append(item.id)
        return {"updated": updated, "failed": failed}
