"""
Tags feature: Service layer for per-user labels.
"""

import logging

from supabase import Client

from notesapp.core.exceptions import ConflictError, NotFoundError, ValidationError
from notesapp.core.repository import OwnedTable, now_iso, unique_violation_as_conflict
from notesapp.features.notes.filters import NoteQuery
from notesapp.features.notes.schemas import NoteStatus
from notesapp.features.notes.service import NotesService
from notesapp.features.tags.schemas import TagCreate, TagUpdate

logger = logging.getLogger(__name__)

DUPLICATE_TAG = "Tag with this name already exists"


class TagsService:
    """CRUD for tags. Names are unique per owner, ignoring case."""

    def __init__(self, db: Client, user_id: str):
        self.db = db
        self.user_id = user_id
        self.tags = OwnedTable(db, "tags", user_id)
        self.notes = OwnedTable(db, "notes", user_id)

    def _get(self, tag_id: str) -> dict:
        tag = self.tags.get(tag_id)
        if tag is None:
            raise NotFoundError("Tag not found")
        return tag

    def _name_taken(self, name: str, exclude_id: str | None = None) -> bool:
        # not ilike: PostgREST reads `*` there as a wildcard
        wanted = name.lower()
        rows = self.tags.select("id,name").execute().data or []
        return any(row["name"].lower() == wanted and row["id"] != exclude_id for row in rows)

    def _note_count(self, tag_id: str) -> int:
        result = (
            self.notes.select("id", count="exact")
            .contains("tag_ids", [tag_id])
            .neq("status", NoteStatus.TRASHED.value)
            .execute()
        )
        return result.count or 0

    def list_tags(self) -> list[dict]:
        """All tags, alphabetical, each with its count of non-trashed notes."""
        result = self.tags.select().order("name").execute()
        return [{**tag, "note_count": self._note_count(tag["id"])} for tag in result.data or []]

    def create_tag(self, data: TagCreate) -> dict:
        if self._name_taken(data.name):
            raise ConflictError(DUPLICATE_TAG)
        with unique_violation_as_conflict(DUPLICATE_TAG):
            result = self.tags.insert({"name": data.name, "color": data.color}).execute()
        return result.data[0]

    def update_tag(self, tag_id: str, data: TagUpdate) -> dict:
        tag = self._get(tag_id)
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        if not changes:
            raise ValidationError("Please provide at least one field to update")

        if "name" in changes and changes["name"] != tag["name"]:
            if self._name_taken(changes["name"], exclude_id=tag_id):
                raise ConflictError(DUPLICATE_TAG)

        changes["updated_at"] = now_iso()
        with unique_violation_as_conflict(DUPLICATE_TAG):
            result = self.tags.update(changes).eq("id", tag_id).execute()
        if not result.data:
            raise NotFoundError("Tag not found")
        return result.data[0]

    def delete_tag(self, tag_id: str) -> int:
        """Delete a tag and pull it out of every note that holds it.

        Returns the number of notes that were updated.
        """
        self._get(tag_id)

        holders = self.notes.select("id,tag_ids").contains("tag_ids", [tag_id]).execute()
        for note in holders.data or []:
            remaining = [t for t in note["tag_ids"] if t != tag_id]
            self.notes.update({"tag_ids": remaining}).eq("id", note["id"]).execute()

        self.tags.delete().eq("id", tag_id).execute()
        updated = len(holders.data or [])
        logger.info(f"Tag deleted: {tag_id}, removed from {updated} note(s)")
        return updated

    def notes_with_tag(self, tag_id: str, query: NoteQuery) -> dict:
        tag = self._get(tag_id)
        page = NotesService(self.db, self.user_id).list_notes(
            query.model_copy(update={"tag_id": tag_id})
        )
        return {"tag": tag, **page}
