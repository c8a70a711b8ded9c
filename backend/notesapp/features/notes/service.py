"""
Notes feature: Service layer for the note lifecycle and listings.
"""

import logging

from postgrest.exceptions import APIError
from supabase import Client

from notesapp.config import get_settings
from notesapp.core.exceptions import NotFoundError, ValidationError
from notesapp.core.repository import OwnedTable, is_uuid, now_iso, utc_now
from notesapp.features.notes import lifecycle
from notesapp.features.notes.filters import NO_FOLDER, NoteQuery, apply_note_query, apply_predicates
from notesapp.features.notes.schemas import NoteCreate, NoteResponse, NoteStatus, NoteUpdate

logger = logging.getLogger(__name__)

# PostgREST error for a page that starts past the last row
RANGE_NOT_SATISFIABLE = "PGRST103"


class NotesService:
    """Lifecycle operations and filtered listings over one user's notes."""

    def __init__(self, db: Client, user_id: str):
        self.db = db
        self.user_id = user_id
        self.settings = get_settings()
        self.notes = OwnedTable(db, "notes", user_id)
        self.tags = OwnedTable(db, "tags", user_id)
        self.folders = OwnedTable(db, "folders", user_id)

    # ── Lookups ──────────────────────────────────────────

    def _get_owned(self, note_id: str, *statuses: NoteStatus) -> dict:
        """Fetch an owned note, optionally only in the given states."""
        if not is_uuid(note_id):
            raise NotFoundError("Note not found")
        query = self.notes.select().eq("id", note_id)
        if statuses:
            query = query.in_("status", [s.value for s in statuses])
        result = query.limit(1).execute()
        if not result.data:
            raise NotFoundError("Note not found")
        return result.data[0]

    def _get_untrashed(self, note_id: str) -> dict:
        return self._get_owned(note_id, NoteStatus.ACTIVE, NoteStatus.ARCHIVED)

    def _validate_refs(self, tag_ids: list[str] | None, folder_id: str | None) -> None:
        """Tags and folder must resolve to records owned by the same user."""
        if tag_ids:
            wanted = set(tag_ids)
            found = self.tags.get_many(list(wanted), "id")
            if len(found) != len(wanted):
                raise ValidationError("One or more invalid tags")
        if folder_id and self.folders.get(folder_id) is None:
            raise ValidationError("Invalid folder")

    def _write(self, note_id: str, changes: dict) -> dict:
        result = self.notes.update(changes).eq("id", note_id).execute()
        if not result.data:
            raise NotFoundError("Note not found")
        return result.data[0]

    # ── Presentation ─────────────────────────────────────

    def present(self, rows: list[dict]) -> list[dict]:
        """Attach tag and folder summaries and the derived fields."""
        tag_ids = {t for row in rows for t in (row.get("tag_ids") or [])}
        folder_ids = {row["folder_id"] for row in rows if row.get("folder_id")}
        tags = {t["id"]: t for t in self.tags.get_many(list(tag_ids), "id,name,color")}
        folders = {f["id"]: f for f in self.folders.get_many(list(folder_ids), "id,name,icon,color")}

        presented = []
        for row in rows:
            status = NoteStatus(row["status"])
            note = NoteResponse(
                **row,
                preview=lifecycle.preview(row["content"]),
                is_archived=status == NoteStatus.ARCHIVED,
                is_trashed=status == NoteStatus.TRASHED,
                folder=folders.get(row.get("folder_id")),
                tags=[tags[t] for t in row.get("tag_ids") or [] if t in tags],
            )
            presented.append(note.model_dump(mode="json"))
        return presented

    def present_one(self, row: dict) -> dict:
        return self.present([row])[0]

    # ── Create / read / update ───────────────────────────

    def create_note(self, data: NoteCreate) -> dict:
        self._validate_refs(data.tag_ids, data.folder_id)

        insert_data = {
            "title": data.title,
            "content": data.content,
            "content_type": data.content_type.value,
            "color": data.color,
            "tag_ids": data.tag_ids,
            "folder_id": data.folder_id,
            "is_pinned": data.is_pinned,
            "is_favorite": False,
            "status": NoteStatus.ACTIVE.value,
            "archived_before_trash": False,
            "trashed_at": None,
            "view_count": 0,
            "last_viewed_at": None,
            "position": 0,
            **lifecycle.text_stats(data.content),
        }
        result = self.notes.insert(insert_data).execute()
        note = result.data[0]
        logger.info(f"Note created: {note['id']} by user {self.user_id}")
        return self.present_one(note)

    def get_note(self, note_id: str) -> dict:
        """Fetch a note for reading. Counts as a view."""
        note = self._get_untrashed(note_id)
        return self.present_one(self._record_view(note))

    def update_note(self, note_id: str, data: NoteUpdate) -> dict:
        """Partial update: only the fields present in the request are written."""
        self._get_untrashed(note_id)

        changes = {
            k: v
            for k, v in data.model_dump(mode="json", exclude_unset=True).items()
            if v is not None or k == "folder_id"
        }
        if not changes:
            raise ValidationError("Please provide at least one field to update")

        self._validate_refs(changes.get("tag_ids"), changes.get("folder_id"))

        if "content" in changes:
            changes.update(lifecycle.text_stats(changes["content"]))
        changes["updated_at"] = now_iso()

        note = self._write(note_id, changes)
        logger.info(f"Note updated: {note_id} ({', '.join(sorted(changes))})")
        return self.present_one(note)

    def duplicate_note(self, note_id: str) -> dict:
        original = self._get_untrashed(note_id)
        copy = {
            "title": f"{original['title']} (Copy)"[:200],
            "content": original["content"],
            "content_type": original["content_type"],
            "color": original["color"],
            "tag_ids": list(original.get("tag_ids") or []),
            "folder_id": original.get("folder_id"),
            "is_pinned": False,
            "is_favorite": False,
            "status": NoteStatus.ACTIVE.value,
            "archived_before_trash": False,
            "trashed_at": None,
            "view_count": 0,
            "last_viewed_at": None,
            "position": 0,
            **lifecycle.text_stats(original["content"]),
        }
        result = self.notes.insert(copy).execute()
        return self.present_one(result.data[0])

    def _record_view(self, note: dict) -> dict:
        return self._write(
            note["id"],
            {"view_count": (note.get("view_count") or 0) + 1, "last_viewed_at": now_iso()},
        )

    def record_view(self, note_id: str) -> dict:
        """Bump the view counter. Not an edit: counts and updated_at stay put."""
        return self.present_one(self._record_view(self._get_untrashed(note_id)))

    # ── Flags ────────────────────────────────────────────

    def toggle_pin(self, note_id: str) -> dict:
        note = self._get_owned(note_id)
        return self.present_one(
            self._write(note_id, {"is_pinned": not note["is_pinned"], "updated_at": now_iso()})
        )

    def toggle_favorite(self, note_id: str) -> dict:
        note = self._get_owned(note_id)
        return self.present_one(
            self._write(note_id, {"is_favorite": not note["is_favorite"], "updated_at": now_iso()})
        )

    # ── Lifecycle ────────────────────────────────────────

    def set_archived(self, note_id: str, archived: bool) -> dict:
        """Archive or unarchive. Trashed notes are not archivable."""
        self._get_untrashed(note_id)
        return self.present_one(self._write(note_id, lifecycle.archive_changes(archived)))

    def archive_note(self, note_id: str) -> dict:
        return self.set_archived(note_id, True)

    def unarchive_note(self, note_id: str) -> dict:
        return self.set_archived(note_id, False)

    def toggle_archive(self, note_id: str) -> dict:
        note = self._get_untrashed(note_id)
        return self.set_archived(note_id, note["status"] != NoteStatus.ARCHIVED.value)

    def soft_delete(self, note_id: str) -> dict:
        """Move to trash. Trashing an already trashed note is a no-op."""
        note = self._get_owned(note_id)
        changes = lifecycle.soft_delete_changes(note, utc_now())
        if changes is None:
            return self.present_one(note)
        note = self._write(note_id, changes)
        logger.info(f"Note moved to trash: {note_id} by user {self.user_id}")
        return self.present_one(note)

    def restore(self, note_id: str) -> dict:
        note = self._get_owned(note_id, NoteStatus.TRASHED)
        policy = lifecycle.RestorePolicy(self.settings.TRASH_RESTORE_POLICY)
        result = (
            self.notes.update(lifecycle.restore_changes(note, policy))
            .eq("id", note_id)
            .eq("status", NoteStatus.TRASHED.value)
            .execute()
        )
        if not result.data:
            # purged or restored concurrently
            raise NotFoundError("Note not found in trash")
        logger.info(f"Note restored: {note_id} -> {result.data[0]['status']}")
        return self.present_one(result.data[0])

    def hard_delete(self, note_id: str) -> dict:
        """Permanently delete, whatever the state. Irreversible."""
        if not is_uuid(note_id):
            raise NotFoundError("Note not found")
        result = self.notes.delete().eq("id", note_id).execute()
        if not result.data:
            raise NotFoundError("Note not found")
        deleted = result.data[0]
        logger.info(f"Note permanently deleted: {note_id} by user {self.user_id}")
        return {"id": deleted["id"], "title": deleted["title"]}

    def empty_trash(self) -> int:
        result = self.notes.delete().eq("status", NoteStatus.TRASHED.value).execute()
        deleted = len(result.data or [])
        logger.info(f"Trash emptied for user {self.user_id}: {deleted} note(s)")
        return deleted

    # ── Listings ─────────────────────────────────────────

    def list_notes(self, query: NoteQuery) -> dict:
        q = query.normalized(self.settings.DEFAULT_PAGE_SIZE, self.settings.MAX_PAGE_SIZE)
        if q.tag_id and not is_uuid(q.tag_id):
            raise ValidationError("Invalid tag filter")
        if q.folder_id and q.folder_id != NO_FOLDER and not is_uuid(q.folder_id):
            raise ValidationError("Invalid folder filter")
        try:
            result = apply_note_query(self.notes.select(count="exact"), q).execute()
        except APIError as e:
            if e.code != RANGE_NOT_SATISFIABLE:
                raise
            total = self._count(q)
            return {"items": [], "total": total, "page": q.page,
                    "page_size": q.page_size, "pages": q.page_count(total)}

        total = result.count if result.count is not None else len(result.data or [])
        return {
            "items": self.present(result.data or []),
            "total": total,
            "page": q.page,
            "page_size": q.page_size,
            "pages": q.page_count(total),
        }

    def _count(self, q: NoteQuery) -> int:
        result = apply_predicates(self.notes.select("id", count="exact"), q.predicates()).execute()
        return result.count or 0

    def search_notes(self, text: str, query: NoteQuery | None = None) -> dict:
        if not text or not text.strip():
            raise ValidationError("Please provide a search query")
        query = query or NoteQuery()
        return self.list_notes(query.model_copy(update={"search": text}))
