"""
Profile feature: usage statistics and data export.
"""

from collections import Counter
from datetime import timedelta

from supabase import Client

from notesapp.core.repository import OwnedTable, now_iso, parse_timestamp, utc_now
from notesapp.features.notes.schemas import NoteStatus

RECENT_DAYS = 30
TOP_TAGS = 5


class ProfileService:

    def __init__(self, db: Client, user_id: str):
        self.db = db
        self.user_id = user_id
        self.notes = OwnedTable(db, "notes", user_id)
        self.tags = OwnedTable(db, "tags", user_id)
        self.folders = OwnedTable(db, "folders", user_id)

    def _count(self, table: OwnedTable, status: NoteStatus | None = None) -> int:
        query = table.select("id", count="exact")
        if status:
            query = query.eq("status", status.value)
        return query.execute().count or 0

    def counts(self) -> dict:
        """Notes per lifecycle state plus folder and tag totals."""
        return {
            "active_notes": self._count(self.notes, NoteStatus.ACTIVE),
            "archived_notes": self._count(self.notes, NoteStatus.ARCHIVED),
            "trashed_notes": self._count(self.notes, NoteStatus.TRASHED),
            "folders": self._count(self.folders),
            "tags": self._count(self.tags),
        }

    def stats(self) -> dict:
        """Activity over non-trashed notes.

        `notes_by_day` covers notes created in the last 30 days, keyed by
        UTC date.
        """
        notes = (
            self.notes.select("id,tag_ids,word_count,created_at")
            .neq("status", NoteStatus.TRASHED.value)
            .execute()
        ).data or []

        since = utc_now() - timedelta(days=RECENT_DAYS)
        recent = [n for n in notes if parse_timestamp(n["created_at"]) >= since]
        per_day = Counter(parse_timestamp(n["created_at"]).date().isoformat() for n in recent)

        tag_uses = Counter(t for n in notes for t in (n.get("tag_ids") or []))
        top = tag_uses.most_common(TOP_TAGS)
        tags = {t["id"]: t for t in self.tags.get_many([tag_id for tag_id, _ in top], "id,name,color")}

        return {
            "total_notes": len(notes),
            "notes_this_month": len(recent),
            "total_words": sum(n.get("word_count") or 0 for n in notes),
            "most_used_tags": [
                {**tags[tag_id], "count": count} for tag_id, count in top if tag_id in tags
            ],
            "notes_by_day": [{"date": day, "count": per_day[day]} for day in sorted(per_day)],
        }

    def export(self) -> dict:
        """Everything the user owns, with references resolved to names."""
        user = (
            self.db.table("users")
            .select("name,email,preferences")
            .eq("id", self.user_id)
            .limit(1)
            .execute()
        ).data
        notes = self.notes.select().order("created_at").execute().data or []
        folders = self.folders.select("id,name,icon,color,parent_id").order("name").execute().data or []
        tags = self.tags.select("id,name,color").order("name").execute().data or []

        tag_names = {t["id"]: t["name"] for t in tags}
        folder_names = {f["id"]: f["name"] for f in folders}

        return {
            "exported_at": now_iso(),
            "user": user[0] if user else None,
            "notes": [
                {
                    "title": n["title"],
                    "content": n["content"],
                    "content_type": n["content_type"],
                    "color": n["color"],
                    "status": n["status"],
                    "is_pinned": n["is_pinned"],
                    "is_favorite": n["is_favorite"],
                    "tags": [tag_names[t] for t in n.get("tag_ids") or [] if t in tag_names],
                    "folder": folder_names.get(n.get("folder_id")),
                    "created_at": n["created_at"],
                    "updated_at": n["updated_at"],
                }
                for n in notes
            ],
            "folders": [
                {"name": f["name"], "icon": f["icon"], "color": f["color"],
                 "parent": folder_names.get(f.get("parent_id"))}
                for f in folders
            ],
            "tags": [{"name": t["name"], "color": t["color"]} for t in tags],
        }
