"""
Shares feature: Service layer for user shares and public links.

A share row points at a note and carries either a recipient user
(`shared_with`) or an opaque `share_token`, never both. Shares are owned by
the note owner (`owner_id`); a share disappears with its note.
"""

import logging
from datetime import datetime

from supabase import Client

from notesapp.config import get_settings
from notesapp.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from notesapp.core.repository import (
    OwnedTable,
    is_uuid,
    parse_timestamp,
    unique_violation_as_conflict,
    utc_now,
)
from notesapp.core.security import generate_share_token
from notesapp.features.notes.schemas import NoteStatus
from notesapp.features.shares.schemas import Permission, ShareLinkCreate, ShareUpdate, ShareWithUser

logger = logging.getLogger(__name__)

SHARED_NOTE_COLUMNS = "id,title,content,content_type,color,tag_ids,status,created_at,updated_at"


def is_expired(share: dict, now: datetime | None = None) -> bool:
    expires_at = parse_timestamp(share.get("expires_at"))
    return expires_at is not None and (now or utc_now()) > expires_at


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class SharesService:
    """Sharing operations on behalf of one user."""

    def __init__(self, db: Client, user_id: str):
        self.db = db
        self.user_id = user_id
        self.shares = OwnedTable(db, "shared_notes", user_id, owner_column="owner_id")
        self.notes = OwnedTable(db, "notes", user_id)

    def _owned_note(self, note_id: str, allow_trashed: bool = False) -> dict:
        if not is_uuid(note_id):
            raise NotFoundError("Note not found")
        query = self.notes.select("id,title,status").eq("id", note_id)
        if not allow_trashed:
            query = query.neq("status", NoteStatus.TRASHED.value)
        result = query.limit(1).execute()
        if not result.data:
            raise NotFoundError("Note not found")
        return result.data[0]

    def _get_share(self, share_id: str) -> dict:
        share = self.shares.get(share_id)
        if share is None:
            raise NotFoundError("Share not found")
        return share

    def _users(self, user_ids: set[str]) -> dict[str, dict]:
        if not user_ids:
            return {}
        result = self.db.table("users").select("id,name,email").in_("id", list(user_ids)).execute()
        return {u["id"]: u for u in result.data or []}

    # ── Create ───────────────────────────────────────────

    def share_with_user(self, data: ShareWithUser) -> tuple[dict, bool]:
        """Share with the account behind `email`.

        Sharing the same note with the same user again updates the existing
        share in place. Returns the share and whether it was newly created.
        """
        self._owned_note(data.note_id)

        found = (
            self.db.table("users")
            .select("id,name,email")
            .eq("email", data.email.lower())
            .limit(1)
            .execute()
        )
        if not found.data:
            raise NotFoundError("User not found with this email")
        recipient = found.data[0]
        if recipient["id"] == self.user_id:
            raise ValidationError("Cannot share note with yourself")

        fields = {"permission": data.permission.value, "expires_at": _iso(data.expires_at)}
        existing = (
            self.shares.select("id")
            .eq("note_id", data.note_id)
            .eq("shared_with", recipient["id"])
            .limit(1)
            .execute()
        )
        if existing.data:
            share_id = existing.data[0]["id"]
            result = self.shares.update(fields).eq("id", share_id).execute()
            return {**result.data[0], "shared_with_user": recipient}, False

        with unique_violation_as_conflict("Note is already shared with this user"):
            result = self.shares.insert({
                "note_id": data.note_id,
                "shared_with": recipient["id"],
                "share_token": None,
                "view_count": 0,
                **fields,
            }).execute()
        logger.info(f"Note {data.note_id} shared with user {recipient['id']}")
        return {**result.data[0], "shared_with_user": recipient}, True

    def create_link(self, data: ShareLinkCreate) -> dict:
        """Create a public read-only link. Each call mints a new token."""
        self._owned_note(data.note_id)

        token = generate_share_token()
        with unique_violation_as_conflict("Share token collision, please retry"):
            result = self.shares.insert({
                "note_id": data.note_id,
                "shared_with": None,
                "share_token": token,
                "permission": Permission.READ.value,
                "expires_at": _iso(data.expires_at),
                "view_count": 0,
            }).execute()
        share = result.data[0]
        link = f"{get_settings().FRONTEND_URL.rstrip('/')}/shared/{token}"
        logger.info(f"Share link created for note {data.note_id}")
        return {"share_link": link, "share": share}

    # ── Lists ────────────────────────────────────────────

    def received(self) -> list[dict]:
        """Unexpired shares addressed to this user whose note is not trashed."""
        rows = (
            self.db.table("shared_notes")
            .select("*")
            .eq("shared_with", self.user_id)
            .order("created_at", desc=True)
            .execute()
        ).data or []
        now = utc_now()
        rows = [r for r in rows if not is_expired(r, now)]
        if not rows:
            return []

        notes = (
            self.db.table("notes")
            .select(SHARED_NOTE_COLUMNS)
            .in_("id", list({r["note_id"] for r in rows}))
            .neq("status", NoteStatus.TRASHED.value)
            .execute()
        ).data or []
        notes = {n["id"]: n for n in notes}
        owners = self._users({r["owner_id"] for r in rows})

        return [
            {**r, "note": notes[r["note_id"]], "owner": owners.get(r["owner_id"])}
            for r in rows
            if r["note_id"] in notes
        ]

    def sent(self) -> list[dict]:
        rows = self.shares.select().order("created_at", desc=True).execute().data or []
        if not rows:
            return []
        notes = {n["id"]: n for n in self.notes.get_many(list({r["note_id"] for r in rows}), "id,title,color")}
        recipients = self._users({r["shared_with"] for r in rows if r.get("shared_with")})
        return [
            {**r, "note": notes.get(r["note_id"]), "shared_with_user": recipients.get(r.get("shared_with"))}
            for r in rows
        ]

    def for_note(self, note_id: str) -> list[dict]:
        """Every share of one owned note, in any lifecycle state."""
        self._owned_note(note_id, allow_trashed=True)
        rows = self.shares.select().eq("note_id", note_id).order("created_at", desc=True).execute().data or []
        recipients = self._users({r["shared_with"] for r in rows if r.get("shared_with")})
        return [{**r, "shared_with_user": recipients.get(r.get("shared_with"))} for r in rows]

    # ── Manage ───────────────────────────────────────────

    def update_share(self, share_id: str, data: ShareUpdate) -> dict:
        self._get_share(share_id)
        changes = data.model_dump(mode="json", exclude_unset=True)
        if changes.get("permission") is None:
            changes.pop("permission", None)
        if not changes:
            raise ValidationError("Please provide at least one field to update")
        result = self.shares.update(changes).eq("id", share_id).execute()
        return result.data[0]

    def revoke(self, share_id: str) -> None:
        self._get_share(share_id)
        self.shares.delete().eq("id", share_id).execute()
        logger.info(f"Share revoked: {share_id}")


def open_shared_note(db: Client, token: str) -> dict:
    """Resolve a public share token. No authentication involved.

    Unknown tokens and trashed or deleted notes are NotFound, expired links
    are Forbidden. Every successful fetch counts one view.
    """
    result = db.table("shared_notes").select("*").eq("share_token", token).limit(1).execute()
    if not result.data:
        raise NotFoundError("Shared note not found")
    share = result.data[0]

    notes = (
        db.table("notes")
        .select(SHARED_NOTE_COLUMNS)
        .eq("id", share["note_id"])
        .limit(1)
        .execute()
    ).data
    if not notes or notes[0]["status"] == NoteStatus.TRASHED.value:
        raise NotFoundError("Shared note not found")
    if is_expired(share):
        raise ForbiddenError("This share link has expired")

    note = notes[0]
    view_count = (share.get("view_count") or 0) + 1
    db.table("shared_notes").update({"view_count": view_count}).eq("id", share["id"]).execute()

    tags = []
    if note.get("tag_ids"):
        tags = db.table("tags").select("id,name,color").in_("id", note["tag_ids"]).execute().data or []
    owner = db.table("users").select("id,name").eq("id", share["owner_id"]).limit(1).execute().data

    return {
        "note": {k: v for k, v in note.items() if k not in ("tag_ids", "status")} | {"tags": tags},
        "owner": owner[0] if owner else None,
        "permission": share["permission"],
        "view_count": view_count,
    }
