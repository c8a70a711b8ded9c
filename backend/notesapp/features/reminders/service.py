"""
Reminders feature: Service layer.

Reminders are passive records: nothing fires them from here. Completing a
recurring reminder is what creates its successor.
"""

import logging
from datetime import datetime, timedelta

from supabase import Client

from notesapp.core.exceptions import NotFoundError, ValidationError
from notesapp.core.repository import OwnedTable, now_iso, parse_timestamp, utc_now
from notesapp.features.notes.schemas import NoteStatus
from notesapp.features.reminders.recurrence import compute_next_occurrence
from notesapp.features.reminders.schemas import ReminderCreate, ReminderStatus, ReminderUpdate

logger = logging.getLogger(__name__)

UPCOMING_WINDOW = timedelta(days=7)


class RemindersService:

    def __init__(self, db: Client, user_id: str):
        self.db = db
        self.user_id = user_id
        self.reminders = OwnedTable(db, "reminders", user_id)
        self.notes = OwnedTable(db, "notes", user_id)

    def _get(self, reminder_id: str) -> dict:
        reminder = self.reminders.get(reminder_id)
        if reminder is None:
            raise NotFoundError("Reminder not found")
        return reminder

    def _check_note(self, note_id: str) -> None:
        note = self.notes.get(note_id)
        if note is None or note["status"] == NoteStatus.TRASHED.value:
            raise NotFoundError("Note not found")

    @staticmethod
    def _check_future(due_at: datetime) -> None:
        if due_at <= utc_now():
            raise ValidationError("Reminder date must be in the future")

    def _with_notes(self, rows: list[dict]) -> list[dict]:
        note_ids = {r["note_id"] for r in rows if r.get("note_id")}
        notes = {n["id"]: n for n in self.notes.get_many(list(note_ids), "id,title,color")}
        return [{**r, "note": notes.get(r.get("note_id"))} for r in rows]

    # ── Reads ────────────────────────────────────────────

    def list_reminders(self, status: ReminderStatus | None = None, upcoming: bool = False) -> list[dict]:
        """Reminders by due date. `upcoming` keeps pending ones not yet due."""
        query = self.reminders.select()
        if upcoming:
            query = query.eq("status", ReminderStatus.PENDING.value).gte("due_at", now_iso())
        elif status:
            query = query.eq("status", status.value)
        return self._with_notes(query.order("due_at").execute().data or [])

    def upcoming(self) -> list[dict]:
        """Pending reminders due within the next seven days."""
        now = utc_now()
        result = (
            self.reminders.select()
            .eq("status", ReminderStatus.PENDING.value)
            .gte("due_at", now.isoformat())
            .lte("due_at", (now + UPCOMING_WINDOW).isoformat())
            .order("due_at")
            .execute()
        )
        return self._with_notes(result.data or [])

    def for_note(self, note_id: str) -> list[dict]:
        if self.notes.get(note_id) is None:
            raise NotFoundError("Note not found")
        result = self.reminders.select().eq("note_id", note_id).order("due_at").execute()
        return result.data or []

    def get_reminder(self, reminder_id: str) -> dict:
        return self._with_notes([self._get(reminder_id)])[0]

    # ── Writes ───────────────────────────────────────────

    def create_reminder(self, data: ReminderCreate) -> dict:
        self._check_future(data.due_at)
        if data.note_id:
            self._check_note(data.note_id)

        result = self.reminders.insert({
            "note_id": data.note_id,
            "title": data.title,
            "due_at": data.due_at.isoformat(),
            "recurrence": data.recurrence.value,
            "status": ReminderStatus.PENDING.value,
            "notification_methods": [m.value for m in data.notification_methods],
            "completed_at": None,
        }).execute()
        reminder = result.data[0]
        logger.info(f"Reminder created: {reminder['id']} due {reminder['due_at']}")
        return reminder

    def update_reminder(self, reminder_id: str, data: ReminderUpdate) -> dict:
        self._get(reminder_id)
        changes = {
            k: v
            for k, v in data.model_dump(mode="json", exclude_unset=True).items()
            if v is not None
        }
        if not changes:
            raise ValidationError("Please provide at least one field to update")
        if data.due_at is not None:
            self._check_future(data.due_at)

        changes["updated_at"] = now_iso()
        result = self.reminders.update(changes).eq("id", reminder_id).execute()
        return result.data[0]

    def delete_reminder(self, reminder_id: str) -> None:
        self._get(reminder_id)
        self.reminders.delete().eq("id", reminder_id).execute()

    def complete(self, reminder_id: str) -> dict:
        """Mark completed; a recurring reminder gets exactly one pending successor.

        Completing an already completed reminder changes nothing.
        """
        reminder = self._get(reminder_id)
        if reminder["status"] == ReminderStatus.COMPLETED.value:
            return {"reminder": reminder, "next_reminder": None}

        result = (
            self.reminders.update({
                "status": ReminderStatus.COMPLETED.value,
                "completed_at": now_iso(),
                "updated_at": now_iso(),
            })
            .eq("id", reminder_id)
            .eq("status", ReminderStatus.PENDING.value)
            .execute()
        )
        if not result.data:
            # completed concurrently
            return {"reminder": self._get(reminder_id), "next_reminder": None}
        completed = result.data[0]

        successor = None
        next_due = compute_next_occurrence(parse_timestamp(reminder["due_at"]), reminder["recurrence"])
        if next_due is not None:
            successor = self.reminders.insert({
                "note_id": reminder.get("note_id"),
                "title": reminder["title"],
                "due_at": next_due.isoformat(),
                "recurrence": reminder["recurrence"],
                "status": ReminderStatus.PENDING.value,
                "notification_methods": reminder.get("notification_methods") or [],
                "completed_at": None,
            }).execute().data[0]
            logger.info(f"Recurring reminder {reminder_id} rescheduled as {successor['id']}")

        return {"reminder": completed, "next_reminder": successor}

    def snooze(self, reminder_id: str, minutes: int = 15) -> dict:
        """Push the due date to now + `minutes` and reopen the reminder."""
        self._get(reminder_id)
        result = self.reminders.update({
            "due_at": (utc_now() + timedelta(minutes=minutes)).isoformat(),
            "status": ReminderStatus.PENDING.value,
            "completed_at": None,
            "updated_at": now_iso(),
        }).eq("id", reminder_id).execute()
        return result.data[0]

