"""
Reminders feature: API routes.
"""

from fastapi import APIRouter, Depends, Query, status
from supabase import Client

from notesapp.core.dependencies import get_db, get_current_user_id
from notesapp.features.reminders.schemas import (
    ReminderCreate,
    ReminderStatus,
    ReminderUpdate,
    SnoozeRequest,
)
from notesapp.features.reminders.service import RemindersService

router = APIRouter()


@router.get("/")
async def list_reminders(
    status_filter: ReminderStatus | None = Query(None, alias="status"),
    upcoming: bool = False,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = RemindersService(db, user_id)
    return {"data": service.list_reminders(status_filter, upcoming)}


@router.get("/upcoming")
async def upcoming_reminders(
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Pending reminders due in the next 7 days."""
    service = RemindersService(db, user_id)
    return {"data": service.upcoming()}


@router.get("/note/{note_id}")
async def reminders_for_note(
    note_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = RemindersService(db, user_id)
    return {"data": service.for_note(note_id)}


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_reminder(
    data: ReminderCreate,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = RemindersService(db, user_id)
    return {"data": service.create_reminder(data)}


@router.get("/{reminder_id}")
async def get_reminder(
    reminder_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = RemindersService(db, user_id)
    return {"data": service.get_reminder(reminder_id)}


@router.put("/{reminder_id}")
async def update_reminder(
    reminder_id: str,
    data: ReminderUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = RemindersService(db, user_id)
    return {"data": service.update_reminder(reminder_id, data)}


@router.delete("/{reminder_id}")
async def delete_reminder(
    reminder_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = RemindersService(db, user_id)
    service.delete_reminder(reminder_id)
    return {"message": "Reminder deleted successfully"}


@router.put("/{reminder_id}/complete")
async def complete_reminder(
    reminder_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Complete a reminder. Recurring ones get their next occurrence created."""
    service = RemindersService(db, user_id)
    return {"data": service.complete(reminder_id)}


@router.put("/{reminder_id}/snooze")
async def snooze_reminder(
    reminder_id: str,
    data: SnoozeRequest | None = None,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = RemindersService(db, user_id)
    minutes = (data or SnoozeRequest()).minutes
    reminder = service.snooze(reminder_id, minutes)
    return {"message": f"Reminder snoozed for {minutes} minutes", "data": reminder}
