"""
Notes feature: lifecycle rules and derived fields.

A note is in exactly one of three states (`NoteStatus`); permanent deletion
removes the row. Transitions:

    active   <-> archived          archive toggle
    active   --> trashed           soft delete
    archived --> trashed           soft delete (remembers it was archived)
    trashed  --> active/archived   restore, target chosen by RestorePolicy
    any      --> (gone)            permanent delete / timed purge of trash

Functions here are pure: they take the stored row and return the column
changes to write, so the rules are testable without a database.
"""

from datetime import datetime, timedelta
from enum import Enum

from notesapp.features.notes.schemas import NoteStatus

PREVIEW_LENGTH = 150


class RestorePolicy(str, Enum):
    """Where a restored note goes if it was archived before being trashed."""
    PREVIOUS = "previous"
    ACTIVE = "active"


def text_stats(content: str) -> dict:
    """Word and character counts stored alongside the content."""
    return {
        "word_count": len(content.split()),
        "character_count": len(content),
    }


def preview(content: str) -> str:
    if len(content) <= PREVIEW_LENGTH:
        return content
    return content[:PREVIEW_LENGTH] + "..."


def soft_delete_changes(note: dict, now: datetime) -> dict | None:
    """Changes that move a note to the trash, or None if it is already there."""
    if note["status"] == NoteStatus.TRASHED.value:
        return None
    return {
        "status": NoteStatus.TRASHED.value,
        "trashed_at": now.isoformat(),
        "archived_before_trash": note["status"] == NoteStatus.ARCHIVED.value,
    }


def restore_changes(note: dict, policy: RestorePolicy) -> dict:
    """Changes that bring a trashed note back."""
    if policy == RestorePolicy.PREVIOUS and note.get("archived_before_trash"):
        status = NoteStatus.ARCHIVED
    else:
        status = NoteStatus.ACTIVE
    return {
        "status": status.value,
        "trashed_at": None,
        "archived_before_trash": False,
    }


def archive_changes(archived: bool) -> dict:
    status = NoteStatus.ARCHIVED if archived else NoteStatus.ACTIVE
    return {"status": status.value}


def trash_cutoff(now: datetime, retention_days: int) -> datetime:
    """Trashed notes with `trashed_at` strictly before this are purgeable."""
    return now - timedelta(days=retention_days)
