"""
Background cleanup job: permanently delete notes that sat in the trash too long.

Flow:
  soft delete sets `status = trashed` and `trashed_at = now`.
  purge_expired_trash() runs on the APScheduler interval (TRASH_PURGE_INTERVAL_HOURS)
  and removes, across all users, every trashed note whose `trashed_at` is older
  than TRASH_RETENTION_DAYS.

The delete is one filtered statement evaluated by the database, so a note
restored before it runs no longer matches `status = trashed` and survives.
Running it twice in a row deletes nothing the second time.
"""

import logging

from supabase import Client

from notesapp.config import get_settings
from notesapp.core.database import get_supabase_admin_client
from notesapp.core.repository import utc_now
from notesapp.features.notes.lifecycle import trash_cutoff
from notesapp.features.notes.schemas import NoteStatus

logger = logging.getLogger(__name__)


def purge_expired_trash(db: Client | None = None, cutoff_days: int | None = None) -> int:
    """
    Delete trashed notes whose `trashed_at` is strictly before now - cutoff_days.

    Args:
        db: Client to use; defaults to the service-role client (crosses owners).
        cutoff_days: Retention in days; defaults to TRASH_RETENTION_DAYS.

    Returns:
        int: number of notes deleted.
    """
    settings = get_settings()
    db = db or get_supabase_admin_client()
    days = settings.TRASH_RETENTION_DAYS if cutoff_days is None else cutoff_days
    cutoff = trash_cutoff(utc_now(), days)

    result = (
        db.table("notes")
        .delete()
        .eq("status", NoteStatus.TRASHED.value)
        .lt("trashed_at", cutoff.isoformat())
        .execute()
    )
    deleted = len(result.data or [])
    logger.info(f"Trash purge finished: deleted={deleted}, cutoff={cutoff.isoformat()}")
    return deleted
