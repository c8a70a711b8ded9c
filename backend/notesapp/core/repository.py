"""
Owner-scoped table access.

`OwnedTable` is the only way services reach per-user rows: every select,
update and delete it builds already carries the owner filter, and every
insert is stamped with the owner. A service can add filters but cannot
remove the owner one, so a forgotten `.eq("user_id", ...)` cannot leak
another user's data.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from uuid import UUID

from postgrest.exceptions import APIError
from supabase import Client

from notesapp.core.exceptions import ConflictError

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def now_iso() -> str:
    return utc_now().isoformat()


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse a PostgREST timestamp (ISO 8601, possibly with a trailing Z)."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def is_uuid(value) -> bool:
    """True when `value` can be sent to a uuid column without a 22P02 error."""
    try:
        UUID(str(value))
    except ValueError:
        return False
    return True


@contextmanager
def unique_violation_as_conflict(message: str):
    """Translate a store-reported unique violation into a ConflictError.

    Pre-checks give the friendly error in the common case; this is the
    backstop for concurrent identical requests.
    """
    try:
        yield
    except APIError as e:
        if e.code == UNIQUE_VIOLATION:
            raise ConflictError(message) from e
        raise


class OwnedTable:
    """A table seen through one owner's eyes."""

    def __init__(self, db: Client, table: str, user_id: str, owner_column: str = "user_id"):
        self.db = db
        self.table = table
        self.user_id = user_id
        self.owner_column = owner_column

    def select(self, columns: str = "*", count: str | None = None):
        return (
            self.db.table(self.table)
            .select(columns, count=count)
            .eq(self.owner_column, self.user_id)
        )

    def insert(self, data: dict):
        return self.db.table(self.table).insert({**data, self.owner_column: self.user_id})

    def update(self, data: dict):
        return (
            self.db.table(self.table)
            .update(data)
            .eq(self.owner_column, self.user_id)
        )

    def delete(self):
        return self.db.table(self.table).delete().eq(self.owner_column, self.user_id)

    def get(self, record_id: str) -> dict | None:
        """Fetch one owned row by id, or None. Malformed ids match nothing."""
        if not is_uuid(record_id):
            return None
        result = self.select().eq("id", record_id).limit(1).execute()
        return result.data[0] if result.data else None

    def get_many(self, record_ids: list[str], columns: str = "*") -> list[dict]:
        """Fetch the owned rows among `record_ids` (foreign ids are silently absent)."""
        ids = [record_id for record_id in record_ids if is_uuid(record_id)]
        if not ids:
            return []
        result = self.select(columns).in_("id", ids).execute()
        return result.data or []
