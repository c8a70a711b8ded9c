"""
Shared fixtures: an in-memory stand-in for the Supabase client.

`FakeSupabase` implements the slice of the postgrest query builder the
services use (select/insert/update/delete, the filters, order, range, limit
and exact counts) over plain lists of dicts. Like Postgres it enforces
the unique indexes from supabase/schema.sql and rejects malformed values
sent to uuid columns (SQLSTATE 22P02).
"""

import os
import re
import uuid
from collections import defaultdict
from datetime import datetime, timedelta, timezone

# Settings are read at import time of the app modules
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

import pytest
from postgrest.exceptions import APIError

from notesapp.features.notes.filters import NoteQuery
from notesapp.features.notes.schemas import NoteCreate
from notesapp.features.notes.service import NotesService


# -- value helpers --

def _text(value) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _coerce(value):
    """ISO strings compare as datetimes, everything else as is."""
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return value


def _split_top_level(expr: str) -> list[str]:
    """Split an `or` expression on commas outside double quotes."""
    parts, current, quoted, i = [], [], False, 0
    while i < len(expr):
        ch = expr[i]
        if quoted and ch == "\\" and i + 1 < len(expr):
            current.append(expr[i:i + 2])
            i += 2
            continue
        if ch == '"':
            quoted = not quoted
        if ch == "," and not quoted:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    parts.append("".join(current))
    return parts


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return re.sub(r"\\(.)", r"\1", value[1:-1])
    return value


def _compare(op: str, left, right) -> bool:
    if left is None:
        return False
    left, right = _coerce(left), _coerce(right)
    if isinstance(left, (int, float)) and isinstance(right, str):
        right = float(right)
    return {
        "lt": left < right,
        "lte": left <= right,
        "gt": left > right,
        "gte": left >= right,
    }[op]


def _condition(column: str, op: str, value):
    if op == "eq":
        return lambda row: _text(row.get(column)) == _text(value)
    if op == "neq":
        return lambda row: _text(row.get(column)) != _text(value)
    if op == "is":
        return lambda row: _text(row.get(column)) == _text(value)
    if op == "imatch":
        regex = re.compile(value, re.IGNORECASE)
        return lambda row: row.get(column) is not None and regex.search(str(row[column])) is not None
    if op in ("lt", "lte", "gt", "gte"):
        return lambda row: _compare(op, row.get(column), value)
    raise NotImplementedError(op)


# uuid columns in supabase/schema.sql; Postgres rejects malformed values with 22P02
UUID_COLUMNS = {"id", "user_id", "owner_id", "shared_with", "note_id", "folder_id", "parent_id"}


def _malformed_uuid(column: str, values) -> str | None:
    if column not in UUID_COLUMNS and column != "tag_ids":
        return None
    for value in values:
        if value is None or value == "null":
            continue
        try:
            uuid.UUID(str(value))
        except ValueError:
            return str(value)
    return None


# Unique indexes, mirroring supabase/schema.sql
UNIQUE_KEYS = {
    "users": [lambda r: ("email", r["email"].lower())],
    "tags": [lambda r: ("name", r["user_id"], r["name"].lower())],
    "folders": [lambda r: ("name", r["user_id"], r.get("parent_id"), r["name"].lower())],
    "shared_notes": [
        lambda r: ("recipient", r["note_id"], r["shared_with"]) if r.get("shared_with") else None,
        lambda r: ("token", r["share_token"]) if r.get("share_token") else None,
    ],
}


class FakeResult:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.action = "select"
        self.payload = None
        self.columns = "*"
        self.count_mode = None
        self.conditions = []
        self.orders = []
        self.range_ = None
        self.limit_ = None
        self.error = None

    # -- actions --

    def select(self, *columns, count=None):
        self.action = "select"
        self.columns = ",".join(columns) if columns else "*"
        self.count_mode = count
        return self

    def insert(self, data):
        self._check_payload(data)
        self.action, self.payload = "insert", data
        return self

    def update(self, data):
        self._check_payload(data)
        self.action, self.payload = "update", data
        return self

    def delete(self):
        self.action = "delete"
        return self

    # -- filters --

    def _where(self, condition):
        self.conditions.append(condition)
        return self

    def _check_uuid(self, column, values):
        bad = _malformed_uuid(column, values)
        if bad is not None and self.error is None:
            self.error = APIError({
                "code": "22P02",
                "message": f'invalid input syntax for type uuid: "{bad}"',
                "details": None,
                "hint": None,
            })

    def _check_payload(self, data: dict):
        for column, value in data.items():
            self._check_uuid(column, value if isinstance(value, list) else [value])

    def eq(self, column, value):
        self._check_uuid(column, [value])
        return self._where(_condition(column, "eq", value))

    def neq(self, column, value):
        self._check_uuid(column, [value])
        return self._where(_condition(column, "neq", value))

    def is_(self, column, value):
        return self._where(_condition(column, "is", value))

    def lt(self, column, value):
        return self._where(_condition(column, "lt", value))

    def lte(self, column, value):
        return self._where(_condition(column, "lte", value))

    def gt(self, column, value):
        return self._where(_condition(column, "gt", value))

    def gte(self, column, value):
        return self._where(_condition(column, "gte", value))

    def in_(self, column, values):
        self._check_uuid(column, values)
        wanted = {_text(v) for v in values}
        return self._where(lambda row: _text(row.get(column)) in wanted)

    def contains(self, column, values):
        self._check_uuid(column, values)
        return self._where(lambda row: set(values) <= set(row.get(column) or []))

    def or_(self, expr: str):
        alternatives = []
        for part in _split_top_level(expr):
            column, op, value = part.split(".", 2)
            if op == "eq":
                self._check_uuid(column, [_unquote(value)])
            alternatives.append(_condition(column, op, _unquote(value)))
        return self._where(lambda row: any(cond(row) for cond in alternatives))

    # -- shaping --

    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def range(self, start, end):
        self.range_ = (start, end)
        return self

    def limit(self, size):
        self.limit_ = size
        return self

    # -- execution --

    def _project(self, row: dict) -> dict:
        if self.columns.strip() == "*":
            return dict(row)
        wanted = [c.strip() for c in self.columns.split(",")]
        return {c: row.get(c) for c in wanted}

    def _sorted(self, rows: list[dict]) -> list[dict]:
        for column, desc in reversed(self.orders):
            # Postgres default: NULLS LAST ascending, NULLS FIRST descending
            rows = sorted(
                rows,
                key=lambda r: (r.get(column) is None, _coerce(r.get(column)) if r.get(column) is not None else 0),
                reverse=desc,
            )
        return rows

    def execute(self) -> FakeResult:
        if self.error is not None:
            raise self.error
        rows = self.db.tables[self.table]

        if self.action == "insert":
            now = datetime.now(timezone.utc).isoformat()
            row = {"id": str(uuid.uuid4()), "created_at": now, "updated_at": now, **self.payload}
            self.db.check_unique(self.table, row, rows)
            rows.append(row)
            return FakeResult([dict(row)])

        matched = [r for r in rows if all(cond(r) for cond in self.conditions)]

        if self.action == "update":
            for row in matched:
                self.db.check_unique(self.table, {**row, **self.payload}, [r for r in rows if r is not row])
            for row in matched:
                row.update(self.payload)
            return FakeResult([dict(r) for r in matched])

        if self.action == "delete":
            ids = {id(r) for r in matched}
            self.db.tables[self.table] = [r for r in rows if id(r) not in ids]
            return FakeResult([dict(r) for r in matched])

        total = len(matched) if self.count_mode else None
        matched = self._sorted(matched)
        if self.range_ is not None:
            start, end = self.range_
            if start > 0 and start >= len(matched):
                raise APIError({
                    "code": "PGRST103",
                    "message": "Requested range not satisfiable",
                    "details": None,
                    "hint": None,
                })
            matched = matched[start:end + 1]
        if self.limit_ is not None:
            matched = matched[:self.limit_]
        return FakeResult([self._project(r) for r in matched], total)


class FakeSupabase:
    """Just enough of `supabase.Client` for the services."""

    def __init__(self):
        self.tables = defaultdict(list)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def check_unique(self, table: str, row: dict, others: list[dict]) -> None:
        for key in UNIQUE_KEYS.get(table, []):
            value = key(row)
            if value is not None and any(key(other) == value for other in others):
                raise APIError({
                    "code": "23505",
                    "message": f"duplicate key value violates unique constraint on {table}",
                    "details": None,
                    "hint": None,
                })

    def rows(self, table: str) -> list[dict]:
        return self.tables[table]

    def row(self, table: str, record_id: str) -> dict:
        return next(r for r in self.tables[table] if r["id"] == record_id)


# -- fixtures --

def add_user(db: FakeSupabase, name: str = "Alice", email: str = "alice@example.com",
             password_hash: str = "not-a-real-hash") -> str:
    result = db.table("users").insert({
        "name": name,
        "email": email,
        "password_hash": password_hash,
        "bio": "",
        "avatar_url": None,
        "preferences": {},
        "last_login_at": None,
    }).execute()
    return result.data[0]["id"]


def days_ago(days: float) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def user_id(db):
    return add_user(db)


@pytest.fixture
def other_user_id(db):
    return add_user(db, name="Bob", email="bob@example.com")


@pytest.fixture
def notes(db, user_id):
    return NotesService(db, user_id)


@pytest.fixture
def make_note(notes):
    def _make(title="Note", content="some content", **kwargs):
        return notes.create_note(NoteCreate(title=title, content=content, **kwargs))
    return _make


@pytest.fixture
def list_ids(notes):
    """Ids of a listing, in listing order."""
    def _ids(**query):
        return [n["id"] for n in notes.list_notes(NoteQuery(**query))["items"]]
    return _ids
