"""
Notes feature: the note listing query object.

`NoteQuery` holds every optional predicate of a listing (view, text, tag,
folder, color, favorites) plus sort and pagination. It is normalized once,
described as storage-neutral predicates, and only then translated into
PostgREST filters by `apply_note_query`. Owner scoping is not part of it:
the query is always applied on top of an `OwnedTable` select.
"""

import math
import re
from typing import Any, NamedTuple

from pydantic import BaseModel

from notesapp.features.notes.schemas import NoteStatus, SortDirection, SortField

# `folder_id` value meaning "notes that are in no folder"
NO_FOLDER = "null"

TEXT_SEARCH_COLUMNS = ("title", "content")


class Predicate(NamedTuple):
    op: str  # eq | is_null | contains | text
    column: str | tuple[str, ...]
    value: Any = None


class NoteQuery(BaseModel):
    """Filter, sort and page settings for a note listing."""
    view: NoteStatus = NoteStatus.ACTIVE
    search: str | None = None
    tag_id: str | None = None
    folder_id: str | None = None
    color: str | None = None
    favorite_only: bool = False
    sort_field: SortField = SortField.UPDATED_AT
    sort_direction: SortDirection = SortDirection.DESC
    page: int = 1
    page_size: int | None = None

    def normalized(self, default_page_size: int, max_page_size: int) -> "NoteQuery":
        """Clamp pagination instead of rejecting it.

        Non-positive page or page size fall back to the defaults and oversized
        pages are capped, so a malformed client still gets a usable listing.
        """
        page = self.page if self.page > 0 else 1
        page_size = self.page_size if self.page_size and self.page_size > 0 else default_page_size
        search = self.search.strip() if self.search else None
        return self.model_copy(
            update={
                "page": page,
                "page_size": min(page_size, max_page_size),
                "search": search or None,
                "tag_id": self.tag_id or None,
                "folder_id": self.folder_id or None,
                "color": self.color or None,
            }
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def predicates(self) -> list[Predicate]:
        """All predicates, ANDed. The text predicate ORs over title and content."""
        preds = [Predicate("eq", "status", self.view.value)]
        if self.search:
            preds.append(Predicate("text", TEXT_SEARCH_COLUMNS, self.search))
        if self.tag_id:
            preds.append(Predicate("contains", "tag_ids", [self.tag_id]))
        if self.folder_id == NO_FOLDER:
            preds.append(Predicate("is_null", "folder_id"))
        elif self.folder_id:
            preds.append(Predicate("eq", "folder_id", self.folder_id))
        if self.color:
            preds.append(Predicate("eq", "color", self.color))
        if self.favorite_only:
            preds.append(Predicate("eq", "is_favorite", True))
        return preds

    def ordering(self) -> list[tuple[str, bool]]:
        """(column, descending) pairs. Pinned notes always come first."""
        return [
            ("is_pinned", True),
            (self.sort_field.value, self.sort_direction == SortDirection.DESC),
            ("id", False),
        ]

    def page_count(self, total: int) -> int:
        return math.ceil(total / self.page_size) if total else 0


def text_match_filter(columns: tuple[str, ...], text: str) -> str:
    """PostgREST `or` expression: case-insensitive literal substring on any column.

    Built on `imatch` with a regex-escaped pattern, since `ilike` reads `*`
    as a wildcard with no escape. The pattern is double-quoted so commas,
    dots and parentheses in the search text cannot break the filter syntax.
    """
    pattern = re.escape(text)
    quoted = '"' + pattern.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return ",".join(f"{column}.imatch.{quoted}" for column in columns)


def apply_predicates(query, predicates: list[Predicate]):
    for pred in predicates:
        if pred.op == "eq":
            query = query.eq(pred.column, pred.value)
        elif pred.op == "is_null":
            query = query.is_(pred.column, "null")
        elif pred.op == "contains":
            query = query.contains(pred.column, pred.value)
        elif pred.op == "text":
            query = query.or_(text_match_filter(pred.column, pred.value))
        else:
            raise ValueError(f"Unknown predicate op: {pred.op}")
    return query


def apply_note_query(query, note_query: NoteQuery):
    """Translate a normalized NoteQuery onto a PostgREST select."""
    query = apply_predicates(query, note_query.predicates())
    for column, desc in note_query.ordering():
        query = query.order(column, desc=desc)
    start = note_query.offset
    return query.range(start, start + note_query.page_size - 1)
