"""
Notes feature: Schemas for request/response models.
"""

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime

HEX_COLOR = r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$"

TITLE_MAX = 200
CONTENT_MAX = 50_000


class NoteStatus(str, Enum):
    """Lifecycle state of a note. Deleted notes have no row at all."""
    ACTIVE = "active"
    ARCHIVED = "archived"
    TRASHED = "trashed"


class ContentType(str, Enum):
    PLAIN = "plain"
    MARKDOWN = "markdown"
    RICHTEXT = "richtext"


class SortField(str, Enum):
    UPDATED_AT = "updated_at"
    CREATED_AT = "created_at"
    TITLE = "title"
    POSITION = "position"
    VIEW_COUNT = "view_count"
    WORD_COUNT = "word_count"
    LAST_VIEWED_AT = "last_viewed_at"
    TRASHED_AT = "trashed_at"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class NoteCreate(BaseModel):
    """Request to create a new note."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=TITLE_MAX)
    content: str = Field(..., min_length=1, max_length=CONTENT_MAX)
    content_type: ContentType = ContentType.PLAIN
    color: str = Field("#ffffff", pattern=HEX_COLOR)
    tag_ids: list[str] = []
    folder_id: str | None = None
    is_pinned: bool = False


class NoteUpdate(BaseModel):
    """Request to update an existing note.

    Only the fields sent are written. `folder_id: null` moves the note out of
    its folder; a null on any other field is ignored.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(None, min_length=1, max_length=TITLE_MAX)
    content: str | None = Field(None, min_length=1, max_length=CONTENT_MAX)
    content_type: ContentType | None = None
    color: str | None = Field(None, pattern=HEX_COLOR)
    tag_ids: list[str] | None = None
    folder_id: str | None = None
    is_pinned: bool | None = None
    is_favorite: bool | None = None
    position: float | None = None


class TagSummary(BaseModel):
    id: str
    name: str
    color: str


class FolderSummary(BaseModel):
    id: str
    name: str
    icon: str | None = None
    color: str | None = None


class NoteResponse(BaseModel):
    """Response model for a note."""
    id: str
    title: str
    content: str
    preview: str
    content_type: ContentType
    color: str
    status: NoteStatus
    is_archived: bool
    is_trashed: bool
    is_pinned: bool = False
    is_favorite: bool = False
    trashed_at: datetime | None = None
    word_count: int = 0
    character_count: int = 0
    view_count: int = 0
    last_viewed_at: datetime | None = None
    position: float = 0
    folder_id: str | None = None
    folder: FolderSummary | None = None
    tag_ids: list[str] = []
    tags: list[TagSummary] = []
    created_at: datetime
    updated_at: datetime


class NotePage(BaseModel):
    """One page of a note listing."""
    items: list[NoteResponse]
    total: int
    page: int
    page_size: int
    pages: int
