"""
Folders feature: Schemas for request/response models.
"""

from pydantic import BaseModel, ConfigDict, Field

from notesapp.features.notes.schemas import HEX_COLOR


class FolderCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=50)
    parent_id: str | None = None
    icon: str = Field("📁", max_length=10)
    color: str = Field("#6b7280", pattern=HEX_COLOR)


class FolderUpdate(BaseModel):
    """Partial update. An explicit `parent_id: null` moves the folder to the top level."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(None, min_length=1, max_length=50)
    parent_id: str | None = None
    icon: str | None = Field(None, max_length=10)
    color: str | None = Field(None, pattern=HEX_COLOR)
    position: int | None = Field(None, ge=0)


class FolderPosition(BaseModel):
    id: str
    position: int = Field(..., ge=0)


class FolderReorder(BaseModel):
    folders: list[FolderPosition]
