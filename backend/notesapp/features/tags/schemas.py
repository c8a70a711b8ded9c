"""
Tags feature: Schemas for request/response models.
"""

from pydantic import BaseModel, ConfigDict, Field

from notesapp.features.notes.schemas import HEX_COLOR


class TagCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=30)
    color: str = Field("#3b82f6", pattern=HEX_COLOR)


class TagUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(None, min_length=1, max_length=30)
    color: str | None = Field(None, pattern=HEX_COLOR)
