"""
Templates feature: Schemas for request/response models.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from notesapp.features.notes.schemas import HEX_COLOR


class TemplateCategory(str, Enum):
    PERSONAL = "personal"
    WORK = "work"
    MEETING = "meeting"
    PROJECT = "project"
    TODO = "todo"
    JOURNAL = "journal"
    OTHER = "other"


CATEGORIES = [
    {"id": TemplateCategory.PERSONAL.value, "name": "Personal", "icon": "👤"},
    {"id": TemplateCategory.WORK.value, "name": "Work", "icon": "💼"},
    {"id": TemplateCategory.MEETING.value, "name": "Meeting", "icon": "📅"},
    {"id": TemplateCategory.PROJECT.value, "name": "Project", "icon": "📊"},
    {"id": TemplateCategory.TODO.value, "name": "To-Do", "icon": "✅"},
    {"id": TemplateCategory.JOURNAL.value, "name": "Journal", "icon": "📔"},
    {"id": TemplateCategory.OTHER.value, "name": "Other", "icon": "📝"},
]


class TemplateVariable(BaseModel):
    """A `{{name}}` placeholder in the template content."""
    name: str = Field(..., min_length=1, max_length=50)
    default_value: str = ""


class TemplateCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=500)
    content: str = Field(..., min_length=1, max_length=10_000)
    category: TemplateCategory = TemplateCategory.PERSONAL
    is_public: bool = False
    variables: list[TemplateVariable] = []
    color: str = Field("#ffffff", pattern=HEX_COLOR)
    icon: str = Field("📝", max_length=10)


class TemplateUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    content: str | None = Field(None, min_length=1, max_length=10_000)
    category: TemplateCategory | None = None
    is_public: bool | None = None
    variables: list[TemplateVariable] | None = None
    color: str | None = Field(None, pattern=HEX_COLOR)
    icon: str | None = Field(None, max_length=10)


class TemplateUse(BaseModel):
    variable_values: dict[str, str] = {}
