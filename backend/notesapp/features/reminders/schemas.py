"""
Reminders feature: Schemas for request/response models.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from notesapp.features.reminders.recurrence import Recurrence


class ReminderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class NotificationMethod(str, Enum):
    APP = "app"
    EMAIL = "email"


def _as_utc(value: datetime | None) -> datetime | None:
    """Naive timestamps from clients are taken as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ReminderCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field("", max_length=200)
    due_at: datetime
    note_id: str | None = None
    recurrence: Recurrence = Recurrence.NONE
    notification_methods: list[NotificationMethod] = [NotificationMethod.APP]

    @field_validator("due_at")
    @classmethod
    def due_at_as_utc(cls, value):
        return _as_utc(value)


class ReminderUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(None, max_length=200)
    due_at: datetime | None = None
    recurrence: Recurrence | None = None
    notification_methods: list[NotificationMethod] | None = None

    @field_validator("due_at")
    @classmethod
    def due_at_as_utc(cls, value):
        return _as_utc(value)


class SnoozeRequest(BaseModel):
    minutes: int = Field(15, ge=1, le=7 * 24 * 60)
