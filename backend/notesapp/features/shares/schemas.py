"""
Shares feature: Schemas for request/response models.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, EmailStr


class Permission(str, Enum):
    READ = "read"
    EDIT = "edit"


class ShareWithUser(BaseModel):
    """Share a note with another account, identified by email."""
    note_id: str
    email: EmailStr
    permission: Permission = Permission.READ
    expires_at: datetime | None = None


class ShareLinkCreate(BaseModel):
    note_id: str
    expires_at: datetime | None = None


class ShareUpdate(BaseModel):
    permission: Permission | None = None
    expires_at: datetime | None = None
