"""
Auth feature: Pydantic schemas for request/response models.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from notesapp.features.notes.schemas import HEX_COLOR, ContentType

PASSWORD_MIN = 6


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class Preferences(BaseModel):
    theme: Theme = Theme.SYSTEM
    default_note_color: str = Field("#ffffff", pattern=HEX_COLOR)
    default_content_type: ContentType = ContentType.PLAIN
    notes_per_page: int = Field(20, ge=1, le=100)
    email_notifications: bool = True


# ── Requests ─────────────────────────────────────────────
class RegisterRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UpdateProfileRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(None, min_length=2, max_length=50)
    bio: str | None = Field(None, max_length=500)
    avatar_url: str | None = None


class UpdatePreferencesRequest(BaseModel):
    """Partial: only the sent keys change, the rest of the bundle is kept."""
    theme: Theme | None = None
    default_note_color: str | None = Field(None, pattern=HEX_COLOR)
    default_content_type: ContentType | None = None
    notes_per_page: int | None = Field(None, ge=1, le=100)
    email_notifications: bool | None = None


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=PASSWORD_MIN)


class DeleteAccountRequest(BaseModel):
    password: str


# ── Responses ────────────────────────────────────────────
class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    bio: str = ""
    avatar_url: str | None = None
    preferences: Preferences = Preferences()
    last_login_at: datetime | None = None
    created_at: datetime | None = None


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
