"""
Auth feature: Business logic for registration, login and account management.
"""

import logging

from supabase import Client

from notesapp.core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from notesapp.core.repository import is_uuid, now_iso, unique_violation_as_conflict
from notesapp.core.security import hash_password, verify_password, create_access_token
from notesapp.features.auth.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    Preferences,
    RegisterRequest,
    UpdatePreferencesRequest,
    UpdateProfileRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
EMAIL_TAKEN = "Email is already registered"

# Per-user tables removed with the account, children first
OWNED_TABLES = (
    ("reminders", "user_id"),
    ("shared_notes", "owner_id"),
    ("shared_notes", "shared_with"),
    ("notes", "user_id"),
    ("folders", "user_id"),
    ("tags", "user_id"),
    ("templates", "user_id"),
)


def to_user_response(user: dict) -> UserResponse:
    return UserResponse(
        **{k: v for k, v in user.items() if k not in ("password_hash", "preferences", "bio")},
        bio=user.get("bio") or "",
        preferences=user.get("preferences") or {},
    )


class AuthService:
    """Handles user authentication and profile management."""

    def __init__(self, db: Client):
        self.db = db

    def _find_by_email(self, email: str) -> dict | None:
        result = self.db.table("users").select("*").eq("email", email.lower()).limit(1).execute()
        return result.data[0] if result.data else None

    def _get_user(self, user_id: str) -> dict:
        if not is_uuid(user_id):
            raise NotFoundError("User not found")
        result = self.db.table("users").select("*").eq("id", user_id).limit(1).execute()
        if not result.data:
            raise NotFoundError("User not found")
        return result.data[0]

    def _session(self, user: dict) -> dict:
        return {
            "access_token": create_access_token(user["id"]),
            "token_type": "bearer",
            "user": to_user_response(user),
        }

    # ── Sessions ─────────────────────────────────────────

    async def register(self, data: RegisterRequest) -> dict:
        """Register a new user.

        Returns:
            dict with access_token and user data.

        Raises:
            ConflictError: If the email is already registered.
        """
        email = data.email.lower()
        if self._find_by_email(email):
            raise ConflictError(EMAIL_TAKEN)

        user_data = {
            "name": data.name,
            "email": email,
            "password_hash": hash_password(data.password),
            "bio": "",
            "avatar_url": None,
            "preferences": Preferences().model_dump(mode="json"),
            "failed_login_attempts": 0,
            "locked_until": None,
            "last_login_at": None,
        }
        with unique_violation_as_conflict(EMAIL_TAKEN):
            result = self.db.table("users").insert(user_data).execute()
        user = result.data[0]
        logger.info(f"User registered: {user['id']}")
        return self._session(user)

    async def login(self, data: LoginRequest) -> dict:
        """Authenticate user and return JWT token.

        Raises:
            AuthenticationError: If credentials are invalid.
        """
        user = self._find_by_email(data.email)
        if user is None or not verify_password(data.password, user["password_hash"]):
            logger.info(f"Failed login for {data.email.lower()}")
            raise AuthenticationError(INVALID_CREDENTIALS)

        result = (
            self.db.table("users")
            .update({"last_login_at": now_iso()})
            .eq("id", user["id"])
            .execute()
        )
        return self._session(result.data[0] if result.data else user)

    async def refresh(self, user_id: str) -> dict:
        """New token with a fresh expiry for a still existing user."""
        try:
            user = self._get_user(user_id)
        except NotFoundError:
            raise AuthenticationError("Account no longer exists") from None
        return self._session(user)

    # ── Profile ──────────────────────────────────────────

    async def get_profile(self, user_id: str) -> UserResponse:
        return to_user_response(self._get_user(user_id))

    async def update_profile(self, user_id: str, data: UpdateProfileRequest) -> UserResponse:
        """Update user profile fields."""
        update_data = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

        if not update_data:
            return await self.get_profile(user_id)

        update_data["updated_at"] = now_iso()
        result = (
            self.db.table("users")
            .update(update_data)
            .eq("id", user_id)
            .execute()
        )
        if not result.data:
            raise NotFoundError("User not found")
        return to_user_response(result.data[0])

    async def update_preferences(self, user_id: str, data: UpdatePreferencesRequest) -> dict:
        """Merge the sent preference keys into the stored bundle."""
        user = self._get_user(user_id)
        changes = {k: v for k, v in data.model_dump(mode="json", exclude_unset=True).items() if v is not None}
        merged = Preferences(**{**(user.get("preferences") or {}), **changes}).model_dump(mode="json")

        self.db.table("users").update({"preferences": merged, "updated_at": now_iso()}).eq("id", user_id).execute()
        return merged

    async def change_password(self, user_id: str, data: ChangePasswordRequest) -> None:
        user = self._get_user(user_id)
        if not verify_password(data.current_password, user["password_hash"]):
            raise AuthenticationError("Current password is incorrect")
        if data.new_password == data.current_password:
            raise ValidationError("New password must differ from the current one")

        self.db.table("users").update({
            "password_hash": hash_password(data.new_password),
            "updated_at": now_iso(),
        }).eq("id", user_id).execute()
        logger.info(f"Password changed for user {user_id}")

    async def delete_account(self, user_id: str, password: str) -> None:
        """Delete the account and every row it owns. Requires the password."""
        user = self._get_user(user_id)
        if not verify_password(password, user["password_hash"]):
            raise AuthenticationError("Password is incorrect")

        for table, column in OWNED_TABLES:
            self.db.table(table).delete().eq(column, user_id).execute()
        self.db.table("users").delete().eq("id", user_id).execute()
        logger.info(f"Account deleted: {user_id}")
