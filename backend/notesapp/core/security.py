"""
Security utilities: password hashing, JWT handling, share tokens.
"""

import secrets
from passlib.context import CryptContext
from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from uuid import UUID

from notesapp.config import get_settings

# ── Password Hashing ────────────────────────────────────
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


# ── Share Tokens ────────────────────────────────────────
SHARE_TOKEN_BYTES = 32  # 256 bits


def generate_share_token() -> str:
    """Opaque, unguessable token for public share links (64 hex chars)."""
    return secrets.token_hex(SHARE_TOKEN_BYTES)


# ── JWT Token ────────────────────────────────────────────
def create_access_token(user_id: UUID | str, extra_data: dict | None = None) -> str:
    """Create a JWT access token for app authentication."""
    settings = get_settings()

    payload = {
        "sub": str(user_id),
        "exp": datetime.now(timezone.utc) + timedelta(minutes=settings.JWT_EXPIRY_MINUTES),
        "iat": datetime.now(timezone.utc),
    }
    if extra_data:
        payload.update(extra_data)

    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Decode and validate a JWT token. Returns payload or None if invalid."""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
        return payload
    except JWTError:
        return None
