"""
FastAPI dependency injection functions.
"""

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from supabase import Client

from notesapp.core.database import get_supabase_client
from notesapp.core.exceptions import AuthenticationError
from notesapp.core.security import decode_access_token

# auto_error=False: a missing header is reported as our own 401, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Client:
    return get_supabase_client()


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """Resolve the bearer token to the owner id every service is scoped by.

    Raises:
        AuthenticationError: missing, malformed, expired or subject-less token.
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Token does not identify a user")
    return user_id
