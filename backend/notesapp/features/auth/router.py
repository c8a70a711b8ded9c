"""
Auth feature: API routes.
"""

from fastapi import APIRouter, Depends, status
from supabase import Client

from notesapp.core.dependencies import get_db, get_current_user_id
from notesapp.features.auth.schemas import (
    RegisterRequest,
    LoginRequest,
    LoginResponse,
    UserResponse,
)
from notesapp.features.auth.service import AuthService

router = APIRouter()


@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, db: Client = Depends(get_db)):
    """Create an account and sign in."""
    service = AuthService(db)
    return await service.register(data)


@router.post("/login", response_model=LoginResponse)
async def login(data: LoginRequest, db: Client = Depends(get_db)):
    """Exchange email and password for a JWT token."""
    service = AuthService(db)
    return await service.login(data)


@router.get("/me", response_model=UserResponse)
async def get_me(
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    service = AuthService(db)
    return await service.get_profile(user_id)


@router.post("/refresh", response_model=LoginResponse)
async def refresh_token(
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Renew the JWT token. Call it before the current one expires.

    Requires: valid Bearer token in Authorization header.
    Returns: new access_token with fresh expiry.
    """
    service = AuthService(db)
    return await service.refresh(user_id)
