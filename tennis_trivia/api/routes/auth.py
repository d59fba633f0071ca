"""Authentication route handlers."""

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_trivia.api.auth_dependencies import get_current_user
from tennis_trivia.api.routes import limiter, CREDENTIALS_RATE_LIMIT
from tennis_trivia.config import Settings, get_settings
from tennis_trivia.database.db import get_db_session
from tennis_trivia.models.schemas import (
    AuthResponse,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from tennis_trivia.services import session_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(CREDENTIALS_RATE_LIMIT)
async def register(
    request: Request,
    payload: RegisterRequest,
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    """Create an account and return a token pair."""
    return await session_service.register(
        session, payload.email, payload.password, settings, display_name=payload.display_name
    )


@router.post("/login", response_model=AuthResponse)
@limiter.limit(CREDENTIALS_RATE_LIMIT)
async def login(
    request: Request,
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    """Login with email and password."""
    return await session_service.login(session, payload.email, payload.password, settings)


@router.post("/refresh", response_model=TokenResponse)
@limiter.limit(CREDENTIALS_RATE_LIMIT)
async def refresh(
    request: Request,
    payload: RefreshTokenRequest,
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    """Exchange a refresh token for a new token pair. The old token is consumed."""
    return await session_service.refresh(session, payload.refresh_token, settings)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(payload: RefreshTokenRequest, session: AsyncSession = Depends(get_db_session)):
    """Revoke a refresh token. Unknown tokens are accepted silently."""
    await session_service.logout(session, payload.refresh_token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=UserResponse)
async def me(current_user: dict = Depends(get_current_user)):
    """Get current authenticated user information."""
    return current_user
