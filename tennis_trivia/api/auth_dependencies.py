"""
Authentication dependencies for FastAPI routes.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_trivia.config import Settings, get_settings
from tennis_trivia.database.db import get_db_session
from tennis_trivia.services import auth_service, user_service
from tennis_trivia.utils.errors import UnauthorizedError

# auto_error=False so a missing header goes through our own error shape
security = HTTPBearer(auto_error=False)


async def get_current_user(
    session: AsyncSession = Depends(get_db_session),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
) -> dict:
    """
    Dependency to get the current authenticated user from the bearer token.

    Args:
        session: Database session
        credentials: HTTP Bearer token credentials (None if absent)
        settings: Application settings

    Returns:
        User dictionary (id, email, display_name, created_at, updated_at)

    Raises:
        UnauthorizedError: If the header is missing, the token is invalid
            or expired, or the user no longer exists
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Missing or invalid Authorization header")

    payload = auth_service.verify_token(credentials.credentials, settings)
    if payload is None:
        raise UnauthorizedError("Invalid or expired token")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid or expired token")

    user = await user_service.get_user_by_id(session, user_id)
    if user is None:
        raise UnauthorizedError("User not found")

    return user
