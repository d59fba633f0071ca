"""
User service layer for user and refresh token database operations.

Functions here add/flush but do not commit; the calling service owns the
transaction boundary.
"""

from typing import Optional, Dict
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from tennis_trivia.database.models import User, RefreshToken
from tennis_trivia.utils.datetime_utils import ensure_utc, isoformat_or_none
import logging

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Normalize email to lowercase without surrounding whitespace."""
    return email.strip().lower()


async def create_user(
    session: AsyncSession, email: str, password_hash: str, display_name: Optional[str] = None
) -> Dict:
    """
    Create a new user account.

    Args:
        session: Database session
        email: Email address (normalized to lowercase)
        password_hash: Hashed password
        display_name: Optional display name

    Returns:
        User dictionary (without password hash)
    """
    new_user = User(
        email=normalize_email(email),
        password_hash=password_hash,
        display_name=display_name.strip() if display_name and display_name.strip() else None,
    )
    session.add(new_user)
    await session.flush()
    await session.refresh(new_user)
    return _user_to_dict(new_user)


async def get_user_by_email(
    session: AsyncSession, email: str, include_password_hash: bool = False
) -> Optional[Dict]:
    """
    Get user by email address.

    Args:
        session: Database session
        email: Email address (will be normalized to lowercase)
        include_password_hash: Include the stored hash (login only)

    Returns:
        User dictionary or None if not found
    """
    email = normalize_email(email) if email else None
    if not email:
        return None

    result = await session.execute(select(User).where(User.email == email).limit(1))
    user = result.scalar_one_or_none()
    return _user_to_dict(user, include_password_hash) if user else None


async def get_user_by_id(session: AsyncSession, user_id: int) -> Optional[Dict]:
    """
    Get user by ID.

    Args:
        session: Database session
        user_id: User ID

    Returns:
        User dictionary (without password hash) or None if not found
    """
    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    return _user_to_dict(user) if user else None


def _user_to_dict(user: User, include_password_hash: bool = False) -> Dict:
    """
    Convert a User ORM instance to a dictionary.

    Args:
        user: User ORM instance
        include_password_hash: Whether to include the stored hash

    Returns:
        User dictionary
    """
    data = {
        "id": user.id,
        "email": user.email,
        "display_name": user.display_name,
        "created_at": isoformat_or_none(user.created_at),
        "updated_at": isoformat_or_none(user.updated_at),
    }
    if include_password_hash:
        data["password_hash"] = user.password_hash
    return data


def user_summary(user: Optional[User]) -> Optional[Dict]:
    """Public author/creator summary used by forum responses."""
    if user is None:
        return None
    return {"id": user.id, "email": user.email, "display_name": user.display_name}


# Refresh token functions


async def create_refresh_token(
    session: AsyncSession, user_id: int, token_hash: str, expires_at: datetime
) -> int:
    """
    Create a refresh token record.

    Args:
        session: Database session
        user_id: User ID
        token_hash: SHA-256 digest of the refresh token
        expires_at: Expiration datetime

    Returns:
        ID of the new refresh token row
    """
    new_token = RefreshToken(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
    session.add(new_token)
    await session.flush()
    return new_token.id


async def get_refresh_token(session: AsyncSession, token_hash: str, user_id: int) -> Optional[Dict]:
    """
    Get a refresh token record by hash and owning user.

    Args:
        session: Database session
        token_hash: SHA-256 digest of the refresh token
        user_id: User ID taken from the token's subject

    Returns:
        Refresh token dictionary with id, user_id and expires_at, or None if not found
    """
    result = await session.execute(
        select(RefreshToken).where(
            RefreshToken.token_hash == token_hash, RefreshToken.user_id == user_id
        )
    )
    refresh_token = result.scalar_one_or_none()
    if refresh_token:
        return {
            "id": refresh_token.id,
            "user_id": refresh_token.user_id,
            "expires_at": ensure_utc(refresh_token.expires_at),
        }
    return None


async def delete_refresh_token(session: AsyncSession, token_id: int) -> bool:
    """
    Delete a refresh token row by ID (token rotation).

    Args:
        session: Database session
        token_id: Refresh token row ID

    Returns:
        True if a row was deleted, False otherwise
    """
    result = await session.execute(delete(RefreshToken).where(RefreshToken.id == token_id))
    return result.rowcount > 0


async def delete_refresh_tokens_by_hash(session: AsyncSession, token_hash: str) -> int:
    """
    Delete every refresh token row with the given hash (logout).

    Args:
        session: Database session
        token_hash: SHA-256 digest of the refresh token

    Returns:
        Number of tokens deleted
    """
    result = await session.execute(delete(RefreshToken).where(RefreshToken.token_hash == token_hash))
    return result.rowcount
