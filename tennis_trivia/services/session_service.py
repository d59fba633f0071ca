"""
Session lifecycle: registration, login, refresh-token rotation and logout.

Every successful register/login/refresh issues a fresh access/refresh pair and
stores the SHA-256 digest of the refresh token. A refresh token is consumed on
use; presenting it a second time fails.
"""

import logging
from typing import Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_trivia.config import Settings
from tennis_trivia.services import auth_service, user_service
from tennis_trivia.utils.datetime_utils import utcnow
from tennis_trivia.utils.errors import ConflictError, UnauthorizedError

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
INVALID_REFRESH_MESSAGE = "Invalid or expired refresh token"


async def _issue_token_pair(session: AsyncSession, user_id: int, settings: Settings) -> Dict:
    """Mint an access/refresh pair and persist the refresh token digest."""
    access_token = auth_service.create_access_token(user_id, settings)
    refresh_token = auth_service.create_refresh_token(user_id, settings)
    expires_at = utcnow() + auth_service.refresh_token_lifetime(settings)
    await user_service.create_refresh_token(
        session, user_id, auth_service.hash_token(refresh_token), expires_at
    )
    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "expires_in": settings.jwt_access_expires_in,
    }


async def register(
    session: AsyncSession,
    email: str,
    password: str,
    settings: Settings,
    display_name: Optional[str] = None,
) -> Dict:
    """
    Create an account and sign the new user in.

    Args:
        session: Database session
        email: Email address
        password: Plain text password
        settings: Application settings
        display_name: Optional display name

    Returns:
        Dict with user, access_token, refresh_token and expires_in

    Raises:
        ConflictError: If the email is already registered
    """
    existing = await user_service.get_user_by_email(session, email)
    if existing:
        raise ConflictError("Email already registered", code="EMAIL_EXISTS")

    try:
        user = await user_service.create_user(
            session, email, auth_service.hash_password(password), display_name
        )
        tokens = await _issue_token_pair(session, user["id"], settings)
        await session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same email
        await session.rollback()
        raise ConflictError("Email already registered", code="EMAIL_EXISTS")

    logger.info(f"Registered user {user['id']}")
    return {"user": user, **tokens}


async def login(session: AsyncSession, email: str, password: str, settings: Settings) -> Dict:
    """
    Authenticate with email and password.

    Unknown email and wrong password produce the same error.

    Returns:
        Dict with user, access_token, refresh_token and expires_in

    Raises:
        UnauthorizedError: If the credentials do not match an account
    """
    user = await user_service.get_user_by_email(session, email, include_password_hash=True)
    stored_hash = user["password_hash"] if user else auth_service.dummy_password_hash()
    if not auth_service.verify_password(password, stored_hash) or not user:
        raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

    tokens = await _issue_token_pair(session, user["id"], settings)
    await session.commit()

    user.pop("password_hash", None)
    logger.info(f"User {user['id']} logged in")
    return {"user": user, **tokens}


async def refresh(session: AsyncSession, refresh_token: str, settings: Settings) -> Dict:
    """
    Rotate a refresh token: consume it and issue a new pair.

    Args:
        session: Database session
        refresh_token: Refresh token issued by register, login or a previous refresh
        settings: Application settings

    Returns:
        Dict with access_token, refresh_token and expires_in

    Raises:
        UnauthorizedError: If the token is invalid, expired, unknown or already used
    """
    payload = auth_service.verify_refresh_token(refresh_token, settings)
    if not payload or payload.get("type") != auth_service.REFRESH_TOKEN_TYPE:
        logger.warning("Rejected refresh token with bad signature, expiry or type")
        raise UnauthorizedError(INVALID_REFRESH_MESSAGE)

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise UnauthorizedError(INVALID_REFRESH_MESSAGE)

    token_hash = auth_service.hash_token(refresh_token)
    stored = await user_service.get_refresh_token(session, token_hash, user_id)
    if not stored:
        logger.warning(f"Refresh token for user {user_id} not found (revoked or reused)")
        raise UnauthorizedError(INVALID_REFRESH_MESSAGE)

    if stored["expires_at"] <= utcnow():
        try:
            await user_service.delete_refresh_token(session, stored["id"])
            await session.commit()
        except Exception as e:
            # Stale row cleanup is best effort
            await session.rollback()
            logger.warning(f"Failed to delete expired refresh token {stored['id']}: {e}")
        raise UnauthorizedError(INVALID_REFRESH_MESSAGE)

    # A concurrent refresh may have consumed the row since the lookup
    if not await user_service.delete_refresh_token(session, stored["id"]):
        await session.rollback()
        logger.warning(f"Refresh token for user {user_id} was consumed concurrently")
        raise UnauthorizedError(INVALID_REFRESH_MESSAGE)

    tokens = await _issue_token_pair(session, user_id, settings)
    await session.commit()

    logger.info(f"Rotated refresh token for user {user_id}")
    return tokens


async def logout(session: AsyncSession, refresh_token: str) -> None:
    """
    Revoke a refresh token. Unknown tokens are ignored.

    Args:
        session: Database session
        refresh_token: Refresh token to revoke
    """
    deleted = await user_service.delete_refresh_tokens_by_hash(
        session, auth_service.hash_token(refresh_token)
    )
    await session.commit()
    if deleted:
        logger.info("Refresh token revoked")
