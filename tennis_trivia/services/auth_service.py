"""
Credential primitives: password hashing and JWT signing/verification.

Access and refresh tokens are signed with distinct secrets. Refresh tokens
are only ever persisted as a SHA-256 digest (see hash_token).
"""

import hashlib
import logging
import secrets
from datetime import timedelta
from functools import lru_cache
from typing import Any, Dict, Optional

import bcrypt
import jwt

from tennis_trivia.config import Settings
from tennis_trivia.utils.datetime_utils import utcnow, parse_duration

logger = logging.getLogger(__name__)

REFRESH_TOKEN_TYPE = "refresh"

# bcrypt only considers the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt (salted, slow).

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Args:
        password: Plain text password
        password_hash: Stored bcrypt hash

    Returns:
        True if the password matches, False otherwise
    """
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        logger.warning("Password hash could not be parsed")
        return False


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """Hash checked when no account matches, so unknown emails cost a bcrypt round too."""
    return hash_password(secrets.token_urlsafe(16))


def hash_token(token: str) -> str:
    """Digest a refresh token for storage and lookup."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def access_token_lifetime(settings: Settings) -> timedelta:
    return parse_duration(settings.jwt_access_expires_in)


def refresh_token_lifetime(settings: Settings) -> timedelta:
    return parse_duration(settings.jwt_refresh_expires_in)


def create_access_token(
    user_id: int, settings: Settings, expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a signed access token for a user.

    Args:
        user_id: Subject of the token
        settings: Application settings (secret and default lifetime)
        expires_delta: Optional override of the configured lifetime

    Returns:
        Encoded JWT
    """
    now = utcnow()
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + (expires_delta if expires_delta is not None else access_token_lifetime(settings)),
    }
    return jwt.encode(payload, settings.jwt_access_secret, algorithm=settings.jwt_algorithm)


def create_refresh_token(
    user_id: int, settings: Settings, expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a signed refresh token for a user.

    The payload carries a type marker and a random jti so that two tokens
    issued to the same user within the same second still differ.
    """
    now = utcnow()
    payload = {
        "sub": str(user_id),
        "type": REFRESH_TOKEN_TYPE,
        "jti": secrets.token_hex(16),
        "iat": now,
        "exp": now + (expires_delta if expires_delta is not None else refresh_token_lifetime(settings)),
    }
    return jwt.encode(payload, settings.jwt_refresh_secret, algorithm=settings.jwt_algorithm)


def _decode(token: str, secret: str, algorithm: str) -> Optional[Dict[str, Any]]:
    try:
        return jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.ExpiredSignatureError:
        logger.debug("Token expired")
        return None
    except jwt.InvalidTokenError:
        return None


def verify_token(token: str, settings: Settings) -> Optional[Dict[str, Any]]:
    """
    Verify an access token's signature and expiry.

    Returns:
        Decoded payload, or None if the token is invalid or expired
    """
    return _decode(token, settings.jwt_access_secret, settings.jwt_algorithm)


def verify_refresh_token(token: str, settings: Settings) -> Optional[Dict[str, Any]]:
    """
    Verify a refresh token's signature and expiry with the refresh secret.

    The type marker is not checked here; callers decide what to do with it.

    Returns:
        Decoded payload, or None if the token is invalid or expired
    """
    return _decode(token, settings.jwt_refresh_secret, settings.jwt_algorithm)
