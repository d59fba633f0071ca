"""
Domain error taxonomy.

Services raise these where a failure is detected; the API layer translates
them into HTTP responses in one place (see api/main.py).
"""

from typing import Optional


class AppError(Exception):
    """Base class for errors that map to a specific HTTP status."""

    status_code = 500

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class BadRequestError(AppError):
    """Malformed or semantically invalid input."""

    status_code = 400


class UnauthorizedError(AppError):
    """Missing, invalid or expired credentials or tokens."""

    status_code = 401


class ForbiddenError(AppError):
    """Authenticated but not entitled to the resource."""

    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Unique-constraint collision (email or slug already taken)."""

    status_code = 409
