"""
Authentication error taxonomy.

Each error carries the HTTP status it maps to; ``api.middleware`` turns any
``AuthError`` into a JSON ``{"detail": ...}`` response.
"""

from __future__ import annotations

from typing import Dict, Optional


class AuthError(Exception):
    """Base authentication error."""

    status_code: int = 500
    detail: str = "Internal authentication error"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, detail: Optional[str] = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class DuplicateAccountError(AuthError):
    """An account with this email already exists."""

    status_code = 409
    detail = "Account already exists"


class AuthenticationFailedError(AuthError):
    """Unknown email, wrong password or ambiguous lookup; callers cannot tell which."""

    status_code = 401
    detail = "Invalid email or password"


class InvalidTokenError(AuthError):
    """Bearer token missing, malformed, expired or not matching a user."""

    status_code = 401
    detail = "Invalid or expired token"
    headers = {"WWW-Authenticate": "Bearer"}


class HashingError(AuthError):
    """The password hashing primitive failed."""


class SigningError(AuthError):
    """The token could not be signed."""
