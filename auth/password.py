"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and a fixed work factor.
"""

from __future__ import annotations

import bcrypt

from auth.errors import HashingError

BCRYPT_ROUNDS = 10
# bcrypt rejects longer input rather than truncating it
BCRYPT_MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a password with bcrypt (auto-salted)."""
    if not password:
        raise HashingError("Password cannot be empty")
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > BCRYPT_MAX_PASSWORD_BYTES:
        raise HashingError(f"Password longer than {BCRYPT_MAX_PASSWORD_BYTES} bytes")
    try:
        return bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=rounds)).decode()
    except (ValueError, TypeError) as exc:
        raise HashingError() from exc


def verify_password(password: str, password_hash: str) -> bool:
    """
    Constant-time comparison against a bcrypt hash.

    A wrong password (including one too long to ever have been hashed) is
    ``False``; a malformed stored hash is a ``HashingError``.
    """
    if not password:
        return False
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > BCRYPT_MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(password_bytes, password_hash.encode("utf-8"))
    except (ValueError, TypeError) as exc:
        raise HashingError() from exc
