"""
Auth data shapes: the ORM ``User`` re-export, request/response schemas and the
cached session projection.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import asdict, dataclass

from pydantic import BaseModel, Field, field_validator

from auth.password import BCRYPT_MAX_PASSWORD_BYTES
from database.models import User  # noqa: F401


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255, examples=["user@test.com"])
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def email_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("email must not be blank")
        return value


class RegisterRequest(LoginRequest):
    """Create-account body; bcrypt only accepts passwords up to 72 bytes."""

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes")
        return value


class LoginResponse(BaseModel):
    token: str


class UserResponse(BaseModel):
    """Public view of a freshly created account: the id and nothing else."""

    id: str = Field(..., examples=["1a4"])


@dataclass(frozen=True)
class CachedUser:
    """
    Minimal, non-secret projection of a ``User`` kept in the session cache.

    When adding, removing, or renaming fields here, bump
    ``CACHE_SCHEMA_VERSION`` in ``auth/cache.py`` so old entries are ignored.
    """

    id: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> "CachedUser":
        return cls(id=str(user.user_id), email=user.email)

    @property
    def user_id(self) -> uuid.UUID:
        return uuid.UUID(self.id)

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, data: str | bytes) -> "CachedUser":
        return cls(**json.loads(data))


__all__ = ["User", "LoginRequest", "RegisterRequest", "LoginResponse", "UserResponse", "CachedUser"]
