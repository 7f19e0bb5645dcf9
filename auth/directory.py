"""
User directory — persistent account records behind an ``AsyncSession``.

Emails are normalised (trimmed, lower-cased) on every read and write, so
uniqueness and lookup are case-insensitive.  Uniqueness itself is enforced by
the ``users.email`` unique constraint; a violation on insert surfaces as
``DuplicateAccountError``.
"""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.errors import DuplicateAccountError
from auth.models import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class UserDirectory:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def find_by_email(self, email: str) -> List[User]:
        result = await self._session.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return list(result.scalars().all())

    async def get_by_id(self, user_id: str | uuid.UUID) -> Optional[User]:
        uid = uuid.UUID(user_id) if isinstance(user_id, str) else user_id
        return await self._session.get(User, uid)

    async def create(self, email: str, password_hash: str) -> User:
        """Insert a new user and return it with its assigned id."""
        normalized = normalize_email(email)
        if not normalized:
            raise ValueError("email must not be blank")
        user = User(
            user_id=uuid.uuid4(),
            email=normalized,
            password_hash=password_hash,
        )
        self._session.add(user)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            logger.warning("Unique constraint rejected account for %s", user.email)
            raise DuplicateAccountError() from exc
        return user
