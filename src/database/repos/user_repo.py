"""Repository data-access object for the users table."""

from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.models.user import User


class UserRepo:
    """Async data-access layer for :class:`User` rows."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        github_id: str,
        github_username: str,
        github_access_token: str | None = None,
        avatar_url: str | None = None,
        email: str | None = None,
    ) -> User:
        """Create and return a new User."""
        user = User(
            github_id=github_id,
            github_username=github_username,
            github_access_token=github_access_token,
            avatar_url=avatar_url,
            email=email,
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def get_by_id(self, user_id: uuid.UUID) -> User | None:
        """Return a User by primary key, or ``None``."""
        return await self._session.get(User, user_id)

    async def get_by_github_id(self, github_id: str) -> User | None:
        """Return the User with *github_id*, or ``None``."""
        stmt = sa.select(User).where(User.github_id == github_id)
        result = await self._session.execute(stmt)
        return result.scalars().first()

    async def update(self, user_id: uuid.UUID, **kwargs: object) -> User | None:
        """Update arbitrary fields on a User. Returns ``None`` if not found."""
        user = await self._session.get(User, user_id)
        if user is None:
            return None
        for key, value in kwargs.items():
            setattr(user, key, value)
        await self._session.flush()
        return user
