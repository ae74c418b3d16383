"""Persistence backends for users and generated READMEs.

:class:`SqlStorage` runs on any SQLAlchemy async URL (PostgreSQL in
production, SQLite in tests). :class:`MemoryStorage` keeps everything in
process and is selected when no database URL is configured.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import Settings
from src.database.engine import create_engine, create_session_factory
from src.database.models.base import Base, utcnow
from src.database.models.readme_generation import ReadmeGeneration
from src.database.models.user import User
from src.database.repos.generation_repo import GenerationRepo
from src.database.repos.user_repo import UserRepo

logger = logging.getLogger(__name__)


class Storage(ABC):
    """Abstract persistence interface used by the API and identity layers."""

    async def initialize(self) -> None:
        """Prepare the backend (create tables, open pools)."""

    async def close(self) -> None:
        """Release backend resources."""

    @abstractmethod
    async def ping(self) -> None:
        """Raise if the backend is unreachable."""

    @abstractmethod
    async def create_user(
        self,
        *,
        github_id: str,
        github_username: str,
        github_access_token: str | None = None,
        avatar_url: str | None = None,
        email: str | None = None,
    ) -> User: ...

    @abstractmethod
    async def get_user_by_id(self, user_id: uuid.UUID) -> User | None: ...

    @abstractmethod
    async def get_user_by_github_id(self, github_id: str) -> User | None: ...

    @abstractmethod
    async def update_user(self, user_id: uuid.UUID, **fields: Any) -> User | None: ...

    @abstractmethod
    async def create_generation(
        self,
        *,
        user_id: uuid.UUID | None,
        repository_url: str,
        repository_name: str,
        repository_owner: str,
        markdown_content: str,
        repository_data: dict,
        generation_settings: dict,
        is_private_repo: bool = False,
    ) -> ReadmeGeneration: ...

    @abstractmethod
    async def get_generation(self, generation_id: uuid.UUID) -> ReadmeGeneration | None: ...

    @abstractmethod
    async def list_recent_generations(
        self,
        *,
        limit: int = 10,
        user_id: uuid.UUID | None = None,
    ) -> list[ReadmeGeneration]: ...


class SqlStorage(Storage):
    """SQLAlchemy-backed storage; one session and transaction per call."""

    def __init__(self, database_url: str, settings: Settings | None = None) -> None:
        self._engine = create_engine(database_url, settings)
        self._session_factory = create_session_factory(self._engine)

    @asynccontextmanager
    async def _session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session, committing on success or rolling back on error."""
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def initialize(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready")

    async def close(self) -> None:
        await self._engine.dispose()

    async def ping(self) -> None:
        async with self._session() as session:
            await session.execute(text("SELECT 1"))

    async def create_user(self, **fields: Any) -> User:
        async with self._session() as session:
            return await UserRepo(session).create(**fields)

    async def get_user_by_id(self, user_id: uuid.UUID) -> User | None:
        async with self._session() as session:
            return await UserRepo(session).get_by_id(user_id)

    async def get_user_by_github_id(self, github_id: str) -> User | None:
        async with self._session() as session:
            return await UserRepo(session).get_by_github_id(github_id)

    async def update_user(self, user_id: uuid.UUID, **fields: Any) -> User | None:
        async with self._session() as session:
            return await UserRepo(session).update(user_id, **fields)

    async def create_generation(self, **fields: Any) -> ReadmeGeneration:
        async with self._session() as session:
            return await GenerationRepo(session).create(**fields)

    async def get_generation(self, generation_id: uuid.UUID) -> ReadmeGeneration | None:
        async with self._session() as session:
            return await GenerationRepo(session).get_by_id(generation_id)

    async def list_recent_generations(
        self,
        *,
        limit: int = 10,
        user_id: uuid.UUID | None = None,
    ) -> list[ReadmeGeneration]:
        async with self._session() as session:
            return await GenerationRepo(session).list_recent(limit=limit, user_id=user_id)


class MemoryStorage(Storage):
    """Process-local storage holding detached ORM instances."""

    def __init__(self) -> None:
        self._users: dict[uuid.UUID, User] = {}
        self._generations: dict[uuid.UUID, ReadmeGeneration] = {}

    async def ping(self) -> None:
        return None

    async def create_user(
        self,
        *,
        github_id: str,
        github_username: str,
        github_access_token: str | None = None,
        avatar_url: str | None = None,
        email: str | None = None,
    ) -> User:
        if any(user.github_id == github_id for user in self._users.values()):
            raise ValueError(f"User with github_id {github_id} already exists")
        now = utcnow()
        user = User(
            id=uuid.uuid4(),
            github_id=github_id,
            github_username=github_username,
            github_access_token=github_access_token,
            avatar_url=avatar_url,
            email=email,
            created_at=now,
            updated_at=now,
        )
        self._users[user.id] = user
        return user

    async def get_user_by_id(self, user_id: uuid.UUID) -> User | None:
        return self._users.get(user_id)

    async def get_user_by_github_id(self, github_id: str) -> User | None:
        for user in self._users.values():
            if user.github_id == github_id:
                return user
        return None

    async def update_user(self, user_id: uuid.UUID, **fields: Any) -> User | None:
        user = self._users.get(user_id)
        if user is None:
            return None
        for key, value in fields.items():
            setattr(user, key, value)
        user.updated_at = utcnow()
        return user

    async def create_generation(
        self,
        *,
        user_id: uuid.UUID | None,
        repository_url: str,
        repository_name: str,
        repository_owner: str,
        markdown_content: str,
        repository_data: dict,
        generation_settings: dict,
        is_private_repo: bool = False,
    ) -> ReadmeGeneration:
        generation = ReadmeGeneration(
            id=uuid.uuid4(),
            user_id=user_id,
            repository_url=repository_url,
            repository_name=repository_name,
            repository_owner=repository_owner,
            markdown_content=markdown_content,
            repository_data=repository_data,
            generation_settings=generation_settings,
            is_private_repo=is_private_repo,
            created_at=utcnow(),
        )
        self._generations[generation.id] = generation
        return generation

    async def get_generation(self, generation_id: uuid.UUID) -> ReadmeGeneration | None:
        return self._generations.get(generation_id)

    async def list_recent_generations(
        self,
        *,
        limit: int = 10,
        user_id: uuid.UUID | None = None,
    ) -> list[ReadmeGeneration]:
        # dicts keep insertion order, so reversing breaks created_at ties newest-first
        rows = [
            generation
            for generation in reversed(self._generations.values())
            if user_id is None or generation.user_id == user_id
        ]
        rows.sort(key=lambda generation: generation.created_at, reverse=True)
        return rows[:limit]


def build_storage(settings: Settings) -> Storage:
    """Select the storage backend from configuration."""
    if settings.DATABASE_URL:
        logger.info("Using SQL storage")
        return SqlStorage(settings.DATABASE_URL, settings)
    logger.info("DATABASE_URL not set; using in-memory storage")
    return MemoryStorage()
