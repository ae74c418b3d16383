"""Repository data-access object for the readme_generations table."""

from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.models.readme_generation import ReadmeGeneration


class GenerationRepo:
    """Async data-access layer for :class:`ReadmeGeneration` rows.

    Rows are insert-only; there is no update or delete.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
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
        """Create and return a new ReadmeGeneration."""
        generation = ReadmeGeneration(
            user_id=user_id,
            repository_url=repository_url,
            repository_name=repository_name,
            repository_owner=repository_owner,
            markdown_content=markdown_content,
            repository_data=repository_data,
            generation_settings=generation_settings,
            is_private_repo=is_private_repo,
        )
        self._session.add(generation)
        await self._session.flush()
        return generation

    async def get_by_id(self, generation_id: uuid.UUID) -> ReadmeGeneration | None:
        """Return a ReadmeGeneration by primary key, or ``None``."""
        return await self._session.get(ReadmeGeneration, generation_id)

    async def list_recent(
        self,
        *,
        limit: int = 10,
        user_id: uuid.UUID | None = None,
    ) -> list[ReadmeGeneration]:
        """Return the newest generations, optionally only those owned by *user_id*."""
        stmt = sa.select(ReadmeGeneration).order_by(
            ReadmeGeneration.created_at.desc(),
            ReadmeGeneration.id.desc(),
        )
        if user_id is not None:
            stmt = stmt.where(ReadmeGeneration.user_id == user_id)
        stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())
