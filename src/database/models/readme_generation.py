from __future__ import annotations

import uuid

from sqlalchemy import Boolean, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.database.models.base import Base, CreatedAtMixin, JSONDocument, UUIDPrimaryKeyMixin


class ReadmeGeneration(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """A generated README. Written once, never updated."""

    __tablename__ = "readme_generations"
    __table_args__ = (
        Index("ix_readme_generations_created_at", "created_at"),
        Index("ix_readme_generations_user_created_at", "user_id", "created_at"),
    )

    user_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    repository_url: Mapped[str] = mapped_column(String, nullable=False)
    repository_name: Mapped[str] = mapped_column(String, nullable=False)
    repository_owner: Mapped[str] = mapped_column(String, nullable=False)
    markdown_content: Mapped[str] = mapped_column(Text, nullable=False)
    repository_data: Mapped[dict] = mapped_column(JSONDocument, nullable=False)
    generation_settings: Mapped[dict] = mapped_column(JSONDocument, nullable=False)
    is_private_repo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
