from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from src.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A GitHub identity that has signed in at least once."""

    __tablename__ = "users"

    github_id: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    github_username: Mapped[str] = mapped_column(String, nullable=False)
    # Never serialised into API responses or generated documents.
    github_access_token: Mapped[str | None] = mapped_column(String, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
