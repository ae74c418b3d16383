from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """Public view of a signed-in user. The stored access token is never exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    github_id: str
    github_username: str
    avatar_url: str | None = None
    email: str | None = None
    created_at: datetime
    updated_at: datetime


class LogoutResponse(BaseModel):
    success: bool = True
