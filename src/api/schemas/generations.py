from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelRequest(BaseModel):
    """Request bodies accept both snake_case and camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateReadmeRequest(_CamelRequest):
    repository_url: str = Field(..., min_length=1)
    # Validated leniently by GenerationSettings.from_payload, not here.
    settings: dict[str, Any] | None = None


class ValidateRepositoryRequest(_CamelRequest):
    repository_url: str


class ValidateRepositoryResponse(BaseModel):
    valid: bool
    error: str | None = None


class ProcessingStepResponse(BaseModel):
    step: str
    status: str
    message: str | None = None


class GenerateReadmeResponse(BaseModel):
    id: UUID
    markdown_content: str
    repository_data: dict[str, Any]
    processing_steps: list[ProcessingStepResponse]


class ReadmeGenerationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID | None = None
    repository_url: str
    repository_name: str
    repository_owner: str
    markdown_content: str
    repository_data: dict[str, Any]
    generation_settings: dict[str, Any]
    is_private_repo: bool
    created_at: datetime
