from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from src.models.repository import ProjectStructure, RepositoryProfile
from src.models.settings import GenerationSettings

API_NOT_APPLICABLE = "API documentation not available or not applicable for this project."
MAX_FEATURES = 8


@dataclass(frozen=True)
class SectionContext:
    """Read-only inputs shared by every section generator in a run."""

    profile: RepositoryProfile
    structure: ProjectStructure
    settings: GenerationSettings
    manifest: dict[str, Any] | None = None
    existing_readme: str | None = None


class FeatureList(BaseModel):
    """Schema-constrained features response."""

    features: list[str] = Field(default_factory=list)


@dataclass(frozen=True)
class GeneratedSections:
    """Synthesized content for one run. Unrequested sections stay empty."""

    description: str = ""
    features: tuple[str, ...] = ()
    installation: str = ""
    usage: str = ""
    api: str = ""
    contributing: str = ""
