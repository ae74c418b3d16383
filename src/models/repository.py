from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from typing import Any


class BuildSystem(enum.StrEnum):
    none = "none"
    npm = "npm"
    yarn = "yarn"
    maven = "maven"
    gradle = "gradle"
    make = "make"


@dataclass(frozen=True)
class RepositoryProfile:
    """Snapshot of repository metadata taken once per generation run."""

    owner: str
    name: str
    full_name: str
    description: str | None = None
    language: str | None = None
    topics: tuple[str, ...] = ()
    license_name: str | None = None
    license_spdx_id: str | None = None
    stargazers_count: int = 0
    forks_count: int = 0
    homepage: str | None = None
    private: bool = False
    html_url: str = ""
    default_branch: str = "main"

    @property
    def canonical_url(self) -> str:
        return self.html_url or f"https://github.com/{self.full_name}"

    @property
    def has_license(self) -> bool:
        return bool(self.license_name)

    @classmethod
    def from_github(cls, payload: dict[str, Any]) -> RepositoryProfile:
        """Build a profile from a GitHub REST ``GET /repos/{owner}/{repo}`` payload."""
        owner = (payload.get("owner") or {}).get("login", "")
        name = payload.get("name", "")
        license_data = payload.get("license") or {}
        return cls(
            owner=owner,
            name=name,
            full_name=payload.get("full_name") or f"{owner}/{name}",
            description=payload.get("description"),
            language=payload.get("language"),
            topics=tuple(payload.get("topics") or ()),
            license_name=license_data.get("name"),
            license_spdx_id=license_data.get("spdx_id"),
            stargazers_count=int(payload.get("stargazers_count") or 0),
            forks_count=int(payload.get("forks_count") or 0),
            homepage=payload.get("homepage") or None,
            private=bool(payload.get("private", False)),
            html_url=payload.get("html_url") or "",
            default_branch=payload.get("default_branch") or "main",
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["topics"] = list(self.topics)
        return data


@dataclass(frozen=True)
class ContentEntry:
    """One entry of a repository's top-level listing."""

    name: str
    type: str  # "file", "dir", "symlink" or "submodule"
    path: str = ""

    @property
    def is_file(self) -> bool:
        return self.type == "file"


@dataclass(frozen=True)
class ProjectStructure:
    """Technology profile inferred from a shallow top-level scan."""

    has_tests: bool = False
    has_documentation: bool = False
    build_system: BuildSystem = BuildSystem.none
    framework: str | None = None
    technologies: frozenset[str] = field(default_factory=frozenset)

    @property
    def sorted_technologies(self) -> list[str]:
        return sorted(self.technologies, key=str.lower)

    def to_dict(self) -> dict[str, Any]:
        return {
            "has_tests": self.has_tests,
            "has_documentation": self.has_documentation,
            "build_system": self.build_system.value,
            "framework": self.framework,
            "technologies": self.sorted_technologies,
        }


@dataclass(frozen=True)
class StructureReport:
    """Everything the structure-analysis step gathers in one pass."""

    structure: ProjectStructure
    manifest: dict[str, Any] | None = None
    readme: str | None = None
