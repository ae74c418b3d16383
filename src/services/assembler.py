"""Deterministic Markdown assembly for generated READMEs.

Section order is fixed; the preview renderer and file export both rely on it:
title, badges, description, features, tech stack, installation, usage,
API documentation, project structure, contributing, license, repository
information.
"""

from __future__ import annotations

from urllib.parse import quote

from src.agents.section_writer.schemas import API_NOT_APPLICABLE, GeneratedSections
from src.models.repository import BuildSystem, ProjectStructure, RepositoryProfile
from src.models.settings import GenerationSettings

_SHIELDS = "https://img.shields.io"


def _badge_text(text: str) -> str:
    # shields.io static badges use "-" as a separator, so literal dashes are doubled.
    return quote(text.replace("-", "--").replace("_", "__"), safe="")


def _badges(profile: RepositoryProfile, settings: GenerationSettings) -> str | None:
    toggles = settings.include_badges
    if not toggles.any_enabled:
        return None

    full_name = profile.full_name
    badges: list[str] = []
    if toggles.build:
        badges.append(f"![Build Status]({_SHIELDS}/github/actions/workflow/status/{full_name}/ci.yml)")
    if toggles.version:
        badges.append(f"![Version]({_SHIELDS}/github/v/release/{full_name})")
    # The license badge follows the build toggle.
    if profile.has_license and toggles.build:
        label = _badge_text(profile.license_spdx_id or profile.license_name or "")
        badges.append(f"![License]({_SHIELDS}/badge/license-{label}-blue)")
    badges.append(f"![Stars]({_SHIELDS}/github/stars/{full_name})")
    badges.append(f"![Forks]({_SHIELDS}/github/forks/{full_name})")
    return " ".join(badges)


def _tech_stack(profile: RepositoryProfile, structure: ProjectStructure) -> str | None:
    if not structure.technologies and not profile.language:
        return None

    lines = ["## Tech Stack"]
    if profile.language:
        lines.append(f"**Language:** {profile.language}")
    if structure.framework:
        lines.append(f"**Framework:** {structure.framework}")
    if structure.technologies:
        lines.append(f"**Technologies:** {', '.join(structure.sorted_technologies)}")
    if structure.build_system is not BuildSystem.none:
        lines.append(f"**Build System:** {structure.build_system.value}")
    return "\n\n".join(lines)


def _project_tree(profile: RepositoryProfile, structure: ProjectStructure) -> str:
    tree = [
        f"{profile.name}/",
        "├── src/                 # Source code",
        "├── docs/                # Documentation",
    ]
    if structure.has_tests:
        tree.append("├── tests/               # Test files")
    if structure.build_system is BuildSystem.npm:
        tree.append("├── package.json         # Project dependencies")
    tree.append("└── README.md            # Project documentation")
    return "## Project Structure\n\n```\n" + "\n".join(tree) + "\n```"


def _license_label(name: str | None) -> str:
    # GitHub names usually already end in "License" ("MIT License").
    name = name or ""
    return name if name.lower().endswith("license") else f"{name} License"


def _repository_info(profile: RepositoryProfile) -> str:
    lines = [
        "## Repository Information",
        "",
        f"- **Repository:** [{profile.full_name}]({profile.canonical_url})",
        f"- **Stars:** {profile.stargazers_count}",
        f"- **Forks:** {profile.forks_count}",
    ]
    if profile.homepage:
        lines.append(f"- **Homepage:** [{profile.homepage}]({profile.homepage})")
    return "\n".join(lines)


def assemble_readme(
    profile: RepositoryProfile,
    structure: ProjectStructure,
    sections: GeneratedSections,
    settings: GenerationSettings,
) -> str:
    """Combine synthesized content and metadata into one Markdown document.

    Pure and deterministic: identical inputs always yield identical output.
    """
    toggles = settings.include_sections
    blocks: list[str] = [f"# {profile.name}"]

    badges = _badges(profile, settings)
    if badges:
        blocks.append(badges)

    blocks.append(f"## Description\n\n{sections.description}".rstrip())

    if sections.features:
        blocks.append("## Features\n\n" + "\n".join(f"- {feature}" for feature in sections.features))

    tech_stack = _tech_stack(profile, structure)
    if tech_stack:
        blocks.append(tech_stack)

    if toggles.installation and sections.installation:
        blocks.append(f"## Installation\n\n{sections.installation}")

    if toggles.usage and sections.usage:
        blocks.append(f"## Usage\n\n{sections.usage}")

    if toggles.api and sections.api and sections.api != API_NOT_APPLICABLE:
        blocks.append(f"## API Documentation\n\n{sections.api}")

    blocks.append(_project_tree(profile, structure))

    if toggles.contributing and sections.contributing:
        blocks.append(f"## Contributing\n\n{sections.contributing}")

    if profile.has_license:
        blocks.append(
            f"## License\n\nThis project is licensed under the {_license_label(profile.license_name)}. "
            "See the LICENSE file for details."
        )

    blocks.append(_repository_info(profile))

    return "\n\n".join(blocks) + "\n"
