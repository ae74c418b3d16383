"""Tests for deterministic README assembly."""

from __future__ import annotations

import re

import pytest

from src.agents.section_writer import API_NOT_APPLICABLE, GeneratedSections
from src.models.repository import BuildSystem, ProjectStructure, RepositoryProfile
from src.models.settings import BadgeToggles, GenerationSettings, SectionToggles
from src.services.assembler import assemble_readme

HELLO_WORLD = RepositoryProfile(
    owner="octocat",
    name="Hello-World",
    full_name="octocat/Hello-World",
    description="My first repository on GitHub!",
    stargazers_count=2500,
    forks_count=2000,
    html_url="https://github.com/octocat/Hello-World",
)

LICENSED = RepositoryProfile(
    owner="acme",
    name="widgets",
    full_name="acme/widgets",
    language="TypeScript",
    license_name="MIT License",
    license_spdx_id="MIT",
    stargazers_count=10,
    forks_count=3,
    homepage="https://widgets.dev",
)

NODE_STRUCTURE = ProjectStructure(
    has_tests=True,
    has_documentation=True,
    build_system=BuildSystem.npm,
    framework="React",
    technologies=frozenset({"TypeScript", "React", "Docker"}),
)

SECTIONS = GeneratedSections(
    description="Widgets for everyone.",
    features=("Fast", "Typed"),
    installation="npm install",
    usage="npm start",
    api="GET /widgets",
    contributing="Open a PR.",
)

ALL_ON = GenerationSettings(
    include_sections=SectionToggles(installation=True, usage=True, contributing=True, api=True),
)


def _headings(markdown: str) -> list[str]:
    return [line for line in markdown.splitlines() if line.startswith("#")]


# ---------------------------------------------------------------------------
# Ordering and determinism
# ---------------------------------------------------------------------------


class TestOrdering:
    def test_full_document_order(self):
        markdown = assemble_readme(LICENSED, NODE_STRUCTURE, SECTIONS, ALL_ON)
        assert _headings(markdown) == [
            "# widgets",
            "## Description",
            "## Features",
            "## Tech Stack",
            "## Installation",
            "## Usage",
            "## API Documentation",
            "## Project Structure",
            "## Contributing",
            "## License",
            "## Repository Information",
        ]

    def test_deterministic(self):
        first = assemble_readme(LICENSED, NODE_STRUCTURE, SECTIONS, ALL_ON)
        second = assemble_readme(LICENSED, NODE_STRUCTURE, SECTIONS, ALL_ON)
        assert first == second

    def test_hello_world_scenario(self):
        sections = GeneratedSections(description="Greets the world.", features=("Says hello",))
        markdown = assemble_readme(HELLO_WORLD, ProjectStructure(), sections, ALL_ON)

        positions = [
            markdown.index(heading)
            for heading in (
                "# Hello-World",
                "## Description",
                "## Features",
                "## Project Structure",
                "## Repository Information",
            )
        ]
        assert positions == sorted(positions)
        assert "## Tech Stack" not in markdown
        assert "## License" not in markdown


# ---------------------------------------------------------------------------
# Section toggles
# ---------------------------------------------------------------------------


class TestSectionToggles:
    @pytest.mark.parametrize(
        ("toggle", "heading", "content"),
        [
            ("installation", "## Installation", "npm install"),
            ("usage", "## Usage", "npm start"),
            ("api", "## API Documentation", "GET /widgets"),
            ("contributing", "## Contributing", "Open a PR."),
        ],
    )
    def test_disabling_removes_exactly_that_section(self, toggle, heading, content):
        full = assemble_readme(LICENSED, NODE_STRUCTURE, SECTIONS, ALL_ON)
        toggles = ALL_ON.include_sections.model_copy(update={toggle: False})
        reduced = assemble_readme(
            LICENSED, NODE_STRUCTURE, SECTIONS, ALL_ON.model_copy(update={"include_sections": toggles})
        )

        assert heading not in reduced
        assert content not in reduced
        assert reduced == full.replace(f"{heading}\n\n{content}\n\n", "")

    def test_empty_text_omits_section(self):
        sections = GeneratedSections(description="d", installation="")
        markdown = assemble_readme(LICENSED, NODE_STRUCTURE, sections, ALL_ON)
        assert "## Installation" not in markdown

    def test_api_sentinel_omitted(self):
        sections = GeneratedSections(description="d", api=API_NOT_APPLICABLE)
        markdown = assemble_readme(LICENSED, NODE_STRUCTURE, sections, ALL_ON)
        assert "## API Documentation" not in markdown
        assert API_NOT_APPLICABLE not in markdown

    def test_description_always_present(self):
        markdown = assemble_readme(HELLO_WORLD, ProjectStructure(), GeneratedSections(), GenerationSettings())
        assert "## Description" in markdown

    def test_features_bullets(self):
        markdown = assemble_readme(LICENSED, NODE_STRUCTURE, SECTIONS, ALL_ON)
        assert "## Features\n\n- Fast\n- Typed" in markdown


# ---------------------------------------------------------------------------
# Badges
# ---------------------------------------------------------------------------


class TestBadges:
    def test_default_badges(self):
        markdown = assemble_readme(LICENSED, NODE_STRUCTURE, SECTIONS, GenerationSettings())
        badge_line = markdown.splitlines()[2]
        labels = re.findall(r"!\[([^\]]+)\]", badge_line)
        assert labels == ["Build Status", "Version", "License", "Stars", "Forks"]

    def test_license_badge_follows_build_flag(self):
        settings = GenerationSettings(include_badges=BadgeToggles(build=False, version=True))
        markdown = assemble_readme(LICENSED, NODE_STRUCTURE, SECTIONS, settings)
        assert "![License]" not in markdown
        assert "![Version]" in markdown
        assert "![Stars]" in markdown

    def test_no_license_badge_without_license(self):
        markdown = assemble_readme(HELLO_WORLD, NODE_STRUCTURE, SECTIONS, GenerationSettings())
        assert "![License]" not in markdown

    @pytest.mark.parametrize(
        ("spdx_id", "name", "expected"),
        [
            ("MIT", "MIT License", "license-MIT-blue"),
            ("Apache-2.0", "Apache License 2.0", "license-Apache--2.0-blue"),
            (None, "MIT License", "license-MIT%20License-blue"),
            (None, "Custom_Terms-v2", "license-Custom__Terms--v2-blue"),
        ],
    )
    def test_license_badge_text_is_escaped(self, spdx_id, name, expected):
        profile = RepositoryProfile(
            owner="acme", name="widgets", full_name="acme/widgets", license_name=name, license_spdx_id=spdx_id
        )
        markdown = assemble_readme(profile, NODE_STRUCTURE, SECTIONS, GenerationSettings())
        assert f"https://img.shields.io/badge/{expected})" in markdown

    def test_no_badges_when_all_disabled(self):
        settings = GenerationSettings(include_badges=BadgeToggles(build=False, version=False, downloads=False))
        markdown = assemble_readme(LICENSED, NODE_STRUCTURE, SECTIONS, settings)
        assert "![" not in markdown


# ---------------------------------------------------------------------------
# Tech stack, tree and footer
# ---------------------------------------------------------------------------


class TestStaticBlocks:
    def test_tech_stack_lines(self):
        markdown = assemble_readme(LICENSED, NODE_STRUCTURE, SECTIONS, ALL_ON)
        assert "**Language:** TypeScript" in markdown
        assert "**Framework:** React" in markdown
        assert "**Technologies:** Docker, React, TypeScript" in markdown
        assert "**Build System:** npm" in markdown

    def test_tech_stack_with_language_only(self):
        structure = ProjectStructure()
        markdown = assemble_readme(LICENSED, structure, SECTIONS, ALL_ON)
        assert "## Tech Stack" in markdown
        assert "**Build System:**" not in markdown

    def test_project_tree_lines(self):
        markdown = assemble_readme(LICENSED, NODE_STRUCTURE, SECTIONS, ALL_ON)
        assert "tests/" in markdown
        assert "package.json" in markdown

        maven = ProjectStructure(build_system=BuildSystem.maven)
        markdown = assemble_readme(LICENSED, maven, SECTIONS, ALL_ON)
        assert "tests/" not in markdown
        assert "package.json" not in markdown

    def test_footer(self):
        markdown = assemble_readme(LICENSED, NODE_STRUCTURE, SECTIONS, ALL_ON)
        assert "- **Repository:** [acme/widgets](https://github.com/acme/widgets)" in markdown
        assert "- **Stars:** 10" in markdown
        assert "- **Forks:** 3" in markdown
        assert markdown.rstrip().endswith("- **Homepage:** [https://widgets.dev](https://widgets.dev)")

    def test_license_section(self):
        markdown = assemble_readme(LICENSED, NODE_STRUCTURE, SECTIONS, ALL_ON)
        assert "This project is licensed under the MIT License. See" in markdown

    def test_license_label_suffix_added(self):
        profile = RepositoryProfile(owner="a", name="b", full_name="a/b", license_name="Apache 2.0")
        markdown = assemble_readme(profile, ProjectStructure(), SECTIONS, ALL_ON)
        assert "licensed under the Apache 2.0 License." in markdown
