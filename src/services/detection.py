"""Shallow technology detection over a repository's top-level listing.

Only the root listing and the ``package.json`` manifest are considered; this
is a heuristic, not a dependency or AST analysis.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from src.models.repository import BuildSystem, ContentEntry, ProjectStructure

# Checked in order; later matches overwrite the framework, every match adds a tag.
_FRAMEWORK_DEPENDENCIES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("react",), "React"),
    (("vue",), "Vue.js"),
    (("angular", "@angular/core"), "Angular"),
    (("next",), "Next.js"),
)

_TOOL_DEPENDENCIES: dict[str, str] = {
    "express": "Express.js",
    "typescript": "TypeScript",
    "tailwindcss": "Tailwind CSS",
    "jest": "Jest",
    "eslint": "ESLint",
    "prettier": "Prettier",
}

_EXTENSION_TECHNOLOGIES: dict[str, str] = {
    "py": "Python",
    "java": "Java",
    "cpp": "C++",
    "cc": "C++",
    "c": "C",
    "rs": "Rust",
    "go": "Go",
    "php": "PHP",
    "rb": "Ruby",
}

_PACKAGE_MANIFEST = "package.json"
_ALTERNATE_LOCKFILES: dict[str, BuildSystem] = {"yarn.lock": BuildSystem.yarn}


def detect_build_system(names: set[str]) -> BuildSystem:
    """Return the build system for a set of lower-cased top-level names.

    First match wins: npm-family (a lockfile for an alternate package manager
    overrides npm), then maven, gradle, make.
    """
    lockfile_managers = [manager for lockfile, manager in _ALTERNATE_LOCKFILES.items() if lockfile in names]
    if _PACKAGE_MANIFEST in names or lockfile_managers:
        return lockfile_managers[0] if lockfile_managers else BuildSystem.npm
    if "pom.xml" in names:
        return BuildSystem.maven
    if "build.gradle" in names:
        return BuildSystem.gradle
    if "makefile" in names:
        return BuildSystem.make
    return BuildSystem.none


def manifest_dependencies(manifest: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge direct and development dependencies of a package manifest."""
    if not manifest:
        return {}
    deps: dict[str, Any] = {}
    for key in ("dependencies", "devDependencies"):
        section = manifest.get(key)
        if isinstance(section, Mapping):
            deps.update(section)
    return deps


def detect_framework(deps: Mapping[str, Any]) -> tuple[str | None, set[str]]:
    """Return (framework, tags) from merged manifest dependencies."""
    framework: str | None = None
    tags: set[str] = set()
    for packages, label in _FRAMEWORK_DEPENDENCIES:
        if any(package in deps for package in packages):
            framework = label
            tags.add(label)
    for package, label in _TOOL_DEPENDENCIES.items():
        if package in deps:
            tags.add(label)
    return framework, tags


def _extension(name: str) -> str | None:
    if "." not in name:
        return None
    return name.rsplit(".", 1)[1] or None


def detect_file_technologies(entries: Iterable[ContentEntry]) -> set[str]:
    """Tags contributed by file extensions and a top-level Dockerfile."""
    tags: set[str] = set()
    for entry in entries:
        name = entry.name.lower()
        if name == "dockerfile":
            tags.add("Docker")
        if not entry.is_file:
            continue
        technology = _EXTENSION_TECHNOLOGIES.get(_extension(name) or "")
        if technology:
            tags.add(technology)
    return tags


def has_tests(names: Iterable[str]) -> bool:
    return any("test" in name or "spec" in name or name in ("tests", "__tests__") for name in names)


def has_documentation(names: Iterable[str]) -> bool:
    return any("doc" in name or name == "docs" or "wiki" in name for name in names)


def detect_structure(
    entries: Iterable[ContentEntry],
    manifest: Mapping[str, Any] | None = None,
) -> ProjectStructure:
    """Infer a :class:`ProjectStructure` from a top-level listing and manifest.

    Every rule is applied independently. The result does not depend on the
    order of *entries*.
    """
    entries = list(entries)
    names = {entry.name.lower() for entry in entries}

    framework, technologies = detect_framework(manifest_dependencies(manifest))
    technologies |= detect_file_technologies(entries)

    return ProjectStructure(
        has_tests=has_tests(names),
        has_documentation=has_documentation(names),
        build_system=detect_build_system(names),
        framework=framework,
        technologies=frozenset(technologies),
    )
