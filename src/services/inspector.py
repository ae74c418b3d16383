from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from src.models.repository import ContentEntry, ProjectStructure, RepositoryProfile, StructureReport
from src.providers.base import RepositoryHost
from src.services.detection import detect_structure

logger = logging.getLogger(__name__)

MANIFEST_PATH = "package.json"
README_CANDIDATES: tuple[str, ...] = ("README.md", "readme.md", "README.rst", "README.txt", "README")


class RepositoryInspector:
    """Gathers repository metadata and infers its technology profile.

    Only ``fetch_profile`` can fail. Listing, manifest, and README reads
    degrade to empty/``None`` results.
    """

    def __init__(self, host: RepositoryHost, fallback_token: str | None = None) -> None:
        self._host = host
        self._fallback_token = fallback_token or None

    def _credential(self, credential: str | None) -> str | None:
        return credential or self._fallback_token

    def parse_url(self, url: str) -> tuple[str, str]:
        return self._host.parse_url(url)

    async def fetch_profile(self, url: str, credential: str | None = None) -> RepositoryProfile:
        owner, repo = self._host.parse_url(url)
        payload = await self._host.get_repository(owner, repo, self._credential(credential))
        return RepositoryProfile.from_github(payload)

    async def list_top_level(self, url: str, credential: str | None = None) -> list[ContentEntry]:
        owner, repo = self._host.parse_url(url)
        return await self._host.list_top_level(owner, repo, self._credential(credential))

    async def fetch_manifest(self, url: str, credential: str | None = None) -> dict[str, Any] | None:
        """Return the parsed ``package.json``, or ``None`` if absent or malformed."""
        owner, repo = self._host.parse_url(url)
        raw = await self._host.get_file_content(owner, repo, MANIFEST_PATH, self._credential(credential))
        if raw is None:
            return None
        try:
            manifest = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            logger.warning("Ignoring unparseable %s in %s/%s", MANIFEST_PATH, owner, repo)
            return None
        return manifest if isinstance(manifest, dict) else None

    async def fetch_readme(self, url: str, credential: str | None = None) -> str | None:
        """Return the first conventional README found, or ``None``."""
        owner, repo = self._host.parse_url(url)
        token = self._credential(credential)
        for filename in README_CANDIDATES:
            raw = await self._host.get_file_content(owner, repo, filename, token)
            if raw is not None:
                logger.info("Found existing %s in %s/%s", filename, owner, repo)
                return raw.decode("utf-8", errors="replace")
        return None

    async def analyze_structure(self, url: str, credential: str | None = None) -> ProjectStructure:
        entries, manifest = await asyncio.gather(
            self.list_top_level(url, credential),
            self.fetch_manifest(url, credential),
        )
        return detect_structure(entries, manifest)

    async def inspect_structure(self, url: str, credential: str | None = None) -> StructureReport:
        """Run the listing, manifest, and README reads concurrently."""
        entries, manifest, readme = await asyncio.gather(
            self.list_top_level(url, credential),
            self.fetch_manifest(url, credential),
            self.fetch_readme(url, credential),
        )
        structure = detect_structure(entries, manifest)
        logger.info(
            "Analyzed structure: build_system=%s framework=%s technologies=%d",
            structure.build_system,
            structure.framework,
            len(structure.technologies),
        )
        return StructureReport(structure=structure, manifest=manifest, readme=readme)
