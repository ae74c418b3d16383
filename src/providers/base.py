from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from src.models.repository import ContentEntry


class RepositoryHost(ABC):
    """Abstract interface for repository-hosting read operations.

    ``get_repository`` is a hard read and raises from the error taxonomy.
    The listing and file reads are tolerant: failures degrade to an empty
    listing or ``None`` instead of raising.
    """

    @abstractmethod
    def parse_url(self, url: str) -> tuple[str, str]:
        """Return (owner, repo) for *url* without any network access."""

    @abstractmethod
    async def get_repository(
        self,
        owner: str,
        repo: str,
        access_token: str | None,
    ) -> dict[str, Any]:
        """Return the raw repository metadata payload."""

    @abstractmethod
    async def list_top_level(
        self,
        owner: str,
        repo: str,
        access_token: str | None,
    ) -> list[ContentEntry]:
        """Return the non-recursive root listing, or ``[]`` on any failure."""

    @abstractmethod
    async def get_file_content(
        self,
        owner: str,
        repo: str,
        path: str,
        access_token: str | None,
    ) -> bytes | None:
        """Return the decoded file bytes, or ``None`` if absent or unreadable."""


def get_provider(provider: str, **kwargs: Any) -> RepositoryHost:
    """Factory function that returns the appropriate RepositoryHost implementation.

    Imports are deferred to avoid circular imports.
    """
    if provider == "github":
        from src.providers.github import GitHubProvider

        return GitHubProvider(**kwargs)

    from src.errors import InvalidUrlError

    raise InvalidUrlError(f"Unsupported repository host: {provider!r}")
