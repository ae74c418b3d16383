"""Shared fixtures for API integration tests.

Provides a FastAPI test application wired to in-memory storage and a mocked
generation flow, an async HTTPX test client, and reusable factories.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi import FastAPI

from src.api.app import create_app
from src.config.settings import Settings
from src.database.storage import MemoryStorage
from src.flows.readme_generation import GenerationResult
from src.flows.steps import STEP_NAMES, ProcessingStep, StepStatus
from src.models.repository import BuildSystem, ProjectStructure, RepositoryProfile
from src.services.identity import ResolvedIdentity

# ---------------------------------------------------------------------------
# Stable values used across tests
# ---------------------------------------------------------------------------

USER_ID = uuid.UUID("00000000-0000-4000-8000-000000000001")
UNKNOWN_ID = uuid.UUID("00000000-0000-4000-8000-ffffffffffff")
REPO_URL = "https://github.com/octocat/Hello-World"
NOW = datetime(2026, 2, 17, 12, 0, 0, tzinfo=UTC)
ACCESS_TOKEN = "gho_session_token"


# ---------------------------------------------------------------------------
# Factory helpers
# ---------------------------------------------------------------------------


def make_profile(private: bool = False) -> RepositoryProfile:
    return RepositoryProfile(
        owner="octocat",
        name="Hello-World",
        full_name="octocat/Hello-World",
        description="My first repository on GitHub!",
        stargazers_count=2500,
        forks_count=2000,
        private=private,
        html_url=REPO_URL,
    )


def completed_steps() -> tuple[ProcessingStep, ...]:
    return tuple(ProcessingStep(name, StepStatus.completed) for name in STEP_NAMES)


def make_result(private: bool = False) -> GenerationResult:
    """Return a finished generation result for the Hello-World repository."""
    return GenerationResult(
        markdown="# Hello-World\n\n## Description\n\nGreets the world.\n",
        profile=make_profile(private),
        structure=ProjectStructure(build_system=BuildSystem.npm, technologies=frozenset({"React"})),
        steps=completed_steps(),
    )


def make_user(user_id: uuid.UUID = USER_ID, access_token: str | None = ACCESS_TOKEN) -> SimpleNamespace:
    """Return a lightweight user-like object."""
    return SimpleNamespace(
        id=user_id,
        github_id="42",
        github_username="octocat",
        github_access_token=access_token,
        avatar_url="https://avatars.example.com/u/42",
        email="octocat@example.com",
        created_at=NOW,
        updated_at=NOW,
    )


def make_identity(access_token: str | None = ACCESS_TOKEN) -> ResolvedIdentity:
    return ResolvedIdentity(user=make_user(access_token=access_token), credential=access_token)


# ---------------------------------------------------------------------------
# Collaborator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def settings() -> Settings:
    return Settings(_env_file=None, SESSION_SECRET="test-secret", DATABASE_URL="")


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def mock_flow() -> MagicMock:
    """Mock ReadmeGenerationFlow returning a finished Hello-World result."""
    flow = MagicMock()
    flow.generate_readme = AsyncMock(return_value=make_result())
    return flow


@pytest.fixture()
def mock_resolver() -> MagicMock:
    """Mock IdentityResolver: signed out, every token valid."""
    resolver = MagicMock()
    resolver.configured = True
    resolver.resolve = AsyncMock(return_value=None)
    resolver.validate_token = AsyncMock(return_value=True)
    resolver.authorization_url = MagicMock(
        side_effect=lambda state: f"https://github.com/login/oauth/authorize?state={state}"
    )
    resolver.sign_in = AsyncMock()
    return resolver


# ---------------------------------------------------------------------------
# Application fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
def app(
    settings: Settings,
    storage: MemoryStorage,
    mock_flow: MagicMock,
    mock_resolver: MagicMock,
) -> FastAPI:
    """Create a fresh FastAPI application (no real lifespan side-effects)."""
    return create_app(settings, storage=storage, flow=mock_flow, identity=mock_resolver)


# ---------------------------------------------------------------------------
# Async HTTPX test client
# ---------------------------------------------------------------------------


@pytest.fixture()
async def client(app: FastAPI) -> httpx.AsyncClient:
    """Yield an async HTTPX client wired to the test app."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
