from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from src.agents.section_writer import SectionWriter
from src.api.schemas.common import error_response, error_status
from src.config.settings import DEFAULT_SESSION_SECRET, Settings, get_settings
from src.database.storage import Storage, build_storage
from src.errors import PermanentError, TransientError
from src.flows.readme_generation import ReadmeGenerationFlow
from src.providers.base import get_provider
from src.providers.github import GitHubOAuthClient
from src.providers.llm import AdkTextGenerator
from src.services.identity import IdentityResolver
from src.services.inspector import RepositoryInspector

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: prepare storage on startup, release it on shutdown."""
    await app.state.storage.initialize()
    yield
    await app.state.storage.close()


def build_flow(settings: Settings) -> ReadmeGenerationFlow:
    """Wire the GitHub inspector and ADK section writer into a generation flow."""
    host = get_provider(
        "github",
        api_url=settings.GITHUB_API_URL,
        host=settings.GITHUB_HOST,
        timeout=settings.GITHUB_TIMEOUT,
    )
    inspector = RepositoryInspector(host, fallback_token=settings.GITHUB_TOKEN)
    writer = SectionWriter(AdkTextGenerator(app_name=settings.OTEL_SERVICE_NAME), settings)
    return ReadmeGenerationFlow(inspector, writer)


def build_identity_resolver(storage: Storage, settings: Settings) -> IdentityResolver:
    oauth = GitHubOAuthClient(
        client_id=settings.GITHUB_CLIENT_ID,
        client_secret=settings.GITHUB_CLIENT_SECRET,
        api_url=settings.GITHUB_API_URL,
        host=settings.GITHUB_HOST,
        timeout=settings.GITHUB_TIMEOUT,
    )
    return IdentityResolver(storage, oauth, settings)


def create_app(
    settings: Settings | None = None,
    *,
    storage: Storage | None = None,
    flow: ReadmeGenerationFlow | None = None,
    identity: IdentityResolver | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Collaborators not passed in are built from *settings*.
    """
    settings = settings or get_settings()
    storage = storage or build_storage(settings)

    app = FastAPI(
        title="README Forge API",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage = storage
    app.state.flow = flow or build_flow(settings)
    app.state.identity = identity or build_identity_resolver(storage, settings)

    if settings.SESSION_SECRET == DEFAULT_SESSION_SECRET:
        logger.warning("SESSION_SECRET is not set; session cookies are signed with the default key")
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET,
        max_age=settings.SESSION_MAX_AGE,
        same_site="lax",
    )

    # Exception handlers
    @app.exception_handler(TransientError)
    async def transient_error_handler(
        request: Request, exc: TransientError
    ) -> JSONResponse:
        logger.warning("Request failed: %s", exc)
        return JSONResponse(
            status_code=error_status(exc),
            content=error_response(exc).model_dump(),
        )

    @app.exception_handler(PermanentError)
    async def permanent_error_handler(
        request: Request, exc: PermanentError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=error_status(exc),
            content=error_response(exc).model_dump(),
        )

    from src.api.routes.auth import router as auth_router
    from src.api.routes.generations import router as generations_router
    from src.api.routes.health import router as health_router

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(generations_router)

    return app
