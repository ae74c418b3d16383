from __future__ import annotations

from fastapi import Depends, Request

from src.database.storage import Storage
from src.flows.readme_generation import ReadmeGenerationFlow
from src.services.identity import IdentityResolver, ResolvedIdentity

SESSION_USER_KEY = "user_id"
SESSION_STATE_KEY = "oauth_state"


def get_storage(request: Request) -> Storage:
    """Provide the storage backend chosen when the app was built."""
    return request.app.state.storage


def get_flow(request: Request) -> ReadmeGenerationFlow:
    """Provide the README generation flow."""
    return request.app.state.flow


def get_identity_resolver(request: Request) -> IdentityResolver:
    """Provide the identity resolver."""
    return request.app.state.identity


async def get_current_identity(
    request: Request,
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> ResolvedIdentity | None:
    """Resolve the session's signed-in user, or ``None`` when signed out."""
    return await resolver.resolve(request.session.get(SESSION_USER_KEY))
