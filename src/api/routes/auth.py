from __future__ import annotations

import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse

from src.api.dependencies import (
    SESSION_STATE_KEY,
    SESSION_USER_KEY,
    get_current_identity,
    get_identity_resolver,
)
from src.api.schemas.users import LogoutResponse, UserResponse
from src.errors import PIPELINE_ERRORS
from src.services.identity import IdentityResolver, ResolvedIdentity

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.get("/auth/github")
async def github_login(
    request: Request,
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> RedirectResponse:
    if not resolver.configured:
        raise HTTPException(status_code=503, detail="GitHub OAuth is not configured")
    state = secrets.token_hex(16)
    request.session[SESSION_STATE_KEY] = state
    return RedirectResponse(resolver.authorization_url(state), status_code=302)


@router.get("/auth/github/callback", response_model=None)
async def github_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> RedirectResponse | JSONResponse:
    expected_state = request.session.pop(SESSION_STATE_KEY, None)
    if not code or not state or state != expected_state:
        return JSONResponse(status_code=400, content={"detail": "Invalid OAuth callback"})

    try:
        user = await resolver.sign_in(code)
    except PIPELINE_ERRORS as exc:
        logger.warning("OAuth callback failed: %s", exc.message)
        return RedirectResponse("/?auth=error", status_code=302)

    request.session[SESSION_USER_KEY] = str(user.id)
    logger.info("Signed in GitHub user %s", user.github_username)
    return RedirectResponse("/?auth=success", status_code=302)


@router.post("/api/logout", response_model=LogoutResponse)
async def logout(request: Request) -> LogoutResponse:
    request.session.clear()
    return LogoutResponse()


@router.get("/api/user", response_model=UserResponse)
async def current_user(
    identity: ResolvedIdentity | None = Depends(get_current_identity),
) -> UserResponse:
    if identity is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return UserResponse.model_validate(identity.user)
