"""Maps a session identity to the credential used for repository reads."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from src.config.settings import Settings
from src.database.models.user import User
from src.database.storage import Storage
from src.errors import AccessDeniedError
from src.providers.github import GitHubOAuthClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GitHubUser:
    github_id: str
    username: str
    avatar_url: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class ResolvedIdentity:
    user: User
    credential: str | None


class IdentityResolver:
    """GitHub OAuth sign-in and session identity lookup.

    A resolved identity's credential takes precedence over the server-wide
    fallback token; without a session the pipeline runs anonymously.
    """

    def __init__(self, storage: Storage, oauth_client: GitHubOAuthClient, settings: Settings) -> None:
        self._storage = storage
        self._oauth = oauth_client
        self._settings = settings

    @property
    def configured(self) -> bool:
        return bool(self._settings.GITHUB_CLIENT_ID and self._settings.GITHUB_CLIENT_SECRET)

    def authorization_url(self, state: str) -> str:
        return self._oauth.authorize_url(
            redirect_uri=self._settings.oauth_redirect_uri,
            scopes=self._settings.OAUTH_SCOPES,
            state=state,
        )

    async def exchange_code(self, code: str) -> str:
        return await self._oauth.exchange_code(code)

    async def fetch_github_user(self, access_token: str) -> GitHubUser:
        payload = await self._oauth.get_authenticated_user(access_token)
        email = payload.get("email")
        if not email:
            email = await self._oauth.get_primary_email(access_token)
        return GitHubUser(
            github_id=str(payload["id"]),
            username=payload.get("login") or "",
            avatar_url=payload.get("avatar_url"),
            email=email,
        )

    async def find_or_create_user(self, github_user: GitHubUser, access_token: str) -> User:
        existing = await self._storage.get_user_by_github_id(github_user.github_id)
        if existing is not None:
            updated = await self._storage.update_user(
                existing.id,
                github_username=github_user.username,
                github_access_token=access_token,
                avatar_url=github_user.avatar_url,
                email=github_user.email,
            )
            logger.info("Updated GitHub user %s", github_user.username)
            return updated or existing

        user = await self._storage.create_user(
            github_id=github_user.github_id,
            github_username=github_user.username,
            github_access_token=access_token,
            avatar_url=github_user.avatar_url,
            email=github_user.email,
        )
        logger.info("Created GitHub user %s", github_user.username)
        return user

    async def sign_in(self, code: str) -> User:
        """Complete the OAuth callback: exchange, fetch the profile, then upsert."""
        access_token = await self.exchange_code(code)
        github_user = await self.fetch_github_user(access_token)
        return await self.find_or_create_user(github_user, access_token)

    async def resolve(self, user_id: str | uuid.UUID | None) -> ResolvedIdentity | None:
        """Return the identity stored in a session, or ``None`` when there is none."""
        if not user_id:
            return None
        try:
            key = user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))
        except ValueError:
            logger.warning("Ignoring malformed session user id")
            return None
        user = await self._storage.get_user_by_id(key)
        if user is None:
            return None
        return ResolvedIdentity(user=user, credential=user.github_access_token or None)

    async def validate_token(self, access_token: str) -> bool:
        """Whether GitHub still accepts *access_token*.

        Only an explicit rejection counts as invalid; upstream failures propagate.
        """
        try:
            await self._oauth.get_authenticated_user(access_token)
        except AccessDeniedError:
            return False
        return True
