from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import Any
from urllib.parse import quote, urlencode

import httpx

from src.errors import AccessDeniedError, InvalidUrlError, NotFoundError, UpstreamError
from src.models.repository import ContentEntry
from src.providers.base import RepositoryHost

logger = logging.getLogger(__name__)

_GITHUB_API = "https://api.github.com"
_GITHUB_HOST = "github.com"


def parse_repository_url(url: str, host: str = _GITHUB_HOST) -> tuple[str, str]:
    """Extract (owner, repo) from a repository URL.

    Supports URLs like:
        https://github.com/owner/repo
        https://github.com/owner/repo.git
        https://github.com/owner/repo/tree/main/src
        github.com/owner/repo
    """
    pattern = rf"(?:^|[/@.]){re.escape(host)}/([^/\s?#]+)/([^/\s?#]+)"
    match = re.search(pattern, url.strip()) if isinstance(url, str) else None
    if not match:
        raise InvalidUrlError(f"Invalid GitHub repository URL format: {url!r}")
    owner, repo = match.group(1), match.group(2).removesuffix(".git")
    if not repo:
        raise InvalidUrlError(f"Invalid GitHub repository URL format: {url!r}")
    return owner, repo


def _auth_headers(access_token: str | None) -> dict[str, str]:
    headers: dict[str, str] = {"Accept": "application/vnd.github+json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    return headers


def _sanitise(text: str, access_token: str | None) -> str:
    if access_token:
        return text.replace(access_token, "***")
    return text


def _provider_message(resp: httpx.Response) -> str:
    """Return GitHub's ``message`` field, falling back to the raw body."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text.strip() or f"HTTP {resp.status_code}"
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return resp.text.strip() or f"HTTP {resp.status_code}"


class GitHubProvider(RepositoryHost):
    """GitHub REST implementation of the RepositoryHost interface."""

    def __init__(
        self,
        *,
        api_url: str = _GITHUB_API,
        host: str = _GITHUB_HOST,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._host = host
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._api_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    def parse_url(self, url: str) -> tuple[str, str]:
        return parse_repository_url(url, self._host)

    # ------------------------------------------------------------------ #
    # get_repository
    # ------------------------------------------------------------------ #
    async def get_repository(
        self,
        owner: str,
        repo: str,
        access_token: str | None,
    ) -> dict[str, Any]:
        try:
            async with self._client() as client:
                resp = await client.get(f"/repos/{owner}/{repo}", headers=_auth_headers(access_token))
        except httpx.HTTPError as exc:
            raise UpstreamError(
                f"Failed to fetch repository: {_sanitise(str(exc), access_token)}"
            ) from exc

        if resp.status_code == 404:
            raise NotFoundError(
                "Repository not found. Please check the URL and ensure the repository is public. "
                f"({_provider_message(resp)})"
            )

        if resp.status_code in (401, 403, 429):
            raise AccessDeniedError(
                "Access denied. The repository may be private or you may have exceeded "
                f"API rate limits. ({_sanitise(_provider_message(resp), access_token)})"
            )

        if resp.status_code >= 400:
            raise UpstreamError(
                f"Failed to fetch repository ({resp.status_code}): "
                f"{_sanitise(_provider_message(resp), access_token)}"
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamError("Failed to fetch repository: response was not valid JSON") from exc
        if not isinstance(data, dict):
            raise UpstreamError("Failed to fetch repository: unexpected response shape")
        logger.info("Fetched metadata for %s/%s", owner, repo)
        return data

    # ------------------------------------------------------------------ #
    # list_top_level
    # ------------------------------------------------------------------ #
    async def list_top_level(
        self,
        owner: str,
        repo: str,
        access_token: str | None,
    ) -> list[ContentEntry]:
        try:
            async with self._client() as client:
                resp = await client.get(f"/repos/{owner}/{repo}/contents/", headers=_auth_headers(access_token))
            if resp.status_code >= 400:
                logger.warning(
                    "Failed to list contents of %s/%s (status %d)", owner, repo, resp.status_code
                )
                return []
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Failed to list contents of %s/%s: %s", owner, repo, _sanitise(str(exc), access_token))
            return []

        items = data if isinstance(data, list) else [data]
        entries = [
            ContentEntry(name=item["name"], type=item.get("type", "file"), path=item.get("path", item["name"]))
            for item in items
            if isinstance(item, dict) and item.get("name")
        ]
        logger.info("Listed %d top-level entries for %s/%s", len(entries), owner, repo)
        return entries

    # ------------------------------------------------------------------ #
    # get_file_content
    # ------------------------------------------------------------------ #
    async def get_file_content(
        self,
        owner: str,
        repo: str,
        path: str,
        access_token: str | None,
    ) -> bytes | None:
        try:
            async with self._client() as client:
                resp = await client.get(
                    f"/repos/{owner}/{repo}/contents/{quote(path)}",
                    headers=_auth_headers(access_token),
                )
            if resp.status_code >= 400:
                logger.debug("No %s in %s/%s (status %d)", path, owner, repo, resp.status_code)
                return None
            data = resp.json()
            if not isinstance(data, dict) or "content" not in data:
                return None
            return base64.b64decode(data["content"])
        except (httpx.HTTPError, ValueError, binascii.Error) as exc:
            logger.warning("Failed to read %s from %s/%s: %s", path, owner, repo, _sanitise(str(exc), access_token))
            return None


class GitHubOAuthClient:
    """GitHub OAuth web-flow and authenticated-user calls."""

    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        api_url: str = _GITHUB_API,
        host: str = _GITHUB_HOST,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._api_url = api_url.rstrip("/")
        self._host = host
        self._timeout = timeout
        self._transport = transport

    def authorize_url(self, *, redirect_uri: str, scopes: str, state: str) -> str:
        params = urlencode(
            {
                "client_id": self._client_id,
                "redirect_uri": redirect_uri,
                "scope": scopes,
                "state": state,
            }
        )
        return f"https://{self._host}/login/oauth/authorize?{params}"

    async def exchange_code(self, code: str) -> str:
        """Exchange an authorization code for an access token."""
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(
                    f"https://{self._host}/login/oauth/access_token",
                    headers={"Accept": "application/json"},
                    json={
                        "client_id": self._client_id,
                        "client_secret": self._client_secret,
                        "code": code,
                    },
                )
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamError(f"OAuth token exchange failed: {exc}") from exc

        if not isinstance(data, dict):
            raise UpstreamError(f"OAuth token exchange failed: unexpected response (HTTP {resp.status_code})")
        if resp.status_code >= 400 or data.get("error"):
            description = data.get("error_description") or data.get("error") or f"HTTP {resp.status_code}"
            raise AccessDeniedError(f"OAuth error: {description}")

        token = data.get("access_token")
        if not token:
            raise AccessDeniedError("OAuth error: no access token returned")
        return token

    async def get_authenticated_user(self, access_token: str) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                base_url=self._api_url, timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.get("/user", headers=_auth_headers(access_token))
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Failed to fetch GitHub user: {_sanitise(str(exc), access_token)}") from exc

        if resp.status_code in (401, 403):
            raise AccessDeniedError(f"GitHub rejected the access token: {_provider_message(resp)}")
        if resp.status_code >= 400:
            raise UpstreamError(f"Failed to fetch GitHub user ({resp.status_code}): {_provider_message(resp)}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamError("Failed to fetch GitHub user: response was not valid JSON") from exc
        if not isinstance(data, dict) or data.get("id") is None:
            raise UpstreamError("Failed to fetch GitHub user: unexpected response shape")
        return data

    async def get_primary_email(self, access_token: str) -> str | None:
        """Return the primary email, or ``None`` if the email scope was not granted."""
        try:
            async with httpx.AsyncClient(
                base_url=self._api_url, timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.get("/user/emails", headers=_auth_headers(access_token))
            if resp.status_code >= 400:
                logger.warning("Could not fetch user email (status %d): email scope not granted", resp.status_code)
                return None
            emails = resp.json()
        except (httpx.HTTPError, ValueError):
            logger.warning("Could not fetch user email", exc_info=True)
            return None

        for entry in emails if isinstance(emails, list) else []:
            if isinstance(entry, dict) and entry.get("primary"):
                return entry.get("email")
        return None
