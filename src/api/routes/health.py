from __future__ import annotations

from datetime import UTC, datetime

import httpx
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from src.api.dependencies import get_storage
from src.database.storage import Storage

router = APIRouter(tags=["health"])


class DependencyHealth(BaseModel):
    status: str  # "healthy" or "unhealthy"
    message: str | None = None


class HealthResponse(BaseModel):
    status: str  # "healthy", "degraded", or "unhealthy"
    dependencies: dict[str, DependencyHealth]
    timestamp: datetime


async def _check_storage(storage: Storage) -> DependencyHealth:
    try:
        await storage.ping()
        return DependencyHealth(status="healthy")
    except Exception as exc:
        return DependencyHealth(status="unhealthy", message=str(exc))


async def _check_github(api_url: str) -> DependencyHealth:
    """Best-effort check: GitHub is non-critical for the service to answer."""
    try:
        async with httpx.AsyncClient(timeout=5.0) as client:
            resp = await client.get(f"{api_url.rstrip('/')}/rate_limit")
            if resp.status_code < 500:
                return DependencyHealth(status="healthy")
            return DependencyHealth(
                status="unhealthy", message=f"HTTP {resp.status_code}"
            )
    except Exception as exc:
        return DependencyHealth(status="unhealthy", message=str(exc))


@router.get("/health", response_model=HealthResponse)
async def health_check(
    request: Request,
    storage: Storage = Depends(get_storage),
) -> HealthResponse:
    db = await _check_storage(storage)
    github = await _check_github(request.app.state.settings.GITHUB_API_URL)

    deps = {"storage": db, "github": github}

    if db.status == "healthy" and github.status == "healthy":
        status = "healthy"
    elif db.status == "healthy":
        status = "degraded"
    else:
        status = "unhealthy"

    return HealthResponse(
        status=status,
        dependencies=deps,
        timestamp=datetime.now(UTC),
    )
