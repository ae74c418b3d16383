from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse, StreamingResponse

from src.api.dependencies import (
    get_current_identity,
    get_flow,
    get_identity_resolver,
    get_storage,
)
from src.api.schemas.common import error_response, error_status
from src.api.schemas.generations import (
    GenerateReadmeRequest,
    GenerateReadmeResponse,
    ProcessingStepResponse,
    ReadmeGenerationResponse,
    ValidateRepositoryRequest,
    ValidateRepositoryResponse,
)
from src.database.models.readme_generation import ReadmeGeneration
from src.database.storage import Storage
from src.errors import PIPELINE_ERRORS, InvalidUrlError
from src.flows.readme_generation import GenerationResult, ReadmeGenerationFlow
from src.flows.steps import StepSnapshot
from src.models.settings import GenerationSettings
from src.providers.github import parse_repository_url
from src.services.identity import IdentityResolver, ResolvedIdentity

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generations"])

TOKEN_EXPIRED_DETAIL = (
    "Your GitHub authentication has expired. "
    "Please sign in again to access private repositories."
)


async def _session_credential(
    request: Request,
    identity: ResolvedIdentity | None,
    resolver: IdentityResolver,
) -> str | None:
    """Return the signed-in user's token, rejecting one GitHub no longer accepts."""
    if identity is None or not identity.credential:
        return None
    if not await resolver.validate_token(identity.credential):
        request.session.clear()
        raise HTTPException(status_code=401, detail=TOKEN_EXPIRED_DETAIL)
    return identity.credential


async def _persist(
    storage: Storage,
    repository_url: str,
    result: GenerationResult,
    settings: GenerationSettings,
    identity: ResolvedIdentity | None,
) -> ReadmeGeneration:
    return await storage.create_generation(
        user_id=identity.user.id if identity else None,
        repository_url=repository_url,
        repository_name=result.profile.name,
        repository_owner=result.profile.owner,
        markdown_content=result.markdown,
        repository_data={**result.profile.to_dict(), "structure": result.structure.to_dict()},
        generation_settings=settings.model_dump(mode="json"),
        is_private_repo=result.profile.private,
    )


def _steps_payload(steps: StepSnapshot) -> list[ProcessingStepResponse]:
    return [ProcessingStepResponse(**step.to_dict()) for step in steps]


def _build_response(record: ReadmeGeneration, result: GenerationResult) -> GenerateReadmeResponse:
    return GenerateReadmeResponse(
        id=record.id,
        markdown_content=result.markdown,
        repository_data=record.repository_data,
        processing_steps=_steps_payload(result.steps),
    )


@router.post("/api/generate-readme", response_model=GenerateReadmeResponse)
async def generate_readme(
    body: GenerateReadmeRequest,
    request: Request,
    flow: ReadmeGenerationFlow = Depends(get_flow),
    storage: Storage = Depends(get_storage),
    resolver: IdentityResolver = Depends(get_identity_resolver),
    identity: ResolvedIdentity | None = Depends(get_current_identity),
) -> GenerateReadmeResponse:
    credential = await _session_credential(request, identity, resolver)
    settings = GenerationSettings.from_payload(body.settings)
    result = await flow.generate_readme(body.repository_url, settings, credential)
    record = await _persist(storage, body.repository_url, result, settings, identity)
    logger.info("Stored README generation %s for %s", record.id, result.profile.full_name)
    return _build_response(record, result)


@router.post("/api/generate-readme/stream")
async def generate_readme_stream(
    body: GenerateReadmeRequest,
    request: Request,
    flow: ReadmeGenerationFlow = Depends(get_flow),
    storage: Storage = Depends(get_storage),
    resolver: IdentityResolver = Depends(get_identity_resolver),
    identity: ResolvedIdentity | None = Depends(get_current_identity),
) -> StreamingResponse:
    """Stream step snapshots as NDJSON, then one ``result`` or ``error`` line."""
    credential = await _session_credential(request, identity, resolver)
    settings = GenerationSettings.from_payload(body.settings)
    queue: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue()

    async def on_progress(steps: StepSnapshot) -> None:
        await queue.put(
            {"event": "progress", "steps": [step.to_dict() for step in steps]}
        )

    async def worker() -> None:
        try:
            result = await flow.generate_readme(
                body.repository_url, settings, credential, on_progress=on_progress
            )
            record = await _persist(storage, body.repository_url, result, settings, identity)
            await queue.put(
                {"event": "result", "data": _build_response(record, result).model_dump(mode="json")}
            )
        except PIPELINE_ERRORS as exc:
            await queue.put(
                {"event": "error", "status": error_status(exc), **error_response(exc).model_dump()}
            )
        except Exception:
            # The 200 header is already sent; report the failure in-band.
            logger.exception("README generation stream failed")
            await queue.put({"event": "error", "status": 500, "detail": "Internal server error"})
        finally:
            await queue.put(None)

    async def events() -> AsyncGenerator[str, None]:
        task = asyncio.create_task(worker())
        try:
            while True:
                event = await queue.get()
                if event is None:
                    break
                yield json.dumps(event) + "\n"
        finally:
            if not task.done():
                task.cancel()

    return StreamingResponse(events(), media_type="application/x-ndjson")


@router.get("/api/readme/{generation_id}", response_model=ReadmeGenerationResponse)
async def get_readme(
    generation_id: UUID,
    storage: Storage = Depends(get_storage),
) -> ReadmeGenerationResponse:
    record = await storage.get_generation(generation_id)
    if record is None:
        raise HTTPException(status_code=404, detail="README generation not found")
    return ReadmeGenerationResponse.model_validate(record)


@router.get("/api/recent-generations", response_model=list[ReadmeGenerationResponse])
async def recent_generations(
    limit: int = Query(10, ge=1, le=100),
    storage: Storage = Depends(get_storage),
    identity: ResolvedIdentity | None = Depends(get_current_identity),
) -> list[ReadmeGenerationResponse]:
    rows = await storage.list_recent_generations(
        limit=limit,
        user_id=identity.user.id if identity else None,
    )
    return [ReadmeGenerationResponse.model_validate(row) for row in rows]


@router.get("/api/download/{generation_id}")
async def download_readme(
    generation_id: UUID,
    storage: Storage = Depends(get_storage),
) -> Response:
    record = await storage.get_generation(generation_id)
    if record is None:
        raise HTTPException(status_code=404, detail="README generation not found")
    filename = f"{record.repository_name}-README.md".replace('"', "")
    return Response(
        content=record.markdown_content,
        media_type="text/markdown",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/api/validate-repository", response_model=ValidateRepositoryResponse)
async def validate_repository(
    body: ValidateRepositoryRequest,
    request: Request,
) -> ValidateRepositoryResponse | JSONResponse:
    """Check the URL shape only; no network calls are made."""
    try:
        parse_repository_url(body.repository_url, request.app.state.settings.GITHUB_HOST)
    except InvalidUrlError:
        invalid = ValidateRepositoryResponse(
            valid=False,
            error="Invalid GitHub URL format. Expected: https://github.com/username/repository",
        )
        return JSONResponse(status_code=400, content=invalid.model_dump())
    return ValidateRepositoryResponse(valid=True)
