from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from src.errors import PermanentError, TransientError


class ErrorResponse(BaseModel):
    """Error body returned for every pipeline failure."""

    detail: str
    kind: str
    retryable: bool
    processing_steps: list[dict[str, Any]] = Field(default_factory=list)


# Unknown kinds fall back to the base class defaults (400 / 502).
_STATUS_BY_KIND: dict[str, int] = {
    "InvalidUrl": 400,
    "NotFound": 404,
    "AccessDenied": 401,
    "UpstreamFailure": 502,
    "GenerationFailure": 502,
}


def error_status(exc: PermanentError | TransientError) -> int:
    default = 400 if isinstance(exc, PermanentError) else 502
    return _STATUS_BY_KIND.get(exc.kind, default)


def error_response(exc: PermanentError | TransientError) -> ErrorResponse:
    return ErrorResponse(
        detail=exc.message,
        kind=exc.kind,
        retryable=exc.retryable,
        processing_steps=[step.to_dict() for step in exc.steps],
    )
