from __future__ import annotations

from typing import Any


class PermanentError(Exception):
    """Non-retryable errors: the caller must change its input.

    Maps to HTTP 4xx.
    """

    kind = "PermanentError"
    retryable = False

    def __init__(self, message: str) -> None:
        self.message = message
        # Last known step sequence, attached by the generation flow on re-raise.
        self.steps: tuple[Any, ...] = ()
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class TransientError(Exception):
    """Retryable errors: expired credentials, rate limits, upstream outages.

    Maps to HTTP 401/502.
    """

    kind = "TransientError"
    retryable = True

    def __init__(self, message: str) -> None:
        self.message = message
        self.steps: tuple[Any, ...] = ()
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class InvalidUrlError(PermanentError):
    """The repository reference could not be parsed."""

    kind = "InvalidUrl"


class NotFoundError(PermanentError):
    """The repository does not exist or is not visible."""

    kind = "NotFound"


class AccessDeniedError(TransientError):
    """Authorization failed or the API rate limit was hit."""

    kind = "AccessDenied"


class UpstreamError(TransientError):
    """Any other repository-host failure."""

    kind = "UpstreamFailure"


class GenerationError(TransientError):
    """The text-generation provider failed on a requested section."""

    kind = "GenerationFailure"

    def __init__(self, message: str, section: str | None = None) -> None:
        self.section = section
        super().__init__(message)


# Everything the generation pipeline raises on purpose.
PIPELINE_ERRORS = (PermanentError, TransientError)
