"""User-chosen generation settings.

Settings are validated once at the system boundary. Anything missing or
unrecognised falls back to its documented default, so the pipeline only ever
sees complete values.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

ContentStyle = Literal["professional", "casual", "technical"]
ContentLength = Literal["minimal", "standard", "comprehensive"]
TemplateId = Literal["default", "opensource", "company", "personal"]


class _LenientModel(BaseModel):
    """Frozen model whose invalid field values fall back to the field default."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @field_validator("*", mode="wrap")
    @classmethod
    def _fallback_to_default(cls, value: Any, handler: Any, info: ValidationInfo) -> Any:
        try:
            return handler(value)
        except ValidationError:
            field = cls.model_fields[info.field_name]
            default = field.get_default(call_default_factory=True)
            logger.warning(
                "Unrecognised value %r for setting %r; using default %r",
                value,
                info.field_name,
                default,
            )
            return default


class SectionToggles(_LenientModel):
    installation: StrictBool = True
    usage: StrictBool = True
    contributing: StrictBool = True
    api: StrictBool = False


class BadgeToggles(_LenientModel):
    build: StrictBool = True
    version: StrictBool = True
    downloads: StrictBool = False

    @property
    def any_enabled(self) -> bool:
        return self.build or self.version or self.downloads


class GenerationSettings(_LenientModel):
    style: ContentStyle = "professional"
    length: ContentLength = "comprehensive"
    include_sections: SectionToggles = Field(default_factory=SectionToggles)
    include_badges: BadgeToggles = Field(default_factory=BadgeToggles)
    template: TemplateId = "default"

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None) -> GenerationSettings:
        """Build complete settings from a partial, possibly malformed payload."""
        if not isinstance(payload, Mapping):
            if payload is not None:
                logger.warning("Ignoring non-object settings payload of type %s", type(payload).__name__)
            return cls()
        return cls.model_validate(dict(payload))
