from __future__ import annotations

import json
import logging

from pydantic import BaseModel

from src.agents.section_writer.prompts import (
    FEATURE_MARKER,
    build_api_message,
    build_contributing_message,
    build_description_message,
    build_features_fallback_message,
    build_features_message,
    build_installation_message,
    build_system_prompt,
    build_usage_message,
)
from src.agents.section_writer.schemas import (
    API_NOT_APPLICABLE,
    MAX_FEATURES,
    FeatureList,
    SectionContext,
)
from src.config.settings import Settings, get_settings
from src.config.telemetry import set_correlation_context
from src.errors import GenerationError
from src.providers.llm import TextGenerator

logger = logging.getLogger(__name__)


def _strip_code_fence(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines)
    return text


def _parse_feature_list(raw: str) -> list[str]:
    """Parse a schema-constrained features response.

    Accepts the ``{"features": [...]}`` object or a bare JSON array.
    Raises ``ValueError`` (or a pydantic ``ValidationError``) on anything else.
    """
    data = json.loads(_strip_code_fence(raw))
    if isinstance(data, list):
        data = {"features": data}
    parsed = FeatureList.model_validate(data)
    return [feature.strip() for feature in parsed.features if feature.strip()][:MAX_FEATURES]


def _parse_feature_lines(raw: str) -> list[str]:
    features = [
        line.strip()[len(FEATURE_MARKER):].strip()
        for line in raw.split("\n")
        if line.strip().startswith(FEATURE_MARKER)
    ]
    return features[:MAX_FEATURES]


class SectionWriter:
    """Generates the prose for each optional README section.

    Every method issues at most one request per strategy to the text
    generator; callers decide which sections to request at all.
    """

    def __init__(self, generator: TextGenerator, settings: Settings | None = None) -> None:
        self._generator = generator
        self._settings = settings or get_settings()

    async def _generate(
        self,
        section: str,
        prompt: str,
        *,
        system_instruction: str,
        model: str | None = None,
        output_schema: type[BaseModel] | None = None,
    ) -> str:
        set_correlation_context(section=section)
        try:
            text = await self._generator.generate(
                prompt,
                model=model or self._settings.get_section_model(section),
                system_instruction=system_instruction,
                output_schema=output_schema,
            )
        except GenerationError:
            raise
        except Exception as exc:
            logger.warning("Generation failed for section %s", section, exc_info=True)
            raise GenerationError(f"Failed to generate {section}: {exc}", section=section) from exc
        return text or ""

    async def generate_description(self, ctx: SectionContext) -> str:
        return await self._generate(
            "description",
            build_description_message(ctx),
            system_instruction=build_system_prompt(ctx),
        )

    async def generate_features(self, ctx: SectionContext) -> list[str]:
        """Structured list first, then a marker-per-line free-text fallback."""
        try:
            raw = await self._generate(
                "features",
                build_features_message(ctx),
                system_instruction=build_system_prompt(ctx, markdown_output=False),
                output_schema=FeatureList,
            )
            if raw.strip():
                return _parse_feature_list(raw)
        except Exception:
            logger.warning(
                "Failed to generate structured features, falling back to text parsing",
                exc_info=True,
            )

        raw = await self._generate(
            "features",
            build_features_fallback_message(ctx),
            system_instruction=build_system_prompt(ctx),
            model=self._settings.DEFAULT_MODEL,
        )
        return _parse_feature_lines(raw)

    async def generate_installation(self, ctx: SectionContext) -> str:
        return await self._generate(
            "installation",
            build_installation_message(ctx),
            system_instruction=build_system_prompt(ctx),
        )

    async def generate_usage(self, ctx: SectionContext) -> str:
        return await self._generate(
            "usage",
            build_usage_message(ctx),
            system_instruction=build_system_prompt(ctx),
        )

    async def generate_api_docs(self, ctx: SectionContext) -> str:
        if not ctx.existing_readme and not ctx.structure.technologies:
            logger.info("Skipping API documentation: no README and no detected technology")
            return API_NOT_APPLICABLE
        return await self._generate(
            "api",
            build_api_message(ctx),
            system_instruction=build_system_prompt(ctx),
        )

    async def generate_contributing(self, ctx: SectionContext) -> str:
        return await self._generate(
            "contributing",
            build_contributing_message(ctx),
            system_instruction=build_system_prompt(ctx),
        )
