from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from opentelemetry import trace

from src.agents.section_writer import GeneratedSections, SectionContext, SectionWriter
from src.config.telemetry import set_correlation_context
from src.errors import PIPELINE_ERRORS
from src.flows.steps import (
    AI_GENERATION,
    FORMATTING,
    METADATA,
    STEP_NAMES,
    STRUCTURE_ANALYSIS,
    ProgressSink,
    StepSnapshot,
    StepTracker,
)
from src.models.repository import ProjectStructure, RepositoryProfile
from src.models.settings import GenerationSettings
from src.services.assembler import assemble_readme
from src.services.inspector import RepositoryInspector

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class GenerationResult:
    markdown: str
    profile: RepositoryProfile
    structure: ProjectStructure
    steps: StepSnapshot


class GenerationRun:
    """A single README generation run.

    All mutable state (the step sequence) belongs to this object and is only
    published outward as immutable snapshots.
    """

    def __init__(
        self,
        inspector: RepositoryInspector,
        writer: SectionWriter,
        on_progress: ProgressSink | None = None,
    ) -> None:
        self.run_id = uuid.uuid4().hex
        self._inspector = inspector
        self._writer = writer
        self._tracker = StepTracker(on_progress)

    @property
    def steps(self) -> StepSnapshot:
        return self._tracker.snapshot()

    async def _run_step(self, index: int, action: Callable[[], Awaitable[T]]) -> T:
        name = STEP_NAMES[index]
        await self._tracker.start(index)
        set_correlation_context(step_name=name, section="")
        trace.get_current_span().add_event(name)
        try:
            result = await action()
        except Exception as exc:
            message = getattr(exc, "message", None) or str(exc) or type(exc).__name__
            await self._tracker.fail(index, message)
            if isinstance(exc, PIPELINE_ERRORS):
                exc.steps = self._tracker.snapshot()
            logger.warning("Step %r failed: %s", name, message)
            raise
        await self._tracker.complete(index)
        return result

    async def _generate_sections(self, ctx: SectionContext) -> GeneratedSections:
        """Issue every requested section concurrently; unrequested ones are never called."""
        toggles = ctx.settings.include_sections
        requests: dict[str, Awaitable[Any]] = {
            "description": self._writer.generate_description(ctx),
            "features": self._writer.generate_features(ctx),
        }
        if toggles.installation:
            requests["installation"] = self._writer.generate_installation(ctx)
        if toggles.usage:
            requests["usage"] = self._writer.generate_usage(ctx)
        if toggles.contributing:
            requests["contributing"] = self._writer.generate_contributing(ctx)
        if toggles.api:
            requests["api"] = self._writer.generate_api_docs(ctx)

        tasks = [asyncio.ensure_future(request) for request in requests.values()]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

        values = dict(zip(requests, results))
        logger.info("Generated %d section(s): %s", len(values), ", ".join(values))
        return GeneratedSections(
            description=values["description"],
            features=tuple(values["features"]),
            installation=values.get("installation", ""),
            usage=values.get("usage", ""),
            api=values.get("api", ""),
            contributing=values.get("contributing", ""),
        )

    async def execute(
        self,
        url: str,
        settings: GenerationSettings,
        credential: str | None = None,
    ) -> GenerationResult:
        set_correlation_context(run_id=self.run_id, step_name="", section="")
        with tracer.start_as_current_span("readme_generation") as span:
            span.set_attribute("repository.url", url)

            profile = await self._run_step(
                METADATA,
                lambda: self._inspector.fetch_profile(url, credential),
            )

            report = await self._run_step(
                STRUCTURE_ANALYSIS,
                lambda: self._inspector.inspect_structure(url, credential),
            )

            ctx = SectionContext(
                profile=profile,
                structure=report.structure,
                settings=settings,
                manifest=report.manifest,
                existing_readme=report.readme,
            )
            sections = await self._run_step(AI_GENERATION, lambda: self._generate_sections(ctx))

            async def _format() -> str:
                return assemble_readme(profile, report.structure, sections, settings)

            markdown = await self._run_step(FORMATTING, _format)

        logger.info("Generated README for %s (%d chars)", profile.full_name, len(markdown))
        return GenerationResult(
            markdown=markdown,
            profile=profile,
            structure=report.structure,
            steps=self.steps,
        )


class ReadmeGenerationFlow:
    """Conducts metadata -> structure analysis -> AI generation -> formatting.

    Stateless across runs; every call gets its own :class:`GenerationRun`.
    Failures are re-raised after the failing step is marked ``failed``; taxonomy
    errors carry the terminal step sequence on ``exc.steps``. Nothing is retried.
    """

    def __init__(self, inspector: RepositoryInspector, writer: SectionWriter) -> None:
        self._inspector = inspector
        self._writer = writer

    def new_run(self, on_progress: ProgressSink | None = None) -> GenerationRun:
        return GenerationRun(self._inspector, self._writer, on_progress)

    async def generate_readme(
        self,
        url: str,
        settings: GenerationSettings,
        credential: str | None = None,
        on_progress: ProgressSink | None = None,
    ) -> GenerationResult:
        return await self.new_run(on_progress).execute(url, settings, credential)
