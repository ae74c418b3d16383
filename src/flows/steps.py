from __future__ import annotations

import enum
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import Any

logger = logging.getLogger(__name__)


class StepStatus(enum.StrEnum):
    pending = "pending"
    processing = "processing"
    completed = "completed"
    failed = "failed"


METADATA = 0
STRUCTURE_ANALYSIS = 1
AI_GENERATION = 2
FORMATTING = 3

STEP_NAMES: tuple[str, ...] = (
    "Fetching repository metadata",
    "Analyzing project structure",
    "Generating content with AI",
    "Formatting Markdown output",
)


@dataclass(frozen=True)
class ProcessingStep:
    step: str
    status: StepStatus = StepStatus.pending
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"step": self.step, "status": self.status.value}
        if self.message is not None:
            data["message"] = self.message
        return data


StepSnapshot = tuple[ProcessingStep, ...]
ProgressSink = Callable[[StepSnapshot], Awaitable[None] | None]


def initial_steps() -> StepSnapshot:
    return tuple(ProcessingStep(step=name) for name in STEP_NAMES)


class StepTracker:
    """Owns one run's step sequence and publishes a snapshot after every transition.

    Transitions are pending -> processing -> completed | failed, and a step
    may only start once every earlier step has completed.
    """

    def __init__(self, on_progress: ProgressSink | None = None) -> None:
        self._steps: list[ProcessingStep] = list(initial_steps())
        self._on_progress = on_progress

    def snapshot(self) -> StepSnapshot:
        return tuple(self._steps)

    async def start(self, index: int) -> None:
        if self._steps[index].status is not StepStatus.pending:
            raise RuntimeError(f"Step {index} already started")
        if any(step.status is not StepStatus.completed for step in self._steps[:index]):
            raise RuntimeError(f"Step {index} started before earlier steps completed")
        await self._set(index, StepStatus.processing)

    async def complete(self, index: int) -> None:
        await self._set(index, StepStatus.completed)

    async def fail(self, index: int, message: str) -> None:
        await self._set(index, StepStatus.failed, message)

    async def _set(self, index: int, status: StepStatus, message: str | None = None) -> None:
        self._steps[index] = replace(self._steps[index], status=status, message=message)
        await self._emit()

    async def _emit(self) -> None:
        if self._on_progress is None:
            return
        try:
            result = self._on_progress(self.snapshot())
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.warning("Progress sink raised; continuing run", exc_info=True)
