from src.flows.readme_generation import GenerationResult, GenerationRun, ReadmeGenerationFlow
from src.flows.steps import STEP_NAMES, ProcessingStep, StepStatus

__all__ = [
    "STEP_NAMES",
    "GenerationResult",
    "GenerationRun",
    "ProcessingStep",
    "ReadmeGenerationFlow",
    "StepStatus",
]
