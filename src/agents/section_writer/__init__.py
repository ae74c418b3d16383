from src.agents.section_writer.agent import SectionWriter
from src.agents.section_writer.schemas import (
    API_NOT_APPLICABLE,
    FeatureList,
    GeneratedSections,
    SectionContext,
)

__all__ = [
    "API_NOT_APPLICABLE",
    "FeatureList",
    "GeneratedSections",
    "SectionContext",
    "SectionWriter",
]
