from src.agents.section_writer import GeneratedSections, SectionContext, SectionWriter

__all__ = ["GeneratedSections", "SectionContext", "SectionWriter"]
