from __future__ import annotations

from src.agents.common.prompts import build_style_section
from src.agents.section_writer.schemas import SectionContext

SECTION_WRITER_SYSTEM_PROMPT = """You are an expert technical writer producing one section of a GitHub README.

Write only the section body you are asked for. Base every statement on the repository details provided and do not invent commands, files, or APIs that the details do not support.
"""

FEATURES_SYSTEM_PROMPT = """You are an expert technical writer. Generate a list of key features for a software project.
Respond with a JSON object whose "features" field is an array of strings, each string one feature.
Make features specific, technical, and valuable to users.
Limit to 5-8 key features.
"""

FEATURES_FALLBACK_INSTRUCTION = 'Return as a simple list with each feature on a new line, starting with "- "'

FEATURE_MARKER = "- "

_EXISTING_README_LIMIT = 1000
_API_README_LIMIT = 2000


def _join(values: list[str] | tuple[str, ...], empty: str = "None") -> str:
    return ", ".join(values) if values else empty


def build_system_prompt(ctx: SectionContext, *, markdown_output: bool = True) -> str:
    """Section writer system prompt with the run's style preferences appended."""
    base = SECTION_WRITER_SYSTEM_PROMPT if markdown_output else FEATURES_SYSTEM_PROMPT
    return base + build_style_section(
        ctx.settings.style,
        ctx.settings.length,
        ctx.settings.template,
        markdown_output=markdown_output,
    )


def build_description_message(ctx: SectionContext) -> str:
    profile, structure, settings = ctx.profile, ctx.structure, ctx.settings
    return f"""Generate a {settings.style} description for a GitHub repository with the following details:

Repository: {profile.name}
Current Description: {profile.description or "No description provided"}
Language: {profile.language or "Not specified"}
Topics: {_join(profile.topics)}
Technologies: {_join(structure.sorted_technologies)}
Framework: {structure.framework or "None"}

Style: {settings.style}
Length: {settings.length}

Please create a clear, engaging description that explains what this project does, its main purpose, and key benefits."""


def build_features_message(ctx: SectionContext) -> str:
    profile, structure = ctx.profile, ctx.structure
    return f"""Generate key features for this repository:

Repository: {profile.name}
Description: {profile.description or "No description"}
Language: {profile.language or "Not specified"}
Technologies: {_join(structure.sorted_technologies)}
Framework: {structure.framework or "None"}
Has Tests: {structure.has_tests}
Has Documentation: {structure.has_documentation}

Style: {ctx.settings.style}"""


def build_features_fallback_message(ctx: SectionContext) -> str:
    return f"{build_features_message(ctx)}\n\n{FEATURES_FALLBACK_INSTRUCTION}"


def build_installation_message(ctx: SectionContext) -> str:
    profile, structure = ctx.profile, ctx.structure
    return f"""Generate installation instructions for this repository:

Repository: {profile.name}
Clone URL: {profile.canonical_url}.git
Language: {profile.language or "Not specified"}
Build System: {structure.build_system.value}
Framework: {structure.framework or "None"}
Technologies: {_join(structure.sorted_technologies)}
Package manifest exists: {ctx.manifest is not None}

Generate clear, step-by-step installation instructions. Include:
1. Prerequisites (if any)
2. Clone command
3. Install dependencies command
4. Any setup/configuration steps
5. How to run the project

Make instructions beginner-friendly but concise."""


def build_usage_message(ctx: SectionContext) -> str:
    profile, structure = ctx.profile, ctx.structure
    scripts = (ctx.manifest or {}).get("scripts")
    script_names = sorted(scripts) if isinstance(scripts, dict) else []
    readme_excerpt = ctx.existing_readme[:_EXISTING_README_LIMIT] if ctx.existing_readme else "None"
    return f"""Generate usage examples for this repository:

Repository: {profile.name}
Description: {profile.description or "No description"}
Language: {profile.language or "Not specified"}
Framework: {structure.framework or "None"}
Technologies: {_join(structure.sorted_technologies)}
Package scripts: {_join(script_names)}
Existing README content (for reference): {readme_excerpt}

Generate practical usage examples including:
1. Basic usage/getting started
2. Code examples (if it's a library/framework)
3. Available commands/scripts
4. Configuration options (if applicable)

Make examples clear and immediately actionable."""


def build_api_message(ctx: SectionContext) -> str:
    profile, structure = ctx.profile, ctx.structure
    readme_excerpt = ctx.existing_readme[:_API_README_LIMIT] if ctx.existing_readme else "None"
    return f"""Generate API documentation section for this repository:

Repository: {profile.name}
Technologies: {_join(structure.sorted_technologies)}
Framework: {structure.framework or "None"}
Existing README (for reference): {readme_excerpt}

If this is a library, API, or framework, generate:
1. Main API endpoints or methods
2. Parameters and return values
3. Example requests/responses
4. Authentication (if applicable)

If not an API project, generate relevant interface documentation instead."""


def build_contributing_message(ctx: SectionContext) -> str:
    profile, structure = ctx.profile, ctx.structure
    return f"""Generate contributing guidelines for this repository:

Repository: {profile.name}
Language: {profile.language or "Not specified"}
Has Tests: {structure.has_tests}
Technologies: {_join(structure.sorted_technologies)}
Build System: {structure.build_system.value}
Style: {ctx.settings.style}

Generate contributing guidelines that include:
1. How to report issues
2. How to submit pull requests
3. Development setup
4. Coding standards
5. Testing requirements (if tests exist)
6. Review process

Keep it welcoming but clear about expectations."""
