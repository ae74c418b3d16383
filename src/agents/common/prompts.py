from __future__ import annotations

_TEMPLATE_GUIDANCE: dict[str, str] = {
    "opensource": "Address an open-source community: welcome newcomers and highlight how to get involved",
    "company": "Write for an internal engineering audience: emphasise ownership, setup, and conventions",
    "personal": "Write for a personal project: keep it approachable and highlight what was learned or built",
}


def build_style_section(
    style: str = "professional",
    length: str = "standard",
    template: str = "default",
    markdown_output: bool = True,
) -> str:
    """Build the style section appended to every section's system prompt.

    Args:
        style: Writing style ("professional", "casual", "technical").
        length: One of "minimal", "standard", "comprehensive".
        template: README template identifier.
        markdown_output: Whether the section is free Markdown text.

    Returns:
        Formatted string to append to a system prompt.
    """
    parts: list[str] = []

    parts.append("\n\n## Writing Style")
    parts.append(f"- Style: {style}")
    parts.append(f"- Length: {length}")

    if length == "minimal":
        parts.append("- Keep it brief and focus on essentials only")
    elif length == "comprehensive":
        parts.append("- Be thorough and include examples where they help")

    guidance = _TEMPLATE_GUIDANCE.get(template)
    if guidance:
        parts.append(f"- Template: {template}. {guidance}")

    if markdown_output:
        parts.append("- Output Markdown only, without a top-level heading")

    return "\n".join(parts)
