from src.agents.common.prompts import build_style_section

__all__ = ["build_style_section"]
