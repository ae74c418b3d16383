from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from google.adk.agents import LlmAgent
from google.adk.models.lite_llm import LiteLlm
from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai import types
from pydantic import BaseModel

logger = logging.getLogger(__name__)

_LITELLM_PREFIXES = ("vertex_ai/", "azure/", "bedrock/", "openai/", "anthropic/")


def get_model(model_name: str) -> str | LiteLlm:
    """Resolve a configured model name into something an ADK agent accepts.

    ``gemini-*`` names are native to ADK; provider-prefixed names go through LiteLLM.
    """
    if model_name.startswith("gemini-"):
        return model_name

    if any(model_name.startswith(p) for p in _LITELLM_PREFIXES):
        return LiteLlm(model=model_name)

    raise ValueError(
        f"Unrecognized model format: {model_name!r}. "
        f"Expected 'gemini-*' or a provider-prefixed string "
        f"({', '.join(_LITELLM_PREFIXES)})."
    )


@dataclass
class TokenUsage:
    """Token usage for a single generation call."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0

    def add(self, other: TokenUsage) -> None:
        self.input_tokens += other.input_tokens
        self.output_tokens += other.output_tokens
        self.total_tokens += other.total_tokens


class TextGenerator(ABC):
    """Black-box text generation provider."""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        *,
        model: str,
        system_instruction: str | None = None,
        output_schema: type[BaseModel] | None = None,
    ) -> str:
        """Return the generated text (JSON text when *output_schema* is given).

        Returns ``""`` when the provider produced no text. Provider failures
        propagate as exceptions.
        """


def _extract_token_usage(event: Any) -> TokenUsage:
    usage = TokenUsage()
    meta = getattr(event, "usage_metadata", None)
    if meta is not None:
        usage.input_tokens = meta.prompt_token_count or 0
        usage.output_tokens = meta.candidates_token_count or 0
        usage.total_tokens = meta.total_token_count or 0
    return usage


async def _run_agent(
    runner: Runner,
    *,
    user_id: str,
    session_id: str,
    message_text: str,
    agent_name: str,
) -> tuple[str, TokenUsage]:
    """Run an agent via its runner and collect the text response + token usage."""
    content = types.Content(
        role="user",
        parts=[types.Part(text=message_text)],
    )
    response_parts: list[str] = []
    token_usage = TokenUsage()

    async for event in runner.run_async(
        user_id=user_id,
        session_id=session_id,
        new_message=content,
    ):
        token_usage.add(_extract_token_usage(event))

        if event.author == agent_name and event.content and event.content.parts:
            for part in event.content.parts:
                if part.text:
                    response_parts.append(part.text)

    return "".join(response_parts), token_usage


class AdkTextGenerator(TextGenerator):
    """Single-turn generation through a Google ADK ``LlmAgent``.

    Each call gets a throwaway in-memory session so no history leaks between
    sections of the same run.
    """

    def __init__(self, app_name: str = "readme-forge") -> None:
        self._app_name = app_name
        self._session_service = InMemorySessionService()

    async def generate(
        self,
        prompt: str,
        *,
        model: str,
        system_instruction: str | None = None,
        output_schema: type[BaseModel] | None = None,
    ) -> str:
        agent = LlmAgent(
            name="section_writer",
            model=get_model(model),
            instruction=system_instruction or "",
            output_schema=output_schema,
        )
        runner = Runner(
            agent=agent,
            app_name=self._app_name,
            session_service=self._session_service,
        )

        user_id = self._app_name
        session_id = f"section-{uuid.uuid4().hex}"
        await self._session_service.create_session(
            app_name=self._app_name,
            user_id=user_id,
            session_id=session_id,
        )
        try:
            text, usage = await _run_agent(
                runner,
                user_id=user_id,
                session_id=session_id,
                message_text=prompt,
                agent_name=agent.name,
            )
        finally:
            await self._session_service.delete_session(
                app_name=self._app_name,
                user_id=user_id,
                session_id=session_id,
            )

        logger.info(
            "Generated %d chars with %s (tokens in=%d out=%d)",
            len(text),
            model,
            usage.input_tokens,
            usage.output_tokens,
        )
        return text
