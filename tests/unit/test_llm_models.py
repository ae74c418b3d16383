"""Tests for model resolution and the ADK-backed text generator."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.adk.models.lite_llm import LiteLlm

from src.providers.llm import AdkTextGenerator, TokenUsage, _extract_token_usage, get_model


class TestGetModel:
    def test_gemini_passthrough(self):
        assert get_model("gemini-2.5-flash") == "gemini-2.5-flash"

    @pytest.mark.parametrize("name", ["openai/gpt-4o", "anthropic/claude-sonnet", "vertex_ai/gemini-pro"])
    def test_prefixed_models_use_litellm(self, name):
        model = get_model(name)
        assert isinstance(model, LiteLlm)
        assert model.model == name

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unrecognized model format"):
            get_model("gpt-4o")


class TestTokenUsage:
    def test_extract_from_event(self):
        event = SimpleNamespace(
            usage_metadata=SimpleNamespace(prompt_token_count=10, candidates_token_count=5, total_token_count=15)
        )
        assert _extract_token_usage(event) == TokenUsage(10, 5, 15)

    def test_missing_metadata(self):
        assert _extract_token_usage(SimpleNamespace()) == TokenUsage()

    def test_add(self):
        usage = TokenUsage(1, 2, 3)
        usage.add(TokenUsage(1, 1, 2))
        assert usage == TokenUsage(2, 3, 5)


def _event(author: str, text: str | None) -> SimpleNamespace:
    parts = [SimpleNamespace(text=text)] if text is not None else []
    return SimpleNamespace(author=author, content=SimpleNamespace(parts=parts), usage_metadata=None)


class TestAdkTextGenerator:
    async def test_collects_agent_text_and_cleans_up_session(self):
        events = [_event("user", "ignored"), _event("section_writer", "Hello "), _event("section_writer", "world")]

        async def run_async(**kwargs):
            for event in events:
                yield event

        runner = MagicMock()
        runner.run_async = run_async
        generator = AdkTextGenerator(app_name="test-app")
        generator._session_service = MagicMock(create_session=AsyncMock(), delete_session=AsyncMock())

        with patch("src.providers.llm.Runner", return_value=runner), patch("src.providers.llm.LlmAgent") as agent_cls:
            agent_cls.return_value.name = "section_writer"
            text = await generator.generate("prompt", model="gemini-2.5-flash", system_instruction="be brief")

        assert text == "Hello world"
        assert agent_cls.call_args.kwargs["instruction"] == "be brief"
        generator._session_service.create_session.assert_awaited_once()
        generator._session_service.delete_session.assert_awaited_once()

    async def test_session_deleted_on_failure(self):
        async def run_async(**kwargs):
            raise RuntimeError("provider down")
            yield  # pragma: no cover

        runner = MagicMock()
        runner.run_async = run_async
        generator = AdkTextGenerator()
        generator._session_service = MagicMock(create_session=AsyncMock(), delete_session=AsyncMock())

        with patch("src.providers.llm.Runner", return_value=runner), patch("src.providers.llm.LlmAgent"):
            with pytest.raises(RuntimeError, match="provider down"):
                await generator.generate("prompt", model="gemini-2.5-flash")

        generator._session_service.delete_session.assert_awaited_once()
