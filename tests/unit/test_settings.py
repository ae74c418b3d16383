"""Tests for service configuration."""

from __future__ import annotations

import pytest

from src.config.settings import Settings


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSectionModels:
    def test_default_model_for_plain_sections(self):
        settings = _settings(DEFAULT_MODEL="gemini-2.5-flash")
        for section in ("description", "installation", "usage", "api", "contributing"):
            assert settings.get_section_model(section) == "gemini-2.5-flash"

    def test_features_uses_features_model(self):
        settings = _settings(FEATURES_MODEL="gemini-2.5-pro")
        assert settings.get_section_model("features") == "gemini-2.5-pro"

    def test_override_wins(self):
        settings = _settings(USAGE_MODEL="openai/gpt-4o")
        assert settings.get_section_model("usage") == "openai/gpt-4o"

    def test_unknown_section(self):
        with pytest.raises(ValueError, match="Unknown section name"):
            _settings().get_section_model("changelog")


class TestOAuth:
    def test_redirect_uri(self):
        settings = _settings(OAUTH_REDIRECT_BASE_URL="https://forge.example.com/")
        assert settings.oauth_redirect_uri == "https://forge.example.com/auth/github/callback"

    def test_storage_defaults_to_memory(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        assert _settings().DATABASE_URL == ""
