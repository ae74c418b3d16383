from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SESSION_SECRET = "change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage (empty DATABASE_URL selects the in-memory backend)
    DATABASE_URL: str = ""
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600

    # GitHub
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_HOST: str = "github.com"
    GITHUB_TOKEN: str = ""  # server fallback, used only when the caller has none
    GITHUB_TIMEOUT: float = 30.0

    # GitHub OAuth
    GITHUB_CLIENT_ID: str = ""
    GITHUB_CLIENT_SECRET: str = ""
    OAUTH_REDIRECT_BASE_URL: str = "http://localhost:5000"
    OAUTH_SCOPES: str = "repo,user:email"

    # Sessions
    SESSION_SECRET: str = DEFAULT_SESSION_SECRET
    SESSION_MAX_AGE: int = 14 * 24 * 3600

    # Application
    APP_COMMIT_SHA: str = ""

    # Default LLM model
    DEFAULT_MODEL: str = "gemini-2.5-flash"
    FEATURES_MODEL: str = "gemini-2.5-pro"

    # Per-section model overrides (fall back to DEFAULT_MODEL if empty)
    DESCRIPTION_MODEL: str = ""
    INSTALLATION_MODEL: str = ""
    USAGE_MODEL: str = ""
    API_DOCS_MODEL: str = ""
    CONTRIBUTING_MODEL: str = ""

    # OpenTelemetry
    OTEL_EXPORTER_OTLP_ENDPOINT: str = ""
    OTEL_SERVICE_NAME: str = "readme-forge"
    LOG_LEVEL: str = "INFO"

    def get_section_model(self, section: str) -> str:
        """Return the model configured for a README section.

        Args:
            section: One of "description", "features", "installation",
                "usage", "api", "contributing".

        Returns:
            The model string for the section. ``features`` resolves to
            FEATURES_MODEL; every other section falls back to DEFAULT_MODEL.

        Raises:
            ValueError: If *section* is not a recognised section name.
        """
        section_model_fields: dict[str, str] = {
            "description": "DESCRIPTION_MODEL",
            "features": "FEATURES_MODEL",
            "installation": "INSTALLATION_MODEL",
            "usage": "USAGE_MODEL",
            "api": "API_DOCS_MODEL",
            "contributing": "CONTRIBUTING_MODEL",
        }

        field_name = section_model_fields.get(section)
        if field_name is None:
            raise ValueError(
                f"Unknown section name {section!r}. "
                f"Expected one of: {', '.join(sorted(section_model_fields))}"
            )

        value: str = getattr(self, field_name)
        return value if value else self.DEFAULT_MODEL

    @property
    def oauth_redirect_uri(self) -> str:
        return f"{self.OAUTH_REDIRECT_BASE_URL.rstrip('/')}/auth/github/callback"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton :class:`Settings` instance."""
    return Settings()
