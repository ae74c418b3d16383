"""OpenAPI contract validation tests.

Validates the schema FastAPI generates for the service: endpoint
definitions, HTTP methods, and the public shape of response models.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from src.api.app import create_app
from src.config.settings import Settings
from src.database.storage import MemoryStorage

pytestmark = pytest.mark.contract


@pytest.fixture(scope="module")
def spec() -> dict:
    """Build the app with inert collaborators and return its OpenAPI document."""
    settings = Settings(_env_file=None, SESSION_SECRET="contract")
    app = create_app(settings, storage=MemoryStorage(), flow=MagicMock(), identity=MagicMock())
    return app.openapi()


def _schema(spec: dict, name: str) -> dict:
    return spec["components"]["schemas"][name]


# ===================================================================
# Spec-level validation
# ===================================================================


class TestSpecStructure:
    """Validate top-level document structure."""

    def test_info(self, spec: dict):
        assert spec["info"]["title"] == "README Forge API"
        assert spec["info"]["version"] == "1.0.0"

    def test_has_components_schemas(self, spec: dict):
        assert len(spec["components"]["schemas"]) > 0


# ===================================================================
# Endpoint existence
# ===================================================================


class TestEndpointExistence:
    """Verify every expected endpoint and method is exposed."""

    EXPECTED = (
        ("/api/generate-readme", "post"),
        ("/api/generate-readme/stream", "post"),
        ("/api/readme/{generation_id}", "get"),
        ("/api/recent-generations", "get"),
        ("/api/download/{generation_id}", "get"),
        ("/api/validate-repository", "post"),
        ("/auth/github", "get"),
        ("/auth/github/callback", "get"),
        ("/api/logout", "post"),
        ("/api/user", "get"),
        ("/health", "get"),
    )

    @pytest.mark.parametrize(("path", "method"), EXPECTED)
    def test_endpoint_defined(self, spec: dict, path: str, method: str):
        assert path in spec["paths"], f"Missing path {path}"
        assert method in spec["paths"][path], f"Missing {method.upper()} {path}"

    def test_recent_generations_limit_bounds(self, spec: dict):
        params = spec["paths"]["/api/recent-generations"]["get"]["parameters"]
        limit = next(p for p in params if p["name"] == "limit")
        assert limit["schema"]["minimum"] == 1
        assert limit["schema"]["maximum"] == 100
        assert limit["schema"]["default"] == 10


# ===================================================================
# Schemas
# ===================================================================


class TestSchemas:
    def test_generate_request_requires_repository_url(self, spec: dict):
        schema = _schema(spec, "GenerateReadmeRequest")
        assert schema["required"] == ["repositoryUrl"]

    def test_generate_response_fields(self, spec: dict):
        props = _schema(spec, "GenerateReadmeResponse")["properties"]
        assert set(props) == {"id", "markdown_content", "repository_data", "processing_steps"}

    def test_user_response_hides_access_token(self, spec: dict):
        props = _schema(spec, "UserResponse")["properties"]
        assert "github_access_token" not in props
        assert "github_username" in props
