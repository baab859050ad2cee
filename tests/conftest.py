"""Shared test fixtures for Proxima."""

from collections.abc import AsyncIterator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from proxima.core.app import create_app
from proxima.core.engine import Engine
from proxima.core.settings import AuthSettings
from proxima.oidc.presets import Preset, PresetRegistry, StandardClaims


@pytest.fixture(autouse=True)
def _set_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set environment variables for test settings."""
    monkeypatch.setenv("PROXIMA_ISSUER_URL", "http://localhost:8000")
    monkeypatch.delenv("PROXIMA_PRESETS_FILE", raising=False)


@pytest.fixture
def test_preset() -> Preset:
    """The active preset used by most endpoint tests."""
    return Preset(
        name="test_user",
        display_name="Test User",
        client_id="test-client",
        redirect_uri="http://localhost:3000/callback",
        subject="u@example.com",
        standard_claims=StandardClaims(
            email="u@example.com",
            name="Test User",
            preferred_username="testuser",
            groups=["users"],
        ),
        custom_claims={"test_claim": "test_value"},
    )


@pytest.fixture
def other_preset() -> Preset:
    """A second, inactive preset with its own client and redirect."""
    return Preset(
        name="other_user",
        client_id="other-client",
        redirect_uri="http://localhost:4000/cb",
        subject="other@example.com",
        scopes=["openid", "groups"],
        token_ttl_seconds=600,
        custom_claims={"role": "viewer"},
    )


@pytest.fixture
def registry(test_preset: Preset, other_preset: Preset) -> PresetRegistry:
    return PresetRegistry([test_preset, other_preset], active="test_user")


@pytest.fixture
def settings() -> AuthSettings:
    return AuthSettings()


@pytest.fixture
def app(settings: AuthSettings, registry: PresetRegistry) -> FastAPI:
    return create_app(settings, presets=registry)


@pytest.fixture
def engine(app: FastAPI) -> Engine:
    """The engine wired into ``app``."""
    return app.state.engine


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Create an httpx test client bound to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
