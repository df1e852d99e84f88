from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from weather_dashboard.api import deps
from weather_dashboard.core.config import Settings
from weather_dashboard.factory import create_app
from tests.fakes import FakeFavoriteRepository, FakeWeatherGateway


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        env="test",
        debug=True,
        docs_enabled=False,
        secret_key="test_secret_key_must_be_32_chars_minimum",
        cors_origins=["http://localhost"],
        trusted_hosts=["testserver", "localhost"],
        log_level="WARNING",
        log_json=False,
        weather_api_key="test-key",
        weather_user_agent="test-agent",
        weather_timeout_seconds=1.0,
        favorites_database_url="sqlite://",
    )


@pytest.fixture()
def fake_gateway() -> FakeWeatherGateway:
    return FakeWeatherGateway()


@pytest.fixture()
def fake_favorites() -> FakeFavoriteRepository:
    return FakeFavoriteRepository()


@pytest.fixture()
def client(
    settings: Settings,
    fake_gateway: FakeWeatherGateway,
    fake_favorites: FakeFavoriteRepository,
) -> TestClient:
    app = create_app(settings)
    app.dependency_overrides[deps.get_weather_gateway] = lambda: fake_gateway
    app.dependency_overrides[deps.get_favorites_repository] = lambda: fake_favorites
    with TestClient(app) as client:
        yield client
