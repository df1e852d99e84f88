from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from weather_dashboard.exceptions import WeatherGatewayError
from tests.fakes import FakeFavoriteRepository, FakeWeatherGateway


def test_root(client: TestClient) -> None:
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


def test_current_weather_by_city(client: TestClient) -> None:
    resp = client.get("/api/v1/weather/current", params={"city": "London", "country": "GB"})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["display_name"] == "London, GB"
    assert body["temperature_celsius"] == 15.0
    assert body["temperature_fahrenheit"] == 59.0
    assert body["wind_speed_kmh"] == 18.0
    assert body["wind_speed_mph"] == 11.2
    assert body["wind_direction_compass"] == "N"
    assert body["condition"]["icon_url"].endswith("/04d@2x.png")


def test_current_weather_unknown_city_is_404(client: TestClient) -> None:
    resp = client.get("/api/v1/weather/current", params={"city": "Atlantis"})
    assert resp.status_code == 404
    assert resp.json()["detail"]["kind"] == "city_not_found"


@pytest.mark.parametrize(
    "params",
    [
        {"city": "   "},
        {"lat": "95", "lon": "0"},
        {"city": "London", "lat": "1", "lon": "1"},
        {},
    ],
)
def test_current_weather_validation_is_400(
    client: TestClient, fake_gateway: FakeWeatherGateway, params: dict
) -> None:
    resp = client.get("/api/v1/weather/current", params=params)
    assert resp.status_code == 400
    assert resp.json()["detail"]["kind"] == "validation"
    assert fake_gateway.calls == []


@pytest.mark.parametrize(
    ("error", "status"),
    [
        (WeatherGatewayError.invalid_credentials(), 502),
        (WeatherGatewayError.rate_limited(), 429),
        (WeatherGatewayError.service_unavailable(), 503),
        (WeatherGatewayError.network_failure(None, attempts=4), 504),
        (WeatherGatewayError.malformed("bad payload"), 502),
    ],
)
def test_gateway_errors_map_to_http_status(
    client: TestClient, fake_gateway: FakeWeatherGateway, error: WeatherGatewayError, status: int
) -> None:
    fake_gateway.error = error
    resp = client.get("/api/v1/weather/current", params={"city": "London"})
    assert resp.status_code == status
    assert resp.json()["detail"] == {"kind": error.kind.value, "message": error.message}


def test_search_cities(client: TestClient) -> None:
    resp = client.get("/api/v1/weather/search", params={"q": "London", "limit": 1})
    assert resp.status_code == 200
    rows = resp.json()
    assert len(rows) == 1
    assert rows[0]["display_name"] == "London, England, GB"
    assert rows[0]["coordinates"] == {"latitude": 51.51, "longitude": -0.13}

    bad = client.get("/api/v1/weather/search", params={"q": "London", "limit": 50})
    assert bad.status_code == 400


def test_favorites_crud(client: TestClient) -> None:
    created = client.post(
        "/api/v1/favorites",
        json={"city_name": "Oslo", "country": "no", "latitude": 59.91, "longitude": 10.75},
    )
    assert created.status_code == 201, created.text
    favorite = created.json()
    assert favorite["country"] == "NO"
    assert favorite["display_name"] == "Oslo, NO"

    dup = client.post(
        "/api/v1/favorites",
        json={"city_name": "Oslo", "country": "NO", "latitude": 59.91, "longitude": 10.75},
    )
    assert dup.status_code == 409

    listed = client.get("/api/v1/favorites")
    assert [f["id"] for f in listed.json()] == [favorite["id"]]

    one = client.get(f"/api/v1/favorites/{favorite['id']}")
    assert one.status_code == 200

    touched = client.post(f"/api/v1/favorites/{favorite['id']}/touch")
    assert touched.status_code == 204

    deleted = client.delete(f"/api/v1/favorites/{favorite['id']}")
    assert deleted.status_code == 204
    assert client.delete(f"/api/v1/favorites/{favorite['id']}").status_code == 404
    assert client.get(f"/api/v1/favorites/{favorite['id']}").status_code == 404
    assert client.post(f"/api/v1/favorites/{favorite['id']}/touch").status_code == 404


@pytest.mark.parametrize(
    "payload",
    [
        {"city_name": "Oslo", "country": "NOR", "latitude": 59.91, "longitude": 10.75},
        {"city_name": "Oslo", "country": "NO", "latitude": 91, "longitude": 10.75},
        {"city_name": "", "country": "NO", "latitude": 59.91, "longitude": 10.75},
    ],
)
def test_favorites_reject_invalid_payload(client: TestClient, payload: dict) -> None:
    resp = client.post("/api/v1/favorites", json=payload)
    assert resp.status_code == 422


def test_favorites_storage_failure_is_503(
    client: TestClient, fake_favorites: FakeFavoriteRepository
) -> None:
    fake_favorites.fail_with = RuntimeError("disk full")
    resp = client.get("/api/v1/favorites")
    assert resp.status_code == 503


def test_health_ok(client: TestClient) -> None:
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "weather": True, "storage": True}


def test_health_degraded(
    client: TestClient,
    fake_gateway: FakeWeatherGateway,
    fake_favorites: FakeFavoriteRepository,
) -> None:
    fake_gateway.healthy = False
    resp = client.get("/api/health")
    assert resp.status_code == 503
    assert resp.json() == {"status": "degraded", "weather": False, "storage": True}

    fake_gateway.healthy = True
    fake_favorites.ping_error = RuntimeError("db down")
    resp = client.get("/api/health")
    assert resp.status_code == 503
    assert resp.json()["storage"] is False


@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("GET", "/api/v1/favorites/%20"),
        ("DELETE", "/api/v1/favorites/%20"),
        ("POST", "/api/v1/favorites/%20/touch"),
    ],
)
def test_blank_favorite_id_is_404(client: TestClient, method: str, path: str) -> None:
    resp = client.request(method, path)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Favorite not found"


def test_health_pings_storage_off_the_event_loop(
    client: TestClient,
    fake_gateway: FakeWeatherGateway,
    fake_favorites: FakeFavoriteRepository,
) -> None:
    assert client.get("/api/health").status_code == 200
    assert fake_gateway.loop_threads
    assert fake_favorites.threads
    assert fake_favorites.threads.isdisjoint(fake_gateway.loop_threads)
