from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from weather_dashboard.core.config import WeatherApiConfig
from weather_dashboard.exceptions import WeatherGatewayError
from weather_dashboard.models.favorites import FavoriteCity
from weather_dashboard.models.weather import (
    CitySearchResult,
    Coordinates,
    CurrentConditions,
    WeatherCondition,
    WeatherQuery,
)

WEATHER_BASE_URL = "https://weather.test/data/2.5"
GEOCODING_BASE_URL = "https://weather.test/geo/1.0"


def make_config(**overrides: Any) -> WeatherApiConfig:
    values: dict[str, Any] = {
        "api_key": "test-key",
        "base_url": WEATHER_BASE_URL,
        "geocoding_base_url": GEOCODING_BASE_URL,
        "timeout_seconds": 5.0,
        "user_agent": "weather-dashboard-tests",
        "units": "metric",
        "max_retries": 2,
        "retry_delay_seconds": 0.5,
    }
    values.update(overrides)
    return WeatherApiConfig(**values)


def weather_payload(
    *,
    name: str = "London",
    country: str | None = "GB",
    temp: float = 15.0,
    feels_like: float = 14.2,
    humidity: int = 72,
    pressure: float = 1012,
    wind_speed: float = 5.0,
    wind_deg: int = 0,
    visibility: int = 10000,
    lat: float = 51.51,
    lon: float = -0.13,
    main: str = "Clouds",
    description: str = "broken clouds",
    icon: str = "04d",
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "coord": {"lat": lat, "lon": lon},
        "weather": [{"id": 803, "main": main, "description": description, "icon": icon}],
        "main": {
            "temp": temp,
            "feels_like": feels_like,
            "humidity": humidity,
            "pressure": pressure,
        },
        "visibility": visibility,
        "wind": {"speed": wind_speed, "deg": wind_deg},
        "dt": 1_700_000_000,
        "sys": {"sunrise": 1_699_990_000, "sunset": 1_700_020_000},
        "name": name,
    }
    if country is not None:
        payload["sys"]["country"] = country
    return payload


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_conditions(**overrides: Any) -> CurrentConditions:
    conditions = CurrentConditions(
        city_name="London",
        country_code="GB",
        coordinates=Coordinates(latitude=51.51, longitude=-0.13),
        temperature_celsius=15.0,
        feels_like_celsius=14.2,
        condition=WeatherCondition(
            id=803, main="Clouds", description="broken clouds", icon_code="04d"
        ),
        humidity=72,
        pressure=1012.0,
        wind_speed_mps=5.0,
        wind_direction_degrees=0,
        visibility_meters=10000.0,
        last_updated=datetime(2023, 11, 14, 22, 13, tzinfo=timezone.utc),
    )
    return replace(conditions, **overrides)


class FakeWeatherGateway:
    def __init__(self) -> None:
        self.conditions: dict[str, CurrentConditions] = {"london,gb": make_conditions()}
        self.search_results: list[CitySearchResult] = [
            CitySearchResult(
                name="London",
                country="GB",
                state="England",
                coordinates=Coordinates(latitude=51.51, longitude=-0.13),
            ),
            CitySearchResult(
                name="London",
                country="CA",
                state="Ontario",
                coordinates=Coordinates(latitude=42.98, longitude=-81.25),
            ),
        ]
        self.error: WeatherGatewayError | None = None
        self.healthy = True
        self.calls: list[str] = []
        self.loop_threads: set[int] = set()

    async def get_current_conditions(self, query: WeatherQuery) -> CurrentConditions:
        self.loop_threads.add(threading.get_ident())
        query = query.validate()
        self.calls.append(query.location)
        if self.error is not None:
            raise self.error
        conditions = self.conditions.get(query.location.lower())
        if conditions is None:
            raise WeatherGatewayError.city_not_found(query.location)
        return conditions

    async def search_cities(self, text: str, limit: int = 5) -> list[CitySearchResult]:
        text = text.strip()
        if not text:
            raise WeatherGatewayError.validation("Search query cannot be empty.")
        if not (1 <= limit <= 10):
            raise WeatherGatewayError.validation("Limit must be between 1 and 10.")
        if self.error is not None:
            raise self.error
        return [r for r in self.search_results if r.name.lower() == text.lower()][:limit]

    async def is_healthy(self) -> bool:
        self.loop_threads.add(threading.get_ident())
        return self.healthy

    async def aclose(self) -> None:
        return None


class FakeFavoriteRepository:
    def __init__(self) -> None:
        self._rows: dict[str, FavoriteCity] = {}
        self.ping_error: Exception | None = None
        self.fail_with: Exception | None = None
        self.threads: set[int] = set()

    def _check(self) -> None:
        self.threads.add(threading.get_ident())
        if self.fail_with is not None:
            raise self.fail_with

    def ensure_ready(self) -> None:
        return None

    def ping(self) -> None:
        self.threads.add(threading.get_ident())
        if self.ping_error is not None:
            raise self.ping_error

    def list(self) -> list[FavoriteCity]:
        self._check()
        return list(self._rows.values())

    def get_by_id(self, favorite_id: str) -> FavoriteCity | None:
        self._check()
        return self._rows.get(favorite_id)

    def add(self, favorite: FavoriteCity) -> None:
        self._check()
        self._rows[favorite.id] = favorite

    def delete(self, favorite_id: str) -> bool:
        self._check()
        return self._rows.pop(favorite_id, None) is not None

    def touch_last_accessed(self, favorite_id: str, *, at: datetime) -> bool:
        self._check()
        favorite = self._rows.get(favorite_id)
        if favorite is None:
            return False
        self._rows[favorite_id] = favorite.touched(at)
        return True

    def exists_by_city_country(self, *, city_name: str, country: str) -> bool:
        self._check()
        return any(
            f.city_name == city_name and f.country == country for f in self._rows.values()
        )

    def count(self) -> int:
        self._check()
        return len(self._rows)
