from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import httpx

from weather_dashboard.core.config import WeatherApiConfig
from weather_dashboard.exceptions import GatewayErrorKind, WeatherGatewayError
from weather_dashboard.models.weather import (
    UNKNOWN_COUNTRY,
    CitySearchResult,
    Coordinates,
    CurrentConditions,
    WeatherCondition,
    WeatherQuery,
)
from weather_dashboard.services import conversions

HEALTH_PROBE_LOCATION = "London,GB"
DEFAULT_ICON_CODE = "01d"

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class ConditionsFetch:
    conditions: CurrentConditions
    attempts: int


@dataclass(frozen=True)
class CitySearchFetch:
    results: list[CitySearchResult]
    attempts: int


def _status_error(response: httpx.Response, location: str) -> WeatherGatewayError:
    status_code = response.status_code
    if status_code == 404:
        return WeatherGatewayError.city_not_found(location)
    if status_code == 401:
        return WeatherGatewayError.invalid_credentials()
    if status_code == 429:
        return WeatherGatewayError.rate_limited()
    if status_code == 503:
        return WeatherGatewayError.service_unavailable()
    body = response.text
    return WeatherGatewayError(
        GatewayErrorKind.UNKNOWN,
        f"API request failed with status {status_code}: {body[:300]}",
        status_code=status_code,
        body=body,
    )


class OpenWeatherClient:
    """OpenWeatherMap current-weather and geocoding client with bounded retries."""

    def __init__(
        self,
        config: WeatherApiConfig,
        *,
        logger: logging.Logger | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._config = config
        self.logger = logger or logging.getLogger(__name__)
        self._sleep = sleep
        self._client = httpx.AsyncClient(
            timeout=config.timeout_seconds,
            headers={
                "User-Agent": config.user_agent,
                "Accept": "application/json",
            },
            transport=transport,
        )

    async def __aenter__(self) -> OpenWeatherClient:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def config(self) -> WeatherApiConfig:
        return self._config

    def _weather_params(self, query: WeatherQuery) -> dict[str, str | float]:
        params: dict[str, str | float] = {}
        if query.is_coordinates:
            params["lat"] = float(query.latitude)  # type: ignore[arg-type]
            params["lon"] = float(query.longitude)  # type: ignore[arg-type]
        else:
            params["q"] = query.location
        params["appid"] = self._config.api_key
        params["units"] = self._config.units
        params["lang"] = self._config.language
        return params

    async def fetch_current_conditions(self, query: WeatherQuery) -> ConditionsFetch:
        url = f"{self._config.base_url}/weather"
        payload, attempts = await self._get_json(
            url,
            self._weather_params(query),
            context="current weather",
            location=query.location,
        )
        try:
            conditions = self._parse_current(payload, query)
        except WeatherGatewayError as exc:
            exc.attempts = attempts
            raise
        return ConditionsFetch(conditions=conditions, attempts=attempts)

    async def search_cities(self, text: str, limit: int) -> CitySearchFetch:
        url = f"{self._config.geocoding_base_url}/direct"
        payload, attempts = await self._get_json(
            url,
            {"q": text, "limit": limit, "appid": self._config.api_key},
            context="city search",
            location=text,
        )
        try:
            results = self._parse_geocoding(payload)
        except WeatherGatewayError as exc:
            exc.attempts = attempts
            raise
        return CitySearchFetch(results=results, attempts=attempts)

    async def probe(self) -> bool:
        """Single un-retried request for a known-good location."""
        response = await self._client.get(
            f"{self._config.base_url}/weather",
            params={
                "q": HEALTH_PROBE_LOCATION,
                "appid": self._config.api_key,
                "units": self._config.units,
            },
        )
        return response.is_success

    async def _get_json(
        self,
        url: str,
        params: dict[str, Any],
        *,
        context: str,
        location: str,
    ) -> tuple[Any, int]:
        last_error: Exception | None = None
        attempts = 0
        for attempt in range(self._config.max_retries + 1):
            if attempt:
                delay = self._config.retry_delay_seconds * attempt
                self.logger.debug(
                    "Retrying OpenWeather %s in %.3fs",
                    context,
                    delay,
                    extra={"event": "weather_retry_scheduled", "attempt": attempt + 1, "delay": delay},
                )
                await self._sleep(delay)

            attempts = attempt + 1
            try:
                response = await self._client.get(url, params=params)
            except httpx.HTTPError as exc:
                last_error = exc
                self.logger.warning(
                    "OpenWeather %s request failed (%s) on attempt %d",
                    context,
                    type(exc).__name__,
                    attempts,
                    extra={"event": "weather_attempt_failed", "attempt": attempts},
                )
                continue

            if response.is_success:
                try:
                    return response.json(), attempts
                except ValueError as exc:
                    raise WeatherGatewayError(
                        GatewayErrorKind.MALFORMED_RESPONSE,
                        f"OpenWeather {context} returned a non-JSON response.",
                        status_code=response.status_code,
                        attempts=attempts,
                    ) from exc

            error = _status_error(response, location)
            error.attempts = attempts
            if not error.kind.retryable:
                self.logger.warning(
                    "OpenWeather %s failed with HTTP %d (%s)",
                    context,
                    response.status_code,
                    error.kind.value,
                    extra={"event": "weather_attempt_classified", "attempt": attempts},
                )
                raise error

            last_error = error
            self.logger.warning(
                "OpenWeather %s failed with HTTP %d on attempt %d",
                context,
                response.status_code,
                attempts,
                extra={"event": "weather_attempt_failed", "attempt": attempts},
            )

        self.logger.error(
            "All %d attempts failed for OpenWeather %s",
            attempts,
            context,
            extra={"event": "weather_retries_exhausted", "attempts": attempts},
        )
        raise WeatherGatewayError.network_failure(last_error, attempts=attempts) from last_error

    def _parse_current(self, payload: Any, query: WeatherQuery) -> CurrentConditions:
        if not isinstance(payload, dict):
            raise WeatherGatewayError.malformed("Weather API response was not a JSON object.")

        main = payload.get("main")
        if not isinstance(main, dict):
            raise WeatherGatewayError.malformed(
                "Weather API response is missing main weather data."
            )
        weather = payload.get("weather")
        if not isinstance(weather, list) or not weather or not isinstance(weather[0], dict):
            raise WeatherGatewayError.malformed(
                "Weather API response is missing weather condition data."
            )
        name = _str_or_none(payload.get("name"))
        if not name:
            raise WeatherGatewayError.malformed("Weather API response is missing city name.")

        temp = _float_or_none(main.get("temp"))
        feels_like = _float_or_none(main.get("feels_like"))
        pressure = _float_or_none(main.get("pressure"))
        if temp is None or feels_like is None or pressure is None:
            raise WeatherGatewayError.malformed(
                "Weather API main block is missing temperature or pressure."
            )
        humidity = _int_or_none(main.get("humidity")) or 0

        wind = payload.get("wind")
        wind = wind if isinstance(wind, dict) else {}
        wind_speed = _float_or_none(wind.get("speed")) or 0.0
        wind_deg = _int_or_none(wind.get("deg")) or 0

        sys_block = payload.get("sys")
        sys_block = sys_block if isinstance(sys_block, dict) else None
        country = UNKNOWN_COUNTRY
        sunrise: datetime | None = None
        sunset: datetime | None = None
        if sys_block is not None:
            country = _str_or_none(sys_block.get("country")) or UNKNOWN_COUNTRY
            sunrise = _timestamp_or_none(sys_block.get("sunrise"))
            sunset = _timestamp_or_none(sys_block.get("sunset"))

        first = weather[0]
        condition = WeatherCondition(
            id=_int_or_none(first.get("id")) or 0,
            main=_str_or_none(first.get("main")) or "Unknown",
            description=_str_or_none(first.get("description")) or "Unknown",
            icon_code=_str_or_none(first.get("icon")) or DEFAULT_ICON_CODE,
        )

        conditions = CurrentConditions(
            city_name=name,
            country_code=country,
            coordinates=self._parse_coordinates(payload.get("coord"), query),
            temperature_celsius=self._to_celsius(temp),
            feels_like_celsius=self._to_celsius(feels_like),
            condition=condition,
            humidity=humidity,
            pressure=pressure,
            wind_speed_mps=self._to_mps(wind_speed),
            wind_direction_degrees=wind_deg,
            visibility_meters=_float_or_none(payload.get("visibility")) or 0.0,
            last_updated=_timestamp_or_none(payload.get("dt"))
            or datetime.now(tz=timezone.utc).replace(microsecond=0),
            sunrise=sunrise,
            sunset=sunset,
        )
        _check_ranges(conditions)
        return conditions

    def _to_celsius(self, value: float) -> float:
        if self._config.units == "standard":
            return conversions.kelvin_to_celsius(value)
        if self._config.units == "imperial":
            return conversions.fahrenheit_to_celsius(value)
        return value

    def _to_mps(self, value: float) -> float:
        if self._config.units == "imperial":
            return conversions.mph_to_mps(value)
        return value

    @staticmethod
    def _parse_coordinates(raw: Any, query: WeatherQuery) -> Coordinates | None:
        if isinstance(raw, dict):
            lat = _float_or_none(raw.get("lat"))
            lon = _float_or_none(raw.get("lon"))
            if lat is not None and lon is not None:
                return Coordinates(latitude=lat, longitude=lon)
        if query.is_coordinates:
            return Coordinates(latitude=float(query.latitude), longitude=float(query.longitude))  # type: ignore[arg-type]
        return None

    @staticmethod
    def _parse_geocoding(payload: Any) -> list[CitySearchResult]:
        if not isinstance(payload, list):
            raise WeatherGatewayError.malformed("Geocoding API response was not a JSON array.")
        results: list[CitySearchResult] = []
        for row in payload:
            if not isinstance(row, dict):
                continue
            lat = _float_or_none(row.get("lat"))
            lon = _float_or_none(row.get("lon"))
            if lat is None or lon is None:
                continue
            results.append(
                CitySearchResult(
                    name=_str_or_none(row.get("name")) or "Unknown",
                    country=_str_or_none(row.get("country")) or UNKNOWN_COUNTRY,
                    state=_str_or_none(row.get("state")),
                    coordinates=Coordinates(latitude=lat, longitude=lon),
                )
            )
        return results


_RANGES: tuple[tuple[str, float, float], ...] = (
    ("humidity", 0, 100),
    ("pressure", 800, 1200),
    ("wind_speed_mps", 0, 200),
    ("wind_direction_degrees", 0, 360),
    ("visibility_meters", 0, 50_000),
    ("uv_index", 0, 15),
)


def _check_ranges(conditions: CurrentConditions) -> None:
    for field, low, high in _RANGES:
        value = getattr(conditions, field)
        if not (low <= value <= high):
            raise WeatherGatewayError.malformed(
                f"Weather API value {field}={value} is outside [{low}, {high}]."
            )


def _float_or_none(v: Any) -> float | None:
    if v is None or isinstance(v, bool):
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def _int_or_none(v: Any) -> int | None:
    f = _float_or_none(v)
    if f is None:
        return None
    return int(round(f))


def _str_or_none(v: Any) -> str | None:
    if isinstance(v, str) and v.strip():
        return v.strip()
    return None


def _timestamp_or_none(v: Any) -> datetime | None:
    seconds = _float_or_none(v)
    if seconds is None:
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
