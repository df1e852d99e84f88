from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from cachetools import TTLCache

from weather_dashboard.clients.openweather import OpenWeatherClient
from weather_dashboard.exceptions import WeatherGatewayError
from weather_dashboard.models.weather import CitySearchResult, CurrentConditions, WeatherQuery

MAX_CACHE_ENTRIES = 1024
MIN_SEARCH_LIMIT = 1
MAX_SEARCH_LIMIT = 10

V = TypeVar("V")


@dataclass(frozen=True)
class CacheStats:
    hits: int
    misses: int
    size: int


class WeatherCache(Generic[V]):
    """Thread-safe TTL cache; expired entries are dropped lazily on access."""

    def __init__(
        self,
        *,
        ttl_seconds: float,
        maxsize: int = MAX_CACHE_ENTRIES,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lock = threading.Lock()
        self._entries: TTLCache[str, V] = TTLCache(maxsize=maxsize, ttl=ttl_seconds, timer=timer)
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> V | None:
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                self._misses += 1
            else:
                self._hits += 1
            return value

    def set(self, key: str, value: V) -> None:
        with self._lock:
            self._entries[key] = value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            self._entries.expire()
            return CacheStats(hits=self._hits, misses=self._misses, size=len(self._entries))


class WeatherGateway:
    """Cached, validated access to current conditions and city search."""

    def __init__(
        self,
        *,
        client: OpenWeatherClient,
        logger: logging.Logger | None = None,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        config = client.config
        self._client = client
        self.logger = logger or logging.getLogger(__name__)
        self._cache_enabled = config.cache_enabled
        self._conditions_cache: WeatherCache[CurrentConditions] = WeatherCache(
            ttl_seconds=config.cache_ttl_seconds, timer=timer
        )
        self._search_cache: WeatherCache[list[CitySearchResult]] = WeatherCache(
            ttl_seconds=config.search_cache_ttl_seconds, timer=timer
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_current_conditions(self, query: WeatherQuery) -> CurrentConditions:
        query = query.validate()
        key = query.cache_key

        if self._cache_enabled:
            cached = self._conditions_cache.get(key)
            if cached is not None:
                self.logger.debug(
                    "Returning cached weather for %s",
                    query.location,
                    extra={"event": "weather_cache_hit", "cache_key": key},
                )
                return cached
            self.logger.debug(
                "No cached weather for %s",
                query.location,
                extra={"event": "weather_cache_miss", "cache_key": key},
            )

        try:
            fetched = await self._client.fetch_current_conditions(query)
        except WeatherGatewayError as exc:
            self._log_failure("current weather", query.location, exc)
            raise

        if self._cache_enabled:
            self._conditions_cache.set(key, fetched.conditions)
        self.logger.info(
            "Retrieved weather for %s",
            query.location,
            extra={
                "event": "weather_fetch_succeeded",
                "cache_key": key,
                "attempts": fetched.attempts,
            },
        )
        return fetched.conditions

    async def search_cities(self, text: str, limit: int = 5) -> list[CitySearchResult]:
        text = (text or "").strip()
        if not text:
            raise WeatherGatewayError.validation("Search query cannot be empty.")
        if not (MIN_SEARCH_LIMIT <= limit <= MAX_SEARCH_LIMIT):
            raise WeatherGatewayError.validation(
                f"Limit must be between {MIN_SEARCH_LIMIT} and {MAX_SEARCH_LIMIT}."
            )

        key = f"search_{text.lower()}_{limit}"
        if self._cache_enabled:
            cached = self._search_cache.get(key)
            if cached is not None:
                self.logger.debug(
                    "Returning cached city search for %s",
                    text,
                    extra={"event": "search_cache_hit", "cache_key": key},
                )
                return list(cached)
            self.logger.debug(
                "No cached city search for %s",
                text,
                extra={"event": "search_cache_miss", "cache_key": key},
            )

        try:
            fetched = await self._client.search_cities(text, limit)
        except WeatherGatewayError as exc:
            self._log_failure("city search", text, exc)
            raise

        if self._cache_enabled:
            self._search_cache.set(key, list(fetched.results))
        self.logger.info(
            "Found %d cities for %s",
            len(fetched.results),
            text,
            extra={
                "event": "search_fetch_succeeded",
                "cache_key": key,
                "attempts": fetched.attempts,
            },
        )
        return list(fetched.results)

    async def is_healthy(self) -> bool:
        try:
            healthy = await self._client.probe()
        except Exception:
            self.logger.exception(
                "Weather health check failed", extra={"event": "weather_health_check"}
            )
            return False
        self.logger.info(
            "Weather health check result: %s",
            healthy,
            extra={"event": "weather_health_check", "healthy": healthy},
        )
        return healthy

    def cache_stats(self) -> dict[str, CacheStats]:
        return {
            "conditions": self._conditions_cache.stats(),
            "search": self._search_cache.stats(),
        }

    def clear_cache(self) -> None:
        self._conditions_cache.clear()
        self._search_cache.clear()

    def _log_failure(self, context: str, subject: str, exc: WeatherGatewayError) -> None:
        self.logger.warning(
            "Weather %s for %s failed: %s",
            context,
            subject,
            exc.message,
            extra={
                "event": "weather_fetch_failed",
                "kind": exc.kind.value,
                "status_code": exc.status_code,
                "attempts": exc.attempts,
            },
        )
