from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TypeVar

from weather_dashboard.exceptions import DuplicateFavoriteError, FavoriteCityError
from weather_dashboard.models.favorites import FavoriteCity
from weather_dashboard.repositories.favorites import FavoriteCityRepository

MAX_CITY_NAME_LENGTH = 100
COUNTRY_CODE_LENGTH = 2

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class FavoriteCityService:
    """Validated access to stored favorite cities.

    Storage failures are logged and re-raised as ``FavoriteCityError``; bad
    input raises ``ValueError`` before the repository is touched.
    """

    def __init__(
        self,
        repo: FavoriteCityRepository,
        *,
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repo = repo
        self.logger = logger or logging.getLogger(__name__)
        self._clock = clock

    def list_favorites(self) -> list[FavoriteCity]:
        rows = self._call("list favorites", self._repo.list)
        return sorted(rows, key=lambda f: (f.city_name.lower(), f.country))

    def get_favorite(self, favorite_id: str) -> FavoriteCity | None:
        favorite_id = _require_id(favorite_id)
        return self._call("get favorite", lambda: self._repo.get_by_id(favorite_id))

    def add_favorite(
        self, *, city_name: str, country: str, latitude: float, longitude: float
    ) -> FavoriteCity:
        city_name, country = _normalize_city(city_name, country)
        if not (-90.0 <= latitude <= 90.0):
            raise ValueError("Latitude must be between -90 and 90.")
        if not (-180.0 <= longitude <= 180.0):
            raise ValueError("Longitude must be between -180 and 180.")

        exists = self._call(
            "check favorite",
            lambda: self._repo.exists_by_city_country(city_name=city_name, country=country),
        )
        if exists:
            raise DuplicateFavoriteError(f"{city_name}, {country} is already a favorite.")

        favorite = FavoriteCity.create(
            city_name=city_name,
            country=country,
            latitude=float(latitude),
            longitude=float(longitude),
            now=self._clock(),
        )
        self._call("add favorite", lambda: self._repo.add(favorite))
        self.logger.info(
            "Added favorite city %s",
            favorite.display_name,
            extra={"event": "favorite_added", "favorite_id": favorite.id},
        )
        return favorite

    def remove_favorite(self, favorite_id: str) -> bool:
        favorite_id = _require_id(favorite_id)
        removed = self._call("remove favorite", lambda: self._repo.delete(favorite_id))
        if removed:
            self.logger.info(
                "Removed favorite city %s",
                favorite_id,
                extra={"event": "favorite_removed", "favorite_id": favorite_id},
            )
        return removed

    def touch_last_accessed(self, favorite_id: str) -> bool:
        favorite_id = _require_id(favorite_id)
        at = self._clock()
        return self._call(
            "touch favorite",
            lambda: self._repo.touch_last_accessed(favorite_id, at=at),
        )

    def is_favorite(self, *, city_name: str, country: str) -> bool:
        city_name, country = _normalize_city(city_name, country)
        return self._call(
            "check favorite",
            lambda: self._repo.exists_by_city_country(city_name=city_name, country=country),
        )

    def count_favorites(self) -> int:
        return self._call("count favorites", self._repo.count)

    def _call(self, action: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except FavoriteCityError:
            raise
        except Exception as exc:
            self.logger.error(
                "Failed to %s: %s",
                action,
                exc,
                extra={"event": "favorite_storage_failed", "action": action},
            )
            raise FavoriteCityError(f"Failed to {action}.") from exc


def _require_id(favorite_id: str) -> str:
    favorite_id = (favorite_id or "").strip()
    if not favorite_id:
        raise ValueError("Favorite id cannot be empty.")
    return favorite_id


def _normalize_city(city_name: str, country: str) -> tuple[str, str]:
    city_name = (city_name or "").strip()
    country = (country or "").strip().upper()
    if not city_name or len(city_name) > MAX_CITY_NAME_LENGTH:
        raise ValueError(f"City name must be 1-{MAX_CITY_NAME_LENGTH} characters.")
    if len(country) != COUNTRY_CODE_LENGTH:
        raise ValueError("Country must be a 2-letter code.")
    return city_name, country
