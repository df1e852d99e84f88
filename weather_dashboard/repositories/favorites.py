from __future__ import annotations

from datetime import datetime
from typing import Protocol

from weather_dashboard.models.favorites import FavoriteCity


class FavoriteCityRepository(Protocol):
    def ensure_ready(self) -> None: ...

    def ping(self) -> None: ...

    def list(self) -> list[FavoriteCity]: ...

    def get_by_id(self, favorite_id: str) -> FavoriteCity | None: ...

    def add(self, favorite: FavoriteCity) -> None: ...

    def delete(self, favorite_id: str) -> bool: ...

    def touch_last_accessed(self, favorite_id: str, *, at: datetime) -> bool: ...

    def exists_by_city_country(self, *, city_name: str, country: str) -> bool: ...

    def count(self) -> int: ...
