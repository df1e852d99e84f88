from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone

FAVORITES_PARTITION_KEY = "favorites"


@dataclass(frozen=True)
class FavoriteCity:
    id: str
    city_name: str
    country: str
    latitude: float
    longitude: float
    date_added: datetime
    last_accessed: datetime
    partition_key: str = FAVORITES_PARTITION_KEY

    @classmethod
    def create(
        cls,
        *,
        city_name: str,
        country: str,
        latitude: float,
        longitude: float,
        now: datetime | None = None,
    ) -> FavoriteCity:
        now = now or datetime.now(tz=timezone.utc)
        return cls(
            id=str(uuid.uuid4()),
            city_name=city_name,
            country=country,
            latitude=latitude,
            longitude=longitude,
            date_added=now,
            last_accessed=now,
        )

    def touched(self, at: datetime) -> FavoriteCity:
        return replace(self, last_accessed=at)

    @property
    def display_name(self) -> str:
        return f"{self.city_name}, {self.country}"

    @property
    def search_key(self) -> str:
        return f"{self.city_name},{self.country}"
