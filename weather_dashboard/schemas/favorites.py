from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from weather_dashboard.models.favorites import FavoriteCity

COUNTRY_CODE_PATTERN = r"^[A-Za-z]{2}$"


class FavoriteCityCreate(BaseModel):
    city_name: str = Field(min_length=1, max_length=100)
    country: str = Field(min_length=2, max_length=2, pattern=COUNTRY_CODE_PATTERN)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    @field_validator("city_name")
    @classmethod
    def _strip_city(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("city_name cannot be blank")
        return v

    @field_validator("country")
    @classmethod
    def _upper_country(cls, v: str) -> str:
        return v.upper()


class FavoriteCityOut(BaseModel):
    id: str
    city_name: str
    country: str
    display_name: str
    latitude: float
    longitude: float
    date_added: datetime
    last_accessed: datetime

    @classmethod
    def from_domain(cls, f: FavoriteCity) -> FavoriteCityOut:
        return cls(
            id=f.id,
            city_name=f.city_name,
            country=f.country,
            display_name=f.display_name,
            latitude=f.latitude,
            longitude=f.longitude,
            date_added=f.date_added,
            last_accessed=f.last_accessed,
        )
