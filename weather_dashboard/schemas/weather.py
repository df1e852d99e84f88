from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from weather_dashboard.models.weather import CitySearchResult, CurrentConditions


class CoordinatesOut(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class WeatherConditionOut(BaseModel):
    id: int
    main: str
    description: str
    icon_code: str
    icon_url: str


class CurrentConditionsOut(BaseModel):
    city_name: str
    country_code: str
    display_name: str
    coordinates: CoordinatesOut | None = None

    temperature_celsius: float
    temperature_fahrenheit: float
    feels_like_celsius: float
    feels_like_fahrenheit: float
    condition: WeatherConditionOut

    humidity: int = Field(ge=0, le=100)
    humidity_description: str
    pressure: float
    wind_speed_mps: float = Field(ge=0)
    wind_speed_kmh: float
    wind_speed_mph: float
    wind_direction_degrees: int = Field(ge=0, le=360)
    wind_direction_compass: str
    wind_description: str
    visibility_meters: float = Field(ge=0)
    visibility_km: float
    visibility_miles: float
    uv_index: float
    uv_index_description: str

    last_updated: datetime
    sunrise: datetime | None = None
    sunset: datetime | None = None

    @classmethod
    def from_domain(cls, c: CurrentConditions) -> CurrentConditionsOut:
        coordinates = None
        if c.coordinates is not None:
            coordinates = CoordinatesOut(
                latitude=c.coordinates.latitude, longitude=c.coordinates.longitude
            )
        return cls(
            city_name=c.city_name,
            country_code=c.country_code,
            display_name=c.display_name,
            coordinates=coordinates,
            temperature_celsius=c.temperature_celsius,
            temperature_fahrenheit=c.temperature_fahrenheit,
            feels_like_celsius=c.feels_like_celsius,
            feels_like_fahrenheit=c.feels_like_fahrenheit,
            condition=WeatherConditionOut(
                id=c.condition.id,
                main=c.condition.main,
                description=c.condition.description,
                icon_code=c.condition.icon_code,
                icon_url=c.condition.icon_url,
            ),
            humidity=c.humidity,
            humidity_description=c.humidity_description,
            pressure=c.pressure,
            wind_speed_mps=c.wind_speed_mps,
            wind_speed_kmh=c.wind_speed_kmh,
            wind_speed_mph=c.wind_speed_mph,
            wind_direction_degrees=c.wind_direction_degrees,
            wind_direction_compass=c.wind_direction_compass,
            wind_description=c.wind_description,
            visibility_meters=c.visibility_meters,
            visibility_km=c.visibility_km,
            visibility_miles=c.visibility_miles,
            uv_index=c.uv_index,
            uv_index_description=c.uv_index_description,
            last_updated=c.last_updated,
            sunrise=c.sunrise,
            sunset=c.sunset,
        )


class CitySearchResultOut(BaseModel):
    name: str
    country: str
    state: str | None = None
    display_name: str
    search_key: str
    coordinates: CoordinatesOut

    @classmethod
    def from_domain(cls, r: CitySearchResult) -> CitySearchResultOut:
        return cls(
            name=r.name,
            country=r.country,
            state=r.state,
            display_name=r.display_name,
            search_key=r.search_key,
            coordinates=CoordinatesOut(
                latitude=r.coordinates.latitude, longitude=r.coordinates.longitude
            ),
        )


class HealthStatus(BaseModel):
    status: str
    weather: bool
    storage: bool
