from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from weather_dashboard.exceptions import WeatherGatewayError
from weather_dashboard.services import conversions

UNKNOWN_COUNTRY = "Unknown"
ICON_URL_TEMPLATE = "https://openweathermap.org/img/wn/{icon}@2x.png"


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class WeatherQuery:
    """A current-conditions lookup by city name (optionally with country) or coordinates."""

    city_name: str | None = None
    country_code: str | None = None
    latitude: float | None = None
    longitude: float | None = None

    @classmethod
    def for_city(cls, city_name: str, country_code: str | None = None) -> WeatherQuery:
        return cls(city_name=city_name, country_code=country_code)

    @classmethod
    def for_coordinates(cls, latitude: float, longitude: float) -> WeatherQuery:
        return cls(latitude=latitude, longitude=longitude)

    @property
    def is_coordinates(self) -> bool:
        return self.city_name is None

    def validate(self) -> WeatherQuery:
        if self.city_name is not None:
            if self.latitude is not None or self.longitude is not None:
                raise WeatherGatewayError.validation(
                    "Use either a city name or coordinates, not both."
                )
            city = self.city_name.strip()
            if not city:
                raise WeatherGatewayError.validation("City name cannot be empty.")
            country = None
            if self.country_code is not None:
                country = self.country_code.strip()
                if not country:
                    raise WeatherGatewayError.validation("Country code cannot be empty.")
            return WeatherQuery(city_name=city, country_code=country)

        if self.country_code is not None:
            raise WeatherGatewayError.validation("A country code requires a city name.")
        if self.latitude is None or self.longitude is None:
            raise WeatherGatewayError.validation(
                "Missing coordinates: provide both latitude and longitude."
            )
        if not (-90 <= self.latitude <= 90):
            raise WeatherGatewayError.validation(
                f"Invalid latitude {self.latitude}; expected between -90 and 90."
            )
        if not (-180 <= self.longitude <= 180):
            raise WeatherGatewayError.validation(
                f"Invalid longitude {self.longitude}; expected between -180 and 180."
            )
        return self

    @property
    def location(self) -> str:
        """Upstream ``q`` value for name queries: ``city`` or ``city,country``."""
        if self.city_name is None:
            return f"{self.latitude},{self.longitude}"
        if self.country_code:
            return f"{self.city_name},{self.country_code}"
        return self.city_name

    @property
    def cache_key(self) -> str:
        if self.city_name is None:
            return f"weather_coords_{self.latitude:.2f}_{self.longitude:.2f}"
        return f"weather_city_{self.location.lower()}"


@dataclass(frozen=True)
class WeatherCondition:
    id: int
    main: str
    description: str
    icon_code: str

    @property
    def icon_url(self) -> str:
        return ICON_URL_TEMPLATE.format(icon=self.icon_code)

    @property
    def display_description(self) -> str:
        if not self.description:
            return self.description
        return self.description[0].upper() + self.description[1:]

    @property
    def css_class(self) -> str:
        main = self.main.lower()
        if main in {"clear", "clouds", "snow", "thunderstorm"}:
            return f"weather-{main}"
        if main in {"rain", "drizzle"}:
            return "weather-rain"
        return "weather-atmospheric"

    @property
    def icon_class(self) -> str:
        main = self.main.lower()
        if main == "clear":
            return "bi-moon-stars" if "n" in self.icon_code else "bi-sun"
        return {
            "clouds": "bi-clouds",
            "rain": "bi-cloud-rain",
            "drizzle": "bi-cloud-drizzle",
            "snow": "bi-cloud-snow",
            "thunderstorm": "bi-cloud-lightning",
            "mist": "bi-cloud-fog",
            "fog": "bi-cloud-fog",
        }.get(main, "bi-cloud")


@dataclass(frozen=True)
class CurrentConditions:
    city_name: str
    country_code: str
    coordinates: Coordinates | None
    temperature_celsius: float
    feels_like_celsius: float
    condition: WeatherCondition
    humidity: int
    pressure: float
    wind_speed_mps: float
    wind_direction_degrees: int
    visibility_meters: float
    last_updated: datetime
    sunrise: datetime | None = None
    sunset: datetime | None = None
    # The current-weather endpoint has no UV data; a separate UV call would be needed.
    uv_index: float = 0.0

    @property
    def temperature_fahrenheit(self) -> float:
        return conversions.celsius_to_fahrenheit(self.temperature_celsius)

    @property
    def feels_like_fahrenheit(self) -> float:
        return conversions.celsius_to_fahrenheit(self.feels_like_celsius)

    @property
    def wind_speed_kmh(self) -> float:
        return conversions.mps_to_kmh(self.wind_speed_mps)

    @property
    def wind_speed_mph(self) -> float:
        return conversions.mps_to_mph(self.wind_speed_mps)

    @property
    def wind_direction_compass(self) -> str:
        return conversions.degrees_to_compass(self.wind_direction_degrees)

    @property
    def visibility_km(self) -> float:
        return conversions.meters_to_kilometers(self.visibility_meters)

    @property
    def visibility_miles(self) -> float:
        return conversions.meters_to_miles(self.visibility_meters)

    @property
    def humidity_description(self) -> str:
        return conversions.humidity_description(self.humidity)

    @property
    def wind_description(self) -> str:
        return conversions.wind_speed_description(self.wind_speed_mps)

    @property
    def uv_index_description(self) -> str:
        return conversions.uv_index_description(self.uv_index)

    @property
    def display_name(self) -> str:
        return f"{self.city_name}, {self.country_code}"

    @property
    def search_key(self) -> str:
        return f"{self.city_name},{self.country_code}"


@dataclass(frozen=True)
class CitySearchResult:
    name: str
    country: str
    coordinates: Coordinates
    state: str | None = None

    @property
    def display_name(self) -> str:
        if self.state:
            return f"{self.name}, {self.state}, {self.country}"
        return f"{self.name}, {self.country}"

    @property
    def search_key(self) -> str:
        return f"{self.name},{self.country}"
