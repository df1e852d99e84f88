from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import AnyHttpUrl, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from weather_dashboard.exceptions import ConfigError

DEFAULT_WEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"
DEFAULT_GEOCODING_BASE_URL = "https://api.openweathermap.org/geo/1.0"

Units = Literal["metric", "imperial", "standard"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="APP_",
        case_sensitive=False,
    )

    env: str = Field(default="development")
    debug: bool = Field(default=False)
    docs_enabled: bool = Field(default=True)

    secret_key: str = Field(min_length=32)

    cors_origins: list[str] = Field(default_factory=list)
    trusted_hosts: list[str] = Field(default_factory=lambda: ["localhost", "127.0.0.1"])

    session_cookie: str = Field(default="weather_dashboard_session", min_length=1, max_length=64)
    session_max_age_seconds: int = Field(default=60 * 60 * 8, ge=60, le=60 * 60 * 24 * 30)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_json: bool = Field(default=True)

    weather_api_key: str = Field(min_length=1, repr=False)
    weather_base_url: AnyHttpUrl = Field(default=DEFAULT_WEATHER_BASE_URL)
    weather_geocoding_base_url: AnyHttpUrl = Field(default=DEFAULT_GEOCODING_BASE_URL)
    weather_timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0)
    weather_max_retries: int = Field(default=3, ge=0, le=5)
    weather_retry_delay_ms: int = Field(default=1000, ge=100, le=10_000)
    weather_cache_enabled: bool = Field(default=True)
    weather_cache_duration_minutes: int = Field(default=10, ge=1, le=60)
    weather_search_cache_minutes: int = Field(default=60, ge=1, le=24 * 60)
    weather_units: Units = Field(default="metric")
    weather_language: str = Field(default="en", min_length=2, max_length=8)
    weather_user_agent: str = Field(
        default="weather-dashboard/0.1 (contact: you@example.com)",
        min_length=3,
        max_length=256,
    )

    favorites_database_url: str = Field(default="sqlite:///./favorites.db", min_length=1)
    favorites_table_name: str = Field(
        default="favorites", min_length=1, max_length=63, pattern=r"^[A-Za-z][A-Za-z0-9_]*$"
    )

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"


@dataclass(frozen=True)
class WeatherApiConfig:
    """Explicit transport and policy settings handed to the weather gateway."""

    api_key: str
    base_url: str = DEFAULT_WEATHER_BASE_URL
    geocoding_base_url: str = DEFAULT_GEOCODING_BASE_URL
    timeout_seconds: float = 30.0
    user_agent: str = "weather-dashboard/0.1"
    units: Units = "metric"
    language: str = "en"
    max_retries: int = 3
    retry_delay_seconds: float = 1.0
    cache_enabled: bool = True
    cache_ttl_seconds: float = 600.0
    search_cache_ttl_seconds: float = 3600.0

    def __post_init__(self) -> None:
        if not (0 <= self.max_retries <= 5):
            raise ConfigError(f"max_retries must be between 0 and 5, got {self.max_retries}.")
        if self.retry_delay_seconds < 0:
            raise ConfigError("retry_delay_seconds cannot be negative.")
        if self.timeout_seconds <= 0:
            raise ConfigError("timeout_seconds must be greater than 0.")
        if self.cache_ttl_seconds <= 0 or self.search_cache_ttl_seconds <= 0:
            raise ConfigError("Cache TTLs must be greater than 0.")

    @classmethod
    def from_settings(cls, settings: Settings) -> WeatherApiConfig:
        return cls(
            api_key=settings.weather_api_key,
            base_url=str(settings.weather_base_url).rstrip("/"),
            geocoding_base_url=str(settings.weather_geocoding_base_url).rstrip("/"),
            timeout_seconds=settings.weather_timeout_seconds,
            user_agent=settings.weather_user_agent,
            units=settings.weather_units,
            language=settings.weather_language,
            max_retries=settings.weather_max_retries,
            retry_delay_seconds=settings.weather_retry_delay_ms / 1000.0,
            cache_enabled=settings.weather_cache_enabled,
            cache_ttl_seconds=settings.weather_cache_duration_minutes * 60.0,
            search_cache_ttl_seconds=settings.weather_search_cache_minutes * 60.0,
        )


def load_settings() -> Settings:
    try:
        settings = Settings()
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
    if not settings.cors_origins:
        settings.cors_origins = ["http://localhost:3000", "http://localhost:8000"]
    return settings
