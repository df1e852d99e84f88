"""Application exception classes."""

from __future__ import annotations

from enum import Enum


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class GatewayErrorKind(str, Enum):
    VALIDATION = "validation"
    CITY_NOT_FOUND = "city_not_found"
    INVALID_CREDENTIALS = "invalid_credentials"
    RATE_LIMITED = "rate_limited"
    SERVICE_UNAVAILABLE = "service_unavailable"
    NETWORK_FAILURE = "network_failure"
    MALFORMED_RESPONSE = "malformed_response"
    UNKNOWN = "unknown"

    @property
    def retryable(self) -> bool:
        return self is GatewayErrorKind.UNKNOWN


class WeatherGatewayError(Exception):
    """Raised for every weather gateway failure, tagged with its kind."""

    def __init__(
        self,
        kind: GatewayErrorKind,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
        cause: BaseException | None = None,
        attempts: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.body = body
        self.cause = cause
        self.attempts = attempts

    def __repr__(self) -> str:
        return (
            f"WeatherGatewayError(kind={self.kind.value!r}, message={self.message!r}, "
            f"status_code={self.status_code!r})"
        )

    @classmethod
    def validation(cls, message: str) -> WeatherGatewayError:
        return cls(GatewayErrorKind.VALIDATION, message)

    @classmethod
    def city_not_found(cls, location: str) -> WeatherGatewayError:
        return cls(
            GatewayErrorKind.CITY_NOT_FOUND,
            f"City '{location}' was not found.",
            status_code=404,
        )

    @classmethod
    def invalid_credentials(cls) -> WeatherGatewayError:
        return cls(
            GatewayErrorKind.INVALID_CREDENTIALS,
            "Invalid API key. Please check the OpenWeatherMap API configuration.",
            status_code=401,
        )

    @classmethod
    def rate_limited(cls) -> WeatherGatewayError:
        return cls(
            GatewayErrorKind.RATE_LIMITED,
            "API rate limit exceeded. Please try again later.",
            status_code=429,
        )

    @classmethod
    def service_unavailable(cls) -> WeatherGatewayError:
        return cls(
            GatewayErrorKind.SERVICE_UNAVAILABLE,
            "The weather service is currently unavailable. Please try again later.",
            status_code=503,
        )

    @classmethod
    def network_failure(
        cls, cause: BaseException | None, *, attempts: int | None = None
    ) -> WeatherGatewayError:
        return cls(
            GatewayErrorKind.NETWORK_FAILURE,
            "Unable to connect to the weather service. Please check your internet connection.",
            status_code=getattr(cause, "status_code", None),
            cause=cause,
            attempts=attempts,
        )

    @classmethod
    def malformed(cls, message: str) -> WeatherGatewayError:
        return cls(GatewayErrorKind.MALFORMED_RESPONSE, message)


class FavoriteCityError(Exception):
    """Raised when favorite city storage operations fail."""


class DuplicateFavoriteError(FavoriteCityError):
    """Raised when a city/country pair is already stored as a favorite."""
