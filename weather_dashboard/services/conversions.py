"""Unit conversions and human-readable descriptors for weather values.

Every conversion rounds to one decimal place, matching what the dashboard
displays. Rounding follows Python's ``round`` (half to even).
"""

from __future__ import annotations

COMPASS_POINTS: tuple[str, ...] = (
    "N",
    "NNE",
    "NE",
    "ENE",
    "E",
    "ESE",
    "SE",
    "SSE",
    "S",
    "SSW",
    "SW",
    "WSW",
    "W",
    "WNW",
    "NW",
    "NNW",
)

KELVIN_OFFSET = 273.15
MPS_TO_KMH = 3.6
MPS_TO_MPH = 2.237
METERS_PER_MILE = 1609.344


def kelvin_to_celsius(kelvin: float) -> float:
    return round(kelvin - KELVIN_OFFSET, 1)


def celsius_to_fahrenheit(celsius: float) -> float:
    return round(celsius * 9.0 / 5.0 + 32.0, 1)


def fahrenheit_to_celsius(fahrenheit: float) -> float:
    return round((fahrenheit - 32.0) * 5.0 / 9.0, 1)


def mps_to_kmh(mps: float) -> float:
    return round(mps * MPS_TO_KMH, 1)


def mps_to_mph(mps: float) -> float:
    return round(mps * MPS_TO_MPH, 1)


def mph_to_mps(mph: float) -> float:
    # Two decimals so a later m/s -> mph round trip stays within display precision.
    return round(mph / MPS_TO_MPH, 2)


def meters_to_kilometers(meters: float) -> float:
    return round(meters / 1000.0, 1)


def meters_to_miles(meters: float) -> float:
    return round(meters / METERS_PER_MILE, 1)


def degrees_to_compass(degrees: float) -> str:
    """Map a bearing to one of 16 compass points; values wrap modulo 360."""
    normalized = degrees % 360
    return COMPASS_POINTS[round(normalized / 22.5) % 16]


def uv_index_description(uv_index: float) -> str:
    if uv_index <= 2:
        return "Low"
    if uv_index <= 5:
        return "Moderate"
    if uv_index <= 7:
        return "High"
    if uv_index <= 10:
        return "Very High"
    return "Extreme"


def humidity_description(humidity: int) -> str:
    if humidity < 30:
        return "Low"
    if humidity <= 60:
        return "Comfortable"
    if humidity <= 80:
        return "High"
    return "Very High"


_WIND_SCALE: tuple[tuple[float, str], ...] = (
    (1, "Calm"),
    (4, "Light Breeze"),
    (7, "Gentle Breeze"),
    (11, "Moderate Breeze"),
    (17, "Fresh Breeze"),
    (22, "Strong Breeze"),
    (28, "Near Gale"),
    (34, "Gale"),
    (41, "Strong Gale"),
)


def wind_speed_description(wind_speed_mps: float) -> str:
    for upper, label in _WIND_SCALE:
        if wind_speed_mps < upper:
            return label
    return "Storm"
