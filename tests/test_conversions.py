from __future__ import annotations

import pytest

from weather_dashboard.services import conversions
from tests.fakes import make_conditions


@pytest.mark.parametrize(
    ("degrees", "expected"),
    [
        (0, "N"),
        (22.5, "NNE"),
        (45, "NE"),
        (90, "E"),
        (180, "S"),
        (270, "W"),
        (337.5, "NNW"),
        (359, "N"),
        (360, "N"),
        (361, "N"),
        (450, "E"),
    ],
)
def test_degrees_to_compass(degrees: float, expected: str) -> None:
    assert conversions.degrees_to_compass(degrees) == expected


def test_temperature_conversions() -> None:
    assert conversions.celsius_to_fahrenheit(15.0) == 59.0
    assert conversions.celsius_to_fahrenheit(-40.0) == -40.0
    assert conversions.fahrenheit_to_celsius(212.0) == 100.0
    assert conversions.kelvin_to_celsius(273.15) == 0.0
    assert conversions.kelvin_to_celsius(288.15) == 15.0


def test_celsius_fahrenheit_round_trip_stays_within_display_precision() -> None:
    for celsius in (-30.0, -0.5, 0.0, 12.3, 37.8):
        back = conversions.fahrenheit_to_celsius(conversions.celsius_to_fahrenheit(celsius))
        assert abs(back - celsius) <= 0.1


@pytest.mark.parametrize("fahrenheit", [-40.0, 0.0, 37.0, 100.0])
def test_fahrenheit_celsius_round_trip(fahrenheit: float) -> None:
    back = conversions.celsius_to_fahrenheit(conversions.fahrenheit_to_celsius(fahrenheit))
    assert back == pytest.approx(fahrenheit, abs=0.1)


def test_wind_and_visibility_conversions() -> None:
    assert conversions.mps_to_kmh(5.0) == 18.0
    assert conversions.mps_to_mph(5.0) == 11.2
    assert conversions.mph_to_mps(11.2) == 5.01
    assert conversions.meters_to_kilometers(10000) == 10.0
    assert conversions.meters_to_miles(10000) == 6.2


def test_descriptions() -> None:
    assert conversions.humidity_description(20) == "Low"
    assert conversions.humidity_description(45) == "Comfortable"
    assert conversions.humidity_description(72) == "High"
    assert conversions.humidity_description(95) == "Very High"
    assert conversions.uv_index_description(0) == "Low"
    assert conversions.uv_index_description(11) == "Extreme"
    assert conversions.wind_speed_description(0.5) == "Calm"
    assert conversions.wind_speed_description(5.0) == "Gentle Breeze"
    assert conversions.wind_speed_description(50) == "Storm"


def test_current_conditions_derived_values() -> None:
    c = make_conditions(wind_speed_mps=5.0, wind_direction_degrees=0)
    assert c.temperature_fahrenheit == 59.0
    assert c.wind_speed_kmh == 18.0
    assert c.wind_speed_mph == 11.2
    assert c.wind_direction_compass == "N"
    assert c.visibility_km == 10.0
    assert c.uv_index == 0.0
    assert c.uv_index_description == "Low"
    assert c.display_name == "London, GB"
    assert c.search_key == "London,GB"
    assert c.condition.icon_url == "https://openweathermap.org/img/wn/04d@2x.png"
    assert c.condition.display_description == "Broken clouds"
