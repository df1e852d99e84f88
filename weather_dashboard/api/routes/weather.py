from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from weather_dashboard.api.deps import Gateway
from weather_dashboard.api.errors import gateway_http_exception
from weather_dashboard.exceptions import WeatherGatewayError
from weather_dashboard.models.weather import WeatherQuery
from weather_dashboard.schemas.weather import CitySearchResultOut, CurrentConditionsOut

router = APIRouter(prefix="/weather")


@router.get("/current", response_model=CurrentConditionsOut)
async def current_weather(
    gateway: Gateway,
    city: Annotated[str | None, Query(max_length=100)] = None,
    country: Annotated[str | None, Query(max_length=10)] = None,
    lat: float | None = None,
    lon: float | None = None,
) -> CurrentConditionsOut:
    query = WeatherQuery(city_name=city, country_code=country, latitude=lat, longitude=lon)
    try:
        conditions = await gateway.get_current_conditions(query)
    except WeatherGatewayError as e:
        raise gateway_http_exception(e) from e
    return CurrentConditionsOut.from_domain(conditions)


@router.get("/search", response_model=list[CitySearchResultOut])
async def search_cities(
    gateway: Gateway,
    q: Annotated[str, Query(max_length=100)],
    limit: int = 5,
) -> list[CitySearchResultOut]:
    try:
        results = await gateway.search_cities(q, limit)
    except WeatherGatewayError as e:
        raise gateway_http_exception(e) from e
    return [CitySearchResultOut.from_domain(r) for r in results]
