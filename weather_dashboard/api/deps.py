from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from weather_dashboard.core.config import Settings
from weather_dashboard.repositories.favorites import FavoriteCityRepository
from weather_dashboard.services.favorites import FavoriteCityService
from weather_dashboard.services.weather import WeatherGateway


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_weather_gateway(request: Request) -> WeatherGateway:
    return request.app.state.weather_gateway


def get_favorites_repository(request: Request) -> FavoriteCityRepository:
    return request.app.state.favorites_repository


def get_favorite_service(
    repo: Annotated[FavoriteCityRepository, Depends(get_favorites_repository)],
) -> FavoriteCityService:
    return FavoriteCityService(repo)


Gateway = Annotated[WeatherGateway, Depends(get_weather_gateway)]
Favorites = Annotated[FavoriteCityService, Depends(get_favorite_service)]
