from __future__ import annotations

from typing import Annotated
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool

from weather_dashboard.api.deps import Favorites, Gateway
from weather_dashboard.exceptions import (
    DuplicateFavoriteError,
    FavoriteCityError,
    GatewayErrorKind,
    WeatherGatewayError,
)
from weather_dashboard.models.favorites import FavoriteCity
from weather_dashboard.models.weather import CurrentConditions, WeatherQuery
from weather_dashboard.services.favorites import FavoriteCityService
from weather_dashboard.web.deps import csrf_protect, ensure_csrf_token
from weather_dashboard.web.templates import templates

router = APIRouter()

MIN_SEARCH_LENGTH = 2
MAX_SEARCH_LENGTH = 100

USER_MESSAGES: dict[GatewayErrorKind, str] = {
    GatewayErrorKind.VALIDATION: "Please check the city name and try again.",
    GatewayErrorKind.CITY_NOT_FOUND: (
        "We couldn't find that city. Check the spelling or add a country code (e.g. 'Paris,FR')."
    ),
    GatewayErrorKind.INVALID_CREDENTIALS: (
        "The weather service is misconfigured. Please contact the site administrator."
    ),
    GatewayErrorKind.RATE_LIMITED: "Too many requests right now. Please wait a minute and try again.",
    GatewayErrorKind.SERVICE_UNAVAILABLE: (
        "The weather service is temporarily unavailable. Please try again later."
    ),
    GatewayErrorKind.NETWORK_FAILURE: (
        "We couldn't reach the weather service. Please check your connection and try again."
    ),
    GatewayErrorKind.MALFORMED_RESPONSE: (
        "The weather service returned unexpected data. Please try again later."
    ),
    GatewayErrorKind.UNKNOWN: "Something went wrong while loading the weather. Please try again.",
}

FAVORITES_UNAVAILABLE = "Favorites are unavailable right now."
FAVORITE_MISSING = "That favorite no longer exists."


def user_message(exc: WeatherGatewayError) -> str:
    return USER_MESSAGES.get(exc.kind, USER_MESSAGES[GatewayErrorKind.UNKNOWN])


def parse_city_input(raw: str) -> WeatherQuery:
    """``"Oslo"`` or ``"Oslo,NO"``; the last comma separates the country code."""
    city, sep, country = raw.strip().rpartition(",")
    if not sep:
        return WeatherQuery.for_city(raw.strip())
    country = country.strip()
    return WeatherQuery.for_city(city.strip(), country or None)


def _redirect(message: str | None = None, error: str | None = None) -> RedirectResponse:
    query: dict[str, str] = {}
    if message:
        query["message"] = message
    if error:
        query["error"] = error
    url = "/ui/weather"
    if query:
        url = f"{url}?{urlencode(query)}"
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


def _load_favorites(service: FavoriteCityService) -> tuple[list[FavoriteCity], str | None]:
    try:
        return service.list_favorites(), None
    except FavoriteCityError:
        return [], FAVORITES_UNAVAILABLE


def _open_favorite(service: FavoriteCityService, favorite_id: str) -> FavoriteCity | None:
    favorite = service.get_favorite(favorite_id)
    if favorite is not None:
        service.touch_last_accessed(favorite_id)
    return favorite


def _render_weather(
    *,
    request: Request,
    favorites: list[FavoriteCity],
    favorites_error: str | None = None,
    search: str = "",
    conditions: CurrentConditions | None = None,
    message: str | None = None,
    error: str | None = None,
    status_code: int = 200,
):
    csrf_token = ensure_csrf_token(request)

    is_favorite = conditions is not None and any(
        f.city_name == conditions.city_name and f.country == conditions.country_code
        for f in favorites
    )

    return templates.TemplateResponse(
        request,
        "weather.html",
        {
            "request": request,
            "title": "Weather",
            "csrf_token": csrf_token,
            "search": search,
            "conditions": conditions,
            "is_favorite": is_favorite,
            "favorites": favorites,
            "favorites_error": favorites_error,
            "message": message,
            "error": error,
        },
        status_code=status_code,
    )


@router.get("/", include_in_schema=False)
def ui_index():
    return RedirectResponse("/ui/weather", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/weather", include_in_schema=False)
def weather_page(
    request: Request,
    service: Favorites,
    message: Annotated[str | None, Query(max_length=200)] = None,
    flash_error: Annotated[str | None, Query(max_length=200, alias="error")] = None,
):
    favorites, favorites_error = _load_favorites(service)
    return _render_weather(
        request=request,
        favorites=favorites,
        favorites_error=favorites_error,
        message=message,
        error=flash_error,
    )


@router.post("/weather", include_in_schema=False, dependencies=[Depends(csrf_protect)])
async def search_weather(
    request: Request,
    gateway: Gateway,
    service: Favorites,
    city: Annotated[str, Form()] = "",
):
    search = city.strip()
    if not (MIN_SEARCH_LENGTH <= len(search) <= MAX_SEARCH_LENGTH):
        favorites, favorites_error = await run_in_threadpool(_load_favorites, service)
        return _render_weather(
            request=request,
            favorites=favorites,
            favorites_error=favorites_error,
            search=search,
            error=(
                f"Please enter a city name between {MIN_SEARCH_LENGTH} "
                f"and {MAX_SEARCH_LENGTH} characters."
            ),
            status_code=400,
        )

    conditions: CurrentConditions | None = None
    error: str | None = None
    try:
        conditions = await gateway.get_current_conditions(parse_city_input(search))
    except WeatherGatewayError as e:
        error = user_message(e)

    favorites, favorites_error = await run_in_threadpool(_load_favorites, service)
    return _render_weather(
        request=request,
        favorites=favorites,
        favorites_error=favorites_error,
        search=search,
        conditions=conditions,
        error=error,
    )


@router.post("/favorites", include_in_schema=False, dependencies=[Depends(csrf_protect)])
def add_favorite(
    service: Favorites,
    city_name: Annotated[str, Form(max_length=100)],
    country: Annotated[str, Form(max_length=10)],
    latitude: Annotated[float, Form()],
    longitude: Annotated[float, Form()],
):
    try:
        favorite = service.add_favorite(
            city_name=city_name, country=country, latitude=latitude, longitude=longitude
        )
    except DuplicateFavoriteError:
        return _redirect(message=f"{city_name.strip()} is already in your favorites.")
    except ValueError as e:
        return _redirect(error=str(e))
    except FavoriteCityError:
        return _redirect(error="Could not save the favorite. Please try again.")
    return _redirect(message=f"Added {favorite.display_name} to favorites.")


@router.post(
    "/favorites/{favorite_id}/remove",
    include_in_schema=False,
    dependencies=[Depends(csrf_protect)],
)
def remove_favorite(favorite_id: str, service: Favorites):
    try:
        removed = service.remove_favorite(favorite_id)
    except ValueError:
        return _redirect(error=FAVORITE_MISSING)
    except FavoriteCityError:
        return _redirect(error="Could not remove the favorite. Please try again.")
    if not removed:
        return _redirect(error=FAVORITE_MISSING)
    return _redirect(message="Removed from favorites.")


@router.post(
    "/favorites/{favorite_id}/weather",
    include_in_schema=False,
    dependencies=[Depends(csrf_protect)],
)
async def favorite_weather(
    request: Request,
    favorite_id: str,
    gateway: Gateway,
    service: Favorites,
):
    try:
        favorite = await run_in_threadpool(_open_favorite, service, favorite_id)
    except ValueError:
        return _redirect(error=FAVORITE_MISSING)
    except FavoriteCityError:
        return _redirect(error=FAVORITES_UNAVAILABLE)
    if favorite is None:
        return _redirect(error=FAVORITE_MISSING)

    query = WeatherQuery.for_city(favorite.city_name, favorite.country)
    conditions: CurrentConditions | None = None
    error: str | None = None
    try:
        conditions = await gateway.get_current_conditions(query)
    except WeatherGatewayError as e:
        error = user_message(e)

    favorites, favorites_error = await run_in_threadpool(_load_favorites, service)
    return _render_weather(
        request=request,
        favorites=favorites,
        favorites_error=favorites_error,
        search=favorite.search_key,
        conditions=conditions,
        error=error,
    )


@router.get("/favorites.json", include_in_schema=False)
def favorites_json(service: Favorites) -> list[dict[str, object]]:
    try:
        rows = service.list_favorites()
    except FavoriteCityError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=FAVORITES_UNAVAILABLE,
        ) from e
    return [
        {
            "id": f.id,
            "city_name": f.city_name,
            "country": f.country,
            "display_name": f.display_name,
            "search_key": f.search_key,
            "latitude": f.latitude,
            "longitude": f.longitude,
            "last_accessed": f.last_accessed.isoformat().replace("+00:00", "Z"),
        }
        for f in rows
    ]
