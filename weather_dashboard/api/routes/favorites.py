from __future__ import annotations

from fastapi import APIRouter, HTTPException, Response, status

from weather_dashboard.api.deps import Favorites
from weather_dashboard.exceptions import DuplicateFavoriteError, FavoriteCityError
from weather_dashboard.schemas.favorites import FavoriteCityCreate, FavoriteCityOut

router = APIRouter(prefix="/favorites")


def _storage_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Favorites storage unavailable",
    )


@router.get("", response_model=list[FavoriteCityOut])
def list_favorites(service: Favorites) -> list[FavoriteCityOut]:
    try:
        rows = service.list_favorites()
    except FavoriteCityError as e:
        raise _storage_unavailable() from e
    return [FavoriteCityOut.from_domain(f) for f in rows]


@router.post("", response_model=FavoriteCityOut, status_code=status.HTTP_201_CREATED)
def add_favorite(payload: FavoriteCityCreate, service: Favorites) -> FavoriteCityOut:
    try:
        favorite = service.add_favorite(
            city_name=payload.city_name,
            country=payload.country,
            latitude=payload.latitude,
            longitude=payload.longitude,
        )
    except DuplicateFavoriteError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except FavoriteCityError as e:
        raise _storage_unavailable() from e
    return FavoriteCityOut.from_domain(favorite)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Favorite not found")


@router.get("/{favorite_id}", response_model=FavoriteCityOut)
def get_favorite(favorite_id: str, service: Favorites) -> FavoriteCityOut:
    try:
        favorite = service.get_favorite(favorite_id)
    except ValueError as e:
        raise _not_found() from e
    except FavoriteCityError as e:
        raise _storage_unavailable() from e
    if favorite is None:
        raise _not_found()
    return FavoriteCityOut.from_domain(favorite)


@router.delete("/{favorite_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_favorite(favorite_id: str, service: Favorites) -> Response:
    try:
        removed = service.remove_favorite(favorite_id)
    except ValueError as e:
        raise _not_found() from e
    except FavoriteCityError as e:
        raise _storage_unavailable() from e
    if not removed:
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{favorite_id}/touch", status_code=status.HTTP_204_NO_CONTENT)
def touch_favorite(favorite_id: str, service: Favorites) -> Response:
    try:
        touched = service.touch_last_accessed(favorite_id)
    except ValueError as e:
        raise _not_found() from e
    except FavoriteCityError as e:
        raise _storage_unavailable() from e
    if not touched:
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
