from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from starlette.concurrency import run_in_threadpool

from weather_dashboard.api.deps import Gateway, get_favorites_repository
from weather_dashboard.repositories.favorites import FavoriteCityRepository
from weather_dashboard.schemas.weather import HealthStatus

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthStatus)
async def health(
    response: Response,
    gateway: Gateway,
    repo: Annotated[FavoriteCityRepository, Depends(get_favorites_repository)],
) -> HealthStatus:
    weather_ok = await gateway.is_healthy()
    try:
        await run_in_threadpool(repo.ping)
        storage_ok = True
    except Exception:
        logger.exception("Favorites storage ping failed", extra={"event": "storage_health_check"})
        storage_ok = False

    healthy = weather_ok and storage_ok
    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthStatus(
        status="ok" if healthy else "degraded", weather=weather_ok, storage=storage_ok
    )
