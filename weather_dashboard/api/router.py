from fastapi import APIRouter

from weather_dashboard.api.routes import favorites, health, weather

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(weather.router, tags=["weather"])
api_router.include_router(favorites.router, tags=["favorites"])

health_router = APIRouter(prefix="/api")
health_router.include_router(health.router, tags=["meta"])
