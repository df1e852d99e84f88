from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from weather_dashboard.api.router import api_router, health_router
from weather_dashboard.clients.openweather import OpenWeatherClient
from weather_dashboard.core.config import Settings, WeatherApiConfig, load_settings
from weather_dashboard.core.log_setup import setup_logging
from weather_dashboard.db.sql import create_sql_engine
from weather_dashboard.repositories.favorites_sql import SqlFavoriteCityRepository
from weather_dashboard.services.weather import WeatherGateway
from weather_dashboard.web.router import ui_router


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger = setup_logging(settings.log_level, json_output=settings.log_json)

        engine = create_sql_engine(settings)
        repo = SqlFavoriteCityRepository(engine=engine, table_name=settings.favorites_table_name)
        repo.ensure_ready()

        weather_client = OpenWeatherClient(
            WeatherApiConfig.from_settings(settings),
            logger=logger.getChild("openweather"),
        )
        app.state.settings = settings
        app.state.sql_engine = engine
        app.state.favorites_repository = repo
        app.state.weather_gateway = WeatherGateway(
            client=weather_client, logger=logger.getChild("gateway")
        )
        logger.info(
            "Weather dashboard started",
            extra={"event": "app_started", "env": settings.env, "units": settings.weather_units},
        )

        yield

        await app.state.weather_gateway.aclose()
        engine.dispose()
        logger.info("Weather dashboard stopped", extra={"event": "app_stopped"})

    docs_enabled = settings.docs_enabled and not settings.is_production
    app = FastAPI(
        title="Weather Dashboard API",
        version="0.1.0",
        debug=settings.debug,
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.secret_key,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age_seconds,
        same_site="lax",
        https_only=settings.is_production,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    if settings.trusted_hosts:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

    @app.middleware("http")
    async def security_headers(request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")
        response.headers.setdefault("Cross-Origin-Resource-Policy", "same-site")
        if settings.is_production:
            response.headers.setdefault(
                "Strict-Transport-Security", "max-age=31536000; includeSubDomains"
            )
        return response

    @app.get("/", tags=["meta"])
    def root():
        return {"name": "weather-dashboard", "status": "ok"}

    app.include_router(api_router)
    app.include_router(health_router)
    app.include_router(ui_router)

    static_dir = Path(__file__).resolve().parent / "web" / "static"
    app.mount("/static", StaticFiles(directory=static_dir), name="static")
    return app
