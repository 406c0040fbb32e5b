from __future__ import annotations

import logging

from fastapi import FastAPI

from guardias.api.routes import router as api_router
from guardias.config import Settings, load_settings
from guardias.observability.metrics import Metrics
from guardias.parsers.extraction import DocumentOpener
from guardias.parsers.registry import build_strategies
from guardias.parsers.service import ScheduleParsingService
from guardias.storage.cache import InMemoryScheduleCache
from guardias.storage.repository import SqliteScheduleCache
from guardias.storage.zone_cache import ZoneCache


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def build_cache(settings: Settings) -> SqliteScheduleCache | InMemoryScheduleCache:
    if settings.cache_backend == "memory":
        return InMemoryScheduleCache()
    cache = SqliteScheduleCache(settings.database_path)
    cache.init_db()
    return cache


def create_app(settings: Settings | None = None, *, opener: DocumentOpener | None = None) -> FastAPI:
    app_settings = settings or load_settings()
    configure_logging(app_settings.log_level)

    cache = build_cache(app_settings)
    metrics = Metrics()
    service = ScheduleParsingService(
        build_strategies(app_settings.parser_profile),
        profile=app_settings.parser_profile,
        cache=cache if app_settings.cache_enabled else None,
        zone_cache=ZoneCache(),
        metrics=metrics,
        opener=opener,
    )

    app = FastAPI(title="guardias-segovia", version="0.1.0")
    app.state.settings = app_settings
    app.state.cache = cache
    app.state.metrics = metrics
    app.state.service = service

    app.include_router(api_router)
    return app
