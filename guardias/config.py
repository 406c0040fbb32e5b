from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ParserProfile:
    fallback_font_size: float = 12.0
    scan_step_ratio: float = 0.5
    page_margin: float = 40.0
    column_gap: float = 5.0
    capital_date_ratio: float = 0.22
    rural_date_ratio: float = 0.2
    max_workers: int = 1


@dataclass(frozen=True)
class Settings:
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"

    database_path: str = "./data/guardias.db"
    cache_backend: str = "sqlite"
    cache_enabled: bool = True

    parser_profile: ParserProfile = ParserProfile()


def _as_bool(raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _as_int(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    return int(raw)


def _as_float(raw: str | None, default: float) -> float:
    if raw is None:
        return default
    return float(raw)


def load_settings() -> Settings:
    parser_profile = ParserProfile(
        fallback_font_size=_as_float(os.getenv("PARSER_FALLBACK_FONT_SIZE"), 12.0),
        scan_step_ratio=_as_float(os.getenv("PARSER_SCAN_STEP_RATIO"), 0.5),
        page_margin=_as_float(os.getenv("PARSER_PAGE_MARGIN"), 40.0),
        column_gap=_as_float(os.getenv("PARSER_COLUMN_GAP"), 5.0),
        capital_date_ratio=_as_float(os.getenv("PARSER_CAPITAL_DATE_RATIO"), 0.22),
        rural_date_ratio=_as_float(os.getenv("PARSER_RURAL_DATE_RATIO"), 0.2),
        max_workers=_as_int(os.getenv("PARSER_MAX_WORKERS"), 1),
    )

    return Settings(
        app_host=os.getenv("APP_HOST", "0.0.0.0"),
        app_port=_as_int(os.getenv("APP_PORT"), 8000),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        database_path=os.getenv("DATABASE_PATH", "./data/guardias.db"),
        cache_backend=os.getenv("CACHE_BACKEND", "sqlite"),
        cache_enabled=_as_bool(os.getenv("CACHE_ENABLED"), True),
        parser_profile=parser_profile,
    )
